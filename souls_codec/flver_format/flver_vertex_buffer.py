"""Vertex buffers: one stream of a mesh's vertex data.

Vertex buffer header (0x20 bytes):
    +0x00: buffer index (i32) - position within the owning mesh; edge
           compressed buffers also carry marker bits 0x60000000
    +0x04: layout index (i32)
    +0x08: vertex size (i32) - must equal the layout's stride
    +0x0C: vertex count (i32)
    +0x10: 0, 0 (i32 x2)
    +0x18: buffer length in bytes (i32)
    +0x1C: buffer offset, relative to the data region (i32)
"""

from ..binary.bin_errors import FormatError
from .flver_constants import BUFFER_INDEX_MARKER_MASK, DATA_BLOCK_ALIGN


class VertexBuffer:
    """Reference to a layout plus the raw bytes it describes.

    The raw bytes only live between reading the header and decoding the
    owning mesh's vertices; afterwards the vertices are the source of truth.
    """

    __slots__ = ('buffer_index', 'layout_index', 'vertex_size', 'vertex_count', 'data')

    def __init__(self, layout_index=0, buffer_index=0):
        self.buffer_index = buffer_index
        self.layout_index = layout_index
        self.vertex_size = 0
        self.vertex_count = 0
        self.data = None

    @property
    def edge_compressed(self):
        return bool(self.buffer_index & BUFFER_INDEX_MARKER_MASK)

    @property
    def position_index(self):
        """Buffer index with the compression marker bits masked off."""
        return self.buffer_index & ~BUFFER_INDEX_MARKER_MASK

    @classmethod
    def read(cls, br, header):
        vb = cls()
        vb.buffer_index = br.read_int32()
        vb.layout_index = br.read_int32()
        vb.vertex_size = br.read_int32()
        vb.vertex_count = br.read_int32()
        br.assert_int32(0)
        br.assert_int32(0)
        buffer_length = br.read_int32()
        buffer_offset = br.read_int32()
        vb.data = br.get_bytes(header.data_offset + buffer_offset, buffer_length)
        return vb

    def resolve_layout(self, layouts):
        """Return this buffer's layout after checking it fits the data."""
        if not 0 <= self.layout_index < len(layouts):
            raise FormatError(
                f"Vertex buffer layout index {self.layout_index} out of range "
                f"({len(layouts)} layouts)",
                field="layout_index", observed=self.layout_index,
            )
        layout = layouts[self.layout_index]
        if self.data is not None:
            if layout.size != self.vertex_size:
                raise FormatError(
                    f"Mismatched vertex buffer and layout sizes: "
                    f"{self.vertex_size} vs {layout.size}",
                    field="vertex_size", expected=layout.size, observed=self.vertex_size,
                )
            if layout.size * self.vertex_count > len(self.data):
                raise FormatError(
                    f"Vertex buffer too short: {self.vertex_count} x {layout.size} "
                    f"> {len(self.data)} bytes",
                    field="buffer_length", observed=len(self.data),
                )
        return layout

    def read_vertices(self, layouts, vertices, endian, uv_factor, slot_base):
        layout = self.resolve_layout(layouts)
        slot_base = layout.decode_vertices(self.data, vertices, endian, uv_factor, slot_base)
        self.vertex_size = layout.size
        self.data = None
        return slot_base

    def write(self, bw, index, position, layouts, vertex_count):
        """Write the header; ``position`` is the buffer's place in its mesh."""
        layout = self.resolve_layout(layouts)
        bw.write_int32((self.buffer_index & BUFFER_INDEX_MARKER_MASK) | position)
        bw.write_int32(self.layout_index)
        bw.write_int32(layout.size)
        bw.write_int32(vertex_count)
        bw.write_int32(0)
        bw.write_int32(0)
        bw.reserve_int32(f"VertexBufferLength{index}")
        bw.reserve_int32(f"VertexBufferOffset{index}")

    def write_buffer(self, bw, index, data_start, data):
        bw.fill_int32(f"VertexBufferLength{index}", len(data))
        bw.fill_int32(f"VertexBufferOffset{index}", bw.position - data_start)
        bw.write_bytes(data)
        bw.pad(DATA_BLOCK_ALIGN)

    def __repr__(self):
        return (
            f"VertexBuffer(index=0x{self.buffer_index:X}, layout={self.layout_index}, "
            f"count={self.vertex_count})"
        )
