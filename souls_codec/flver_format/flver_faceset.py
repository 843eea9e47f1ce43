"""Face sets: one detail level of a mesh's triangle connectivity.

Face set header (0x10 bytes, 0x20 after version 0x20005):
    +0x00: flags (u32, FaceSetFlags)
    +0x04: triangle strip (bool)
    +0x05: cull backfaces (bool)
    +0x06: unk06 (i16)
    +0x08: index count (i32)
    +0x0C: indices offset, relative to the data region (i32)
  extended:
    +0x10: indices length in bytes (i32)
    +0x14: 0 (i32)
    +0x18: index size in bits (i32) - 0 inherits the container default,
           8 marks an edge-compressed group
    +0x1C: 0 (i32)
"""

import struct

from ..binary.bin_errors import FormatError, UnsupportedFormatError
from .flver_constants import (
    FACESET_EXTENDED_AFTER, DATA_BLOCK_ALIGN,
    INDEX_SIZE_EDGE, INDEX_SIZE_16, INDEX_SIZE_32,
    RESTART_16, RESTART_32,
    FaceSetFlags,
)
from .flver_edge_index import EdgeIndexGroup


def strip_to_list(indices, restarts=(RESTART_32,), include_degenerate=False):
    """Convert a triangle strip to a flat triangle list.

    Every window (a, b, c) yields one triangle. Windows alternate winding:
    even windows emit (a, b, c), odd windows emit (c, b, a). A window that
    touches a restart value emits nothing and resets the alternation, so no
    triangle spans a restart. Degenerate windows (a repeated index) are
    skipped unless ``include_degenerate`` but still count for alternation.
    """
    triangles = []
    flip = False
    for i in range(len(indices) - 2):
        a, b, c = indices[i], indices[i + 1], indices[i + 2]
        if a in restarts or b in restarts or c in restarts:
            flip = False
            continue
        if include_degenerate or (a != b and b != c and c != a):
            if flip:
                triangles.extend((c, b, a))
            else:
                triangles.extend((a, b, c))
        flip = not flip
    return triangles


class FaceSet:
    """Triangle indices for one detail level of a mesh.

    Holds either plain indices or an EdgeIndexGroup. ``indices`` always
    returns the flat sequence; a compressed group is decompressed on first
    access and the result kept.
    """

    __slots__ = (
        'flags', 'triangle_strip', 'cull_backfaces', 'unk06', 'index_size',
        'edge_group', '_indices',
    )

    def __init__(self, flags=FaceSetFlags.NONE, triangle_strip=False,
                 cull_backfaces=True, unk06=0, indices=None, index_size=0):
        self.flags = FaceSetFlags(flags)
        self.triangle_strip = triangle_strip
        self.cull_backfaces = cull_backfaces
        self.unk06 = unk06
        self.index_size = index_size
        self.edge_group = None
        self._indices = list(indices) if indices is not None else []

    @property
    def indices(self):
        if self._indices is None:
            self._indices = self.edge_group.decompress()
        return self._indices

    @indices.setter
    def indices(self, values):
        self._indices = list(values)
        self.edge_group = None

    @property
    def is_edge_compressed(self):
        return self.edge_group is not None or self.index_size == INDEX_SIZE_EDGE

    @property
    def index_count(self):
        if self._indices is None:
            return self.edge_group.index_count
        return len(self._indices)

    @classmethod
    def read(cls, br, header, decompressor=None):
        face_set = cls(
            flags=br.read_uint32(),
            triangle_strip=br.read_bool(),
            cull_backfaces=br.read_bool(),
            unk06=br.read_int16(),
        )
        index_count = br.read_int32()
        indices_offset = br.read_int32()
        if header.version > FACESET_EXTENDED_AFTER:
            br.read_int32()  # indices length, derived on write
            br.assert_int32(0)
            face_set.index_size = br.assert_int32(
                0, INDEX_SIZE_EDGE, INDEX_SIZE_16, INDEX_SIZE_32, field="index_size")
            br.assert_int32(0)

        index_size = face_set.index_size or header.vertex_index_size
        with br.step_in(header.data_offset + indices_offset):
            if index_size == INDEX_SIZE_EDGE:
                face_set.edge_group = EdgeIndexGroup.read(br, decompressor)
                face_set._indices = None
            elif index_size == INDEX_SIZE_16:
                face_set._indices = br.read_uint16s(index_count)
            elif index_size == INDEX_SIZE_32:
                face_set._indices = br.read_uint32s(index_count)
            else:
                raise FormatError(
                    f"Face set has no usable index size: {index_size}",
                    field="index_size", observed=index_size,
                )
        return face_set

    def effective_index_size(self, header):
        return self.index_size or header.vertex_index_size

    def _check_writable(self, header):
        if self.is_edge_compressed or self.effective_index_size(header) == INDEX_SIZE_EDGE:
            raise UnsupportedFormatError("Writing edge-compressed face sets is not supported")

    def write(self, bw, header, index):
        self._check_writable(header)
        indices = self.indices
        bw.write_uint32(self.flags)
        bw.write_bool(self.triangle_strip)
        bw.write_bool(self.cull_backfaces)
        bw.write_int16(self.unk06)
        bw.write_int32(len(indices))
        bw.reserve_int32(f"FaceSetIndicesOffset{index}")
        if header.version > FACESET_EXTENDED_AFTER:
            bw.write_int32(len(indices) * self.effective_index_size(header) // 8)
            bw.write_int32(0)
            bw.write_int32(self.index_size)
            bw.write_int32(0)

    def write_indices(self, bw, header, index, data_start):
        self._check_writable(header)
        bw.fill_int32(f"FaceSetIndicesOffset{index}", bw.position - data_start)
        try:
            if self.effective_index_size(header) == INDEX_SIZE_16:
                bw.write_uint16s(self.indices)
            else:
                bw.write_uint32s(self.indices)
        except struct.error as exc:
            raise FormatError(
                f"Face set {index} index out of range for "
                f"{self.effective_index_size(header)}-bit storage"
            ) from exc
        bw.pad(DATA_BLOCK_ALIGN)

    def triangulate(self, allow_restarts, include_degenerate=False):
        """Return this face set as a flat triangle list.

        Args:
            allow_restarts: treat 0xFFFF as a strip restart (meshes with
                fewer than 0xFFFF vertices)
            include_degenerate: keep strip triangles with repeated indices
        """
        indices = self.indices
        if not self.triangle_strip or self.edge_group is not None:
            return list(indices)
        restarts = (RESTART_16, RESTART_32) if allow_restarts else (RESTART_32,)
        return strip_to_list(indices, restarts, include_degenerate)

    def __repr__(self):
        return (
            f"FaceSet(flags={self.flags!r}, strip={self.triangle_strip}, "
            f"indices={self.index_count})"
        )
