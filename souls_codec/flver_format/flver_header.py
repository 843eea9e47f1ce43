"""FLVER container header."""

from ..binary.bin_errors import FormatError, UnsupportedFormatError
from .flver_constants import (
    FLVER_MAGIC, ENDIAN_LITTLE, ENDIAN_BIG, KNOWN_VERSIONS,
    INDEX_SIZE_INHERIT, INDEX_SIZE_EDGE, INDEX_SIZE_16, INDEX_SIZE_32,
    uv_factor_for,
)


class FLVERHeader:
    """Represents the 0x50-byte container header.

    Layout:
        +0x00: "FLVER\\0"
        +0x06: "L\\0" (little endian) or "B\\0" (big endian)
        +0x08: version (u32)
        +0x0C: data region offset (i32)
        +0x10: data region length (i32)
        +0x14: mesh, face set, vertex buffer, layout counts (i32 x4)
        +0x24: bounding min (vec3), +0x30: bounding max (vec3)
        +0x3C: default vertex index size (u8)
        +0x3D: unicode (u8)
        +0x3E: 0, 0 (u8 x2)
        +0x40: 0 x4 (i32)
    """

    __slots__ = (
        'big_endian', 'version', 'data_offset', 'data_length',
        'mesh_count', 'face_set_count', 'vertex_buffer_count', 'layout_count',
        'bounding_min', 'bounding_max', 'vertex_index_size', 'unicode',
    )

    def __init__(self, version=0x20014, big_endian=False):
        self.big_endian = big_endian
        self.version = version
        self.data_offset = 0
        self.data_length = 0
        self.mesh_count = 0
        self.face_set_count = 0
        self.vertex_buffer_count = 0
        self.layout_count = 0
        self.bounding_min = (0.0, 0.0, 0.0)
        self.bounding_max = (0.0, 0.0, 0.0)
        self.vertex_index_size = INDEX_SIZE_16
        self.unicode = True

    @property
    def endian(self):
        return ">" if self.big_endian else "<"

    @property
    def uv_factor(self):
        return uv_factor_for(self.version)

    @classmethod
    def read(cls, br):
        """Read the header and switch ``br`` to the document's byte order."""
        header = cls()
        br.assert_bytes(FLVER_MAGIC, field="magic")
        endian_tag = br.read_bytes(2)
        if endian_tag == ENDIAN_LITTLE:
            br.endian = "<"
        elif endian_tag == ENDIAN_BIG:
            br.endian = ">"
        else:
            raise FormatError(f"Invalid FLVER byte order tag: {endian_tag!r}",
                              field="endian", observed=endian_tag)
        header.big_endian = br.big_endian

        header.version = br.read_uint32()
        if header.version not in KNOWN_VERSIONS:
            raise UnsupportedFormatError(f"Unsupported FLVER version: 0x{header.version:X}")

        header.data_offset = br.read_int32()
        header.data_length = br.read_int32()
        header.mesh_count = br.read_int32()
        header.face_set_count = br.read_int32()
        header.vertex_buffer_count = br.read_int32()
        header.layout_count = br.read_int32()
        header.bounding_min = br.read_vector3()
        header.bounding_max = br.read_vector3()
        header.vertex_index_size = br.assert_uint8(
            INDEX_SIZE_INHERIT, INDEX_SIZE_EDGE, INDEX_SIZE_16, INDEX_SIZE_32,
            field="vertex_index_size")
        header.unicode = br.read_bool()
        br.assert_uint8(0)
        br.assert_uint8(0)
        for _ in range(4):
            br.assert_int32(0)

        if header.data_offset + header.data_length > len(br):
            raise FormatError(
                f"Truncated FLVER: data region ends at "
                f"0x{header.data_offset + header.data_length:X}, file is 0x{len(br):X}"
            )
        return header

    def write(self, bw):
        bw.write_bytes(FLVER_MAGIC)
        bw.write_bytes(ENDIAN_BIG if self.big_endian else ENDIAN_LITTLE)
        bw.write_uint32(self.version)
        bw.reserve_int32("DataOffset")
        bw.reserve_int32("DataLength")
        bw.write_int32(self.mesh_count)
        bw.write_int32(self.face_set_count)
        bw.write_int32(self.vertex_buffer_count)
        bw.write_int32(self.layout_count)
        bw.write_vector3(self.bounding_min)
        bw.write_vector3(self.bounding_max)
        bw.write_uint8(self.vertex_index_size)
        bw.write_bool(self.unicode)
        bw.write_uint8(0)
        bw.write_uint8(0)
        for _ in range(4):
            bw.write_int32(0)

    def __repr__(self):
        return (
            f"FLVERHeader(version=0x{self.version:X}, "
            f"endian='{self.endian}', meshes={self.mesh_count}, "
            f"faceSets={self.face_set_count}, vertexBuffers={self.vertex_buffer_count}, "
            f"layouts={self.layout_count})"
        )
