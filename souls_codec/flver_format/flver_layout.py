"""Buffer layouts: the per-vertex schema of a vertex buffer.

A layout is an ordered list of members, each naming a semantic (what the
value means) and a value type (how it is stored). Member offsets are
implicit: each member starts where the previous one ends, and the vertex
stride is the sum of member sizes.

Layout header (0x10 bytes):
    +0x00: member count (i32)
    +0x04: 0 (i32)
    +0x08: 0 (i32)
    +0x0C: member table offset (i32)

Layout member (0x14 bytes):
    +0x00: unk00 (i32) - usually a stream/group number
    +0x04: struct offset (i32) - must equal the running offset
    +0x08: value type (u32, LayoutType)
    +0x0C: semantic (u32, LayoutSemantic)
    +0x10: semantic index (i32)
"""

from ..binary.bin_errors import FormatError
from .flver_constants import LayoutSemantic, LayoutType
from .flver_vertex import decode_value, encode_value, value_size

# Semantics stored in per-vertex lists; everything else has a single slot
LIST_SEMANTICS = (LayoutSemantic.UV, LayoutSemantic.TANGENT, LayoutSemantic.VERTEX_COLOR)


class LayoutMember:
    """One attribute in a buffer layout."""

    __slots__ = ('type', 'semantic', 'index', 'unk00')

    def __init__(self, type, semantic, index=0, unk00=0):
        self.type = LayoutType(type)
        self.semantic = LayoutSemantic(semantic)
        self.index = index
        self.unk00 = unk00

    @property
    def size(self):
        return value_size(self.type)

    @property
    def slot_count(self):
        """Number of list slots this member fills (UV pairs fill two)."""
        return 2 if self.type == LayoutType.UV_PAIR else 1

    @classmethod
    def read(cls, br, struct_offset):
        unk00 = br.read_int32()
        br.assert_int32(struct_offset, field="struct_offset")
        type_raw = br.read_uint32()
        semantic_raw = br.read_uint32()
        index = br.read_int32()
        try:
            layout_type = LayoutType(type_raw)
        except ValueError:
            raise FormatError(
                f"Unknown layout type: 0x{type_raw:X}", field="type", observed=type_raw
            ) from None
        try:
            semantic = LayoutSemantic(semantic_raw)
        except ValueError:
            raise FormatError(
                f"Unknown layout semantic: 0x{semantic_raw:X}",
                field="semantic", observed=semantic_raw,
            ) from None
        return cls(layout_type, semantic, index, unk00)

    def write(self, bw, struct_offset):
        bw.write_int32(self.unk00)
        bw.write_int32(struct_offset)
        bw.write_uint32(self.type)
        bw.write_uint32(self.semantic)
        bw.write_int32(self.index)

    def __eq__(self, other):
        if not isinstance(other, LayoutMember):
            return NotImplemented
        return (self.type, self.semantic, self.index, self.unk00) == \
            (other.type, other.semantic, other.index, other.unk00)

    def __repr__(self):
        return f"LayoutMember({self.semantic.name}, {self.type.name}, index={self.index})"


class BufferLayout:
    """Ordered list of LayoutMembers shared by index across vertex buffers."""

    __slots__ = ('members',)

    def __init__(self, members=None):
        self.members = list(members) if members else []

    def __iter__(self):
        return iter(self.members)

    def __len__(self):
        return len(self.members)

    def __eq__(self, other):
        if not isinstance(other, BufferLayout):
            return NotImplemented
        return self.members == other.members

    @property
    def size(self):
        """Vertex stride in bytes."""
        return sum(m.size for m in self.members)

    def member_offsets(self):
        """Yield (member, byte offset within the vertex)."""
        offset = 0
        for member in self.members:
            yield member, offset
            offset += member.size

    def semantic_counts(self):
        """Number of list slots each list semantic needs in this layout."""
        counts = dict.fromkeys(LIST_SEMANTICS, 0)
        for member in self.members:
            if member.semantic in counts:
                counts[member.semantic] += member.slot_count
        return counts

    @classmethod
    def read(cls, br):
        member_count = br.read_int32()
        br.assert_int32(0)
        br.assert_int32(0)
        member_offset = br.read_int32()

        layout = cls()
        with br.step_in(member_offset):
            struct_offset = 0
            for _ in range(member_count):
                member = LayoutMember.read(br, struct_offset)
                layout.members.append(member)
                struct_offset += member.size
        return layout

    def write(self, bw, index):
        bw.write_int32(len(self.members))
        bw.write_int32(0)
        bw.write_int32(0)
        bw.reserve_int32(f"LayoutMembersOffset{index}")

    def write_members(self, bw, index):
        bw.fill_int32(f"LayoutMembersOffset{index}", bw.position)
        for member, offset in self.member_offsets():
            member.write(bw, offset)

    def decode_vertices(self, data, vertices, endian, uv_factor, slot_base):
        """Decode one vertex buffer into ``vertices`` in place.

        Args:
            data: raw buffer bytes (stride * len(vertices) at least)
            vertices: pre-allocated Vertex list of the owning mesh
            endian: struct byte order character
            uv_factor: divisor for UV shorts
            slot_base: list-slot start per semantic for this buffer

        Returns:
            slot_base advanced past this layout's list slots
        """
        stride = self.size
        placed = list(self.member_offsets())
        for i, vertex in enumerate(vertices):
            base = i * stride
            slots = {s: slot_base.get(s, 0) for s in LIST_SEMANTICS}
            for member, offset in placed:
                value = decode_value(member.type, data, base + offset, endian, uv_factor)
                vertex.set_attribute(member, value, slots)
        return self._advance(slot_base)

    def encode_vertices(self, vertices, endian, uv_factor, slot_base):
        """Inverse of decode_vertices.

        Returns:
            (bytes, advanced slot_base)
        """
        out = bytearray()
        for vertex in vertices:
            slots = {s: slot_base.get(s, 0) for s in LIST_SEMANTICS}
            for member in self.members:
                value = vertex.get_attribute(member, slots)
                out.extend(encode_value(member.type, value, endian, uv_factor))
        return bytes(out), self._advance(slot_base)

    def _advance(self, slot_base):
        counts = self.semantic_counts()
        return {s: slot_base.get(s, 0) + counts[s] for s in LIST_SEMANTICS}

    def __repr__(self):
        return f"BufferLayout({self.members!r})"
