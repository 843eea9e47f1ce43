"""Vertex records and per value-type attribute codecs.

Each LayoutType maps to a struct format plus a decode/encode pair. Decoded
values are plain tuples; encoding is the exact inverse (round to nearest,
clamped to the storage range), so values read from a buffer write back to
the same bytes.

    type                 storage     decoded as
    FLOAT2/3/4           float32     floats
    BYTE4A               4 x u8      raw ints
    BYTE4B               4 x u8      (b - 127) / 127
    SHORT2_TO_FLOAT2     2 x i16     s / 32767
    BYTE4C               4 x u8      b / 255 (packed colour)
    UV / UV_PAIR         2/4 x i16   s / uv_factor
    SHORT_BONE_INDICES   4 x i16     raw ints
    SHORT4_TO_FLOAT4A    4 x i16     s / 32767
    HALF2 / HALF4        float16     floats
    SHORT4_TO_FLOAT4B    4 x u16     s / 65535
    BYTE4E               4 x i8      s / 127
"""

import struct

from ..binary.bin_errors import FormatError
from .flver_constants import LayoutSemantic, LayoutType


def _quantize(value, scale, bias, lo, hi):
    return max(lo, min(hi, int(round(value * scale + bias))))


def _raw_ints(lo, hi):
    def encode(values, uv_factor):
        return tuple(max(lo, min(hi, int(round(v)))) for v in values)
    return (lambda raw, uv_factor: tuple(raw)), encode


def _floats():
    return (lambda raw, uv_factor: tuple(raw)), (lambda values, uv_factor: tuple(float(v) for v in values))


def _normalized(scale, bias, lo, hi):
    def decode(raw, uv_factor):
        return tuple((r - bias) / scale for r in raw)

    def encode(values, uv_factor):
        return tuple(_quantize(v, scale, bias, lo, hi) for v in values)
    return decode, encode


def _uv_scaled():
    def decode(raw, uv_factor):
        return tuple(r / uv_factor for r in raw)

    def encode(values, uv_factor):
        return tuple(_quantize(v, uv_factor, 0, -32768, 32767) for v in values)
    return decode, encode


# LayoutType -> (struct format, component count, (decode, encode))
VALUE_CODECS = {
    LayoutType.FLOAT2: ("2f", 2, _floats()),
    LayoutType.FLOAT3: ("3f", 3, _floats()),
    LayoutType.FLOAT4: ("4f", 4, _floats()),
    LayoutType.BYTE4A: ("4B", 4, _raw_ints(0, 255)),
    LayoutType.BYTE4B: ("4B", 4, _normalized(127.0, 127.0, 0, 255)),
    LayoutType.SHORT2_TO_FLOAT2: ("2h", 2, _normalized(32767.0, 0.0, -32768, 32767)),
    LayoutType.BYTE4C: ("4B", 4, _normalized(255.0, 0.0, 0, 255)),
    LayoutType.UV: ("2h", 2, _uv_scaled()),
    LayoutType.UV_PAIR: ("4h", 4, _uv_scaled()),
    LayoutType.SHORT_BONE_INDICES: ("4h", 4, _raw_ints(-32768, 32767)),
    LayoutType.SHORT4_TO_FLOAT4A: ("4h", 4, _normalized(32767.0, 0.0, -32768, 32767)),
    LayoutType.HALF2: ("2e", 2, _floats()),
    LayoutType.HALF4: ("4e", 4, _floats()),
    LayoutType.SHORT4_TO_FLOAT4B: ("4H", 4, _normalized(65535.0, 0.0, 0, 65535)),
    LayoutType.BYTE4E: ("4b", 4, _normalized(127.0, 0.0, -128, 127)),
}


def value_size(layout_type):
    return struct.calcsize("<" + VALUE_CODECS[layout_type][0])


def decode_value(layout_type, data, offset, endian, uv_factor):
    fmt, _, (decode, _) = VALUE_CODECS[layout_type]
    try:
        raw = struct.unpack_from(endian + fmt, data, offset)
    except struct.error as exc:
        raise FormatError(
            f"Vertex data truncated at 0x{offset:X} reading {layout_type.name}"
        ) from exc
    return decode(raw, uv_factor)


def encode_value(layout_type, values, endian, uv_factor):
    fmt, count, (_, encode) = VALUE_CODECS[layout_type]
    values = tuple(values)[:count]
    values += (0,) * (count - len(values))
    return struct.pack(endian + fmt, *encode(values, uv_factor))


def _slot(values, index, semantic):
    if index >= len(values):
        raise FormatError(
            f"Vertex has {len(values)} {semantic.name} slot(s), layout needs slot {index}",
            field=semantic.name, observed=len(values),
        )
    return values[index]


class Vertex:
    """A single vertex; attribute slots hold decoded tuples.

    ``uvs``, ``tangents`` and ``colors`` are lists whose length is fixed
    per mesh from the layouts of its vertex buffers.
    """

    __slots__ = (
        'position', 'bone_weights', 'bone_indices', 'normal', 'bitangent',
        'uvs', 'tangents', 'colors',
    )

    def __init__(self, uv_count=0, tangent_count=0, color_count=0):
        self.position = (0.0, 0.0, 0.0)
        self.bone_weights = (0.0, 0.0, 0.0, 0.0)
        self.bone_indices = (0, 0, 0, 0)
        self.normal = (0.0, 0.0, 0.0)
        self.bitangent = (0.0, 0.0, 0.0, 0.0)
        self.uvs = [(0.0, 0.0)] * uv_count
        self.tangents = [(0.0, 0.0, 0.0, 0.0)] * tangent_count
        self.colors = [(1.0, 1.0, 1.0, 1.0)] * color_count

    def set_attribute(self, member, value, slots):
        """Store a decoded member value; ``slots`` tracks list-slot cursors."""
        semantic = member.semantic
        if semantic == LayoutSemantic.POSITION:
            self.position = value
        elif semantic == LayoutSemantic.BONE_WEIGHTS:
            self.bone_weights = value
        elif semantic == LayoutSemantic.BONE_INDICES:
            self.bone_indices = value
        elif semantic == LayoutSemantic.NORMAL:
            self.normal = value
        elif semantic == LayoutSemantic.BITANGENT:
            self.bitangent = value
        elif semantic == LayoutSemantic.UV:
            slot = slots[semantic]
            if member.type == LayoutType.UV_PAIR:
                self.uvs[slot] = value[:2]
                self.uvs[slot + 1] = value[2:]
            else:
                self.uvs[slot] = value
            slots[semantic] = slot + member.slot_count
        elif semantic == LayoutSemantic.TANGENT:
            self.tangents[slots[semantic]] = value
            slots[semantic] += 1
        elif semantic == LayoutSemantic.VERTEX_COLOR:
            self.colors[slots[semantic]] = value
            slots[semantic] += 1

    def get_attribute(self, member, slots):
        """Inverse of set_attribute: fetch the value a member encodes."""
        semantic = member.semantic
        if semantic == LayoutSemantic.POSITION:
            return self.position
        if semantic == LayoutSemantic.BONE_WEIGHTS:
            return self.bone_weights
        if semantic == LayoutSemantic.BONE_INDICES:
            return self.bone_indices
        if semantic == LayoutSemantic.NORMAL:
            return self.normal
        if semantic == LayoutSemantic.BITANGENT:
            return self.bitangent
        if semantic == LayoutSemantic.UV:
            slot = slots[semantic]
            slots[semantic] = slot + member.slot_count
            if member.type == LayoutType.UV_PAIR:
                return tuple(_slot(self.uvs, slot, semantic)) + tuple(_slot(self.uvs, slot + 1, semantic))
            return _slot(self.uvs, slot, semantic)
        if semantic == LayoutSemantic.TANGENT:
            slots[semantic] += 1
            return _slot(self.tangents, slots[semantic] - 1, semantic)
        if semantic == LayoutSemantic.VERTEX_COLOR:
            slots[semantic] += 1
            return _slot(self.colors, slots[semantic] - 1, semantic)
        raise FormatError(f"No vertex slot for semantic {semantic!r}")

    def __eq__(self, other):
        if not isinstance(other, Vertex):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self):
        return f"Vertex(position={self.position}, uvs={len(self.uvs)})"
