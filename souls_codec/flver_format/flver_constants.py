"""Constants for the FLVER geometry container."""

from enum import IntEnum, IntFlag

FLVER_MAGIC = b"FLVER\0"
ENDIAN_LITTLE = b"L\0"
ENDIAN_BIG = b"B\0"

# Versions seen in shipped games, oldest to newest
KNOWN_VERSIONS = (
    0x20005, 0x20007, 0x20009, 0x2000B, 0x2000C, 0x2000D, 0x2000E,
    0x2000F, 0x20010, 0x20013, 0x20014, 0x20016, 0x2001A,
)

# Face set headers grow by 16 bytes (explicit index size) after this version
FACESET_EXTENDED_AFTER = 0x20005

# Bounding boxes gain a third vector from this version on
BOUNDING_BOX_UNK_VERSION = 0x2001A

# UV shorts are scaled by 2048 from this version on, 1024 before
UV_FACTOR_VERSION = 0x2000F
UV_FACTOR_NEW = 2048.0
UV_FACTOR_OLD = 1024.0

# Record sizes
HEADER_SIZE = 0x50
MESH_HEADER_SIZE = 0x30
FACESET_HEADER_SIZE = 0x10
FACESET_HEADER_SIZE_EXTENDED = 0x20
VERTEX_BUFFER_HEADER_SIZE = 0x20
LAYOUT_HEADER_SIZE = 0x10
LAYOUT_MEMBER_SIZE = 0x14
EDGE_GROUP_HEADER_SIZE = 0x10
EDGE_MEMBER_SIZE = 0x40

# Alignment of the data region and of each block inside it
DATA_REGION_ALIGN = 0x20
DATA_BLOCK_ALIGN = 0x10

# Index sizes (bits); 8 marks an edge-compressed face set
INDEX_SIZE_INHERIT = 0
INDEX_SIZE_EDGE = 8
INDEX_SIZE_16 = 16
INDEX_SIZE_32 = 32

# Strip restart sentinels
RESTART_16 = 0xFFFF
RESTART_32 = 0xFFFFFFFF

# Marker bits carried in VertexBuffer.buffer_index on edge-compressed buffers
BUFFER_INDEX_MARKER_MASK = 0x60000000

# Scratch bytes allocated per expected index when decompressing edge members
EDGE_SCRATCH_BYTES_PER_INDEX = 32


class FaceSetFlags(IntFlag):
    """Detail-level and compression markers on a face set."""
    NONE = 0
    LOD_LEVEL1 = 0x01000000
    LOD_LEVEL2 = 0x02000000
    EDGE_COMPRESSED = 0x40000000
    MOTION_BLUR = 0x80000000


class LayoutSemantic(IntEnum):
    POSITION = 0
    BONE_WEIGHTS = 1
    BONE_INDICES = 2
    NORMAL = 3
    UV = 5
    TANGENT = 6
    BITANGENT = 7
    VERTEX_COLOR = 10


# Semantics that may legitimately appear more than once in a mesh's layouts
REPEATABLE_SEMANTICS = frozenset((
    LayoutSemantic.POSITION,
    LayoutSemantic.NORMAL,
    LayoutSemantic.TANGENT,
    LayoutSemantic.UV,
    LayoutSemantic.VERTEX_COLOR,
))


class LayoutType(IntEnum):
    FLOAT2 = 0x01
    FLOAT3 = 0x02
    FLOAT4 = 0x03
    BYTE4A = 0x10
    BYTE4B = 0x11
    SHORT2_TO_FLOAT2 = 0x12
    BYTE4C = 0x13
    UV = 0x15
    UV_PAIR = 0x16
    SHORT_BONE_INDICES = 0x18
    SHORT4_TO_FLOAT4A = 0x1A
    HALF2 = 0x1C
    HALF4 = 0x1D
    SHORT4_TO_FLOAT4B = 0x2E
    BYTE4E = 0x2F


def uv_factor_for(version):
    return UV_FACTOR_NEW if version >= UV_FACTOR_VERSION else UV_FACTOR_OLD
