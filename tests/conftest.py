import struct

import pytest

from souls_codec.flver_format import flver_edge_index
from souls_codec.flver_format.flver_constants import (
    FaceSetFlags, LayoutSemantic, LayoutType,
)
from souls_codec.flver_format.flver_faceset import FaceSet
from souls_codec.flver_format.flver_file import FLVERFile
from souls_codec.flver_format.flver_header import FLVERHeader
from souls_codec.flver_format.flver_layout import BufferLayout, LayoutMember
from souls_codec.flver_format.flver_mesh import BoundingBoxes, Mesh
from souls_codec.flver_format.flver_vertex import Vertex
from souls_codec.flver_format.flver_vertex_buffer import VertexBuffer


def stub_decompressor(count, buffer):
    """Stands in for the native routine: writes 0..count-1 as u16."""
    struct.pack_into(f"<{count}H", buffer, 0, *range(count))


def make_quad_mesh(layout_index=0, material_index=0):
    """Four vertices in a unit square with a list and a strip face set."""
    mesh = Mesh()
    mesh.material_index = material_index
    mesh.bone_indices = [0, 1]
    mesh.bounding_box = BoundingBoxes((0.0, 0.0, 0.0), (1.0, 1.0, 0.0))
    corners = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 0.0)]
    for x, y, z in corners:
        v = Vertex(uv_count=2)
        v.position = (x, y, z)
        v.normal = (0.0, 0.0, 1.0, 0.0)
        v.uvs = [(x, y), (0.5, 0.25)]
        mesh.vertices.append(v)
    mesh.vertex_buffers = [VertexBuffer(layout_index=layout_index)]
    mesh.face_sets = [
        FaceSet(indices=[0, 1, 2, 2, 1, 3]),
        FaceSet(FaceSetFlags.LOD_LEVEL1, triangle_strip=True, indices=[0, 1, 2, 3]),
    ]
    return mesh


def make_flver(version=0x20014, big_endian=False, mesh_count=1):
    layout = BufferLayout([
        LayoutMember(LayoutType.FLOAT3, LayoutSemantic.POSITION),
        LayoutMember(LayoutType.BYTE4B, LayoutSemantic.NORMAL),
        LayoutMember(LayoutType.UV_PAIR, LayoutSemantic.UV),
    ])
    header = FLVERHeader(version, big_endian)
    header.bounding_max = (1.0, 1.0, 0.0)
    meshes = [make_quad_mesh(material_index=i) for i in range(mesh_count)]
    return FLVERFile(header, meshes, [layout])


@pytest.fixture
def quad_flver():
    return make_flver()


@pytest.fixture
def quad_flver_bytes(quad_flver):
    return quad_flver.write()


@pytest.fixture
def no_default_decompressor(monkeypatch):
    monkeypatch.setattr(flver_edge_index, "_default_decompressor", None)
    monkeypatch.setattr(flver_edge_index, "_default_loaded", True)
