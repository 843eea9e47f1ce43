import pytest

from souls_codec.binary.bin_errors import FormatError
from souls_codec.binary.bin_reader import BinaryReader
from souls_codec.binary.bin_writer import BinaryWriter
from souls_codec.flver_format.flver_constants import (
    FaceSetFlags, LayoutSemantic, LayoutType,
)
from souls_codec.flver_format.flver_faceset import FaceSet
from souls_codec.flver_format.flver_layout import BufferLayout, LayoutMember
from souls_codec.flver_format.flver_mesh import BoundingBoxes, Mesh
from souls_codec.flver_format.flver_vertex import Vertex
from souls_codec.flver_format.flver_vertex_buffer import VertexBuffer
from souls_codec.utils.claim_pool import ClaimPool


def _mesh_with_vertices(count):
    mesh = Mesh()
    for i in range(count):
        v = Vertex()
        v.position = (float(i), 0.0, 0.0)
        mesh.vertices.append(v)
    return mesh


def test_duplicate_face_set_claim_fails():
    pool = ClaimPool([FaceSet(), FaceSet()], "face set")
    first, second = Mesh(), Mesh()
    first._face_set_indices = [0]
    second._face_set_indices = [0, 1]
    first.claim_face_sets(pool)
    with pytest.raises(FormatError, match="already claimed: 0"):
        second.claim_face_sets(pool)


def test_unclaimed_face_set_is_orphaned():
    pool = ClaimPool([FaceSet(), FaceSet()], "face set")
    mesh = Mesh()
    mesh._face_set_indices = [1]
    mesh.claim_face_sets(pool)
    with pytest.raises(FormatError, match="Orphaned"):
        pool.ensure_empty()


def test_vertex_buffer_index_must_match_position():
    layouts = [BufferLayout([LayoutMember(LayoutType.FLOAT3, LayoutSemantic.POSITION)])]
    pool = ClaimPool([VertexBuffer(0, buffer_index=1), VertexBuffer(0, buffer_index=0)],
                     "vertex buffer")
    mesh = Mesh()
    mesh._vertex_buffer_indices = [0, 1]
    with pytest.raises(FormatError, match="Unexpected vertex buffer index"):
        mesh.claim_vertex_buffers(pool, layouts)


def test_marker_bits_are_masked_off():
    layouts = [BufferLayout([LayoutMember(LayoutType.FLOAT3, LayoutSemantic.POSITION)])]
    pool = ClaimPool([VertexBuffer(0, buffer_index=0x60000000),
                      VertexBuffer(0, buffer_index=0x60000001)], "vertex buffer")
    mesh = Mesh()
    mesh._vertex_buffer_indices = [0, 1]
    mesh.claim_vertex_buffers(pool, layouts)
    assert all(vb.edge_compressed for vb in mesh.vertex_buffers)


def test_repeated_bone_weights_rejected():
    layout = BufferLayout([LayoutMember(LayoutType.BYTE4C, LayoutSemantic.BONE_WEIGHTS)])
    pool = ClaimPool([VertexBuffer(0, 0), VertexBuffer(0, 1)], "vertex buffer")
    mesh = Mesh()
    mesh._vertex_buffer_indices = [0, 1]
    with pytest.raises(FormatError, match="repeated semantic: BONE_WEIGHTS"):
        mesh.claim_vertex_buffers(pool, [layout])


def test_repeated_uv_allowed_and_slots_accumulate():
    layouts = [
        BufferLayout([LayoutMember(LayoutType.FLOAT3, LayoutSemantic.POSITION),
                      LayoutMember(LayoutType.UV, LayoutSemantic.UV)]),
        BufferLayout([LayoutMember(LayoutType.UV_PAIR, LayoutSemantic.UV)]),
    ]
    pool = ClaimPool([VertexBuffer(0, 0), VertexBuffer(1, 1)], "vertex buffer")
    mesh = Mesh()
    mesh._vertex_buffer_indices = [0, 1]
    mesh.claim_vertex_buffers(pool, layouts)
    assert mesh.slot_counts(layouts)[LayoutSemantic.UV] == 3


def test_get_faces_prefers_matching_flags():
    mesh = _mesh_with_vertices(4)
    mesh.face_sets = [
        FaceSet(FaceSetFlags.LOD_LEVEL1, indices=[3, 2, 1]),
        FaceSet(FaceSetFlags.NONE, indices=[0, 1, 2]),
    ]
    faces = mesh.get_faces()
    assert len(faces) == 1
    assert faces[0] == (mesh.vertices[0], mesh.vertices[1], mesh.vertices[2])
    assert mesh.get_face_indices(FaceSetFlags.LOD_LEVEL1) == [(3, 2, 1)]


def test_get_faces_falls_back_to_first_face_set():
    mesh = _mesh_with_vertices(4)
    mesh.face_sets = [FaceSet(FaceSetFlags.LOD_LEVEL2, indices=[1, 2, 3])]
    assert mesh.get_face_indices() == [(1, 2, 3)]


def test_get_faces_drops_remainder():
    mesh = _mesh_with_vertices(4)
    mesh.face_sets = [FaceSet(indices=[0, 1, 2, 3, 2])]
    assert mesh.get_face_indices() == [(0, 1, 2)]


def test_get_faces_without_face_sets():
    assert _mesh_with_vertices(3).get_faces() == []


def test_get_faces_bad_index():
    mesh = _mesh_with_vertices(2)
    mesh.face_sets = [FaceSet(indices=[0, 1, 5])]
    with pytest.raises(FormatError):
        mesh.get_faces()


def test_strip_mesh_faces():
    mesh = _mesh_with_vertices(4)
    mesh.face_sets = [FaceSet(triangle_strip=True, indices=[0, 1, 2, 3])]
    assert mesh.get_face_indices() == [(0, 1, 2), (3, 2, 1)]


@pytest.mark.parametrize("version, size", [(0x20014, 24), (0x2001A, 36)])
def test_bounding_box_extra_vector_gated_by_version(version, size):
    box = BoundingBoxes((-1.0, -2.0, -3.0), (1.0, 2.0, 3.0), (0.5, 0.5, 0.5))
    bw = BinaryWriter()
    box.write(bw, version)
    data = bw.finish()
    assert len(data) == size

    read = BoundingBoxes.read(BinaryReader(data), version)
    assert read.min == box.min and read.max == box.max
    expected_unk = box.unk if version >= 0x2001A else (0.0, 0.0, 0.0)
    assert read.unk == expected_unk


def test_mesh_needs_one_to_three_buffers():
    with pytest.raises(FormatError):
        Mesh().write(BinaryWriter(), 0)
