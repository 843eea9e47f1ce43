import struct

import pytest

from conftest import make_flver
from souls_codec import read_flver, write_flver
from souls_codec.binary.bin_errors import FormatError, UnsupportedFormatError
from souls_codec.flver_format.flver_constants import (
    FaceSetFlags, HEADER_SIZE, MESH_HEADER_SIZE,
)
from souls_codec.flver_format.flver_file import FLVERFile


def test_round_trip_preserves_structure(quad_flver, quad_flver_bytes):
    loaded = read_flver(quad_flver_bytes)
    assert loaded.header.version == 0x20014
    assert loaded.header.bounding_max == (1.0, 1.0, 0.0)
    assert loaded.layouts == quad_flver.layouts

    mesh = loaded.meshes[0]
    original = quad_flver.meshes[0]
    assert mesh.bone_indices == [0, 1]
    assert mesh.bounding_box == original.bounding_box
    assert mesh.vertices == original.vertices
    assert [fs.indices for fs in mesh.face_sets] == [[0, 1, 2, 2, 1, 3], [0, 1, 2, 3]]
    assert mesh.face_sets[1].flags == FaceSetFlags.LOD_LEVEL1
    assert mesh.face_sets[1].triangle_strip
    assert mesh.vertex_buffers[0].vertex_count == 4


def test_second_write_is_byte_identical(quad_flver_bytes):
    again = write_flver(read_flver(quad_flver_bytes))
    assert again == quad_flver_bytes


def test_faces_after_load(quad_flver_bytes):
    mesh = read_flver(quad_flver_bytes).meshes[0]
    assert mesh.get_face_indices() == [(0, 1, 2), (2, 1, 3)]
    assert mesh.get_face_indices(FaceSetFlags.LOD_LEVEL1) == [(0, 1, 2), (3, 2, 1)]


@pytest.mark.parametrize("version, big_endian", [
    (0x20005, True),
    (0x2000C, False),
    (0x2001A, False),
])
def test_round_trip_other_versions(version, big_endian):
    data = make_flver(version, big_endian, mesh_count=2).write()
    loaded = FLVERFile.read(data)
    assert loaded.header.big_endian == big_endian
    assert len(loaded.meshes) == 2
    assert loaded.meshes[1].material_index == 1
    assert loaded.write() == data


def test_profile_detected_on_load():
    loaded = FLVERFile.read(make_flver(0x20005, True).write())
    assert loaded.profile.game_id == "des_ps3"
    assert loaded.uv_factor == 1024.0


def test_short_face_set_headers_before_0x20006():
    old = make_flver(0x20005).write()
    new = make_flver(0x20007).write()
    # Two face sets, 0x10 bytes each smaller; the data region start is padded
    assert struct.unpack_from("<i", old, 0x0C)[0] < struct.unpack_from("<i", new, 0x0C)[0]


def test_bad_magic():
    with pytest.raises(FormatError):
        read_flver(b"FLVEX\0L\0" + bytes(0x48))


def test_unknown_version():
    data = bytearray(make_flver().write())
    struct.pack_into("<I", data, 0x08, 0x20099)
    with pytest.raises(UnsupportedFormatError):
        read_flver(bytes(data))


def test_truncated_data_region(quad_flver_bytes):
    with pytest.raises(FormatError):
        read_flver(quad_flver_bytes[:-0x10])


def test_shared_face_set_between_meshes_rejected():
    data = bytearray(make_flver(mesh_count=2).write())
    # Point the second mesh's face set index list at the first mesh's
    face_set_list_field = HEADER_SIZE + MESH_HEADER_SIZE + 0x24
    first_list = struct.unpack_from("<i", data, HEADER_SIZE + 0x24)[0]
    struct.pack_into("<i", data, face_set_list_field, first_list)
    with pytest.raises(FormatError, match="already claimed"):
        read_flver(bytes(data))


def test_face_index_out_of_range_rejected():
    flver = make_flver()
    flver.meshes[0].face_sets[0].indices = [0, 1, 9]
    with pytest.raises(FormatError, match="out of range"):
        read_flver(flver.write())


def test_writing_edge_compressed_face_set_rejected(quad_flver):
    quad_flver.meshes[0].face_sets[0].index_size = 8
    with pytest.raises(UnsupportedFormatError):
        quad_flver.write()


def test_file_helpers(tmp_path, quad_flver):
    path = tmp_path / "quad.flver"
    quad_flver.write_to_path(path)
    assert FLVERFile.from_path(path).meshes[0].vertices == quad_flver.meshes[0].vertices


def test_for_profile_sets_header():
    flver = FLVERFile.for_profile("sekiro_pc")
    assert flver.header.version == 0x2001A
    assert flver.header.vertex_index_size == 32


def test_negative_bone_count_rejected(quad_flver_bytes):
    data = bytearray(quad_flver_bytes)
    struct.pack_into("<i", data, HEADER_SIZE + 0x14, -1)
    with pytest.raises(FormatError, match="Negative element count") as err:
        read_flver(bytes(data))
    assert err.value.observed == -1


def test_negative_face_set_index_count_rejected(quad_flver_bytes):
    data = bytearray(quad_flver_bytes)
    first_face_set = HEADER_SIZE + MESH_HEADER_SIZE
    struct.pack_into("<i", data, first_face_set + 0x08, -3)
    with pytest.raises(FormatError, match="Negative element count") as err:
        read_flver(bytes(data))
    assert err.value.field == "count"
