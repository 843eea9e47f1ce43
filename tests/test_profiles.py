from types import SimpleNamespace

import pytest

from souls_codec.game_profiles import (
    GAME_PROFILES, GameProfile, GeometryConfig,
    detect_profile, get_profile, register_profile,
)


def _header(version, big_endian=False):
    return SimpleNamespace(version=version, big_endian=big_endian)


@pytest.mark.parametrize("version, big_endian, expected", [
    (0x2000C, True, "ds1_ps3"),
    (0x2000C, False, "ds1_pc"),
    (0x20014, False, "ds3_pc"),
    (0x20016, False, "bb_ps4"),
    (0x2001A, False, "sekiro_pc"),
])
def test_detect_by_version_and_byte_order(version, big_endian, expected):
    assert detect_profile(_header(version, big_endian)).game_id == expected


def test_detect_falls_back_to_default():
    assert detect_profile(_header(0x10000)).game_id == "ds3_pc"


def test_lookup_by_id():
    assert get_profile("sekiro_pc").geometry.default_vertex_index_size == 32
    assert get_profile("unknown") is None


def test_register_custom_profile(monkeypatch):
    monkeypatch.setattr("souls_codec.game_profiles.GAME_PROFILES", dict(GAME_PROFILES))
    register_profile(GameProfile(
        game_id="test_exact",
        game_name="Exact",
        min_version=0x20014,
        max_version=0x20014,
        geometry=GeometryConfig(uv_factor=512.0),
    ))
    assert get_profile("test_exact").geometry.uv_factor == 512.0
    assert detect_profile(_header(0x20014)).game_id == "test_exact"
