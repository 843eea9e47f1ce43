"""FLVER document object: header, meshes and shared buffer layouts."""

from ..game_profiles import GAME_PROFILES, DEFAULT_PROFILE_ID, get_profile
from .flver_header import FLVERHeader
from .flver_reader import FLVERReader
from .flver_writer import FLVERWriter


class FLVERFile:
    """An editable FLVER geometry container.

    Meshes own their face sets, vertex buffers and decoded vertices;
    layouts are shared by index between vertex buffers of any mesh.
    """

    def __init__(self, header=None, meshes=None, layouts=None, profile=None):
        self.profile = profile or GAME_PROFILES[DEFAULT_PROFILE_ID]
        self.header = header if header is not None else FLVERHeader()
        self.meshes = list(meshes) if meshes else []
        self.layouts = list(layouts) if layouts else []

    @classmethod
    def for_profile(cls, game_id):
        """Create an empty container with the version and byte order a game expects."""
        profile = get_profile(game_id)
        if profile is None:
            raise KeyError(f"Unknown game profile: {game_id}")
        header = FLVERHeader(profile.max_version, profile.big_endian)
        header.vertex_index_size = profile.geometry.default_vertex_index_size
        return cls(header, profile=profile)

    @property
    def uv_factor(self):
        return self.profile.geometry.uv_factor or self.header.uv_factor

    @classmethod
    def read(cls, data, profile=None, decompressor=None):
        reader = FLVERReader(data, profile, decompressor).read()
        return cls(reader.header, reader.meshes, reader.layouts, reader.profile)

    @classmethod
    def from_path(cls, path, profile=None, decompressor=None):
        with open(path, "rb") as f:
            return cls.read(f.read(), profile, decompressor)

    def write(self):
        return FLVERWriter(self).write()

    def write_to_path(self, path):
        data = self.write()
        with open(path, "wb") as f:
            f.write(data)

    def __repr__(self):
        return (
            f"FLVERFile(version=0x{self.header.version:X}, meshes={len(self.meshes)}, "
            f"layouts={len(self.layouts)})"
        )
