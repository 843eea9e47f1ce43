"""Whole-document FLVER reader.

Reads the header, then the four container-wide tables in file order
(meshes, face sets, vertex buffers, layouts). Face sets and vertex buffers
go into claim pools; every mesh then claims the entries it indexes, and
both pools must be empty afterwards. Vertices are decoded last, once each
mesh knows all of its buffers and their layouts.
"""

import logging
import os

from ..binary.bin_reader import BinaryReader
from ..game_profiles import detect_profile
from ..utils.claim_pool import ClaimPool
from .flver_faceset import FaceSet
from .flver_header import FLVERHeader
from .flver_layout import BufferLayout
from .flver_mesh import Mesh
from .flver_vertex_buffer import VertexBuffer

# Debug logger - activate with SOULS_CODEC_DEBUG=1 environment variable
_debug = os.environ.get('SOULS_CODEC_DEBUG', '') == '1'
_log = logging.getLogger("souls_codec.flver")


class FLVERReader:
    """Parses a complete FLVER container.

    Usage:
        reader = FLVERReader(data)
        reader.read()
        # Access parsed data:
        #   reader.header - FLVERHeader
        #   reader.meshes - list of Mesh (vertices decoded)
        #   reader.layouts - list of BufferLayout
        #   reader.profile - GameProfile used for decoding

    Args:
        data: bytes of the whole document
        profile: GameProfile to use, or None to detect from the header
        decompressor: callable(count, buffer) for edge-compressed face sets
    """

    def __init__(self, data, profile=None, decompressor=None):
        self.data = data
        self.profile = profile
        self.decompressor = decompressor
        self.header = None
        self.meshes = []
        self.layouts = []

    def read(self):
        br = BinaryReader(self.data)
        header = FLVERHeader.read(br)
        self.header = header
        if self.profile is None:
            self.profile = detect_profile(header)

        meshes = [Mesh.read(br, header) for _ in range(header.mesh_count)]
        face_sets = [FaceSet.read(br, header, self.decompressor)
                     for _ in range(header.face_set_count)]
        vertex_buffers = [VertexBuffer.read(br, header)
                          for _ in range(header.vertex_buffer_count)]
        layouts = [BufferLayout.read(br) for _ in range(header.layout_count)]

        face_set_pool = ClaimPool(face_sets, "face set")
        vertex_buffer_pool = ClaimPool(vertex_buffers, "vertex buffer")
        for mesh in meshes:
            mesh.claim_face_sets(face_set_pool)
            mesh.claim_vertex_buffers(vertex_buffer_pool, layouts)
        face_set_pool.ensure_empty()
        vertex_buffer_pool.ensure_empty()

        uv_factor = self.profile.geometry.uv_factor or header.uv_factor
        for i, mesh in enumerate(meshes):
            mesh.read_vertices(layouts, header.endian, uv_factor)
            if _debug:
                _log.debug("Mesh %d: %d vertices, %d face sets, %d vertex buffers, material %d",
                           i, len(mesh.vertices), len(mesh.face_sets),
                           len(mesh.vertex_buffers), mesh.material_index)

        compressed = sum(1 for fs in face_sets if fs.is_edge_compressed)
        if compressed and not self.profile.geometry.edge_compressed:
            _log.warning("%d edge-compressed face set(s) in a file detected as %s",
                         compressed, self.profile.game_name)

        self.meshes = meshes
        self.layouts = layouts
        _log.info("Read FLVER 0x%X (%s): %d meshes, %d face sets, %d vertex buffers, %d layouts",
                  header.version, self.profile.game_id, len(meshes), len(face_sets),
                  len(vertex_buffers), len(layouts))
        return self
