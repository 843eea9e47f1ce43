"""Meshes: an individual chunk of a model.

Mesh header (0x30 bytes):
    +0x00: dynamic (u8, 0 or 1) - 1 when the mesh is in bind pose
    +0x01: 0, 0, 0 (u8 x3)
    +0x04: material index (i32)
    +0x08: 0, 0 (i32 x2)
    +0x10: default bone index (i32)
    +0x14: bone count (i32)
    +0x18: bounding box offset (i32, 0 when absent)
    +0x1C: bone index list offset (i32)
    +0x20: face set count (i32)
    +0x24: face set index list offset (i32)
    +0x28: vertex buffer count (i32, 1 to 3)
    +0x2C: vertex buffer index list offset (i32)

Face sets and vertex buffers live in container-wide tables; a mesh only
stores indices into them and claims its entries once every table is read.
"""

from ..binary.bin_errors import FormatError
from .flver_constants import (
    BOUNDING_BOX_UNK_VERSION, REPEATABLE_SEMANTICS, RESTART_16, RESTART_32,
    FaceSetFlags,
)
from .flver_layout import LIST_SEMANTICS
from .flver_vertex import Vertex

FLOAT_MAX = 3.4028234663852886e38


class BoundingBoxes:
    """Optional per-mesh bounds; ``unk`` only exists from version 0x2001A."""

    __slots__ = ('min', 'max', 'unk')

    def __init__(self, min=None, max=None, unk=(0.0, 0.0, 0.0)):
        self.min = min if min is not None else (-FLOAT_MAX,) * 3
        self.max = max if max is not None else (FLOAT_MAX,) * 3
        self.unk = unk

    @classmethod
    def read(cls, br, version):
        box = cls(br.read_vector3(), br.read_vector3())
        if version >= BOUNDING_BOX_UNK_VERSION:
            box.unk = br.read_vector3()
        return box

    def write(self, bw, version):
        bw.write_vector3(self.min)
        bw.write_vector3(self.max)
        if version >= BOUNDING_BOX_UNK_VERSION:
            bw.write_vector3(self.unk)

    def __eq__(self, other):
        if not isinstance(other, BoundingBoxes):
            return NotImplemented
        return (self.min, self.max, self.unk) == (other.min, other.max, other.unk)

    def __repr__(self):
        return f"BoundingBoxes(min={self.min}, max={self.max})"


class Mesh:
    """A mesh with its claimed face sets, vertex buffers and vertices."""

    __slots__ = (
        'dynamic', 'material_index', 'default_bone_index', 'bone_indices',
        'face_sets', 'vertex_buffers', 'vertices', 'bounding_box',
        '_face_set_indices', '_vertex_buffer_indices',
    )

    def __init__(self):
        self.dynamic = 0
        self.material_index = 0
        self.default_bone_index = -1
        self.bone_indices = []
        self.face_sets = []
        self.vertex_buffers = []
        self.vertices = []
        self.bounding_box = None
        self._face_set_indices = None
        self._vertex_buffer_indices = None

    @classmethod
    def read(cls, br, header):
        mesh = cls()
        mesh.dynamic = br.assert_uint8(0, 1, field="dynamic")
        br.assert_uint8(0)
        br.assert_uint8(0)
        br.assert_uint8(0)

        mesh.material_index = br.read_int32()
        br.assert_int32(0)
        br.assert_int32(0)
        mesh.default_bone_index = br.read_int32()
        bone_count = br.read_int32()
        bounding_box_offset = br.read_int32()
        bone_offset = br.read_int32()
        face_set_count = br.read_int32()
        face_set_offset = br.read_int32()
        vertex_buffer_count = br.assert_int32(1, 2, 3, field="vertex_buffer_count")
        vertex_buffer_offset = br.read_int32()

        if bounding_box_offset != 0:
            with br.step_in(bounding_box_offset):
                mesh.bounding_box = BoundingBoxes.read(br, header.version)

        mesh.bone_indices = br.get_int32s(bone_offset, bone_count)
        mesh._face_set_indices = br.get_int32s(face_set_offset, face_set_count)
        mesh._vertex_buffer_indices = br.get_int32s(vertex_buffer_offset, vertex_buffer_count)
        return mesh

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def claim_face_sets(self, pool):
        self.face_sets = pool.claim_all(self._face_set_indices)
        self._face_set_indices = None

    def claim_vertex_buffers(self, pool, layouts):
        self.vertex_buffers = pool.claim_all(self._vertex_buffer_indices)
        self._vertex_buffer_indices = None

        # Only these semantics are known to repeat; anything else repeating
        # would shift slot assignment.
        seen = set()
        for buffer in self.vertex_buffers:
            for member in buffer.resolve_layout(layouts):
                if member.semantic in REPEATABLE_SEMANTICS:
                    continue
                if member.semantic in seen:
                    raise FormatError(
                        f"Unexpected repeated semantic: {member.semantic.name}",
                        field="semantic", observed=member.semantic,
                    )
                seen.add(member.semantic)

        for i, buffer in enumerate(self.vertex_buffers):
            if buffer.position_index != i:
                raise FormatError(
                    f"Unexpected vertex buffer index: 0x{buffer.buffer_index:X} at position {i}",
                    field="buffer_index", expected=i, observed=buffer.buffer_index,
                )

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    def slot_counts(self, layouts):
        """List-slot counts (UV, tangent, colour) over this mesh's layouts."""
        counts = dict.fromkeys(LIST_SEMANTICS, 0)
        for buffer in self.vertex_buffers:
            for semantic, count in buffer.resolve_layout(layouts).semantic_counts().items():
                counts[semantic] += count
        return counts

    def read_vertices(self, layouts, endian, uv_factor):
        vertex_count = self.vertex_buffers[0].vertex_count
        for buffer in self.vertex_buffers[1:]:
            if buffer.vertex_count != vertex_count:
                raise FormatError(
                    f"Vertex buffers disagree on vertex count: "
                    f"{buffer.vertex_count} vs {vertex_count}",
                    field="vertex_count", expected=vertex_count, observed=buffer.vertex_count,
                )

        counts = self.slot_counts(layouts)
        uv_count = counts[LIST_SEMANTICS[0]]
        tangent_count = counts[LIST_SEMANTICS[1]]
        color_count = counts[LIST_SEMANTICS[2]]
        self.vertices = [Vertex(uv_count, tangent_count, color_count) for _ in range(vertex_count)]

        slot_base = dict.fromkeys(LIST_SEMANTICS, 0)
        for buffer in self.vertex_buffers:
            slot_base = buffer.read_vertices(
                layouts, self.vertices, endian, uv_factor, slot_base)
        self._check_face_indices()

    def _check_face_indices(self):
        limit = len(self.vertices)
        for fs in self.face_sets:
            if fs.edge_group is not None:
                continue
            restarts = (RESTART_16, RESTART_32) if fs.triangle_strip else ()
            for index in fs.indices:
                if index >= limit and index not in restarts:
                    raise FormatError(
                        f"Face index {index} out of range for {limit} vertices",
                        field="indices", expected=limit, observed=index,
                    )

    def encode_vertices(self, layouts, endian, uv_factor):
        """Encode the vertices into one byte string per vertex buffer."""
        blobs = []
        slot_base = dict.fromkeys(LIST_SEMANTICS, 0)
        for buffer in self.vertex_buffers:
            layout = buffer.resolve_layout(layouts)
            data, slot_base = layout.encode_vertices(
                self.vertices, endian, uv_factor, slot_base)
            blobs.append(data)
        return blobs

    # ------------------------------------------------------------------
    # Triangles
    # ------------------------------------------------------------------

    def get_face_indices(self, flags=FaceSetFlags.NONE, include_degenerate=False):
        """Return triangles as (i0, i1, i2) vertex index tuples.

        Uses the first face set whose flags equal ``flags`` (full detail by
        default), else the first face set. A trailing partial triangle is
        dropped.
        """
        if not self.face_sets:
            return []
        face_set = next((fs for fs in self.face_sets if fs.flags == flags), self.face_sets[0])
        indices = face_set.triangulate(len(self.vertices) < RESTART_16, include_degenerate)
        return [tuple(indices[i:i + 3]) for i in range(0, len(indices) - 2, 3)]

    def get_faces(self, flags=FaceSetFlags.NONE, include_degenerate=False):
        """Return triangles as triples of Vertex objects."""
        vertices = self.vertices
        faces = []
        for tri in self.get_face_indices(flags, include_degenerate):
            try:
                faces.append((vertices[tri[0]], vertices[tri[1]], vertices[tri[2]]))
            except IndexError:
                raise FormatError(
                    f"Face {tri} references a vertex outside 0..{len(vertices) - 1}",
                    field="indices", observed=tri,
                ) from None
        return faces

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, bw, index):
        if not 1 <= len(self.vertex_buffers) <= 3:
            raise FormatError(
                f"Mesh {index} has {len(self.vertex_buffers)} vertex buffers, expected 1 to 3",
                field="vertex_buffer_count", observed=len(self.vertex_buffers),
            )
        bw.write_uint8(self.dynamic)
        bw.write_uint8(0)
        bw.write_uint8(0)
        bw.write_uint8(0)

        bw.write_int32(self.material_index)
        bw.write_int32(0)
        bw.write_int32(0)
        bw.write_int32(self.default_bone_index)
        bw.write_int32(len(self.bone_indices))
        bw.reserve_int32(f"MeshBoundingBox{index}")
        bw.reserve_int32(f"MeshBoneIndices{index}")
        bw.write_int32(len(self.face_sets))
        bw.reserve_int32(f"MeshFaceSetIndices{index}")
        bw.write_int32(len(self.vertex_buffers))
        bw.reserve_int32(f"MeshVertexBufferIndices{index}")

    def write_bounding_box(self, bw, index, version):
        if self.bounding_box is None:
            bw.fill_int32(f"MeshBoundingBox{index}", 0)
        else:
            bw.fill_int32(f"MeshBoundingBox{index}", bw.position)
            self.bounding_box.write(bw, version)

    def write_bone_indices(self, bw, index):
        bw.fill_int32(f"MeshBoneIndices{index}", bw.position)
        bw.write_int32s(self.bone_indices)

    def write_face_set_indices(self, bw, index, first):
        bw.fill_int32(f"MeshFaceSetIndices{index}", bw.position)
        bw.write_int32s(range(first, first + len(self.face_sets)))

    def write_vertex_buffer_indices(self, bw, index, first):
        bw.fill_int32(f"MeshVertexBufferIndices{index}", bw.position)
        bw.write_int32s(range(first, first + len(self.vertex_buffers)))

    def __repr__(self):
        return (
            f"Mesh(material={self.material_index}, vertices={len(self.vertices)}, "
            f"faceSets={len(self.face_sets)}, vertexBuffers={len(self.vertex_buffers)})"
        )
