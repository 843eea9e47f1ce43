"""Whole-document FLVER serializer.

This is the exact inverse of flver_reader.py. Tables are written in the
order the reader expects; every offset that points forward is reserved
when its owner is written and filled once the target position is known.

File order:
    header, mesh headers, face set headers, vertex buffer headers,
    layout headers, layout members, mesh bounding boxes, mesh bone
    indices, mesh face set indices, mesh vertex buffer indices,
    pad to 0x20, data region (per mesh: face set indices then vertex
    buffer bytes, each padded to 0x10)
"""

import logging

from ..binary.bin_writer import BinaryWriter
from .flver_constants import DATA_REGION_ALIGN

_log = logging.getLogger("souls_codec.flver")


class FLVERWriter:
    """Serializes an FLVERFile to bytes.

    Face set and vertex buffer table indices are assigned in mesh order,
    so a file read back has each mesh own a contiguous run of entries.

    Usage:
        data = FLVERWriter(flver).write()
    """

    def __init__(self, flver):
        self.flver = flver

    def write(self):
        flver = self.flver
        header = flver.header
        meshes = flver.meshes
        layouts = flver.layouts
        uv_factor = flver.uv_factor

        face_sets = [fs for mesh in meshes for fs in mesh.face_sets]
        vertex_buffers = [vb for mesh in meshes for vb in mesh.vertex_buffers]

        header.mesh_count = len(meshes)
        header.face_set_count = len(face_sets)
        header.vertex_buffer_count = len(vertex_buffers)
        header.layout_count = len(layouts)

        bw = BinaryWriter(header.endian)
        header.write(bw)

        for i, mesh in enumerate(meshes):
            mesh.write(bw, i)

        for i, face_set in enumerate(face_sets):
            face_set.write(bw, header, i)

        index = 0
        for mesh in meshes:
            for position, vb in enumerate(mesh.vertex_buffers):
                vb.write(bw, index, position, layouts, len(mesh.vertices))
                index += 1

        for i, layout in enumerate(layouts):
            layout.write(bw, i)
        for i, layout in enumerate(layouts):
            layout.write_members(bw, i)

        for i, mesh in enumerate(meshes):
            mesh.write_bounding_box(bw, i, header.version)
        for i, mesh in enumerate(meshes):
            mesh.write_bone_indices(bw, i)

        first = 0
        for i, mesh in enumerate(meshes):
            mesh.write_face_set_indices(bw, i, first)
            first += len(mesh.face_sets)
        first = 0
        for i, mesh in enumerate(meshes):
            mesh.write_vertex_buffer_indices(bw, i, first)
            first += len(mesh.vertex_buffers)

        bw.pad(DATA_REGION_ALIGN)
        data_start = bw.position
        bw.fill_int32("DataOffset", data_start)

        face_set_index = 0
        buffer_index = 0
        for mesh in meshes:
            for face_set in mesh.face_sets:
                face_set.write_indices(bw, header, face_set_index, data_start)
                face_set_index += 1
            blobs = mesh.encode_vertices(layouts, header.endian, uv_factor)
            for vb, blob in zip(mesh.vertex_buffers, blobs):
                vb.write_buffer(bw, buffer_index, data_start, blob)
                buffer_index += 1

        bw.fill_int32("DataLength", bw.position - data_start)
        data = bw.finish()
        _log.info("Wrote FLVER 0x%X: %d meshes, %d face sets, %d vertex buffers, %d bytes",
                  header.version, len(meshes), len(face_sets), len(vertex_buffers), len(data))
        return data
