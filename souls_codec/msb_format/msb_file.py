"""MSB document: header, model param and parts param.

Header (0x10 bytes):
    +0x00: "MSB "
    +0x04: 1 (i32)
    +0x08: header size 0x10 (i32)
    +0x0C: big endian (bool, 0), bit big endian (bool, 0)
    +0x0E: unicode (u8, 1), 0xFF (u8)

The params follow in order MODEL_PARAM_ST, PARTS_PARAM_ST, each linked to
the next by its next param offset.
"""

import logging

from ..binary.bin_errors import FormatError
from ..binary.bin_reader import BinaryReader
from ..binary.bin_writer import BinaryWriter
from .msb_constants import MSB_MAGIC, HEADER_SIZE
from .msb_models import ModelParam
from .msb_parts import PartsParam

_log = logging.getLogger("souls_codec.msb")


class MSBFile:
    """An editable scene: models and the parts that place them."""

    def __init__(self):
        self.models = ModelParam()
        self.parts = PartsParam()

    @classmethod
    def read(cls, data):
        br = BinaryReader(data, "<")
        br.assert_bytes(MSB_MAGIC, field="magic")
        br.assert_int32(1)
        br.assert_int32(HEADER_SIZE, field="header_size")
        br.assert_bool(False, field="big_endian")
        br.assert_bool(False, field="bit_big_endian")
        br.assert_uint8(1, field="unicode")
        br.assert_uint8(0xFF)

        msb = cls()
        start = br.position
        next_offset = msb.models.read(br)
        if next_offset == 0:
            raise FormatError(f"Missing param after {msb.models.NAME}", field="next_param_offset")
        br.seek(start + next_offset)

        model_names = [m.name for m in msb.models.get_entries()]
        last_offset = msb.parts.read(br, model_names)
        if last_offset != 0:
            raise FormatError(f"Unexpected param after {msb.parts.NAME}",
                              field="next_param_offset", observed=last_offset)

        _log.info("Read MSB: %d models, %d parts",
                  len(model_names), len(msb.parts.parts))
        return msb

    @classmethod
    def from_path(cls, path):
        with open(path, "rb") as f:
            return cls.read(f.read())

    def write(self):
        """Serialize the scene; model instance counts are recomputed from parts."""
        self.models.count_instances(self.parts.parts)
        model_names = [m.name for m in self.models.get_entries()]

        bw = BinaryWriter("<")
        bw.write_bytes(MSB_MAGIC)
        bw.write_int32(1)
        bw.write_int32(HEADER_SIZE)
        bw.write_bool(False)
        bw.write_bool(False)
        bw.write_uint8(1)
        bw.write_uint8(0xFF)

        self.models.write(bw, False)
        self.parts.write(bw, True, model_names)
        data = bw.finish()
        _log.info("Wrote MSB: %d models, %d parts, %d bytes",
                  len(model_names), len(self.parts.parts), len(data))
        return data

    def write_to_path(self, path):
        data = self.write()
        with open(path, "wb") as f:
            f.write(data)

    def __repr__(self):
        return f"MSBFile(models={len(self.models.get_entries())}, parts={len(self.parts.parts)})"
