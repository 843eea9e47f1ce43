"""MSB part records: placed instances of models.

Part record (0x40 bytes, offsets relative to the record start):
    +0x00: name offset (i64)
    +0x08: sib path offset (i64)
    +0x10: model index (i32) - position in ModelParam.get_entries()
    +0x14: 0 (i32)
    +0x18: position (vec3)
    +0x24: rotation (vec3, degrees)
    +0x30: scale (vec3)
    +0x3C: 0 (i32)
    name, sib path (UTF-16, null-terminated), pad to 8
"""

from ..binary.bin_errors import FormatError
from .msb_constants import PARTS_PARAM_NAME, PARAM_VERSION, ENTRY_ALIGN
from .msb_param import Param


class Part:
    """A placed model. The model is referenced by name in memory."""

    def __init__(self, name="", model_name=None):
        self.name = name
        self.sib_path = ""
        self.model_name = model_name
        self.position = (0.0, 0.0, 0.0)
        self.rotation = (0.0, 0.0, 0.0)
        self.scale = (1.0, 1.0, 1.0)

    @classmethod
    def read(cls, br, model_names):
        start = br.position
        name_offset = br.read_int64()
        sib_offset = br.read_int64()
        model_index = br.read_int32()
        br.assert_int32(0)
        position = br.read_vector3()
        rotation = br.read_vector3()
        scale = br.read_vector3()
        br.assert_int32(0)

        if not 0 <= model_index < len(model_names):
            raise FormatError(
                f"Part model index {model_index} out of range ({len(model_names)} models)",
                field="model_index", observed=model_index,
            )
        part = cls(br.get_utf16(start + name_offset), model_names[model_index])
        part.sib_path = br.get_utf16(start + sib_offset)
        part.position = position
        part.rotation = rotation
        part.scale = scale
        return part

    def write(self, bw, model_names):
        try:
            model_index = model_names.index(self.model_name)
        except ValueError:
            raise FormatError(
                f"Part {self.name} references unknown model {self.model_name}",
                field="model_name", observed=self.model_name,
            ) from None

        start = bw.position
        bw.reserve_int64("PartNameOffset")
        bw.reserve_int64("PartSibOffset")
        bw.write_int32(model_index)
        bw.write_int32(0)
        bw.write_vector3(self.position)
        bw.write_vector3(self.rotation)
        bw.write_vector3(self.scale)
        bw.write_int32(0)

        bw.fill_int64("PartNameOffset", bw.position - start)
        bw.write_utf16(self.name, terminate=True)
        bw.fill_int64("PartSibOffset", bw.position - start)
        bw.write_utf16(self.sib_path, terminate=True)
        bw.pad(ENTRY_ALIGN)

    def deep_copy(self):
        clone = Part(self.name, self.model_name)
        clone.sib_path = self.sib_path
        clone.position = self.position
        clone.rotation = self.rotation
        clone.scale = self.scale
        return clone

    def __eq__(self, other):
        if not isinstance(other, Part):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return f"Part {self.name} ({self.model_name})"


class PartsParam(Param):
    """Placed parts, in on-disk order."""

    NAME = PARTS_PARAM_NAME

    def __init__(self, version=PARAM_VERSION):
        super().__init__(version)
        self.parts = []

    def add(self, part):
        if not isinstance(part, Part):
            raise TypeError(f"Unrecognized part type: {type(part).__name__}")
        self.parts.append(part)
        return part

    def get_entries(self):
        return list(self.parts)

    def read_entry(self, br, model_names):
        return self.add(Part.read(br, model_names))

    def write_entry(self, bw, index, part, model_names):
        part.write(bw, model_names)
