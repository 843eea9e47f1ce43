"""MSB model records and the model param.

Model record (offsets relative to the record start):
    +0x00: name offset (i64, non-zero)
    +0x08: type (u32, ModelType)
    +0x0C: id (i32) - written as the model's position in the param
    +0x10: sib path offset (i64, non-zero)
    +0x18: instance count (i32) - number of parts using the model
    +0x1C: unk1c (i32)
    +0x20: type data offset (i64) - non-zero exactly when the type has data
    name, sib path (UTF-16, null-terminated), pad to 8, type data

MapPiece type data (0x20 bytes):
    +0x00: unk_t00, unk_t01, unk_t02 (bool x3), 0 (u8)
    +0x04: unk_t04 .. unk_t18 (f32 x6)
    +0x1C: 0 (i32)
"""

import logging
import os

from ..binary.bin_errors import FormatError
from .msb_constants import MODEL_PARAM_NAME, PARAM_VERSION, ENTRY_ALIGN, ModelType
from .msb_param import Param

_debug = os.environ.get('SOULS_CODEC_DEBUG', '') == '1'
_log = logging.getLogger("souls_codec.msb")


class Model:
    """A model file available for parts to reference.

    Subclasses set TYPE and HAS_TYPE_DATA; those with type data override
    _read_type_data, _write_type_data and _copy_type_data.
    """

    TYPE = None
    HAS_TYPE_DATA = False
    DEFAULT_NAME = ""

    def __init__(self, name=None):
        self.name = self.DEFAULT_NAME if name is None else name
        self.sib_path = ""
        self.unk1c = 0
        self.instance_count = 0

    @classmethod
    def read(cls, br):
        start = br.position
        name_offset = br.read_int64()
        br.assert_uint32(cls.TYPE, field="model_type")
        br.read_int32()  # id
        sib_offset = br.read_int64()
        instance_count = br.read_int32()
        unk1c = br.read_int32()
        type_data_offset = br.read_int64()

        if name_offset == 0:
            raise FormatError(f"name_offset must not be 0 in type {cls.__name__}",
                              field="name_offset", observed=0)
        if sib_offset == 0:
            raise FormatError(f"sib_offset must not be 0 in type {cls.__name__}",
                              field="sib_offset", observed=0)
        if cls.HAS_TYPE_DATA != (type_data_offset != 0):
            raise FormatError(
                f"Unexpected type_data_offset 0x{type_data_offset:X} in type {cls.__name__}",
                field="type_data_offset", observed=type_data_offset,
            )

        model = cls(br.get_utf16(start + name_offset))
        model.sib_path = br.get_utf16(start + sib_offset)
        model.instance_count = instance_count
        model.unk1c = unk1c
        if cls.HAS_TYPE_DATA:
            with br.step_in(start + type_data_offset):
                model._read_type_data(br)
        return model

    def write(self, bw, index):
        start = bw.position
        bw.reserve_int64("NameOffset")
        bw.write_uint32(self.TYPE)
        bw.write_int32(index)
        bw.reserve_int64("SibOffset")
        bw.write_int32(self.instance_count)
        bw.write_int32(self.unk1c)
        bw.reserve_int64("TypeDataOffset")

        bw.fill_int64("NameOffset", bw.position - start)
        bw.write_utf16(self.name, terminate=True)
        bw.fill_int64("SibOffset", bw.position - start)
        bw.write_utf16(self.sib_path, terminate=True)
        bw.pad(ENTRY_ALIGN)

        if self.HAS_TYPE_DATA:
            bw.fill_int64("TypeDataOffset", bw.position - start)
            self._write_type_data(bw)
        else:
            bw.fill_int64("TypeDataOffset", 0)

    def _read_type_data(self, br):
        raise NotImplementedError(f"Type {type(self).__name__} has no type data reader")

    def _write_type_data(self, bw):
        raise NotImplementedError(f"Type {type(self).__name__} has no type data writer")

    def _copy_type_data(self, clone):
        pass

    def deep_copy(self):
        """Return an independent copy of this model."""
        clone = type(self)(self.name)
        clone.sib_path = self.sib_path
        clone.unk1c = self.unk1c
        clone.instance_count = self.instance_count
        self._copy_type_data(clone)
        return clone

    def count_instances(self, parts):
        self.instance_count = sum(1 for p in parts if p.model_name == self.name)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return f"{ModelType(self.TYPE).name} {self.name}"


class MapPiece(Model):
    """A model for fixed terrain or scenery."""

    TYPE = ModelType.MAP_PIECE
    HAS_TYPE_DATA = True
    DEFAULT_NAME = "mXXXXXX"

    def __init__(self, name=None):
        super().__init__(name)
        self.unk_t00 = False
        self.unk_t01 = False
        self.unk_t02 = False
        self.unk_t04 = 0.0
        self.unk_t08 = 0.0
        self.unk_t0c = 0.0
        self.unk_t10 = 0.0
        self.unk_t14 = 0.0
        self.unk_t18 = 0.0

    def _read_type_data(self, br):
        self.unk_t00 = br.read_bool()
        self.unk_t01 = br.read_bool()
        self.unk_t02 = br.read_bool()
        br.assert_uint8(0)
        self.unk_t04 = br.read_float32()
        self.unk_t08 = br.read_float32()
        self.unk_t0c = br.read_float32()
        self.unk_t10 = br.read_float32()
        self.unk_t14 = br.read_float32()
        self.unk_t18 = br.read_float32()
        br.assert_int32(0)

    def _write_type_data(self, bw):
        bw.write_bool(self.unk_t00)
        bw.write_bool(self.unk_t01)
        bw.write_bool(self.unk_t02)
        bw.write_uint8(0)
        bw.write_float32(self.unk_t04)
        bw.write_float32(self.unk_t08)
        bw.write_float32(self.unk_t0c)
        bw.write_float32(self.unk_t10)
        bw.write_float32(self.unk_t14)
        bw.write_float32(self.unk_t18)
        bw.write_int32(0)

    def _copy_type_data(self, clone):
        clone.unk_t00 = self.unk_t00
        clone.unk_t01 = self.unk_t01
        clone.unk_t02 = self.unk_t02
        clone.unk_t04 = self.unk_t04
        clone.unk_t08 = self.unk_t08
        clone.unk_t0c = self.unk_t0c
        clone.unk_t10 = self.unk_t10
        clone.unk_t14 = self.unk_t14
        clone.unk_t18 = self.unk_t18


class Object(Model):
    """A model for a dynamic prop."""
    TYPE = ModelType.OBJECT
    DEFAULT_NAME = "oXXXXXX"


class Enemy(Model):
    """A model for a non-player entity."""
    TYPE = ModelType.ENEMY
    DEFAULT_NAME = "cXXXX"


class Player(Model):
    TYPE = ModelType.PLAYER
    DEFAULT_NAME = "c0000"


class Collision(Model):
    """A model for collision physics."""
    TYPE = ModelType.COLLISION
    DEFAULT_NAME = "hXXXXXX"


MODEL_CLASSES = {
    ModelType.MAP_PIECE: MapPiece,
    ModelType.OBJECT: Object,
    ModelType.ENEMY: Enemy,
    ModelType.PLAYER: Player,
    ModelType.COLLISION: Collision,
}


class ModelParam(Param):
    """Models grouped by type; get_entries() fixes the on-disk order."""

    NAME = MODEL_PARAM_NAME

    def __init__(self, version=PARAM_VERSION):
        super().__init__(version)
        self.map_pieces = []
        self.objects = []
        self.enemies = []
        self.players = []
        self.collisions = []

    def _list_for(self, model_type):
        return {
            ModelType.MAP_PIECE: self.map_pieces,
            ModelType.OBJECT: self.objects,
            ModelType.ENEMY: self.enemies,
            ModelType.PLAYER: self.players,
            ModelType.COLLISION: self.collisions,
        }[model_type]

    def add(self, model):
        """Append ``model`` to the list for its type and return it."""
        if not isinstance(model, Model) or model.TYPE not in MODEL_CLASSES:
            raise TypeError(f"Unrecognized model type: {type(model).__name__}")
        self._list_for(model.TYPE).append(model)
        return model

    def get_entries(self):
        return (self.map_pieces + self.objects + self.enemies
                + self.players + self.collisions)

    def read_entry(self, br):
        raw_type = br.get_uint32(br.position + 8)
        try:
            model_type = ModelType(raw_type)
        except ValueError:
            raise FormatError(f"Unknown model type: {raw_type}",
                              field="model_type", observed=raw_type) from None
        model = self.add(MODEL_CLASSES[model_type].read(br))
        if _debug:
            _log.debug("Read model %r (%d instances)", model, model.instance_count)
        return model

    def write_entry(self, bw, index, model):
        model.write(bw, index)

    def count_instances(self, parts):
        """Recompute every model's instance count from ``parts``."""
        for model in self.get_entries():
            model.count_instances(parts)
