"""Constants for the MSB scene description."""

from enum import IntEnum

MSB_MAGIC = b"MSB "
HEADER_SIZE = 0x10

# Every param table in a document shares this version
PARAM_VERSION = 35

MODEL_PARAM_NAME = "MODEL_PARAM_ST"
PARTS_PARAM_NAME = "PARTS_PARAM_ST"

# Param names and entries are aligned to this
ENTRY_ALIGN = 8


class ModelType(IntEnum):
    """Tag stored at +0x08 of every model record."""
    MAP_PIECE = 0
    OBJECT = 1
    ENEMY = 2
    PLAYER = 4
    COLLISION = 5
