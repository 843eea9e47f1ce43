"""Readers and writers for FLVER geometry containers and MSB scene files."""

__version__ = "0.1.0"

from .binary.bin_errors import FormatError, UnsupportedFormatError, ReservationError
from .flver_format.flver_file import FLVERFile
from .msb_format.msb_file import MSBFile


def read_flver(data, profile=None, decompressor=None):
    """Load a FLVER container from bytes.

    Args:
        data: the whole document
        profile: GameProfile, or None to detect from the header
        decompressor: callable(count, buffer) for edge-compressed face sets;
            defaults to the library named by $SOULS_EDGE_DECOMPRESSOR
    """
    return FLVERFile.read(data, profile, decompressor)


def write_flver(flver):
    return flver.write()


def read_msb(data):
    return MSBFile.read(data)


def write_msb(msb):
    return msb.write()


__all__ = [
    "FLVERFile", "MSBFile",
    "FormatError", "UnsupportedFormatError", "ReservationError",
    "read_flver", "write_flver", "read_msb", "write_msb",
]
