"""Edge-compressed face index groups.

Some console assets store face indices as groups of bit-packed delta streams
produced by an external tool chain. The stream format itself is opaque; we
only know the group framing and the contract of the native routine that
unpacks one member:

    decompress(count, buffer)
        buffer holds the compressed payload on entry (zero padded) and
        ``count`` little-endian u16 values on return.

Group header (0x10 bytes, at data offset + face set indices offset):
    +0x00: member count (i16)
    +0x02: unknown (i16)
    +0x04: unknown (i32)
    +0x08: 0 (i32)
    +0x0C: unknown (i32)

Member (0x40 bytes):
    +0x00: compressed length (i32)
    +0x04: compressed offset, relative to the group start (i32)
    +0x08: 0, 0 (i32 x2)
    +0x10: unknown (i16 x2)
    +0x14: base index (u16)
    +0x16: unknown (i16)
    +0x18: unknown (i32 x2)
    +0x20: 0, 0, 0, 0 (i32 x4)
    +0x30: unknown (i16 x5)
    +0x3A: member index count (u16)
    +0x3C: -1 (i32)

Decompressed member values are offset by the member's base index and the
members are concatenated in order, always forming a triangle list.
"""

import ctypes
import logging
import os
import struct

from ..binary.bin_errors import UnsupportedFormatError
from .flver_constants import EDGE_SCRATCH_BYTES_PER_INDEX

_log = logging.getLogger("souls_codec.edge")

# Path of the native decompressor library to bind when none is given
DECOMPRESSOR_ENV = "SOULS_EDGE_DECOMPRESSOR"
NATIVE_SYMBOL = "DecompressIndexes_C_Standalone"

_default_decompressor = None
_default_loaded = False


def load_native_decompressor(path):
    """Bind the native routine in the shared library at ``path``.

    Returns:
        callable(count, buffer) operating on a bytearray in place
    """
    lib = ctypes.cdll.LoadLibrary(path)
    func = getattr(lib, NATIVE_SYMBOL)
    func.argtypes = [ctypes.c_uint32, ctypes.POINTER(ctypes.c_ubyte)]
    func.restype = None

    def decompress(count, buffer):
        raw = (ctypes.c_ubyte * len(buffer)).from_buffer(buffer)
        func(count, raw)

    _log.info("Bound edge index decompressor from %s", path)
    return decompress


def set_default_decompressor(decompressor):
    """Install the decompressor used when a group has none of its own."""
    global _default_decompressor, _default_loaded
    _default_decompressor = decompressor
    _default_loaded = True


def get_default_decompressor():
    """Return the installed decompressor, binding $SOULS_EDGE_DECOMPRESSOR once."""
    global _default_decompressor, _default_loaded
    if not _default_loaded:
        path = os.environ.get(DECOMPRESSOR_ENV, '')
        if path:
            _default_decompressor = load_native_decompressor(path)
        _default_loaded = True
    return _default_decompressor


class EdgeMember:
    """One compressed member: its payload bytes plus reconstruction info."""

    __slots__ = ('base_index', 'index_count', 'payload')

    def __init__(self, base_index, index_count, payload):
        self.base_index = base_index
        self.index_count = index_count
        self.payload = payload

    def decompress(self, decompressor):
        # The true decompressed size is not recorded anywhere we know of,
        # so the scratch buffer is over-allocated.
        size = max(self.index_count * EDGE_SCRATCH_BYTES_PER_INDEX, len(self.payload))
        buffer = bytearray(size)
        buffer[:len(self.payload)] = self.payload
        decompressor(self.index_count, buffer)
        values = struct.unpack_from(f"<{self.index_count}H", buffer, 0)
        return [self.base_index + v for v in values]


class EdgeIndexGroup:
    """A face set's compressed index data, decompressed on request."""

    __slots__ = ('members', 'decompressor')

    def __init__(self, members=None, decompressor=None):
        self.members = list(members) if members else []
        self.decompressor = decompressor

    @property
    def index_count(self):
        return sum(m.index_count for m in self.members)

    @classmethod
    def read(cls, br, decompressor=None):
        """Read a group at the reader's current position.

        Payload bytes are copied out so the group does not keep the
        document buffer alive.
        """
        start = br.position
        member_count = br.read_int16()
        br.read_int16()
        br.read_int32()
        br.assert_int32(0)
        br.read_int32()

        group = cls(decompressor=decompressor)
        for _ in range(member_count):
            data_length = br.read_int32()
            data_offset = br.read_int32()
            br.assert_int32(0)
            br.assert_int32(0)
            br.read_int16()
            br.read_int16()
            base_index = br.read_uint16()
            br.read_int16()
            br.read_int32()
            br.read_int32()
            for _ in range(4):
                br.assert_int32(0)
            for _ in range(5):
                br.read_int16()
            member_index_count = br.read_uint16()
            br.assert_int32(-1)

            payload = br.get_bytes(start + data_offset, data_length)
            group.members.append(EdgeMember(base_index, member_index_count, payload))
        return group

    def decompress(self, decompressor=None):
        """Return the flat triangle-list indices of every member in order.

        Raises:
            UnsupportedFormatError: if no decompressor is available
        """
        decompressor = decompressor or self.decompressor or get_default_decompressor()
        if decompressor is None:
            raise UnsupportedFormatError(
                "Edge-compressed face set needs a decompressor; "
                f"pass one in or set ${DECOMPRESSOR_ENV}"
            )
        indices = []
        for member in self.members:
            indices.extend(member.decompress(decompressor))
        _log.debug("Decompressed %d edge members into %d indices",
                   len(self.members), len(indices))
        return indices
