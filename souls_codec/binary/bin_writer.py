"""Append-only binary writer with named forward-reference reservations.

Record headers are written before the data they point to, so offset and
length fields are unknown at the time the header is emitted. ``reserve_*``
writes a fixed-width placeholder and remembers where it is under a name;
``fill_*`` later overwrites it with the real value. Every reservation must be
filled exactly once before ``finish()`` hands out the bytes. Any violation is
a bug in the calling serializer and raises ``ReservationError``.
"""

import struct

from .bin_errors import ReservationError

# Placeholder byte for reserved fields; easy to spot in a hex dump.
RESERVED_BYTE = 0xFE


class BinaryWriter:
    """Builds a document in memory.

    Args:
        endian: struct byte order character, "<" or ">"
    """

    __slots__ = ('endian', '_buf', '_reservations')

    def __init__(self, endian="<"):
        self.endian = endian
        self._buf = bytearray()
        self._reservations = {}  # name -> (offset, struct format)

    @property
    def position(self):
        return len(self._buf)

    @property
    def big_endian(self):
        return self.endian == ">"

    def write(self, fmt, *values):
        self._buf.extend(struct.pack(self.endian + fmt, *values))

    def write_bytes(self, data):
        self._buf.extend(data)

    def pad(self, align, fill=0):
        """Append ``fill`` bytes up to the next multiple of ``align``."""
        remainder = len(self._buf) % align
        if remainder:
            self._buf.extend(bytes([fill]) * (align - remainder))

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def write_int8(self, value):
        self.write("b", value)

    def write_uint8(self, value):
        self.write("B", value)

    def write_int16(self, value):
        self.write("h", value)

    def write_uint16(self, value):
        self.write("H", value)

    def write_int32(self, value):
        self.write("i", value)

    def write_uint32(self, value):
        self.write("I", value)

    def write_int64(self, value):
        self.write("q", value)

    def write_float32(self, value):
        self.write("f", value)

    def write_bool(self, value):
        self.write("B", 1 if value else 0)

    def write_vector3(self, value):
        self.write("fff", *value)

    def write_int32s(self, values):
        values = list(values)
        self.write(f"{len(values)}i", *values)

    def write_uint16s(self, values):
        values = list(values)
        self.write(f"{len(values)}H", *values)

    def write_uint32s(self, values):
        values = list(values)
        self.write(f"{len(values)}I", *values)

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def write_ascii(self, text, terminate=False, length=None):
        data = text.encode("ascii")
        if terminate:
            data += b"\0"
        if length is not None:
            data = data[:length].ljust(length, b"\0")
        self._buf.extend(data)

    def write_utf16(self, text, terminate=False):
        encoding = "utf-16-be" if self.big_endian else "utf-16-le"
        data = text.encode(encoding)
        if terminate:
            data += b"\0\0"
        self._buf.extend(data)

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def _reserve(self, name, fmt):
        if name in self._reservations:
            raise ReservationError(f"Key already reserved: {name}")
        self._reservations[name] = (len(self._buf), fmt)
        self._buf.extend(bytes([RESERVED_BYTE]) * struct.calcsize(self.endian + fmt))

    def _fill(self, name, fmt, value):
        if name not in self._reservations:
            raise ReservationError(f"Key is not reserved: {name}")
        offset, reserved_fmt = self._reservations[name]
        if reserved_fmt != fmt:
            raise ReservationError(
                f"Key {name} reserved as '{reserved_fmt}' but filled as '{fmt}'"
            )
        del self._reservations[name]
        struct.pack_into(self.endian + fmt, self._buf, offset, value)

    def reserve_int32(self, name):
        self._reserve(name, "i")

    def fill_int32(self, name, value):
        self._fill(name, "i", value)

    def reserve_uint32(self, name):
        self._reserve(name, "I")

    def fill_uint32(self, name, value):
        self._fill(name, "I", value)

    def reserve_int64(self, name):
        self._reserve(name, "q")

    def fill_int64(self, name, value):
        self._fill(name, "q", value)

    @property
    def pending_reservations(self):
        return sorted(self._reservations)

    def finish(self):
        """Return the finished document.

        Raises:
            ReservationError: if any reservation was never filled
        """
        if self._reservations:
            raise ReservationError(
                "Unfilled reservations: " + ", ".join(self.pending_reservations)
            )
        return bytes(self._buf)
