"""Positioned binary reader used by every record parser.

Wraps an in-memory buffer with a movable position. Records are parsed by
reading fields in order; offsets stored in a record are followed with
``step_in`` (a scoped seek that always restores the previous position) or
with the ``get_*`` family, which read at an absolute offset without moving.

Reverse-engineered formats carry many fields whose meaning is unknown but
whose value has always been observed to be fixed. Those are read with the
``assert_*`` family, which raise ``FormatError`` when the value is not one of
the expected options.
"""

import struct
from contextlib import contextmanager

from .bin_errors import FormatError


def _show(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return f"0x{value:X}" if value >= 0 else str(value)
    return repr(value)


class BinaryReader:
    """Reads typed values from a bytes buffer.

    Args:
        data: bytes-like object holding the whole document
        endian: struct byte order character, "<" or ">"
        position: initial offset
    """

    __slots__ = ('data', 'endian', 'position')

    def __init__(self, data, endian="<", position=0):
        self.data = bytes(data)
        self.endian = endian
        self.position = position

    def __len__(self):
        return len(self.data)

    @property
    def big_endian(self):
        return self.endian == ">"

    # ------------------------------------------------------------------
    # Positioning
    # ------------------------------------------------------------------

    def seek(self, position):
        if position < 0 or position > len(self.data):
            raise FormatError(
                f"Seek outside of data: 0x{position:X} (size 0x{len(self.data):X})",
                observed=position,
            )
        self.position = position

    def skip(self, count):
        self.seek(self.position + count)

    @contextmanager
    def step_in(self, offset):
        """Temporarily move to an absolute offset.

        The previous position is restored when the block exits, whether it
        finishes normally or raises.
        """
        saved = self.position
        self.seek(offset)
        try:
            yield self
        finally:
            self.position = saved

    def step_in_relative(self, delta):
        return self.step_in(self.position + delta)

    def pad(self, align):
        """Skip forward to the next multiple of ``align``."""
        if self.position % align:
            self.skip(align - self.position % align)

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def _unpack(self, fmt, offset):
        fmt = self.endian + fmt
        size = struct.calcsize(fmt)
        if offset < 0 or offset + size > len(self.data):
            raise FormatError(
                f"Unexpected end of data at 0x{offset:X}, need {size} bytes",
                observed=len(self.data),
            )
        return struct.unpack_from(fmt, self.data, offset), size

    def read(self, fmt):
        """Read a struct format (without byte order prefix) and advance."""
        values, size = self._unpack(fmt, self.position)
        self.position += size
        return values

    def get(self, fmt, offset):
        """Read a struct format at ``offset`` without moving."""
        return self._unpack(fmt, offset)[0]

    def read_bytes(self, count):
        end = self.position + count
        if count < 0 or end > len(self.data):
            raise FormatError(
                f"Unexpected end of data at 0x{self.position:X}, need {count} bytes",
                observed=len(self.data),
            )
        chunk = self.data[self.position:end]
        self.position = end
        return chunk

    def get_bytes(self, offset, count):
        with self.step_in(offset):
            return self.read_bytes(count)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def read_int8(self):
        return self.read("b")[0]

    def read_uint8(self):
        return self.read("B")[0]

    def read_int16(self):
        return self.read("h")[0]

    def read_uint16(self):
        return self.read("H")[0]

    def read_int32(self):
        return self.read("i")[0]

    def read_uint32(self):
        return self.read("I")[0]

    def read_int64(self):
        return self.read("q")[0]

    def read_uint64(self):
        return self.read("Q")[0]

    def read_float32(self):
        return self.read("f")[0]

    def read_bool(self):
        return bool(self.assert_uint8(0, 1, field="bool"))

    def read_vector3(self):
        return self.read("fff")

    @staticmethod
    def _check_count(count):
        if count < 0:
            raise FormatError(f"Negative element count: {count}", field="count", observed=count)

    def read_int32s(self, count):
        self._check_count(count)
        return list(self.read(f"{count}i"))

    def read_uint16s(self, count):
        self._check_count(count)
        return list(self.read(f"{count}H"))

    def read_uint32s(self, count):
        self._check_count(count)
        return list(self.read(f"{count}I"))

    def get_uint32(self, offset):
        return self.get("I", offset)[0]

    def get_int32s(self, offset, count):
        self._check_count(count)
        return list(self.get(f"{count}i", offset))

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(raw, encoding, offset):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError as exc:
            raise FormatError(
                f"Invalid {encoding} string at 0x{offset:X}",
                field="string", observed=raw,
            ) from exc

    def read_ascii(self, length=None):
        """Read a single-byte string.

        With ``length`` the field is fixed-size and trailing nulls are
        dropped; without it the string runs to the next null byte.
        """
        start = self.position
        if length is not None:
            return self._decode(self.read_bytes(length).split(b"\0", 1)[0], "ascii", start)
        end = self.data.find(b"\0", start)
        if end == -1:
            raise FormatError(f"Unterminated string at 0x{start:X}")
        text = self._decode(self.data[start:end], "ascii", start)
        self.position = end + 1
        return text

    def read_utf16(self, length=None):
        """Read a double-byte string (``length`` in characters, or null-terminated)."""
        encoding = "utf-16-be" if self.big_endian else "utf-16-le"
        start = self.position
        if length is not None:
            raw = self.read_bytes(length * 2)
        else:
            while self.read("H")[0] != 0:
                pass
            raw = self.data[start:self.position - 2]
        text = self._decode(raw, encoding, start)
        return text.split("\0", 1)[0] if length is not None else text

    def get_utf16(self, offset):
        with self.step_in(offset):
            return self.read_utf16()

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def _assert(self, value, options, type_name, field):
        if value not in options:
            label = f"{type_name} {field}" if field else type_name
            expected = ", ".join(_show(o) for o in options)
            raise FormatError(
                f"Read {label}: {_show(value)} | Expected: {expected}",
                field=field, expected=options, observed=value,
            )
        return value

    def assert_uint8(self, *options, field=None):
        return self._assert(self.read_uint8(), options, "uint8", field)

    def assert_int16(self, *options, field=None):
        return self._assert(self.read_int16(), options, "int16", field)

    def assert_int32(self, *options, field=None):
        return self._assert(self.read_int32(), options, "int32", field)

    def assert_uint32(self, *options, field=None):
        return self._assert(self.read_uint32(), options, "uint32", field)

    def assert_int64(self, *options, field=None):
        return self._assert(self.read_int64(), options, "int64", field)

    def assert_bool(self, *options, field=None):
        return self._assert(self.read_bool(), options, "bool", field)

    def assert_bytes(self, expected, field=None):
        return self._assert(self.read_bytes(len(expected)), (expected,), "bytes", field)
