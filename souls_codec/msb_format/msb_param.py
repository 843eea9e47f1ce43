"""Generic MSB param table.

Param layout (all offsets relative to the param start):
    +0x00: version (i32, 35)
    +0x04: offset count (i32) - entry count + 1
    +0x08: name offset (i64)
    +0x10: entry offsets (i64 x entry count)
    +....: next param offset (i64, 0 on the last param)
    name (UTF-16, null-terminated), pad to 8
    entries, each padded to 8

Subclasses supply NAME, get_entries(), read_entry() and write_entry().
"""

from ..binary.bin_errors import FormatError
from .msb_constants import PARAM_VERSION, ENTRY_ALIGN


class Param:
    """Base class for a named table of entries."""

    NAME = None

    def __init__(self, version=PARAM_VERSION):
        self.version = version

    def get_entries(self):
        raise NotImplementedError

    def read_entry(self, br, *context):
        raise NotImplementedError

    def write_entry(self, bw, index, entry, *context):
        raise NotImplementedError

    def read(self, br, *context):
        """Read the param at the reader's position.

        Extra ``context`` arguments are passed through to read_entry.

        Returns:
            the next param offset (relative to this param's start), 0 if last
        """
        start = br.position
        self.version = br.assert_int32(PARAM_VERSION, field="param_version")
        offset_count = br.read_int32()
        if offset_count < 1:
            raise FormatError(f"{self.NAME} has no offset table: count {offset_count}",
                              field="offset_count", observed=offset_count)
        name_offset = br.read_int64()
        entry_offsets = [br.read_int64() for _ in range(offset_count - 1)]
        next_param_offset = br.read_int64()

        name = br.get_utf16(start + name_offset)
        if name != self.NAME:
            raise FormatError(f"Expected param {self.NAME}, got {name}",
                              field="param_name", expected=self.NAME, observed=name)

        for offset in entry_offsets:
            with br.step_in(start + offset):
                self.read_entry(br, *context)
        return next_param_offset

    def write(self, bw, last, *context):
        """Write the param; ``last`` writes a zero next param offset."""
        start = bw.position
        entries = self.get_entries()
        bw.write_int32(self.version)
        bw.write_int32(len(entries) + 1)
        bw.reserve_int64(f"{self.NAME}:NameOffset")
        for i in range(len(entries)):
            bw.reserve_int64(f"{self.NAME}:EntryOffset{i}")
        bw.reserve_int64(f"{self.NAME}:NextParamOffset")

        bw.fill_int64(f"{self.NAME}:NameOffset", bw.position - start)
        bw.write_utf16(self.NAME, terminate=True)
        bw.pad(ENTRY_ALIGN)

        for i, entry in enumerate(entries):
            bw.fill_int64(f"{self.NAME}:EntryOffset{i}", bw.position - start)
            self.write_entry(bw, i, entry, *context)
            bw.pad(ENTRY_ALIGN)

        if last:
            bw.fill_int64(f"{self.NAME}:NextParamOffset", 0)
        else:
            bw.fill_int64(f"{self.NAME}:NextParamOffset", bw.position - start)
