import pytest

from souls_codec.binary.bin_errors import FormatError, ReservationError
from souls_codec.binary.bin_reader import BinaryReader
from souls_codec.binary.bin_writer import BinaryWriter


def test_typed_reads_follow_byte_order():
    bw = BinaryWriter(">")
    bw.write_int32(-2)
    bw.write_uint16(0xBEEF)
    bw.write_float32(1.5)
    data = bw.finish()
    assert data[:4] == b"\xff\xff\xff\xfe"

    br = BinaryReader(data, ">")
    assert br.read_int32() == -2
    assert br.read_uint16() == 0xBEEF
    assert br.read_float32() == 1.5
    assert br.position == len(data)


def test_step_in_restores_position_on_error():
    br = BinaryReader(bytes(range(16)))
    br.seek(4)
    with pytest.raises(FormatError):
        with br.step_in(12):
            br.read_int64()
    assert br.position == 4

    with br.step_in(8):
        assert br.read_uint8() == 8
    assert br.position == 4


def test_assert_names_type_value_and_options():
    br = BinaryReader(b"\x05\x00\x00\x00")
    with pytest.raises(FormatError) as err:
        br.assert_int32(1, 2, field="count")
    message = str(err.value)
    assert "int32 count" in message
    assert "0x5" in message
    assert "0x1, 0x2" in message
    assert err.value.observed == 5


def test_read_past_end_raises():
    br = BinaryReader(b"\x01\x02")
    with pytest.raises(FormatError):
        br.read_int32()
    with pytest.raises(FormatError):
        br.read_bytes(3)
    with pytest.raises(FormatError):
        br.seek(3)


def test_bool_must_be_zero_or_one():
    with pytest.raises(FormatError):
        BinaryReader(b"\x02").read_bool()


def test_utf16_terminated_and_fixed():
    bw = BinaryWriter()
    bw.write_utf16("m100", terminate=True)
    bw.write_utf16("ab")
    br = BinaryReader(bw.finish())
    assert br.read_utf16() == "m100"
    assert br.read_utf16(2) == "ab"
    assert br.get_utf16(0) == "m100"


def test_reservation_filled_later():
    bw = BinaryWriter()
    bw.reserve_int32("Offset")
    bw.write_bytes(b"abcd")
    bw.fill_int32("Offset", bw.position)
    assert bw.finish() == b"\x08\x00\x00\x00abcd"


def test_reservation_misuse():
    bw = BinaryWriter()
    bw.reserve_int32("A")
    with pytest.raises(ReservationError):
        bw.reserve_int32("A")
    with pytest.raises(ReservationError):
        bw.fill_int64("A", 0)
    with pytest.raises(ReservationError):
        bw.fill_int32("B", 0)
    with pytest.raises(ReservationError):
        bw.finish()
    bw.fill_int32("A", 1)
    with pytest.raises(ReservationError):
        bw.fill_int32("A", 1)


def test_pad():
    bw = BinaryWriter()
    bw.write_uint8(1)
    bw.pad(8)
    assert bw.position == 8
    bw.pad(8)
    assert bw.position == 8

    br = BinaryReader(bytes(16))
    br.skip(3)
    br.pad(4)
    assert br.position == 4


def test_step_in_relative_restores_position():
    br = BinaryReader(bytes(range(16)))
    br.seek(4)
    with br.step_in_relative(6):
        assert br.read_uint8() == 10
    assert br.position == 4


def test_ascii_fixed_length_round_trip():
    bw = BinaryWriter()
    bw.write_ascii("MTD", length=8)
    bw.write_ascii("end", terminate=True)
    data = bw.finish()
    assert data[:8] == b"MTD\0\0\0\0\0"

    br = BinaryReader(data)
    assert br.read_ascii(8) == "MTD"
    assert br.position == 8
    assert br.read_ascii() == "end"
    assert br.position == len(data)


def test_negative_counts_raise_format_error():
    br = BinaryReader(bytes(16))
    for read in (br.read_int32s, br.read_uint16s, br.read_uint32s):
        with pytest.raises(FormatError) as err:
            read(-1)
        assert err.value.field == "count"
    with pytest.raises(FormatError):
        br.get_int32s(0, -2)
    assert br.position == 0


def test_undecodable_strings_raise_format_error():
    with pytest.raises(FormatError, match="ascii"):
        BinaryReader(b"\xff\x00").read_ascii()
    with pytest.raises(FormatError, match="ascii"):
        BinaryReader(b"a\xffbc").read_ascii(4)
    with pytest.raises(FormatError, match="utf-16-le"):
        BinaryReader(b"\x00\xdc\x00\x00").read_utf16()
