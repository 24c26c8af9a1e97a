import struct

import pytest

from peinspect.errors import CorruptedFileError
from peinspect.reader import BinaryReader


def test_reads_mz_magic_little_endian():
    reader = BinaryReader(b"MZ")
    assert reader.read_u16() == 0x5A4D
    assert reader.position == 2
    assert reader.remaining == 0


@pytest.mark.parametrize(
    ("fmt", "method", "value"),
    [
        ("<B", "read_u8", 200),
        ("<H", "read_u16", 0xBEEF),
        ("<I", "read_u32", 0xDEADBEEF),
        ("<Q", "read_u64", 0x0123456789ABCDEF),
        ("<b", "read_i8", -100),
        ("<h", "read_i16", -12345),
        ("<i", "read_i32", -123456789),
        ("<q", "read_i64", -1234567890123),
    ],
)
def test_round_trip(fmt, method, value):
    data = struct.pack(fmt, value)
    reader = BinaryReader(data)
    assert getattr(reader, method)() == value
    assert reader.position == len(data)


def test_sequential_reads_advance():
    data = struct.pack("<HIQ", 1, 2, 3)
    reader = BinaryReader(data)
    assert [reader.read_u16(), reader.read_u32(), reader.read_u64()] == [1, 2, 3]


def test_short_read_raises_and_keeps_position():
    reader = BinaryReader(b"\x01\x02\x03")
    with pytest.raises(CorruptedFileError) as info:
        reader.read_u32()
    assert str(info.value) == "Corrupted File: Not enough data: Need 4 bytes, have 3"
    assert reader.position == 0


def test_read_bytes():
    reader = BinaryReader(b"PE\x00\x00rest")
    assert reader.read_bytes(4) == b"PE\x00\x00"
    assert reader.remaining == 4


def test_read_bytes_overrun():
    reader = BinaryReader(b"ab")
    with pytest.raises(CorruptedFileError):
        reader.read_bytes(3)


def test_seek_to_end_allowed():
    reader = BinaryReader(b"abcd")
    reader.seek(4)
    assert reader.position == 4
    assert reader.remaining == 0


def test_seek_out_of_bounds():
    reader = BinaryReader(b"abcd")
    with pytest.raises(CorruptedFileError) as info:
        reader.seek(5)
    assert str(info.value) == "Corrupted File: Seek position 5 out of bounds 4"


def test_seek_then_read():
    reader = BinaryReader(struct.pack("<II", 7, 9))
    reader.seek(4)
    assert reader.read_u32() == 9


def test_cstring_stops_at_nul():
    reader = BinaryReader(b".text\x00\x00\x00")
    assert reader.read_cstring(8) == ".text"
    assert reader.position == 6


def test_cstring_respects_max_length():
    reader = BinaryReader(b"abcdefgh")
    assert reader.read_cstring(3) == "abc"
    assert reader.position == 3


def test_cstring_runs_to_end_of_data():
    reader = BinaryReader(b"xyz")
    assert reader.read_cstring(10) == "xyz"
    assert reader.remaining == 0


def test_cstring_invalid_utf8():
    reader = BinaryReader(b"\xff\xfe\x00")
    with pytest.raises(CorruptedFileError) as info:
        reader.read_cstring(4)
    assert str(info.value) == "Corrupted File: Invalid UTF-8 in string"