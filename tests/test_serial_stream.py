import pytest

from nestlab.serial_stream import (
    ByteStream,
    CorruptStreamError,
    EntryKind,
    FULL_SIZE_BITS,
    hex_decode,
    hex_encode,
    highest_bit,
)


def test_highest_bit_values():
    assert highest_bit(0) == 0
    assert highest_bit(1) == 1
    assert highest_bit(255) == 8
    assert highest_bit(256) == 9


def test_entry_kind_values():
    s = ByteStream()
    indices = [s.intern(kind, "x") for kind in EntryKind]
    kinds = [s.lookup(i)[0] for i in indices]
    assert [int(k) for k in kinds] == [0, 1, 2, 3]
    assert len(set(indices)) == 4


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**20, 2**56 - 1])
def test_size_round_trip(value):
    s = ByteStream()
    s.write_size(value)
    s.write_size(value, FULL_SIZE_BITS)
    r = ByteStream(s.data)
    assert r.read_size() == value
    assert r.read_size() == value
    assert r.read_idx == len(s.data)


def test_size_small_encoding():
    s = ByteStream()
    assert s.write_size(0) == 1
    assert bytes(s.data) == b"\x00"


def test_size_two_byte_encoding():
    s = ByteStream()
    s.write_size(300)
    assert bytes(s.data) == b"\xac\x02"


def test_full_width_size_is_eight_bytes():
    s = ByteStream()
    assert s.write_size(1, FULL_SIZE_BITS) == 8
    assert s.data[0] == 0x81
    assert all(b & 0x80 for b in s.data[:7])
    assert s.data[7] == 0


def test_size_overwrite_in_place():
    s = ByteStream()
    s.write_size(0, FULL_SIZE_BITS)
    s.write_bytes(b"tail")
    s.write_size(12345, FULL_SIZE_BITS, where=0)
    r = ByteStream(s.data)
    assert r.read_size() == 12345
    assert r.read_bytes(4) == b"tail"


def test_size_too_wide_raises():
    with pytest.raises(ValueError):
        ByteStream().write_size(1, 57)


def test_size_truncated_raises():
    with pytest.raises(CorruptStreamError):
        ByteStream(b"\x80\x80").read_size()


def test_pod_round_trip():
    s = ByteStream()
    s.write_pod("I", 7)
    s.write_pod("3f", (1.0, 2.5, -3.0))
    s.write_pod("?", True)
    r = ByteStream(s.data)
    assert r.read_pod("I") == 7
    assert r.read_pod("3f") == (1.0, 2.5, -3.0)
    assert r.read_pod("?") is True


def test_pod_is_little_endian():
    s = ByteStream()
    s.write_pod("I", 1)
    assert bytes(s.data) == b"\x01\x00\x00\x00"


def test_read_past_end_raises():
    with pytest.raises(CorruptStreamError):
        ByteStream(b"\x01").read_pod("I")
    with pytest.raises(CorruptStreamError):
        ByteStream(b"ab").read_bytes(3)


def test_intern_deduplicates_by_kind_and_text():
    s = ByteStream()
    a = s.intern(EntryKind.NAME, "speed")
    b = s.intern(EntryKind.NAME, "speed")
    c = s.intern(EntryKind.POD, "speed")
    assert a == b
    assert c != a
    assert s.lookup(c) == (EntryKind.POD, "speed")
    assert len(s.str_descs) == 2


def test_intern_rejects_long_names():
    with pytest.raises(ValueError):
        ByteStream().intern(EntryKind.NAME, "x" * 256)


def test_lookup_out_of_range():
    with pytest.raises(CorruptStreamError):
        ByteStream().lookup(0)


def test_read_string_with_empty_table_is_false_and_consumes_nothing():
    s = ByteStream(b"\x00")
    assert s.read_string_matches(EntryKind.NAME, "x") is False
    assert s.read_idx == 0


def test_string_table_layout_size():
    s = ByteStream()
    s.intern(EntryKind.NAME, "ab")
    s.write_string_table()
    assert len(s.data) == 2 + 12 + 4 + 2


def test_full_round_trip_with_table_and_crc():
    s = ByteStream()
    s.write_string(EntryKind.POD, "float")
    s.write_string(EntryKind.NAME, "gain")
    s.write_pod("f", 0.5)
    s.write_string_table()
    s.append_crc()

    r = ByteStream(bytes(s.data))
    assert r.check_crc()
    r.read_string_table()
    assert r.read_string_matches(EntryKind.POD, "float")
    assert not r.read_string_matches(EntryKind.NAME, "loss")
    assert r.read_pod("f") == 0.5
    assert r.read_idx == r.end_idx


def test_empty_string_table_round_trip():
    s = ByteStream()
    s.write_pod("B", 9)
    s.write_string_table()
    r = ByteStream(s.data)
    r.read_string_table()
    assert r.str_descs == []
    assert r.read_pod("B") == 9


def test_crc_detects_corruption():
    s = ByteStream(b"payload bytes")
    s.append_crc()
    assert ByteStream(s.data).check_crc()
    broken = bytearray(s.data)
    broken[0] ^= 0x01
    assert not ByteStream(broken).check_crc()


def test_crc_needs_more_than_four_bytes():
    assert ByteStream(b"\x00\x00\x00\x00").check_crc() is False


def test_hex_nibble_order():
    assert hex_encode(b"\x1f") == "f1"


@pytest.mark.parametrize("data", [b"", b"\x00\xff", bytes(range(256))])
def test_hex_round_trip(data):
    text = hex_encode(data)
    assert len(text) == 2 * len(data)
    assert hex_decode(text) == data


@pytest.mark.parametrize("text", ["abc", "zz", "AB"])
def test_hex_decode_rejects_bad_input(text):
    with pytest.raises(ValueError):
        hex_decode(text)