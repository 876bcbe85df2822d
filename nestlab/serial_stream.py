"""Byte stream underlying the tagged binary serialization format.

A stream holds the payload bytes, a read cursor and a table of interned
strings (type and variable names). Sizes are written as little-endian base-128
varints whose high bit marks a following byte. A finished file is laid out as
string table, payload, then a 4-byte checksum.
"""

from __future__ import annotations

import logging
import struct
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

__all__ = [
    "EntryKind",
    "StringDesc",
    "CorruptStreamError",
    "ByteStream",
    "highest_bit",
    "hex_encode",
    "hex_decode",
    "TYPE_NAME_LEN",
    "VAR_NAME_LEN",
    "CRC_SIZE",
    "FULL_SIZE_BITS",
]

log = logging.getLogger(__name__)

TYPE_NAME_LEN = 31
VAR_NAME_LEN = 255
CRC_SIZE = 4
FULL_SIZE_BITS = 56

_CRC_MAGIC = 0x1337C0DE + 3
_DESC_FORMAT = struct.Struct("<B3xIB3x")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_MAX_DESCS = 0xFFFF

Text = Union[str, bytes, bytearray]


class EntryKind(IntEnum):
    """What kind of entry a string in the table names."""

    ARRAY = 0
    STRUCT = 1
    POD = 2
    NAME = 3


@dataclass(frozen=True)
class StringDesc:
    """Location of one interned string inside the string bytes."""

    kind: int
    offset: int
    length: int


class CorruptStreamError(ValueError):
    """The stream ends early or holds data that cannot be valid."""


def highest_bit(value: int) -> int:
    """Number of bits needed to hold ``value`` (0 for 0)."""
    if value < 0:
        raise ValueError("value must not be negative")
    return value.bit_length()


def _to_bytes(text: Text) -> bytes:
    if isinstance(text, str):
        return text.encode("utf-8", "surrogateescape")
    return bytes(text)


def _as_kind(kind: int) -> Union[EntryKind, int]:
    try:
        return EntryKind(kind)
    except ValueError:
        return kind


class ByteStream:
    """Payload bytes, a read cursor and an interned string table."""

    def __init__(self, data: bytes = b"") -> None:
        self.data = bytearray(data)
        self.read_idx = 0
        self.str_bytes = bytearray()
        self.str_descs: List[StringDesc] = []
        self._index: Dict[Tuple[int, bytes], int] = {}

    # --- string table ---------------------------------------------------------

    def intern(self, kind: int, text: Text) -> int:
        """Return the table index of ``(kind, text)``, adding it if new."""
        kind = int(kind)
        if not 0 <= kind <= 0xFF:
            raise ValueError(f"kind {kind} does not fit in a byte")
        raw = _to_bytes(text)
        if len(raw) >= 256:
            raise ValueError(f"string of {len(raw)} bytes is too long (max 255)")
        key = (kind, raw)
        found = self._index.get(key)
        if found is not None:
            return found
        if len(self.str_descs) >= _MAX_DESCS:
            raise OverflowError("string table is full")
        desc = StringDesc(kind, len(self.str_bytes), len(raw))
        self.str_bytes.extend(raw)
        index = len(self.str_descs)
        self.str_descs.append(desc)
        self._index[key] = index
        return index

    def lookup(self, index: int) -> Tuple[Union[EntryKind, int], str]:
        """Return the kind and text stored at ``index`` in the table."""
        if not 0 <= index < len(self.str_descs):
            raise CorruptStreamError(f"string index {index} is out of range")
        desc = self.str_descs[index]
        raw = bytes(self.str_bytes[desc.offset : desc.offset + desc.length])
        return _as_kind(desc.kind), raw.decode("utf-8", "surrogateescape")

    def _rebuild_index(self) -> None:
        self._index = {}
        for i, desc in enumerate(self.str_descs):
            end = desc.offset + desc.length
            if end > len(self.str_bytes):
                raise CorruptStreamError("string descriptor points past the string bytes")
            key = (desc.kind, bytes(self.str_bytes[desc.offset : end]))
            self._index.setdefault(key, i)

    # --- raw values -------------------------------------------------------------

    def _take(self, size: int) -> bytes:
        end = self.read_idx + size
        if size < 0 or end > len(self.data):
            raise CorruptStreamError(
                f"cannot read {size} bytes at offset {self.read_idx}: stream has {len(self.data)}"
            )
        chunk = bytes(self.data[self.read_idx : end])
        self.read_idx = end
        return chunk

    def write_pod(self, fmt: str, value: Any) -> None:
        """Append ``value`` packed little-endian with the struct format ``fmt``."""
        packer = struct.Struct("<" + fmt)
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray)):
            self.data.extend(packer.pack(*value))
        else:
            self.data.extend(packer.pack(value))

    def read_pod(self, fmt: str) -> Any:
        """Read a value packed with ``fmt``; several fields come back as a tuple."""
        packer = struct.Struct("<" + fmt)
        values = packer.unpack(self._take(packer.size))
        return values[0] if len(values) == 1 else values

    def write_bytes(self, data: bytes) -> None:
        """Append raw bytes."""
        self.data.extend(data)

    def read_bytes(self, size: int) -> bytes:
        """Read ``size`` raw bytes."""
        return self._take(size)

    # --- sizes ------------------------------------------------------------------

    def write_size(self, value: int, num_bits: int = 0, where: Optional[int] = None) -> int:
        """Write ``value`` as a varint; return the number of bytes written.

        ``num_bits`` of 0 uses as few bytes as the value needs; a larger width
        pads with continuation bytes so the slot can later be overwritten in
        place. With ``where`` the bytes replace existing ones at that offset.
        """
        if value < 0:
            raise ValueError("size must not be negative")
        if num_bits == 0:
            num_bits = max(1, highest_bit(value))
        if num_bits > 64 - 8:
            raise ValueError(f"a size of {num_bits} bits is too large (max 56)")
        if highest_bit(value) > num_bits:
            raise ValueError(f"{value} does not fit in {num_bits} bits")
        out = bytearray()
        remaining = num_bits
        while remaining > 0:
            b = value & 0x7F
            if remaining > 7:
                b |= 0x80
                value >>= 7
                remaining -= 7
            else:
                remaining = 0
            out.append(b)
        if where is None:
            self.data.extend(out)
        else:
            if where < 0 or where + len(out) > len(self.data):
                raise ValueError(f"cannot overwrite {len(out)} bytes at offset {where}")
            self.data[where : where + len(out)] = out
        return len(out)

    def read_size(self) -> int:
        """Read a varint written by :meth:`write_size`."""
        value = 0
        chunk = 0
        while True:
            if self.read_idx >= len(self.data):
                raise CorruptStreamError("stream ends inside a size")
            b = self.data[self.read_idx]
            self.read_idx += 1
            value |= (b & 0x7F) << (chunk * 7)
            chunk += 1
            if not b & 0x80:
                return value

    # --- strings ----------------------------------------------------------------

    def write_string(self, kind: int, text: Text) -> int:
        """Intern ``text`` and write its table index; return the index."""
        index = self.intern(kind, text)
        self.write_size(index)
        return index

    def read_string_matches(self, kind: int, text: Text) -> bool:
        """Read a string index and tell whether it names ``(kind, text)``.

        With an empty table nothing is read and the answer is False.
        """
        if not self.str_descs:
            return False
        index = self.read_size()
        if index >= len(self.str_descs):
            raise CorruptStreamError(f"string index {index} is out of range")
        desc = self.str_descs[index]
        stored = bytes(self.str_bytes[desc.offset : desc.offset + desc.length])
        return desc.kind == int(kind) and stored == _to_bytes(text)

    def write_string_table(self) -> None:
        """Put the string table in front of the payload written so far."""
        table = bytearray(_U16.pack(len(self.str_descs)))
        if self.str_descs:
            for desc in self.str_descs:
                table.extend(_DESC_FORMAT.pack(desc.kind, desc.offset, desc.length))
            table.extend(_U32.pack(len(self.str_bytes)))
            table.extend(self.str_bytes)
        self.data[0:0] = table

    def read_string_table(self) -> None:
        """Read the string table at the cursor, replacing the current one."""
        (count,) = _U16.unpack(self._take(_U16.size))
        descs: List[StringDesc] = []
        str_bytes = bytearray()
        if count:
            for _ in range(count):
                kind, offset, length = _DESC_FORMAT.unpack(self._take(_DESC_FORMAT.size))
                descs.append(StringDesc(kind, offset, length))
            (str_count,) = _U32.unpack(self._take(_U32.size))
            str_bytes.extend(self._take(str_count))
        self.str_descs = descs
        self.str_bytes = str_bytes
        self._rebuild_index()

    # --- checksum ---------------------------------------------------------------

    def append_crc(self) -> None:
        """Append the checksum of everything in the stream."""
        self.data.extend(_U32.pack(zlib.crc32(self.data, _CRC_MAGIC) & 0xFFFFFFFF))

    def check_crc(self) -> bool:
        """Tell whether the trailing checksum matches the bytes before it."""
        if len(self.data) < 5:
            return False
        body = self.data[:-CRC_SIZE]
        expected = zlib.crc32(body, _CRC_MAGIC) & 0xFFFFFFFF
        (found,) = _U32.unpack(self.data[-CRC_SIZE:])
        if found != expected:
            log.warning("Incorrect crc %08x expected, got %08x", expected, found)
        return found == expected

    @property
    def end_idx(self) -> int:
        """Offset where the payload ends and the checksum begins."""
        return len(self.data) - CRC_SIZE


_HEX_DIGITS = "0123456789abcdef"


def hex_encode(data: bytes) -> str:
    """Encode bytes as lowercase hex, low nibble first within each byte."""
    return "".join(_HEX_DIGITS[b & 0x0F] + _HEX_DIGITS[b >> 4] for b in data)


def hex_decode(text: str) -> bytes:
    """Decode text written by :func:`hex_encode`."""
    if len(text) % 2:
        raise ValueError("hex text must have an even length")
    out = bytearray()
    for lower, upper in zip(text[0::2], text[1::2]):
        lo = _HEX_DIGITS.find(lower)
        hi = _HEX_DIGITS.find(upper)
        if lo < 0 or hi < 0:
            raise ValueError(f"invalid hex digits {lower + upper!r}")
        out.append((hi << 4) | lo)
    return bytes(out)