"""Schema-driven reading and writing of tagged binary records.

Every member is written as a type-name string index, a variable-name string
index and a byte size, followed by its contents. Readers look members up by
type and name, so fields may be reordered, added or removed between the
writer's and the reader's schema: entries that do not match are skipped, and
members that are not found keep their current value.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from nestlab.serial_stream import (
    FULL_SIZE_BITS,
    ByteStream,
    CorruptStreamError,
    EntryKind,
)
from nestlab.vectors import Vector

__all__ = [
    "Pod",
    "Field",
    "StructSchema",
    "ArrayOf",
    "U8",
    "S8",
    "U16",
    "S16",
    "U32",
    "S32",
    "FLOAT",
    "BOOL",
    "CHAR",
    "VEC2",
    "VEC3",
    "VEC4",
    "write_member",
    "read_member",
    "save_bytes",
    "load_bytes",
    "save_to_file",
    "load_from_file",
]

_U64 = struct.Struct("<Q")


@dataclass(frozen=True)
class Pod:
    """A fixed-size value stored as raw little-endian bytes."""

    name: str
    fmt: str
    default: Any
    convert: Optional[Callable[[Any], Any]] = None

    kind = EntryKind.POD

    @property
    def size_bytes(self) -> int:
        return struct.calcsize("<" + self.fmt)

    def _new(self) -> Any:
        return self.default

    def _write_core(self, stream: ByteStream, value: Any) -> None:
        stream.write_pod(self.fmt, value)

    def _read_core(self, stream: ByteStream, current: Any, scope_start: int, scope_end: int) -> Any:
        raw = stream.read_pod(self.fmt)
        return self.convert(raw) if self.convert is not None else raw


U8 = Pod("u8", "B", 0)
S8 = Pod("s8", "b", 0)
U16 = Pod("u16", "H", 0)
S16 = Pod("s16", "h", 0)
U32 = Pod("u32", "I", 0)
S32 = Pod("s32", "i", 0)
FLOAT = Pod("float", "f", 0.0)
BOOL = Pod("bool", "?", False)
CHAR = Pod("char", "c", b"\x00")
VEC2 = Pod("vec2", "2f", Vector(0.0, 0.0), Vector)
VEC3 = Pod("vec3", "3f", Vector(0.0, 0.0, 0.0), Vector)
VEC4 = Pod("vec4", "4f", Vector(0.0, 0.0, 0.0, 0.0), Vector)


Schema = Union[Pod, "StructSchema", "ArrayOf"]


@dataclass(frozen=True)
class Field:
    """One named member of a struct; the type name defaults to the schema's."""

    name: str
    schema: Any
    type_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type_name is None:
            object.__setattr__(self, "type_name", self.schema.name)


class StructSchema:
    """A record whose fields are stored as attributes of objects from ``factory``."""

    kind = EntryKind.STRUCT
    size_bytes = 0

    def __init__(self, factory: Callable[[], Any], fields: Iterable[Field]) -> None:
        self.factory = factory
        self.fields = tuple(fields)
        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError("field names must be unique")
        self.name = getattr(factory, "__name__", type(factory).__name__)

    def __repr__(self) -> str:
        return f"StructSchema({self.name}, {[f.name for f in self.fields]})"

    def _new(self) -> Any:
        return self.factory()

    def _write_core(self, stream: ByteStream, value: Any) -> None:
        for f in self.fields:
            write_member(stream, getattr(value, f.name), f.schema, f.type_name, f.name)

    def _read_core(self, stream: ByteStream, current: Any, scope_start: int, scope_end: int) -> Any:
        obj = current if current is not None else self.factory()
        for f in self.fields:
            value = _read_member(
                stream, f.schema, f.type_name, f.name,
                getattr(obj, f.name), scope_start, scope_end,
            )
            setattr(obj, f.name, value)
        return obj


class ArrayOf:
    """A variable-length list of elements sharing one schema."""

    kind = EntryKind.ARRAY
    size_bytes = 0

    def __init__(self, element: Any, type_name: Optional[str] = None) -> None:
        self.element = element
        self.name = type_name if type_name is not None else element.name

    def __repr__(self) -> str:
        return f"ArrayOf({self.element!r})"

    def _new(self) -> list:
        return []

    def _write_core(self, stream: ByteStream, values: Any) -> None:
        start = len(stream.data)
        items = list(values)
        for homogenous in (True, False):
            del stream.data[start:]
            stream.write_pod("?", homogenous)
            first_size: Optional[int] = None
            uniform = True
            for i, item in enumerate(items):
                size_idx = len(stream.data)
                sized = not homogenous or i == 0
                if sized:
                    stream.write_bytes(_U64.pack(0))
                begin = len(stream.data)
                self.element._write_core(stream, item)
                size = len(stream.data) - begin
                if first_size is None:
                    first_size = size
                if homogenous and size != first_size:
                    uniform = False
                    break
                if sized:
                    stream.data[size_idx : size_idx + _U64.size] = _U64.pack(size)
            if uniform:
                return

    def _read_core(self, stream: ByteStream, current: Any, scope_start: int, scope_end: int) -> list:
        items: list = []
        homogenous = stream.read_pod("?")
        element_size = 0
        while stream.read_idx < scope_end:
            if not homogenous or element_size == 0:
                element_size = stream.read_pod("Q")
            sub_end = stream.read_idx + element_size
            if sub_end > scope_end:
                raise CorruptStreamError("array element runs past the end of its array")
            items.append(
                self.element._read_core(stream, self.element._new(), stream.read_idx, sub_end)
            )
            stream.read_idx = sub_end
        return items


def write_member(stream: ByteStream, value: Any, schema: Any, type_name: str, var_name: str) -> None:
    """Write one tagged member to the end of ``stream``."""
    stream.write_string(schema.kind, type_name)
    stream.write_string(EntryKind.NAME, var_name)
    size_idx = len(stream.data)
    type_bytes = schema.size_bytes
    stream.write_size(type_bytes, FULL_SIZE_BITS if type_bytes == 0 else 0)
    start = len(stream.data)
    schema._write_core(stream, value)
    if type_bytes == 0:
        stream.write_size(len(stream.data) - start, FULL_SIZE_BITS, where=size_idx)


def _read_member(
    stream: ByteStream,
    schema: Any,
    type_name: str,
    var_name: str,
    current: Any,
    scope_start: int,
    scope_end: int,
) -> Any:
    if not stream.str_descs:
        return current
    limit = min(scope_end, stream.end_idx)
    search_start = stream.read_idx
    have_looped = False
    while True:
        if have_looped and stream.read_idx >= search_start:
            return current
        if stream.read_idx >= limit:
            if stream.read_idx > limit:
                raise CorruptStreamError("entry runs past the end of its scope")
            stream.read_idx = scope_start
            have_looped = True
            continue
        is_type = stream.read_string_matches(schema.kind, type_name)
        is_var = stream.read_string_matches(EntryKind.NAME, var_name)
        size = stream.read_size()
        is_size = schema.size_bytes == 0 or size == schema.size_bytes
        if is_type and is_var and is_size:
            sub_start = stream.read_idx
            sub_end = sub_start + size
            if sub_end > limit:
                raise CorruptStreamError("entry runs past the end of its scope")
            value = schema._read_core(stream, current, sub_start, sub_end)
            stream.read_idx = sub_end
            return value
        stream.read_idx += size


def read_member(
    stream: ByteStream,
    schema: Any,
    type_name: str,
    var_name: str,
    current: Any = None,
) -> Any:
    """Find and read one member, searching from the cursor to the checksum.

    Returns ``current`` when no matching entry exists. Structs are read into
    ``current`` in place when it is given.
    """
    return _read_member(
        stream, schema, type_name, var_name, current, stream.read_idx, stream.end_idx
    )


def save_bytes(value: Any, schema: Any, type_name: str, name: str) -> bytes:
    """Serialize ``value`` into a complete checksummed record."""
    stream = ByteStream()
    write_member(stream, value, schema, type_name, name)
    stream.write_string_table()
    stream.append_crc()
    return bytes(stream.data)


def load_bytes(
    data: bytes,
    schema: Any,
    type_name: str,
    name: str,
    current: Any = None,
) -> Any:
    """Read a record written by :func:`save_bytes`.

    Raises CorruptStreamError when the checksum does not match.
    """
    stream = ByteStream(data)
    if not stream.check_crc():
        raise CorruptStreamError("checksum mismatch")
    stream.read_string_table()
    return read_member(stream, schema, type_name, name, current)


def save_to_file(value: Any, schema: Any, type_name: str, name: str, path: Union[str, Path]) -> None:
    """Serialize ``value`` and write it to ``path``."""
    Path(path).write_bytes(save_bytes(value, schema, type_name, name))


def load_from_file(
    schema: Any,
    type_name: str,
    name: str,
    path: Union[str, Path],
    current: Any = None,
) -> Any:
    """Read a record from ``path``."""
    return load_bytes(Path(path).read_bytes(), schema, type_name, name, current)