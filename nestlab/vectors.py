"""Small fixed-size vectors of floats, ints, unsigned ints and bools.

Arithmetic is component-wise. Comparisons that produce one result per
component are methods (``eq``, ``lt``, ...) returning a :class:`BoolVector`;
``==`` compares whole vectors.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Iterable
from functools import reduce
from typing import Any, Callable, Tuple

from nestlab import scalar

__all__ = [
    "Vector",
    "IntVector",
    "UIntVector",
    "BoolVector",
    "elementwise",
    "minimum",
    "maximum",
    "clamp",
    "isnan",
    "dot",
    "length_sq",
    "length",
    "normalize",
    "normalize_or_zero",
    "cross",
    "det",
]

_SIZES = (2, 3, 4)
_AXES = "xyzw"
_U32 = 1 << 32
_I32_HALF = 1 << 31


def _wrap_i32(value: int) -> int:
    return ((value + _I32_HALF) % _U32) - _I32_HALF


def _float_div(a: float, b: float) -> float:
    """IEEE division: division by zero gives an infinity or NaN."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    if b == 0:
        raise ZeroDivisionError("integer vector division by zero")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _std_min(a: Any, b: Any) -> Any:
    return b if b < a else a


def _std_max(a: Any, b: Any) -> Any:
    return b if a < b else a


class Vector:
    """A vector of 2, 3 or 4 float components."""

    __slots__ = ("_c",)

    _ARITHMETIC = True
    _divide: Callable[[Any, Any], Any] = staticmethod(_float_div)

    def __init__(self, *args: Any) -> None:
        if len(args) == 1 and isinstance(args[0], Iterable):
            components = tuple(args[0])
        else:
            components = args
        if len(components) not in _SIZES:
            raise ValueError(
                f"a vector has 2, 3 or 4 components, got {len(components)}"
            )
        self._c: Tuple[Any, ...] = tuple(self._coerce(v) for v in components)

    @staticmethod
    def _coerce(value: Any) -> Any:
        return float(value)

    @classmethod
    def splat(cls, value: Any, size: int) -> "Vector":
        """Build a vector with every component set to ``value``."""
        return cls((value,) * size)

    # --- container protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._c)

    def __iter__(self):
        return iter(self._c)

    def __getitem__(self, index: int) -> Any:
        return self._c[index]

    def __getattr__(self, name: str) -> Any:
        if len(name) == 1 and name in _AXES:
            index = _AXES.index(name)
            if index < len(self._c):
                return self._c[index]
        raise AttributeError(f"{type(self).__name__} has no component {name!r}")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._c == other._c  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._c))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(v) for v in self._c)})"

    # --- helpers ------------------------------------------------------------

    def _operand(self, other: Any) -> Tuple[Any, ...] | None:
        if isinstance(other, Vector):
            if type(other) is not type(self):
                return None
            if len(other) != len(self):
                raise ValueError(
                    f"size mismatch: {len(self)} and {len(other)} components"
                )
            return other._c
        if isinstance(other, (int, float)):
            return (other,) * len(self._c)
        return None

    def _arith(self, other: Any, op: Callable[[Any, Any], Any], reflected: bool = False):
        if not self._ARITHMETIC:
            return NotImplemented
        rhs = self._operand(other)
        if rhs is None:
            return NotImplemented
        pairs = zip(rhs, self._c) if reflected else zip(self._c, rhs)
        return type(self)([op(a, b) for a, b in pairs])

    def _require_arithmetic(self, what: str) -> None:
        if not self._ARITHMETIC:
            raise TypeError(f"{what} is not defined for {type(self).__name__}")

    def _compare(self, other: Any, op: Callable[[Any, Any], bool]) -> "BoolVector":
        rhs = self._operand(other)
        if rhs is None:
            raise TypeError(
                f"cannot compare {type(self).__name__} with {type(other).__name__}"
            )
        return BoolVector([op(a, b) for a, b in zip(self._c, rhs)])

    # --- arithmetic -----------------------------------------------------------

    def __add__(self, other):
        return self._arith(other, operator.add)

    def __radd__(self, other):
        return self._arith(other, operator.add, reflected=True)

    def __sub__(self, other):
        return self._arith(other, operator.sub)

    def __rsub__(self, other):
        return self._arith(other, operator.sub, reflected=True)

    def __mul__(self, other):
        return self._arith(other, operator.mul)

    def __rmul__(self, other):
        return self._arith(other, operator.mul, reflected=True)

    def __truediv__(self, other):
        return self._arith(other, type(self)._divide)

    def __rtruediv__(self, other):
        return self._arith(other, type(self)._divide, reflected=True)

    def __neg__(self):
        self._require_arithmetic("negation")
        return type(self)([-v for v in self._c])

    def __abs__(self):
        self._require_arithmetic("abs")
        return type(self)([abs(v) for v in self._c])

    def __floor__(self):
        self._require_arithmetic("floor")
        return type(self)([math.floor(v) for v in self._c])

    def __ceil__(self):
        self._require_arithmetic("ceil")
        return type(self)([math.ceil(v) for v in self._c])

    def __invert__(self):
        raise TypeError(f"bitwise not is not defined for {type(self).__name__}")

    # --- reductions ---------------------------------------------------------

    def sum(self) -> Any:
        """Sum of the components."""
        self._require_arithmetic("sum")
        return self._coerce(reduce(operator.add, self._c))

    def product(self) -> Any:
        """Product of the components."""
        self._require_arithmetic("product")
        return self._coerce(reduce(operator.mul, self._c))

    def min(self) -> Any:
        """Smallest component."""
        return reduce(lambda acc, v: _std_min(v, acc), reversed(self._c))

    def max(self) -> Any:
        """Largest component."""
        return reduce(lambda acc, v: _std_max(v, acc), reversed(self._c))

    def map(self, func: Callable[..., Any], *args: Any) -> "Vector":
        """Apply ``func`` per component, with matching components of ``args``."""
        return elementwise(func, self, *args)

    # --- component-wise comparisons -------------------------------------------

    def eq(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.eq)

    def ne(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.ne)

    def lt(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.lt)

    def gt(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.gt)

    def le(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.le)

    def ge(self, other: Any) -> "BoolVector":
        return self._compare(other, operator.ge)

    # --- conversions --------------------------------------------------------

    def to_float(self) -> "Vector":
        return Vector(self._c)

    def to_int(self) -> "IntVector":
        """Convert, truncating toward zero and wrapping to 32 bits."""
        return IntVector([int(v) for v in self._c])

    def to_uint(self) -> "UIntVector":
        """Convert, truncating toward zero and wrapping modulo 2**32."""
        return UIntVector([int(v) for v in self._c])


class _BitwiseMixin:
    __slots__ = ()

    def __invert__(self):
        return type(self)([~v for v in self._c])  # type: ignore[attr-defined]

    def __or__(self, other):
        return self._arith(other, operator.or_)  # type: ignore[attr-defined]

    __ror__ = __or__

    def __and__(self, other):
        return self._arith(other, operator.and_)  # type: ignore[attr-defined]

    __rand__ = __and__

    def __xor__(self, other):
        return self._arith(other, operator.xor)  # type: ignore[attr-defined]

    __rxor__ = __xor__


class IntVector(_BitwiseMixin, Vector):
    """A vector of signed 32-bit integers; arithmetic wraps."""

    __slots__ = ()
    _divide = staticmethod(_trunc_div)

    @staticmethod
    def _coerce(value: Any) -> int:
        return _wrap_i32(int(value))


class UIntVector(_BitwiseMixin, Vector):
    """A vector of unsigned 32-bit integers; arithmetic wraps modulo 2**32."""

    __slots__ = ()
    _divide = staticmethod(_trunc_div)

    @staticmethod
    def _coerce(value: Any) -> int:
        return int(value) % _U32


class BoolVector(Vector):
    """A vector of booleans; ``~`` negates, ``|`` and ``&`` combine."""

    __slots__ = ()
    _ARITHMETIC = False

    @staticmethod
    def _coerce(value: Any) -> bool:
        return bool(value)

    def _logic(self, other: Any, op: Callable[[bool, bool], bool]):
        rhs = self._operand(other)
        if rhs is None:
            return NotImplemented
        return BoolVector([op(a, bool(b)) for a, b in zip(self._c, rhs)])

    def __invert__(self):
        return BoolVector([not v for v in self._c])

    def __or__(self, other):
        return self._logic(other, lambda a, b: a or b)

    __ror__ = __or__

    def __and__(self, other):
        return self._logic(other, lambda a, b: a and b)

    __rand__ = __and__

    def any(self) -> bool:
        """True if any component is true."""
        return any(self._c)

    def all(self) -> bool:
        """True if every component is true."""
        return all(self._c)


def elementwise(func: Callable[..., Any], *args: Any) -> Vector:
    """Apply ``func`` across matching components of the vector arguments.

    Plain numbers among ``args`` are passed unchanged to every call. The result
    has the type of the first vector argument, or is a :class:`BoolVector`
    when every result is a bool.
    """
    vectors = [a for a in args if isinstance(a, Vector)]
    if not vectors:
        raise TypeError("elementwise needs at least one vector argument")
    size = len(vectors[0])
    if any(len(v) != size for v in vectors):
        raise ValueError("vector arguments differ in size")
    results = [
        func(*(a[i] if isinstance(a, Vector) else a for a in args))
        for i in range(size)
    ]
    first = vectors[0]
    if not isinstance(first, BoolVector) and all(isinstance(r, bool) for r in results):
        return BoolVector(results)
    return type(first)(results)


def minimum(a: Vector, b: Vector) -> Vector:
    """Component-wise minimum."""
    return elementwise(_std_min, a, b)


def maximum(a: Vector, b: Vector) -> Vector:
    """Component-wise maximum."""
    return elementwise(_std_max, a, b)


def clamp(a: Vector, lo: Any, hi: Any) -> Vector:
    """Component-wise clamp of ``a`` into ``[lo, hi]``."""
    return elementwise(scalar.clamp, a, lo, hi)


def isnan(a: Vector) -> BoolVector:
    """Which components are NaN."""
    return BoolVector([math.isnan(v) for v in a])


def _require_float(*vectors: Any) -> None:
    for v in vectors:
        if type(v) is not Vector:
            raise TypeError(f"expected a float Vector, got {type(v).__name__}")


def dot(a: Vector, b: Vector) -> float:
    """Dot product of two float vectors."""
    _require_float(a, b)
    return (a * b).sum()


def length_sq(a: Vector) -> float:
    """Squared Euclidean length."""
    return dot(a, a)


def length(a: Vector) -> float:
    """Euclidean length."""
    return math.sqrt(length_sq(a))


def normalize(a: Vector) -> Vector:
    """Scale ``a`` to unit length; a zero vector gives NaN components."""
    return a / Vector.splat(length(a), len(a))


def normalize_or_zero(a: Vector) -> Vector:
    """Like :func:`normalize`, but a zero-length vector stays zero."""
    n = length(a)
    if n > 0.0:
        return a / Vector.splat(n, len(a))
    return Vector.splat(0.0, len(a))


def cross(a: Vector, b: Vector) -> Vector:
    """Cross product of two 3-component float vectors."""
    _require_float(a, b)
    if len(a) != 3 or len(b) != 3:
        raise ValueError("cross product needs 3-component vectors")
    return Vector(
        a.y * b.z - b.y * a.z,
        a.z * b.x - b.z * a.x,
        a.x * b.y - b.x * a.y,
    )


def det(a: Vector, b: Vector) -> float:
    """Signed area for 2-component vectors, length of the cross product for 3."""
    _require_float(a, b)
    if len(a) != len(b):
        raise ValueError("vector arguments differ in size")
    if len(a) == 2:
        return a.x * b.y - a.y * b.x
    if len(a) == 3:
        return length(cross(a, b))
    raise ValueError("det needs 2- or 3-component vectors")