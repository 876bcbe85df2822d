"""Scalar helpers for shading-style arithmetic: clamping, stepping and blending."""

from __future__ import annotations

import math
from typing import Optional, Union

Number = Union[int, float]

__all__ = [
    "sq",
    "clamp",
    "saturate",
    "sign",
    "fract",
    "mod",
    "step",
    "ramp",
    "smoothstep",
    "smootherstep",
    "lerp",
]


def sq(a: Number) -> Number:
    """Return ``a`` squared."""
    return a * a


def clamp(a: Number, lo: Number, hi: Number) -> Number:
    """Clamp ``a`` into ``[lo, hi]``; ``hi`` wins if the bounds cross."""
    return min(max(a, lo), hi)


def saturate(a: float) -> float:
    """Clamp ``a`` into ``[0, 1]``."""
    return clamp(a, 0.0, 1.0)


def sign(a: Number) -> Number:
    """Return -1, 0 or 1 by the sign of ``a``, as an int for ints and a float otherwise."""
    s = (a > 0) - (a < 0)
    return s if isinstance(a, int) and not isinstance(a, bool) else float(s)


def fract(a: float) -> float:
    """Return the fractional part of ``a``, always in ``[0, 1)`` for finite input."""
    return a - math.floor(a)


def mod(a: float, b: float) -> float:
    """Floored modulo: the result takes the sign of ``b``."""
    return a - b * math.floor(a / b)


def step(a: float, edge: float = 0.0) -> float:
    """Return 0.0 where ``a`` is below ``edge`` and 1.0 otherwise (NaN gives 1.0)."""
    below = a < edge
    return float(not below)


def ramp(a: float, b: float, c: float) -> float:
    """Position of ``c`` between ``a`` and ``b``, saturated to ``[0, 1]``.

    Raises ZeroDivisionError when ``a == b``.
    """
    return saturate((c - a) / (b - a))


def _hermite(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)


def _quintic(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def smoothstep(a: float, b: Optional[float] = None, c: Optional[float] = None) -> float:
    """Cubic Hermite ease.

    With one argument the polynomial is applied to ``a`` directly; with three,
    it is applied to ``ramp(a, b, c)``.
    """
    if b is None and c is None:
        return _hermite(a)
    if b is None or c is None:
        raise TypeError("smoothstep takes either one or three arguments")
    return _hermite(ramp(a, b, c))


def smootherstep(a: float, b: Optional[float] = None, c: Optional[float] = None) -> float:
    """Quintic ease with zero first and second derivatives at both ends.

    With one argument the polynomial is applied to ``a`` directly; with three,
    it is applied to ``ramp(a, b, c)``.
    """
    if b is None and c is None:
        return _quintic(a)
    if b is None or c is None:
        raise TypeError("smootherstep takes either one or three arguments")
    return _quintic(ramp(a, b, c))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from ``a`` to ``b`` by ``t``."""
    return a + (b - a) * t