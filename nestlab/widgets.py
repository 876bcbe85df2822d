"""Descriptions of the editing widget attached to a serialized field."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

__all__ = [
    "WidgetType",
    "Widget",
    "slider_float",
    "slider_int",
    "input_float",
    "input_int",
    "checkbox",
    "binary",
    "color",
    "header",
    "window",
    "struct",
    "format_bits",
    "clamp_u8",
]


class WidgetType(IntEnum):
    """Kinds of editing widget."""

    INPUT = 0
    SLIDER = 1
    DRAG = 2
    BINARY = 3
    COLOR = 4
    WINDOW = 5
    HEADER = 6


@dataclass(frozen=True)
class Widget:
    """A widget kind with its range, display format and slider power."""

    type: WidgetType
    v_min: Union[int, float] = 0
    v_max: Union[int, float] = 0
    fmt: Optional[str] = None
    power: float = 1.0


def slider_float(
    v_min: float = 0.0, v_max: float = 1.0, fmt: str = "%3.2f", power: float = 1.0
) -> Widget:
    return Widget(WidgetType.SLIDER, float(v_min), float(v_max), fmt, float(power))


def slider_int(v_min: int = 0, v_max: int = 100) -> Widget:
    return Widget(WidgetType.SLIDER, int(v_min), int(v_max))


def input_float() -> Widget:
    return Widget(WidgetType.INPUT)


def input_int() -> Widget:
    return Widget(WidgetType.INPUT)


def checkbox() -> Widget:
    return Widget(WidgetType.INPUT)


def binary() -> Widget:
    return Widget(WidgetType.BINARY)


def color() -> Widget:
    return Widget(WidgetType.COLOR)


def header() -> Widget:
    return Widget(WidgetType.HEADER)


def window() -> Widget:
    return Widget(WidgetType.WINDOW)


def struct() -> Widget:
    """Nested structs are shown under a collapsing header."""
    return header()


def format_bits(name: str, bits: int, num_bits: int) -> str:
    """The low ``num_bits`` bits of ``bits``, most significant first, then the name.

    At most 64 bits are shown.
    """
    if num_bits < 0:
        raise ValueError("num_bits must not be negative")
    num_bits = min(num_bits, 64)
    digits = "".join("1" if (bits >> b) & 1 else "0" for b in reversed(range(num_bits)))
    return f"{digits} {name}"


def clamp_u8(value: int) -> int:
    """Clamp an edited integer into the range of an unsigned byte."""
    return max(0, min(255, value))