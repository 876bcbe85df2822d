"""Bindings of values to a knob controller (twister) and a button pad (fighter).

Each frame :meth:`DevMidi.update` takes a snapshot of both devices. Queries
and editors then compare the current snapshot with the previous one. Editors
return the new values together with a flag saying whether anything changed.
"""

from __future__ import annotations

import colorsys
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from nestlab.midi_state import ContinuousMode, MidiDeviceConfig, MidiHub, MidiState

__all__ = [
    "DEV_MIDI_CONFIGS",
    "TWISTER",
    "FIGHTER",
    "FramePair",
    "DevMidi",
    "twister_knob_remap",
    "fighter_button_remap",
    "knob_scale_from_format",
    "format_values",
    "slider_float",
    "slider_floats_click_default",
    "slider_floats_click_toggle",
    "color_edit",
]

log = logging.getLogger(__name__)

DEV_MIDI_CONFIGS = (
    MidiDeviceConfig("Midi Fighter Twister", ContinuousMode.RELATIVE),
    MidiDeviceConfig("Midi Fighter 3D"),
)
TWISTER = 0
FIGHTER = 1

_DEFAULT_FORMAT = "%.2f"
_COLOR_FORMAT = "%.3f"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def twister_knob_remap(knob: int) -> int:
    """Map a knob number so that knob 0 sits in the lower left corner.

    The controller's 4x4 grid is flipped vertically. Knobs above 15 map to 0.
    """
    if knob < 0:
        raise ValueError(f"knob {knob} must not be negative")
    if knob > 15:
        return 0
    x = knob % 4
    y = 3 - knob // 4
    return x + y * 4


def fighter_button_remap(button: int) -> int:
    """Map a button number to its note; the first bank runs from 51 down to 36.

    Buttons above 15 map to 0.
    """
    if button < 0:
        raise ValueError(f"button {button} must not be negative")
    if button > 15:
        return 0
    return 51 - button


def knob_scale_from_format(fmt: Optional[str]) -> float:
    """How much one knob tick changes a value shown with ``fmt``.

    The precision after the first '.' sets the step (``"%.3f"`` gives 0.001);
    without one the step is 0.01.
    """
    scale = 1.0 / 100.0
    if fmt:
        dot = fmt.find(".")
        if dot >= 0 and dot + 1 < len(fmt):
            m = _LEADING_INT.match(fmt, dot + 1)
            digits = int(m.group(1)) if m else 0
            scale = 1.0 / math.pow(10.0, float(digits))
    return scale


def format_values(values: Sequence[float], fmt: str) -> str:
    """Format values with ``fmt`` as a comma separated line."""
    return ", ".join(fmt % v for v in values)


@dataclass
class FramePair:
    """The current and previous snapshot of one device."""

    curr: MidiState = field(default_factory=MidiState)
    prev: MidiState = field(default_factory=MidiState)

    def press(self, button: int) -> bool:
        """Whether a note-on arrived since the previous frame."""
        return self.curr.note_ons[button] - self.prev.note_ons[button] > 0

    def release(self, button: int) -> bool:
        """Whether a note-off arrived since the previous frame."""
        return self.curr.note_offs[button] - self.prev.note_offs[button] > 0

    def down(self, button: int) -> bool:
        """Whether the input is being held."""
        return self.curr.note_ons[button] > self.prev.note_offs[button]

    def value(self, knob: int) -> int:
        """Raw controller value."""
        return self.curr.value[knob]

    def delta(self, knob: int) -> int:
        """Change of the controller value since the previous frame."""
        return self.curr.value[knob] - self.prev.value[knob]


def _powf(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except (ValueError, OverflowError):
        return math.nan


def slider_float(
    frames: FramePair,
    knob: int,
    value: float,
    v_min: float = 0.0,
    v_max: float = 1.0,
    fmt: Optional[str] = _DEFAULT_FORMAT,
    power: float = 1.0,
) -> Tuple[float, bool]:
    """Move ``value`` by the knob's turn; return the new value and whether it turned."""
    scale = knob_scale_from_format(fmt)
    delta = frames.delta(knob)
    linear = value if power == 1.0 else _powf(value, 1.0 / power)
    linear = min(v_max, max(v_min, linear + delta * scale))
    new = linear if power == 1.0 else _powf(linear, power)
    return new, delta != 0


def _check_lengths(knobs: Sequence[int], values: Sequence[Any], defaults: Optional[Sequence[Any]]) -> None:
    if len(knobs) != len(values):
        raise ValueError(f"{len(knobs)} knobs for {len(values)} values")
    if defaults is not None and len(defaults) < len(values):
        raise ValueError(f"{len(defaults)} defaults for {len(values)} values")


def slider_floats_click_default(
    frames: FramePair,
    knobs: Sequence[int],
    values: Sequence[float],
    defaults: Optional[Sequence[float]] = None,
    v_min: float = 0.0,
    v_max: float = 1.0,
    fmt: Optional[str] = _DEFAULT_FORMAT,
    power: float = 1.0,
) -> Tuple[List[float], bool]:
    """Turn each value by its knob; a knob release resets it to its default."""
    values = list(values)
    _check_lengths(knobs, values, defaults)
    touched = False
    out: List[float] = []
    for i, (knob, value) in enumerate(zip(knobs, values)):
        new, moved = slider_float(frames, knob, value, v_min, v_max, fmt, power)
        touched |= moved
        if defaults is not None and frames.release(knob):
            new = defaults[i]
            touched = True
        out.append(new)
    return out, touched


def slider_floats_click_toggle(
    frames: FramePair,
    knobs: Sequence[int],
    values: Sequence[float],
    v_min: float = 0.0,
    v_max: float = 1.0,
    fmt: Optional[str] = _DEFAULT_FORMAT,
    power: float = 1.0,
) -> Tuple[List[float], bool]:
    """Turn each value by its knob; a knob release jumps to the farther extreme."""
    values = list(values)
    _check_lengths(knobs, values, None)
    touched = False
    toggled: List[float] = []
    for knob, value in zip(knobs, values):
        if frames.release(knob):
            value = v_max if abs(value - v_min) < abs(value - v_max) else v_min
            touched = True
        toggled.append(value)
    out, moved = slider_floats_click_default(
        frames, knobs, toggled, None, v_min, v_max, fmt, power
    )
    return out, moved or touched


def color_edit(
    frames: FramePair,
    knobs: Sequence[int],
    values: Sequence[float],
    defaults: Optional[Sequence[float]] = None,
    display_hsv: bool = False,
    input_hsv: bool = False,
) -> Tuple[List[float], bool]:
    """Edit a 3- or 4-component color, one knob per component.

    A tick moves a component by 1/256. Hue wraps around when editing in HSV;
    other components are clamped to [0, 1]. With ``defaults``, a knob release
    resets that component.
    """
    values = list(values)
    if len(values) not in (3, 4):
        raise ValueError(f"a color has 3 or 4 components, got {len(values)}")
    _check_lengths(knobs, values, defaults)
    convert_to_hsv = display_hsv and not input_hsv
    edit = list(values)
    if convert_to_hsv:
        edit[0:3] = colorsys.rgb_to_hsv(values[0], values[1], values[2])
    touched = False
    for i, knob in enumerate(knobs):
        delta = frames.delta(knob)
        edit[i] += delta * 1.0 / 256.0
        if (convert_to_hsv or input_hsv) and i == 0:
            edit[i] = edit[i] - math.floor(edit[i])
        else:
            edit[i] = max(0.0, min(1.0, edit[i]))
        if defaults is not None and frames.release(knob):
            edit[i] = defaults[i]
            touched = True
        touched |= delta != 0
    if convert_to_hsv:
        out = list(colorsys.hsv_to_rgb(edit[0], edit[1], edit[2]))
        if len(values) == 4:
            out.append(edit[3])
    else:
        out = edit
    return out, touched


Numbers = Union[float, Sequence[float]]
Knobs = Union[int, Sequence[int]]


def _normalize(knobs: Knobs, values: Numbers) -> Tuple[List[int], List[float], bool]:
    if isinstance(knobs, int):
        if isinstance(values, (int, float)):
            return [knobs], [values], True
        return [knobs], list(values), False
    if isinstance(values, (int, float)):
        return list(knobs), [values], True
    return list(knobs), list(values), False


def _normalize_defaults(defaults: Optional[Numbers]) -> Optional[List[float]]:
    if defaults is None:
        return None
    if isinstance(defaults, (int, float)):
        return [defaults]
    return list(defaults)


class DevMidi:
    """Two-frame view of the twister and fighter devices attached to a hub."""

    def __init__(self, hub: Optional[MidiHub] = None) -> None:
        self.hub = hub if hub is not None else MidiHub(DEV_MIDI_CONFIGS)
        self._twister = [MidiState(), MidiState()]
        self._fighter = [MidiState(), MidiState()]
        self._write_idx = 0
        self.twister = FramePair(self._twister[1], self._twister[0])
        self.fighter = FramePair(self._fighter[1], self._fighter[0])
        self.clipboard: Optional[str] = None

    def update(self) -> None:
        """Take this frame's snapshots; call once per frame before reading inputs."""
        w = self._write_idx
        state = self.hub.get_state(TWISTER)
        if state is not None:
            self._twister[w] = state
        state = self.hub.get_state(FIGHTER)
        if state is not None:
            self._fighter[w] = state
        self.twister = FramePair(self._twister[w], self._twister[1 - w])
        self.fighter = FramePair(self._fighter[w], self._fighter[1 - w])
        self._write_idx = 1 - w

    def _print(self, label: str, knobs: Sequence[int], values: Sequence[float], fmt: str) -> None:
        if any(self.twister.press(k) for k in knobs):
            text = format_values(values, fmt)
            log.info("%s: %s", label, text)
            self.clipboard = text

    @staticmethod
    def _result(values: List[float], single: bool) -> Any:
        return values[0] if single else values

    # --- twister editors --------------------------------------------------------

    def twister_slider(
        self,
        knobs: Knobs,
        values: Numbers,
        v_min: float = 0.0,
        v_max: float = 1.0,
        fmt: str = _DEFAULT_FORMAT,
        power: float = 1.0,
    ) -> Tuple[Any, bool]:
        """Knob-driven slider; a knob press records the values in :attr:`clipboard`."""
        knob_list, vals, single = _normalize(knobs, values)
        remapped = [twister_knob_remap(k) for k in knob_list]
        self._print("slider", remapped, vals, fmt)
        out, touched = slider_floats_click_default(
            self.twister, remapped, vals, None, v_min, v_max, fmt, power
        )
        return self._result(out, single), touched

    def twister_slider_click_default(
        self,
        knobs: Knobs,
        values: Numbers,
        defaults: Numbers,
        v_min: float = 0.0,
        v_max: float = 1.0,
        fmt: str = _DEFAULT_FORMAT,
        power: float = 1.0,
    ) -> Tuple[Any, bool]:
        """Knob-driven slider; a knob release resets to the default."""
        knob_list, vals, single = _normalize(knobs, values)
        remapped = [twister_knob_remap(k) for k in knob_list]
        out, touched = slider_floats_click_default(
            self.twister, remapped, vals, _normalize_defaults(defaults),
            v_min, v_max, fmt, power,
        )
        return self._result(out, single), touched

    def twister_slider_click_toggle(
        self,
        knobs: Knobs,
        values: Numbers,
        v_min: float = 0.0,
        v_max: float = 1.0,
        fmt: str = _DEFAULT_FORMAT,
        power: float = 1.0,
    ) -> Tuple[Any, bool]:
        """Knob-driven slider; a knob release jumps to the farther extreme."""
        knob_list, vals, single = _normalize(knobs, values)
        remapped = [twister_knob_remap(k) for k in knob_list]
        out, touched = slider_floats_click_toggle(
            self.twister, remapped, vals, v_min, v_max, fmt, power
        )
        return self._result(out, single), touched

    def twister_color_edit(
        self,
        knobs: Sequence[int],
        values: Sequence[float],
        defaults: Optional[Sequence[float]] = None,
        display_hsv: bool = False,
        input_hsv: bool = False,
    ) -> Tuple[List[float], bool]:
        """Knob-driven color editor; without defaults a press records the color."""
        remapped = [twister_knob_remap(k) for k in knobs]
        values = list(values)
        if defaults is None:
            self._print("color", remapped, values, _COLOR_FORMAT)
        return color_edit(self.twister, remapped, values, defaults, display_hsv, input_hsv)

    # --- twister queries --------------------------------------------------------

    def twister_knob_value(self, knob: int) -> int:
        return self.twister.value(twister_knob_remap(knob))

    def twister_knob_delta(self, knob: int) -> int:
        return self.twister.delta(twister_knob_remap(knob))

    def twister_knob_press(self, knob: int) -> bool:
        return self.twister.press(twister_knob_remap(knob))

    def twister_knob_release(self, knob: int) -> bool:
        return self.twister.release(twister_knob_remap(knob))

    def twister_knob_down(self, knob: int) -> bool:
        return self.twister.down(twister_knob_remap(knob))

    # --- fighter ----------------------------------------------------------------

    def fighter_press(self, button: int) -> bool:
        return self.fighter.press(fighter_button_remap(button))

    def fighter_release(self, button: int) -> bool:
        return self.fighter.release(fighter_button_remap(button))

    def fighter_down(self, button: int) -> bool:
        return self.fighter.down(fighter_button_remap(button))

    def fighter_radio(self, button: int, value: int, button_value: int) -> Tuple[int, bool]:
        """A press selects ``button_value``."""
        if self.fighter_press(button):
            return button_value, True
        return value, False

    def fighter_checkbox(self, button: int, value: bool) -> Tuple[bool, bool]:
        """A press toggles ``value``."""
        if self.fighter_press(button):
            return not value, True
        return value, False

    def fighter_checkbox_momentary(self, button: int, value: bool) -> Tuple[bool, bool]:
        """Both press and release toggle ``value``, so it follows the held button."""
        if self.fighter_press(button) or self.fighter_release(button):
            return not value, True
        return value, False