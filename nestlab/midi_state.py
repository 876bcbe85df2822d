"""Per-device MIDI input state accumulated from raw channel messages."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Union

__all__ = [
    "MIDI_INPUT_COUNT_MAX",
    "ContinuousMode",
    "MidiDeviceConfig",
    "MidiState",
    "MidiHub",
]

log = logging.getLogger(__name__)

MIDI_INPUT_COUNT_MAX = 128

_CONTROL_CHANGE = 0xB
_NOTE_OFF = 0x8
_NOTE_ON = 0x9


class ContinuousMode(IntEnum):
    """How a device reports continuous controller values."""

    ABSOLUTE = 0
    RELATIVE = 1


@dataclass(frozen=True)
class MidiDeviceConfig:
    """A device to listen to, by name, with its controller mode."""

    name: str
    continuous_mode: ContinuousMode = ContinuousMode.ABSOLUTE


def _zeros() -> List[int]:
    return [0] * MIDI_INPUT_COUNT_MAX


@dataclass
class MidiState:
    """Note-on and note-off counts and controller values, one per input."""

    note_ons: List[int] = field(default_factory=_zeros)
    note_offs: List[int] = field(default_factory=_zeros)
    value: List[int] = field(default_factory=_zeros)

    def copy(self) -> "MidiState":
        return MidiState(list(self.note_ons), list(self.note_offs), list(self.value))


@dataclass
class _Device:
    config_id: int
    name: str
    continuous_mode: ContinuousMode
    state: MidiState = field(default_factory=MidiState)


Message = Union[int, bytes, bytearray, Sequence[int]]


def _pack(message: Message) -> int:
    if isinstance(message, int):
        return message
    data = list(message)
    if not 1 <= len(data) <= 3 or any(not 0 <= b <= 0xFF for b in data):
        raise ValueError("a MIDI message has one to three bytes")
    return sum(b << (8 * i) for i, b in enumerate(data))


class MidiHub:
    """Collects input from attached devices; safe to feed from another thread."""

    def __init__(self, configs: Sequence[MidiDeviceConfig]) -> None:
        self.configs = list(configs)
        self._devices: List[_Device] = []
        self._lock = threading.Lock()

    def attach(self, name: str) -> List[int]:
        """Register a device by name; return the device indices it was given.

        A device gets one entry for every configuration with its name.
        """
        added = []
        for config_id, config in enumerate(self.configs):
            if config.name == name:
                log.info("[MIDI] Selecting device '%s'", name)
                self._devices.append(_Device(config_id, config.name, config.continuous_mode))
                added.append(len(self._devices) - 1)
        return added

    def handle_message(self, device_index: int, message: Message) -> bool:
        """Apply one raw message (status byte lowest); return whether it was understood."""
        raw = _pack(message)
        device = self._devices[device_index]
        kind = (raw >> 4) & 0xF
        idx = (raw >> 8) & 0xFF
        val = (raw >> 16) & 0xFF
        if kind not in (_CONTROL_CHANGE, _NOTE_OFF, _NOTE_ON):
            log.warning(
                "[MIDI] Unknown input: %08x (type=%08x idx=%d val=%d)", raw, kind, idx, val
            )
            return False
        if idx >= MIDI_INPUT_COUNT_MAX:
            raise ValueError(f"input index {idx} is out of range")
        with self._lock:
            state = device.state
            if kind == _CONTROL_CHANGE:
                if device.continuous_mode == ContinuousMode.ABSOLUTE:
                    state.value[idx] = val
                else:
                    # relative control is signed and biased around 64
                    state.value[idx] += val - 64
            elif kind == _NOTE_OFF:
                state.note_offs[idx] += 1
            else:
                state.note_ons[idx] += 1
        return True

    def get_state(self, config_index: int, num: int = 0) -> Optional[MidiState]:
        """Snapshot of the ``num``-th device for a configuration, or None."""
        for device in self._devices:
            if device.config_id == config_index:
                if num == 0:
                    with self._lock:
                        return device.state.copy()
                num -= 1
        return None