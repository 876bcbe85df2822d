"""Keyboard, mouse and gamepad button codes and per-frame button state."""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import IntEnum
from typing import List

__all__ = [
    "Key",
    "MouseButton",
    "PadButton",
    "PAD_MAX",
    "ButtonStates",
    "MouseState",
]

PAD_MAX = 8


class Key(IntEnum):
    """Keyboard key codes."""

    SPACE = 32
    APOSTROPHE = 39
    COMMA = 44
    MINUS = 45
    PERIOD = 46
    SLASH = 47
    DIGIT_0 = 48
    DIGIT_1 = 49
    DIGIT_2 = 50
    DIGIT_3 = 51
    DIGIT_4 = 52
    DIGIT_5 = 53
    DIGIT_6 = 54
    DIGIT_7 = 55
    DIGIT_8 = 56
    DIGIT_9 = 57
    SEMICOLON = 59
    EQUAL = 61
    A = 65
    B = 66
    C = 67
    D = 68
    E = 69
    F = 70
    G = 71
    H = 72
    I = 73  # noqa: E741
    J = 74
    K = 75
    L = 76
    M = 77
    N = 78
    O = 79  # noqa: E741
    P = 80
    Q = 81
    R = 82
    S = 83
    T = 84
    U = 85
    V = 86
    W = 87
    X = 88
    Y = 89
    Z = 90
    LEFT_BRACKET = 91
    BACKSLASH = 92
    RIGHT_BRACKET = 93
    GRAVE_ACCENT = 96
    WORLD_1 = 161
    WORLD_2 = 162
    ESCAPE = 256
    ENTER = 257
    TAB = 258
    BACKSPACE = 259
    INSERT = 260
    DELETE = 261
    RIGHT = 262
    LEFT = 263
    DOWN = 264
    UP = 265
    PAGE_UP = 266
    PAGE_DOWN = 267
    HOME = 268
    END = 269
    CAPS_LOCK = 280
    SCROLL_LOCK = 281
    NUM_LOCK = 282
    PRINT_SCREEN = 283
    PAUSE = 284
    F1 = 290
    F2 = 291
    F3 = 292
    F4 = 293
    F5 = 294
    F6 = 295
    F7 = 296
    F8 = 297
    F9 = 298
    F10 = 299
    F11 = 300
    F12 = 301
    F13 = 302
    F14 = 303
    F15 = 304
    F16 = 305
    F17 = 306
    F18 = 307
    F19 = 308
    F20 = 309
    F21 = 310
    F22 = 311
    F23 = 312
    F24 = 313
    F25 = 314
    KP_0 = 320
    KP_1 = 321
    KP_2 = 322
    KP_3 = 323
    KP_4 = 324
    KP_5 = 325
    KP_6 = 326
    KP_7 = 327
    KP_8 = 328
    KP_9 = 329
    KP_DECIMAL = 330
    KP_DIVIDE = 331
    KP_MULTIPLY = 332
    KP_SUBTRACT = 333
    KP_ADD = 334
    KP_ENTER = 335
    KP_EQUAL = 336
    LEFT_SHIFT = 340
    LEFT_CONTROL = 341
    LEFT_ALT = 342
    LEFT_SUPER = 343
    RIGHT_SHIFT = 344
    RIGHT_CONTROL = 345
    RIGHT_ALT = 346
    RIGHT_SUPER = 347
    MENU = 348
    LAST = 348


class MouseButton(IntEnum):
    """Mouse button numbers."""

    BUTTON_1 = 0
    BUTTON_2 = 1
    BUTTON_3 = 2
    BUTTON_4 = 3
    BUTTON_5 = 4
    BUTTON_6 = 5
    BUTTON_7 = 6
    BUTTON_8 = 7
    LAST = 7
    LEFT = 0
    RIGHT = 1
    MIDDLE = 2


class PadButton(IntEnum):
    """Gamepad buttons; the JOY_* entries are presses simulated from the sticks."""

    CROSS = 0
    CIRCLE = 1
    SQUARE = 2
    TRIANGLE = 3
    L1 = 4
    L2 = 5
    R1 = 6
    R2 = 7
    LEFT = 8
    RIGHT = 9
    UP = 10
    DOWN = 11
    JOY_LEFT = 12
    JOY_RIGHT = 13
    JOY_UP = 14
    JOY_DOWN = 15
    L3 = 16
    R3 = 17
    START = 18
    SELECT = 19
    LAST = 20


class ButtonStates:
    """Down, press and release flags for a bank of buttons, updated once a frame.

    Buttons numbered below ``first`` are never polled and stay up.
    """

    def __init__(self, size: int, first: int = 0) -> None:
        if size <= 0 or not 0 <= first <= size:
            raise ValueError(f"invalid button range {first}..{size}")
        self.size = size
        self.first = first
        self.down: List[bool] = [False] * size
        self.press: List[bool] = [False] * size
        self.release: List[bool] = [False] * size

    def update(self, down: Iterable[int]) -> None:
        """Set the new frame's state from the indices of the buttons now held."""
        held = {int(i) for i in down}
        for i in held:
            if not 0 <= i < self.size:
                raise ValueError(f"button {i} is out of range 0..{self.size - 1}")
        prev = list(self.down)
        for i in range(self.first, self.size):
            now = i in held
            self.down[i] = now
            self.press[i] = now and not prev[i]
            self.release[i] = not now and prev[i]


class MouseState:
    """Normalized cursor position with origin at the bottom left, buttons and wheel."""

    def __init__(self) -> None:
        self.x = 0.0
        self.y = 0.0
        self.dx = 0.0
        self.dy = 0.0
        self.valid = False
        self.wheel = 0.0
        self.buttons = ButtonStates(MouseButton.LAST + 1)
        self._prev_x = 0.0
        self._prev_y = 0.0

    def update(
        self,
        cursor_x: float,
        cursor_y: float,
        res_x: int,
        res_y: int,
        buttons: Iterable[int] = (),
        wheel: float = 0.0,
    ) -> None:
        """Take a new frame's cursor position in pixels (top-left origin) and buttons."""
        if res_x <= 0 or res_y <= 0:
            raise ValueError("resolution must be positive")
        mx = math.floor(cursor_x)
        my = res_y - math.floor(cursor_y)
        self.x = mx / res_x
        self.y = my / res_y
        self.dx = self.x - self._prev_x
        self.dy = self.y - self._prev_y
        self.valid = True
        self.buttons.update(buttons)
        self.wheel = float(wheel)
        self._prev_x = self.x
        self._prev_y = self.y