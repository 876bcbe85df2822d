import pytest

from nestlab.keys import ButtonStates, Key, MouseButton, MouseState, PadButton


def _keyboard():
    return ButtonStates(Key.LAST + 1, first=Key.SPACE)


def test_press_hold_release_cycle():
    keys = _keyboard()
    keys.update({Key.A})
    assert keys.down[Key.A] and keys.press[Key.A] and not keys.release[Key.A]
    keys.update({Key.A})
    assert keys.down[Key.A] and not keys.press[Key.A]
    keys.update(set())
    assert not keys.down[Key.A] and keys.release[Key.A]
    keys.update(set())
    assert not keys.release[Key.A]


def test_last_key_is_pollable():
    keys = _keyboard()
    keys.update([Key.MENU, Key.ESCAPE])
    assert keys.down[Key.LAST] and keys.down[Key.ESCAPE]
    assert sum(keys.down) == 2


def test_keys_below_first_are_not_polled():
    keys = _keyboard()
    keys.update({5})
    assert keys.down[5] is False
    assert not any(keys.press)


def test_out_of_range_button_raises():
    keys = _keyboard()
    with pytest.raises(ValueError):
        keys.update({Key.LAST + 1})
    with pytest.raises(ValueError):
        ButtonStates(0)


def test_pad_bank_size():
    pad = ButtonStates(PadButton.LAST + 1)
    pad.update({PadButton.SELECT, PadButton.CROSS})
    assert pad.press[PadButton.SELECT] and pad.press[PadButton.CROSS]
    assert len(pad.down) == PadButton.LAST + 1


def test_mouse_origin_is_bottom_left():
    mouse = MouseState()
    mouse.update(0.0, 0.0, 100, 100)
    assert mouse.x == 0.0
    assert mouse.y == 1.0
    assert mouse.valid


def test_mouse_delta_tracks_previous_position():
    mouse = MouseState()
    mouse.update(10.7, 20.2, 200, 100)
    first = (mouse.x, mouse.y)
    mouse.update(50.0, 80.0, 200, 100)
    assert mouse.dx == pytest.approx(mouse.x - first[0])
    assert mouse.dy == pytest.approx(mouse.y - first[1])


def test_mouse_buttons_and_wheel():
    mouse = MouseState()
    mouse.update(1, 1, 10, 10, buttons={MouseButton.LEFT}, wheel=2.5)
    assert mouse.buttons.press[MouseButton.LEFT]
    assert mouse.wheel == 2.5
    mouse.update(1, 1, 10, 10)
    assert mouse.buttons.release[MouseButton.LEFT]
    assert mouse.wheel == 0.0


def test_mouse_rejects_empty_resolution():
    with pytest.raises(ValueError):
        MouseState().update(1, 1, 0, 10)