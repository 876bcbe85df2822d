import math

import pytest

from nestlab.devmidi import (
    DevMidi,
    FramePair,
    color_edit,
    fighter_button_remap,
    format_values,
    knob_scale_from_format,
    slider_float,
    slider_floats_click_default,
    slider_floats_click_toggle,
    twister_knob_remap,
)
from nestlab.midi_state import MidiState


def _frames(values=None, note_ons=None, note_offs=None):
    curr = MidiState()
    for k, v in (values or {}).items():
        curr.value[k] = v
    for k, v in (note_ons or {}).items():
        curr.note_ons[k] = v
    for k, v in (note_offs or {}).items():
        curr.note_offs[k] = v
    return FramePair(curr, MidiState())


def test_twister_remap_is_involutive_permutation():
    mapped = [twister_knob_remap(k) for k in range(16)]
    assert sorted(mapped) == list(range(16))
    assert all(twister_knob_remap(twister_knob_remap(k)) == k for k in range(16))
    assert twister_knob_remap(16) == 0


def test_twister_remap_keeps_column():
    assert all(twister_knob_remap(k) % 4 == k % 4 for k in range(16))


def test_fighter_remap():
    assert fighter_button_remap(0) == 51
    assert [fighter_button_remap(b) for b in range(16)] == list(range(51, 35, -1))
    assert fighter_button_remap(16) == 0


def test_negative_remaps_raise():
    with pytest.raises(ValueError):
        twister_knob_remap(-1)
    with pytest.raises(ValueError):
        fighter_button_remap(-1)


def test_knob_scale():
    assert knob_scale_from_format("%.2f") == pytest.approx(1.0 / 100.0)
    assert knob_scale_from_format(None) == pytest.approx(1.0 / 100.0)
    assert knob_scale_from_format("%d") == pytest.approx(1.0 / 100.0)
    assert knob_scale_from_format("%.3f") == pytest.approx(knob_scale_from_format("%.2f") / 10)
    assert knob_scale_from_format("%.0f") == 1.0


def test_format_values():
    assert format_values([0.5, 0.25], "%.2f") == "0.50, 0.25"


def test_frame_pair_queries():
    f = _frames(values={3: 7}, note_ons={3: 1}, note_offs={4: 2})
    assert f.value(3) == 7
    assert f.delta(3) == 7
    assert f.press(3) is True
    assert f.release(3) is False
    assert f.release(4) is True
    assert f.down(3) is True
    assert f.down(5) is False


def test_slider_moves_by_scale():
    f = _frames(values={2: 10})
    new, touched = slider_float(f, 2, 0.5, 0.0, 1.0, "%.2f", 1.0)
    assert touched is True
    assert new == pytest.approx(0.5 + 10 * knob_scale_from_format("%.2f"))


def test_slider_clamps_and_idles():
    f = _frames(values={2: 500})
    assert slider_float(f, 2, 0.5, 0.0, 1.0, "%.2f", 1.0) == (1.0, True)
    assert slider_float(f, 1, 0.3, 0.0, 1.0, "%.2f", 1.0) == (0.3, False)


def test_slider_power_round_trip():
    new, touched = slider_float(_frames(), 0, 0.36, 0.0, 1.0, "%.2f", 2.0)
    assert touched is False
    assert new == pytest.approx(0.36)


def test_click_default_resets_on_release():
    f = _frames(note_offs={1: 1})
    out, touched = slider_floats_click_default(f, [0, 1], [0.2, 0.3], [0.7, 0.9])
    assert out == [0.2, 0.9]
    assert touched is True


def test_click_default_length_mismatch():
    with pytest.raises(ValueError):
        slider_floats_click_default(_frames(), [0], [0.1, 0.2])


def test_click_toggle_jumps_to_far_extreme():
    f = _frames(note_offs={0: 1, 1: 1})
    out, touched = slider_floats_click_toggle(f, [0, 1], [0.2, 0.8], 0.0, 1.0)
    assert out == [1.0, 0.0]
    assert touched is True


def test_color_rgb_saturates():
    f = _frames(values={0: 1000, 1: -1000})
    out, touched = color_edit(f, [0, 1, 2], [0.5, 0.5, 0.5])
    assert out == [1.0, 0.0, 0.5]
    assert touched is True


def test_color_hue_wraps_in_hsv_input():
    f = _frames(values={0: 256})
    out, touched = color_edit(f, [0, 1, 2, 3], [0.25, 0.5, 0.5, 1.0], input_hsv=True)
    assert out[0] == pytest.approx(0.25)
    assert 0.0 <= out[0] < 1.0
    assert touched is True


def test_color_display_hsv_round_trip():
    out, touched = color_edit(_frames(), [0, 1, 2, 3], [0.2, 0.4, 0.6, 0.8], display_hsv=True)
    assert out == pytest.approx([0.2, 0.4, 0.6, 0.8])
    assert touched is False


def test_color_needs_three_or_four():
    with pytest.raises(ValueError):
        color_edit(_frames(), [0, 1], [0.1, 0.2])


@pytest.fixture
def dev():
    d = DevMidi()
    twister = d.hub.attach("Midi Fighter Twister")[0]
    fighter = d.hub.attach("Midi Fighter 3D")[0]
    return d, twister, fighter


def test_queries_before_update_are_quiet():
    d = DevMidi()
    assert d.twister_knob_press(0) is False
    assert d.fighter_down(0) is False
    assert d.twister_knob_delta(0) == 0


def test_twister_relative_knob(dev):
    d, twister, _ = dev
    d.hub.handle_message(twister, [0xB0, twister_knob_remap(0), 64 + 5])
    d.update()
    assert d.twister_knob_value(0) == 5
    assert d.twister_knob_delta(0) == 5
    d.update()
    assert d.twister_knob_delta(0) == 0
    assert d.twister_knob_value(0) == 5


def test_twister_slider_and_clipboard(dev):
    d, twister, _ = dev
    d.hub.handle_message(twister, [0x90, twister_knob_remap(2), 127])
    d.update()
    assert d.twister_knob_press(2) is True
    value, touched = d.twister_slider(2, 0.5)
    assert value == 0.5
    assert touched is False
    assert d.clipboard == format_values([0.5], "%.2f")


def test_twister_click_default_and_toggle(dev):
    d, twister, _ = dev
    d.hub.handle_message(twister, [0x80, twister_knob_remap(1), 0])
    d.update()
    assert d.twister_knob_release(1) is True
    assert d.twister_slider_click_default(1, 0.3, 0.75) == (0.75, True)
    assert d.twister_slider_click_toggle([1], [0.1]) == ([1.0], True)


def test_twister_color_edit_with_defaults(dev):
    d, twister, _ = dev
    d.hub.handle_message(twister, [0x80, twister_knob_remap(0), 0])
    d.update()
    out, touched = d.twister_color_edit([0, 1, 2], [0.1, 0.2, 0.3], [0.9, 0.8, 0.7])
    assert out == pytest.approx([0.9, 0.2, 0.3])
    assert touched is True
    assert d.clipboard is None


def test_fighter_buttons(dev):
    d, _, fighter = dev
    d.hub.handle_message(fighter, [0x90, fighter_button_remap(0), 127])
    d.update()
    assert d.fighter_press(0) is True
    assert d.fighter_down(0) is True
    assert d.fighter_checkbox(0, False) == (True, True)
    assert d.fighter_radio(0, 1, 4) == (4, True)
    assert d.fighter_checkbox_momentary(0, False) == (True, True)
    assert d.fighter_press(1) is False
    d.hub.handle_message(fighter, [0x80, fighter_button_remap(0), 0])
    d.update()
    assert d.fighter_press(0) is False
    assert d.fighter_release(0) is True
    assert d.fighter_checkbox(0, True) == (True, False)
    assert d.fighter_checkbox_momentary(0, True) == (False, True)


def test_missing_device_keeps_zero_state():
    d = DevMidi()
    d.update()
    d.update()
    assert d.twister_knob_value(3) == 0
    assert not math.isnan(d.twister_slider(3, 0.4)[0])