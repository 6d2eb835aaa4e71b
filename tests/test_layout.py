import pytest

from notes.model import PitchRange
from render.layout import (is_black, keyboard_layout, lane_y, marker_y,
                           scroll_x, static_x)

RNG = PitchRange(60, 64, "C4", "E4", 2.0)

def test_lanes_from_top_to_bottom():
    assert lane_y(64, RNG, 10, 500) == 10
    assert lane_y(60, RNG, 10, 500) == pytest.approx(10 + 4 * 100)

def test_lane_clamped_to_range():
    assert lane_y(80, RNG, 0, 500) == 0
    assert lane_y(40, RNG, 0, 500) == pytest.approx(400)

def test_marker_y():
    assert marker_y(0.8, 20, 500) == pytest.approx(420)

def test_static_x_maps_view_window():
    assert static_x(0.0, 0.0, 2.0, 100, 800) == 100
    assert static_x(1.0, 0.0, 2.0, 100, 800) == 500
    assert static_x(1.0, 0.0, 0.0, 100, 800) == 100

def test_scroll_x_hits_line_at_note_on():
    # note at beat 1, lead-in 0.5: crosses hit_x at elapsed 1.5 beats
    assert scroll_x(1.0, 1.5, 0.5, 120, 160) == 120
    assert scroll_x(1.0, 0.5, 0.5, 120, 160) == 120 + 160

def test_keyboard_layout_one_octave():
    keys = keyboard_layout(60, 71, 0, 700)
    whites = [p for p, (_, _, black) in keys.items() if not black]
    assert whites == [60, 62, 64, 65, 67, 69, 71]
    assert keys[60][0] == 0
    assert keys[62][0] == 100
    x_c, _, _ = keys[60]
    x_cs, w_cs, black = keys[61]
    assert black and x_c < x_cs < keys[62][0] + w_cs
    assert is_black(61) and not is_black(64)
