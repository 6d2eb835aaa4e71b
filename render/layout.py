# render/layout.py
"""Pixel math for the piano roll, kept free of pygame so it can be tested."""
from notes.model import PitchRange

WHITE_SET = {0, 2, 4, 5, 7, 9, 11}

def is_black(pitch: int) -> bool:
    return (pitch % 12) not in WHITE_SET

def row_height(rng: PitchRange, height: float) -> float:
    return height / rng.rows

def lane_y(pitch: int, rng: PitchRange, top: float, height: float) -> float:
    """Top edge of the lane for ``pitch``; the highest pitch sits at ``top``."""
    row = min(max(rng.highest_value - pitch, 0), rng.span)
    return top + row * row_height(rng, height)

def marker_y(marker_pos: float, top: float, height: float) -> float:
    return top + marker_pos * height

def static_x(t: float, view_start: float, view_end: float, left: float, width: float) -> float:
    if view_end <= view_start:
        return left
    return left + (t - view_start) / (view_end - view_start) * width

def scroll_x(t: float, elapsed_beats: float, start_delay: float, hit_x: float, pixels_per_beat: float) -> float:
    """Sprites slide left and cross ``hit_x`` at the moment their note-on fires."""
    return hit_x + (t + start_delay - elapsed_beats) * pixels_per_beat

def keyboard_layout(first_midi: int, last_midi: int, left: float, width: float) -> dict[int, tuple[int, int, bool]]:
    """pitch -> (x, w, is_black) for an on-screen piano spanning ``width``."""
    whites = [p for p in range(first_midi, last_midi + 1) if not is_black(p)]
    white_w = width / max(1, len(whites))
    out: dict[int, tuple[int, int, bool]] = {}
    idx = 0
    for p in range(first_midi, last_midi + 1):
        if not is_black(p):
            out[p] = (int(left + idx * white_w), int(white_w - 1), False)
            idx += 1
        else:
            # 黑鍵壓在前一個白鍵右側
            base = left + max(0, idx - 1) * white_w
            out[p] = (int(base + white_w * 0.7), int(white_w * 0.6), True)
    return out
