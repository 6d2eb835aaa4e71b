# script/parser.py
"""Melody script -> NoteEvent list.

One directive per line::

    octave 5
    step 1/8
    C#
    rest

``octave`` is absolute (C4 = 60) and limited to -1..8 so every note stays
a MIDI pitch. ``step`` sets the beat length of the following notes and
rests. Note letters are case-insensitive. The parser runs on every
keystroke of the editor, so :func:`parse` never raises: a bad token
discards the whole result and returns ``[]``.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from notes.model import NoteEvent

REFERENCE_OCTAVE = 4
MIN_OCTAVE, MAX_OCTAVE = -1, 8  # C-1 = 0 .. B8 = 119
DEFAULT_STEP = 0.25

PITCH_TABLE = {
    "C": 60, "C#": 61, "D": 62, "D#": 63, "E": 64, "F": 65,
    "F#": 66, "G": 67, "G#": 68, "A": 69, "A#": 70, "B": 71,
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ScriptError(ValueError):
    def __init__(self, line_no: int, line: str):
        super().__init__(f"line {line_no}: unknown token {line!r}")
        self.line_no = line_no
        self.line = line


@dataclass
class ParserState:
    octave: int = REFERENCE_OCTAVE
    step_duration: float = DEFAULT_STEP
    cursor_time: float = 0.0


def _leading_int(s: str) -> Optional[int]:
    m = _LEADING_INT.match(s)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:  # longer than the int conversion limit
        return None

def _leading_float(s: str) -> Optional[float]:
    m = _LEADING_FLOAT.match(s)
    return float(m.group(1)) if m else None

def parse_step(value: str) -> Optional[float]:
    """'0.5' -> 0.5, '1/8' -> 0.125. None when the value is unusable."""
    if "/" in value:
        num_s, _, den_s = value.partition("/")
        num, den = _leading_float(num_s), _leading_float(den_s)
        if num is None or den is None or num == 0 or den == 0:
            return None
        step = num / den
    else:
        step = _leading_float(value)
        if step is None:
            return None
    if not math.isfinite(step) or step <= 0:
        return None
    return step


def _directive_arg(line: str, keyword: str) -> Optional[str]:
    """Argument of ``keyword <arg>``; '' for the bare keyword (ignored line)."""
    low = line.lower()
    if not low.startswith(keyword):
        return None
    if low.startswith(keyword + " "):
        return line[len(keyword) + 1:]
    return ""


def compile_script(text: str) -> List[NoteEvent]:
    """Strict variant of :func:`parse`: raises ScriptError on an unknown token."""
    state = ParserState()
    events: List[NoteEvent] = []

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        arg = _directive_arg(line, "octave")
        if arg is not None:
            if arg:
                octave = _leading_int(arg)
                if octave is not None and MIN_OCTAVE <= octave <= MAX_OCTAVE:
                    state.octave = octave
                else:
                    logging.debug("octave %r ignored (line %d)", arg, line_no)
            continue

        arg = _directive_arg(line, "step")
        if arg is not None:
            if arg:
                step = parse_step(arg)
                if step is not None:
                    state.step_duration = step
                else:
                    logging.debug("step %r ignored (line %d)", arg, line_no)
            continue

        if line.lower() == "rest":
            state.cursor_time += state.step_duration
            continue

        letter = line.upper()
        if letter not in PITCH_TABLE:
            raise ScriptError(line_no, line)
        start = state.cursor_time
        events.append(NoteEvent(
            pitch_value=PITCH_TABLE[letter] + (state.octave - REFERENCE_OCTAVE) * 12,
            pitch_label=f"{letter}{state.octave}",
            start_time=start,
            end_time=start + state.step_duration,
        ))
        state.cursor_time = start + state.step_duration

    return events


def check_script(text: str) -> Tuple[List[NoteEvent], Optional[str]]:
    """One pass for the editor: (notes, None) or ([], error message)."""
    try:
        return compile_script(text), None
    except ScriptError as e:
        return [], str(e)


def parse(text: str) -> List[NoteEvent]:
    try:
        return compile_script(text)
    except ScriptError as e:
        logging.debug("script rejected: %s", e)
        return []
