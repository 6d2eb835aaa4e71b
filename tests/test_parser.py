import logging
import pytest

from notes.model import NoteEvent
from script.parser import ScriptError, compile_script, parse, parse_step

def spans(events):
    return [(e.pitch_value, e.start_time, e.end_time) for e in events]

def test_end_to_end_example():
    events = parse("octave 4\nstep 1\nC\nrest\nE")
    assert spans(events) == [(60, 0, 1), (64, 2, 3)]
    assert [e.pitch_label for e in events] == ["C4", "E4"]

def test_default_octave_and_step():
    (c,) = parse("C")
    assert c == NoteEvent(60, "C4", 0.0, 0.25)

def test_octave_directive_shifts_by_twelve():
    assert parse("octave 5\nC")[0].pitch_value == 72
    assert parse("octave 3\nB")[0].pitch_value == 59
    assert parse("octave 5\nA#")[0].pitch_label == "A#5"

def test_letters_are_case_insensitive():
    assert [e.pitch_value for e in parse("c\nc#\nd#\nb")] == [60, 61, 63, 71]

@pytest.mark.parametrize("value, expected", [
    ("1/8", 0.125),
    ("0.5", 0.5),
    ("1/4", 0.25),
    ("3/8", 0.375),
    ("2", 2.0),
    ("0.5abc", 0.5),
])
def test_parse_step_values(value, expected):
    assert parse_step(value) == pytest.approx(expected)

@pytest.mark.parametrize("value", ["banana", "", "1/0", "0/4", "0", "-1", "x/8"])
def test_parse_step_rejects_unusable(value):
    assert parse_step(value) is None

def test_step_directive_applies_to_following_notes():
    events = parse("step 1/8\nC\nstep 0.5\nD")
    assert spans(events) == [(60, 0, 0.125), (62, 0.125, 0.625)]

def test_bad_step_keeps_previous_duration():
    events = parse("step 0.5\nstep banana\nC")
    assert events[0].end_time == 0.5

def test_bad_octave_keeps_previous_octave():
    assert parse("octave 5\noctave high\nC")[0].pitch_value == 72

def test_bare_directives_are_ignored():
    assert spans(parse("octave\noctave5\nstep\nstep1\nC")) == [(60, 0, 0.25)]

def test_rest_advances_cursor_without_event():
    events = parse("step 0.25\nrest\nrest\nC")
    assert len(events) == 1
    assert events[0].start_time == 0.5

def test_blank_lines_and_whitespace_are_skipped():
    assert spans(parse("\n   \n  C  \n\n\tE\n")) == [(60, 0, 0.25), (64, 0.25, 0.5)]

def test_unknown_token_discards_everything(caplog):
    caplog.set_level(logging.DEBUG)
    assert parse("C\nD\nH\nE") == []
    assert "unknown token" in caplog.text

def test_compile_script_reports_line():
    with pytest.raises(ScriptError) as ei:
        compile_script("C\n\nDb")
    assert ei.value.line_no == 3
    assert ei.value.line == "Db"

def test_parse_is_deterministic():
    text = "octave 5\nstep 1/8\nC\nD\nrest\nstep 3/8\nG#"
    assert parse(text) == parse(text)

def test_consecutive_notes_have_no_gaps():
    events = parse("step 1/8\nC\nD\nE\nstep 0.5\nF\nG\nstep 1/3\nA\nB")
    for a, b in zip(events, events[1:]):
        assert a.end_time == b.start_time
        assert a.end_time > a.start_time

def test_empty_text():
    assert parse("") == []
    assert parse("\n\n") == []

def test_oversized_octave_number_keeps_previous_octave():
    events = parse("octave 5\noctave " + "9" * 5000 + "\nC")
    assert [e.pitch_value for e in events] == [72]

@pytest.mark.parametrize("octave", ["9", "11", "-2", "-40"])
def test_octave_outside_midi_range_is_ignored(octave):
    assert parse(f"octave {octave}\nC")[0].pitch_value == 60

def test_octave_limits_cover_midi_range():
    low = parse("octave -1\nC")[0]
    high = parse("octave 8\nB")[0]
    assert (low.pitch_value, low.pitch_label) == (0, "C-1")
    assert (high.pitch_value, high.pitch_label) == (119, "B8")

@pytest.mark.parametrize("value", ["1e300/1e-300", "1e-300/1e300", "1e999", "1e999/2"])
def test_extreme_steps_are_rejected(value):
    assert parse_step(value) is None
    assert parse(f"step {value}\nC")[0].end_time == 0.25

def test_check_script_returns_notes_or_error(monkeypatch):
    import script.parser as parser
    calls = []
    real = parser.compile_script
    monkeypatch.setattr(parser, "compile_script", lambda text: calls.append(text) or real(text))
    notes, error = parser.check_script("C\nE")
    assert [n.pitch_value for n in notes] == [60, 64]
    assert error is None
    assert parser.check_script("C\nH") == ([], "line 2: unknown token 'H'")
    assert calls == ["C\nE", "C\nH"]
