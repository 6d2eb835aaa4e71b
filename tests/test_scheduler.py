import pytest

from config import PlaybackConfig
from notes.model import NoteEvent
from notes.range import compute_range
from script.parser import parse
from timeline.scheduler import PlaybackScheduler

def test_play_with_no_notes_is_noop(scheduler, timers, audio):
    assert scheduler.play([]) is False
    assert scheduler.playing is False
    assert timers.pending == 0
    assert audio.calls == []

def test_play_schedules_on_off_and_completion(scheduler, timers):
    notes = parse("step 1\nC\nE")
    assert scheduler.play(notes) is True
    assert scheduler.playing
    assert len(scheduler.pending) == 2 * len(notes) + 1
    assert timers.pending == len(scheduler.pending)

def test_trigger_times_follow_start_delay_and_tempo(scheduler, clock, audio):
    # step 1 at 120 bpm: 1000 ms per beat, lead-in 0.5 beat
    scheduler.play(parse("step 1\nC\nE"))
    clock.advance(0.45); scheduler.timers.pump()
    assert audio.calls == []
    clock.advance(0.1); scheduler.timers.pump()          # 0.55 s
    assert audio.calls == [("on", 60, 1.0)]
    clock.advance(1.0); scheduler.timers.pump()          # 1.55 s
    assert audio.calls[1:] == [("off", 60), ("on", 64, 1.0)]

def test_faster_bpm_shortens_delays(scheduler, clock, audio):
    scheduler.play(parse("step 1\nC"), bpm=240)
    clock.advance(0.3); scheduler.timers.pump()          # on at 250 ms
    assert audio.played() == [60]
    assert scheduler.beats_to_ms(1.0) == pytest.approx(500.0)

def test_beats_to_ms_reference_tempo(scheduler):
    assert scheduler.beats_to_ms(1.0, 120) == 1000.0
    assert scheduler.beats_to_ms(0.25, 60) == 500.0

def test_stop_cancels_everything(scheduler, clock, audio):
    scheduler.play(parse("C\nD\nE"))
    scheduler.stop()
    assert scheduler.playing is False
    assert scheduler.pending == set()
    clock.advance(60); scheduler.timers.pump()
    assert audio.calls == [("all",)]

def test_stop_after_deadline_passed_but_before_pump(scheduler, clock, audio):
    scheduler.play(parse("C"))
    clock.advance(10)     # every trigger is overdue
    scheduler.stop()
    assert scheduler.timers.pump() == 0
    assert audio.played() == []

def test_play_while_playing_is_noop(scheduler, timers):
    notes = parse("C\nD")
    scheduler.play(notes)
    before = set(scheduler.pending)
    assert scheduler.play(notes) is False
    assert scheduler.pending == before
    assert timers.pending == len(before)

def test_play_stop_toggles(scheduler, audio):
    notes = parse("C")
    scheduler.play_stop(notes)
    assert scheduler.playing
    scheduler.play_stop(notes)
    assert not scheduler.playing
    assert audio.kinds() == ["all"]

def test_natural_completion_stops_transport(scheduler, clock, audio, bus):
    seen = []
    bus.subscribe("transport", lambda playing: seen.append(playing))
    scheduler.play(parse("step 1\nC\nD"))
    clock.advance(3.0); scheduler.timers.pump()
    assert scheduler.playing is False
    assert scheduler.pending == set()
    assert audio.calls == [("on", 60, 1.0), ("off", 60), ("on", 62, 1.0), ("off", 62), ("all",)]
    assert seen == [True, False]

def test_fired_triggers_leave_pending(scheduler, clock):
    scheduler.play(parse("step 1\nC"))
    assert len(scheduler.pending) == 3
    clock.advance(0.6); scheduler.timers.pump()
    assert len(scheduler.pending) == 2

def test_note_on_toggles_swing_and_moves_marker(audio, timers, clock, bus):
    notes = parse("step 1\nE\nC")
    rng = compute_range(notes, [])
    s = PlaybackScheduler(audio, timers, PlaybackConfig(), bus)
    s.play(notes, pitch_range=rng)
    clock.advance(0.6); timers.pump()
    assert s.swing is True
    assert s.marker_pos == 0.0                 # E is the highest row
    clock.advance(1.0); timers.pump()
    assert s.swing is False
    assert s.marker_pos == pytest.approx(4 / 5)

def test_marker_defaults_to_range_of_played_notes(scheduler, clock):
    scheduler.play(parse("step 1\nG\nC"))
    assert scheduler.pitch_range.highest_value == 67
    clock.advance(1.6); scheduler.timers.pump()
    assert scheduler.marker_pos == pytest.approx(7 / 8)

def test_note_off_is_unconditional(scheduler, clock, audio):
    scheduler.play(parse("step 1\nC"))
    clock.advance(0.6); scheduler.timers.pump()
    audio.play_note(60, 0.8)                  # same pitch held by hand
    clock.advance(1.0); scheduler.timers.pump()
    assert ("off", 60) in audio.calls

def test_events_published_for_playback(scheduler, clock, bus):
    got = []
    bus.subscribe("note_on", lambda pitch, source: got.append(("on", pitch, source)))
    bus.subscribe("note_off", lambda pitch, source: got.append(("off", pitch, source)))
    scheduler.play(parse("step 1\nG"))
    clock.advance(2.0); scheduler.timers.pump()
    assert got == [("on", 67, "playback"), ("off", 67, "playback")]

def test_elapsed_beats(scheduler, clock):
    assert scheduler.elapsed_beats() == 0.0
    scheduler.play([NoteEvent(60, "C4", 0.0, 4.0)], bpm=60)
    clock.advance(1.0)
    assert scheduler.elapsed() == pytest.approx(1.0)
    assert scheduler.elapsed_beats() == pytest.approx(0.5)
