# timeline/scheduler.py
import logging
from typing import Optional, Sequence, Set, Tuple

from audio.base import AudioOutput
from config import PlaybackConfig
from notes.model import NoteEvent, PitchRange
from notes.range import compute_range
from timeline.timers import TimerHandle, TimerQueue
from utils.events import EventBus

class PlaybackScheduler:
    """Transport: Stopped <-> Playing.

    ``play()`` turns every note into a note-on and a note-off timer measured
    from the same start instant; ``stop()`` cancels whatever is left before
    returning. Notes and their pitch range are snapshotted at ``play()``,
    later edits only affect the next run.
    """
    def __init__(self, audio: AudioOutput, timers: TimerQueue, cfg: Optional[PlaybackConfig] = None,
                 bus: Optional[EventBus] = None):
        self.audio = audio
        self.timers = timers
        self.cfg = cfg or PlaybackConfig()
        self.bus = bus or EventBus()

        # TransportState
        self.playing = False
        self.start_wall_clock: Optional[float] = None
        self.pending: Set[TimerHandle] = set()

        # 動畫狀態
        self.swing = False
        self.marker_pos = 0.0

        self.velocity = 1.0
        self._bpm = self.cfg.bpm
        self._snapshot: Tuple[NoteEvent, ...] = ()
        self.pitch_range: Optional[PitchRange] = None

    # ---------- tempo ----------
    def beats_to_ms(self, beats: float, bpm: Optional[float] = None) -> float:
        bpm = bpm or self._bpm
        return beats * 1000.0 * (self.cfg.reference_bpm / bpm)

    def elapsed(self, now: Optional[float] = None) -> float:
        if not self.playing or self.start_wall_clock is None:
            return 0.0
        now = self.timers.clock() if now is None else now
        return max(0.0, now - self.start_wall_clock)

    def elapsed_beats(self, now: Optional[float] = None) -> float:
        ms_per_beat = self.beats_to_ms(1.0)
        return self.elapsed(now) * 1000.0 / ms_per_beat

    @property
    def bpm(self) -> float:
        return self._bpm

    @property
    def notes(self) -> Tuple[NoteEvent, ...]:
        return self._snapshot

    # ---------- transport ----------
    def play(self, notes: Sequence[NoteEvent], bpm: Optional[float] = None,
             pitch_range: Optional[PitchRange] = None) -> bool:
        """
        pitch_range places the marker; defaults to the range of ``notes``.
        The caller passes a wider one when ghost notes share the lanes.
        """
        if self.playing or not notes:
            return False
        self._bpm = bpm or self.cfg.bpm
        self._snapshot = tuple(notes)
        self.pitch_range = pitch_range or compute_range(self._snapshot)
        start = self.timers.clock()
        lead = self.cfg.start_delay

        pending: Set[TimerHandle] = set()
        for n in self._snapshot:
            pending.add(self._at(start, n.start_time + lead, self._note_on, n))
            pending.add(self._at(start, n.end_time + lead, self._note_off, n))
        last_end = max(n.end_time for n in self._snapshot)
        pending.add(self._at(start, last_end + lead, self._finish))

        self.pending = pending
        self.start_wall_clock = start
        self.playing = True
        logging.info("playback started: %d notes, bpm=%.1f", len(self._snapshot), self._bpm)
        self.bus.publish("transport", playing=True)
        return True

    def stop(self):
        for h in self.pending:
            self.timers.cancel(h)
        self.pending.clear()
        self.audio.stop_all()
        was_playing = self.playing
        self.playing = False
        self.start_wall_clock = None
        if was_playing:
            logging.info("playback stopped")
            self.bus.publish("transport", playing=False)

    def play_stop(self, notes: Sequence[NoteEvent], bpm: Optional[float] = None):
        if self.playing:
            self.stop()
        else:
            self.play(notes, bpm)

    # ---------- triggers ----------
    def _at(self, start: float, beats: float, fn, *args) -> TimerHandle:
        handle: Optional[TimerHandle] = None
        def fire():
            self.pending.discard(handle)
            fn(*args)
        handle = self.timers.schedule(self.beats_to_ms(beats), fire, now=start)
        return handle

    def _note_on(self, n: NoteEvent):
        self.audio.play_note(n.pitch_value, self.velocity)
        self.swing = not self.swing
        rng = self.pitch_range
        self.marker_pos = (rng.highest_value - n.pitch_value) / rng.rows
        self.bus.publish("note_on", pitch=n.pitch_value, source="playback")

    def _note_off(self, n: NoteEvent):
        # 不檢查鍵盤是否同時按著同一音（已知限制）
        self.audio.stop_note(n.pitch_value)
        self.bus.publish("note_off", pitch=n.pitch_value, source="playback")

    def _finish(self):
        logging.debug("playback reached the end")
        self.stop()
