# session.py
import logging, random, time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple

from audio.base import AudioOutput
from config import PlaybackConfig
from notes.model import NoteEvent, PitchRange
from notes.range import compute_range, struck_ghosts, total_duration
from script.parser import parse
from songs.library import get_song, song_names
from timeline.scheduler import PlaybackScheduler
from timeline.timers import TimerQueue
from utils.events import EventBus

MONSTERS = ("slime", "bat", "ghost", "skull", "imp", "frog", "crab", "owl")

@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs for one refresh.

    ``playing`` is the transport state, ``elapsed`` the wall-clock seconds
    since play() and ``elapsed_beats`` the same time at the playback tempo.
    While playing, notes, ghost_notes and range are the ones captured at
    play(); edits show up after stop.
    """
    notes: Tuple[NoteEvent, ...]
    ghost_notes: Tuple[NoteEvent, ...]
    range: PitchRange
    playing: bool
    elapsed: float
    elapsed_beats: float
    view_start: float
    view_end: float
    start_delay: float
    swing: bool = False
    marker_pos: float = 0.0
    struck: Set[int] = field(default_factory=set)
    monsters: Tuple[str, ...] = MONSTERS


class GameSession:
    def __init__(self, audio: AudioOutput, cfg: Optional[PlaybackConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 bus: Optional[EventBus] = None, rng: Optional[random.Random] = None):
        self.cfg = cfg or PlaybackConfig()
        self.audio = audio
        self.bus = bus or EventBus()
        self.timers = TimerQueue(clock)
        self.rng = rng or random.Random()
        self.scheduler = PlaybackScheduler(audio, self.timers, self.cfg, self.bus)

        self.notes: Tuple[NoteEvent, ...] = ()
        self.ghost_notes: Tuple[NoteEvent, ...] = ()
        self.range: Optional[PitchRange] = None
        self.view_start = 0.0
        self.view_end = 0.0
        self.bpm = self.cfg.bpm
        self.song: Optional[str] = None
        self.monsters: Tuple[str, ...] = MONSTERS
        self._played_ghost: Tuple[NoteEvent, ...] = ()

    # ---------- 音符資料 ----------
    def set_notes(self, seq: Sequence[NoteEvent]):
        self.notes = tuple(seq)
        self._recompute()

    def set_ghost_notes(self, seq: Sequence[NoteEvent]):
        self.ghost_notes = tuple(seq)
        self._recompute()

    def set_script(self, text: str) -> List[NoteEvent]:
        notes = parse(text)
        self.set_notes(notes)
        return notes

    def load_song(self, name: Optional[str]):
        """Use a built-in song as the ghost melody (None clears it)."""
        self.song = name
        self.set_ghost_notes(parse(get_song(name)) if name else ())
        logging.info("ghost song: %s", name or "-")

    def song_names(self) -> List[str]:
        return song_names()

    def _recompute(self):
        self.range = compute_range(self.notes, self.ghost_notes)
        self.view_start = 0.0
        self.view_end = total_duration(self.notes, self.ghost_notes)

    # ---------- transport ----------
    @property
    def playing(self) -> bool:
        return self.scheduler.playing

    def set_bpm(self, bpm: float) -> float:
        self.bpm = max(self.cfg.min_bpm, min(self.cfg.max_bpm, float(bpm)))
        return self.bpm

    def play(self) -> bool:
        if self.playing or not self.notes:
            return False
        self.shuffle_monsters()
        self._played_ghost = self.ghost_notes
        return self.scheduler.play(self.notes, self.bpm,
                                   compute_range(self.notes, self.ghost_notes))

    def stop(self):
        self.scheduler.stop()

    def play_stop(self):
        if self.playing:
            self.stop()
        else:
            self.play()

    def replay(self) -> bool:
        self.stop()
        return self.play()

    def shuffle_monsters(self) -> Tuple[str, ...]:
        m = list(MONSTERS)
        self.rng.shuffle(m)
        self.monsters = tuple(m)
        return self.monsters

    # ---------- per-frame ----------
    def tick(self, now: Optional[float] = None) -> int:
        return self.timers.pump(now)

    def frame(self, now: Optional[float] = None) -> Optional[Frame]:
        # 播放中畫的是 play() 當下的快照
        if self.playing:
            notes, ghost, rng = self.scheduler.notes, self._played_ghost, self.scheduler.pitch_range
        else:
            notes, ghost, rng = self.notes, self.ghost_notes, self.range
        if rng is None:
            return None
        return Frame(
            notes=notes,
            ghost_notes=ghost,
            range=rng,
            playing=self.playing,
            elapsed=self.scheduler.elapsed(now),
            elapsed_beats=self.scheduler.elapsed_beats(now),
            view_start=self.view_start,
            view_end=self.view_end,
            start_delay=self.cfg.start_delay,
            swing=self.scheduler.swing,
            marker_pos=self.scheduler.marker_pos,
            struck=struck_ghosts(ghost, notes, self.cfg.strike_epsilon),
            monsters=self.monsters,
        )

    def render(self, draw: Callable[[Frame], None], now: Optional[float] = None) -> Optional[Frame]:
        self.tick(now)
        frame = self.frame(now)
        if frame is None:
            return None
        draw(frame)
        return frame
