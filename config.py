# ========================= config.py =========================
from dataclasses import dataclass, field
from typing import Optional

@dataclass
class RenderConfig:
    window_w: int = 1280
    window_h: int = 720
    editor_w: int = 300               # left text panel
    piano_h: int = 110
    pixels_per_beat: float = 160.0    # scroll speed while playing
    hit_x: int = 120                  # sprites strike here (relative to roll)
    first_midi: int = 48
    last_midi: int = 84
    fps: int = 60

@dataclass
class AudioConfig:
    waveform: str = "triangle"
    volume: float = 0.5
    velocity: float = 1.0            # playback velocity (0..1)
    live_velocity: float = 0.85      # computer keyboard / mouse

@dataclass
class PlaybackConfig:
    bpm: float = 120.0
    reference_bpm: float = 120.0     # beat lengths are defined at this tempo
    start_delay: float = 0.5         # lead-in in beats
    min_bpm: float = 30.0
    max_bpm: float = 300.0
    strike_epsilon: float = 0.001

@dataclass
class LogConfig:
    log_dir: Optional[str] = None
    level: str = "INFO"

@dataclass
class AppConfig:
    render: RenderConfig = field(default_factory=RenderConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    log: LogConfig = field(default_factory=LogConfig)
    script_path: Optional[str] = None
    ghost_song: Optional[str] = None
    midi_in: Optional[str] = None
