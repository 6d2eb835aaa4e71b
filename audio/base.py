# audio/base.py
from typing import Protocol

WAVEFORMS = ("sine", "triangle", "square", "sawtooth")

class AudioOutput(Protocol):
    def play_note(self, pitch: int, velocity: float = 1.0) -> None: ...
    def stop_note(self, pitch: int) -> None: ...
    def stop_all(self) -> None: ...
    def set_waveform(self, name: str) -> None: ...
    def set_volume(self, value: float) -> None: ...
