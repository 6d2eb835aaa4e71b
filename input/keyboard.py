# input/keyboard.py
from typing import Optional, Set
from audio.base import AudioOutput
from utils.events import EventBus

class LiveKeyboard:
    """Notes played by hand (mouse / computer keys), independent of playback."""
    def __init__(self, audio: AudioOutput, bus: Optional[EventBus] = None, velocity: float = 0.85):
        self.audio = audio
        self.bus = bus or EventBus()
        self.velocity = velocity
        self.active: Set[int] = set()

    def press(self, pitch: int, velocity: Optional[float] = None):
        if pitch in self.active:
            return  # key repeat
        self.active.add(pitch)
        self.audio.play_note(pitch, self.velocity if velocity is None else velocity)
        self.bus.publish("note_on", pitch=pitch, source="live")

    def release(self, pitch: int):
        if pitch not in self.active:
            return
        self.active.discard(pitch)
        self.audio.stop_note(pitch)
        self.bus.publish("note_off", pitch=pitch, source="live")

    def release_all(self):
        for p in sorted(self.active):
            self.release(p)
