# notes/model.py
from dataclasses import dataclass

@dataclass(frozen=True)
class NoteEvent:
    pitch_value: int    # MIDI note number, C4 = 60
    pitch_label: str    # e.g. "C#4"
    start_time: float   # beats
    end_time: float     # beats

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

@dataclass(frozen=True)
class PitchRange:
    """Pitch extent and length of everything on screen (notes + ghost notes)."""
    lowest_value: int
    highest_value: int
    lowest_label: str
    highest_label: str
    total_duration: float

    @property
    def span(self) -> int:
        return self.highest_value - self.lowest_value

    @property
    def rows(self) -> int:
        return self.span + 1
