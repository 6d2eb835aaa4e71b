# notes/range.py
from typing import Iterable, Optional, Sequence, Set
from notes.model import NoteEvent, PitchRange

STRIKE_EPSILON = 0.001  # beats

def compute_range(notes: Sequence[NoteEvent], ghost_notes: Sequence[NoteEvent] = ()) -> Optional[PitchRange]:
    """Pitch extent over both sequences; None when there is nothing to show.

    Extremes are compared note by note across the union, a ghost melody may
    reach further than the primary one in either direction.
    """
    everything = list(notes) + list(ghost_notes)
    if not everything:
        return None
    lowest = min(everything, key=lambda n: n.pitch_value)
    highest = max(everything, key=lambda n: n.pitch_value)
    return PitchRange(
        lowest_value=lowest.pitch_value,
        highest_value=highest.pitch_value,
        lowest_label=lowest.pitch_label,
        highest_label=highest.pitch_label,
        total_duration=max(n.end_time for n in everything),
    )

def total_duration(notes: Sequence[NoteEvent], ghost_notes: Sequence[NoteEvent] = ()) -> float:
    return max((n.end_time for n in list(notes) + list(ghost_notes)), default=0.0)

def is_struck(ghost: NoteEvent, notes: Iterable[NoteEvent], eps: float = STRIKE_EPSILON) -> bool:
    return any(n.pitch_value == ghost.pitch_value and abs(n.start_time - ghost.start_time) < eps
               for n in notes)

def struck_ghosts(ghost_notes: Sequence[NoteEvent], notes: Sequence[NoteEvent],
                  eps: float = STRIKE_EPSILON) -> Set[int]:
    """Indices of ghost notes matched by a primary note (same pitch, same onset)."""
    # bucket by pitch
    by_pitch: dict[int, list[NoteEvent]] = {}
    for n in notes:
        by_pitch.setdefault(n.pitch_value, []).append(n)
    return {i for i, g in enumerate(ghost_notes) if is_struck(g, by_pitch.get(g.pitch_value, ()), eps)}
