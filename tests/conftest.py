import random
import pytest

from config import PlaybackConfig
from session import GameSession
from timeline.scheduler import PlaybackScheduler
from timeline.timers import TimerQueue
from utils.events import EventBus


class FakeClock:
    """Manual monotonic clock (seconds)."""
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, secs: float):
        self.t += secs


class RecordingAudio:
    def __init__(self):
        self.calls = []
        self.waveform = None
        self.volume = None

    def play_note(self, pitch, velocity=1.0):
        self.calls.append(("on", pitch, velocity))

    def stop_note(self, pitch):
        self.calls.append(("off", pitch))

    def stop_all(self):
        self.calls.append(("all",))

    def set_waveform(self, name):
        self.waveform = name

    def set_volume(self, value):
        self.volume = value

    def kinds(self):
        return [c[0] for c in self.calls]

    def played(self):
        return [c[1] for c in self.calls if c[0] == "on"]


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def audio():
    return RecordingAudio()

@pytest.fixture
def bus():
    return EventBus()

@pytest.fixture
def timers(clock):
    return TimerQueue(clock)

@pytest.fixture
def scheduler(audio, timers, bus):
    return PlaybackScheduler(audio, timers, PlaybackConfig(), bus)

@pytest.fixture
def session(audio, clock, bus):
    return GameSession(audio, PlaybackConfig(), clock=clock, bus=bus, rng=random.Random(7))
