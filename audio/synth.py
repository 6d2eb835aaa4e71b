# audio/synth.py
import logging
import pygame.midi
from config import AudioConfig
from audio.base import WAVEFORMS

CHANNEL = 0
CC_VOLUME = 7

# waveform -> 最接近的 GM 音色（program, 0-based）
GM_PROGRAM = {
    "sine": 79,       # Ocarina
    "triangle": 73,   # Flute
    "square": 80,     # Lead 1 (square)
    "sawtooth": 81,   # Lead 2 (sawtooth)
}

class Synth:
    """
    System MIDI synth through pygame.midi:
    - play_note(p, velocity 0..1) retriggers a pitch that is still sounding
    - stop_note(p) / stop_all()
    - set_waveform(name) picks the GM program, set_volume(0..1) sends CC7
    Without an output device every call is a no-op.
    """
    def __init__(self, cfg: AudioConfig):
        self.cfg = cfg
        self.midi_out = None
        self.use_midi_out = False
        self.waveform = cfg.waveform
        self.volume = cfg.volume
        self._sounding: set[int] = set()

        try:
            pygame.midi.init()
            dev = pygame.midi.get_default_output_id()
            if dev != -1:
                self.midi_out = pygame.midi.Output(dev)
                self.use_midi_out = True
                logging.info("[Synth] Using system MIDI out (device %d)", dev)
            else:
                logging.warning("[Synth] No MIDI output device found, audio disabled")
        except Exception as e:
            logging.warning("[Synth] MIDI init failed: %s", e)

        self.set_waveform(self.waveform)
        self.set_volume(self.volume)

    def close(self):
        try:
            if self.midi_out:
                self.stop_all()
                self.midi_out.close()
        except Exception:
            logging.debug("[Synth] close failed", exc_info=True)
        pygame.midi.quit()
        self.midi_out = None
        self.use_midi_out = False

    def _ready(self) -> bool:
        return bool(self.use_midi_out and self.midi_out)

    def play_note(self, pitch: int, velocity: float = 1.0):
        if not self._ready(): return
        p = int(pitch)
        if not 0 <= p <= 127:
            logging.debug("[Synth] pitch %d outside MIDI range, skipped", p)
            return
        if p in self._sounding:
            self.stop_note(p)
        v = max(1, min(int(round(velocity * 127)), 127))
        try:
            self.midi_out.note_on(p, v, CHANNEL)
            self._sounding.add(p)
        except Exception:
            logging.debug("[Synth] note_on %d failed", p, exc_info=True)

    def stop_note(self, pitch: int):
        if not self._ready(): return
        p = int(pitch)
        self._sounding.discard(p)
        try: self.midi_out.note_off(p, 0, CHANNEL)
        except Exception: logging.debug("[Synth] note_off %d failed", p, exc_info=True)

    def stop_all(self):
        if not self._ready(): return
        for p in list(self._sounding):
            self.stop_note(p)
        try: self.midi_out.write_short(0xB0 | CHANNEL, 123, 0)  # All Notes Off
        except Exception: logging.debug("[Synth] all-notes-off failed", exc_info=True)

    def set_waveform(self, name: str):
        if name not in WAVEFORMS:
            logging.warning("[Synth] unknown waveform %r, keeping %r", name, self.waveform)
            return
        self.waveform = name
        if not self._ready(): return
        try: self.midi_out.set_instrument(GM_PROGRAM[name], CHANNEL)
        except Exception: logging.debug("[Synth] program change failed", exc_info=True)

    def set_volume(self, value: float):
        self.volume = max(0.0, min(1.0, float(value)))
        if not self._ready(): return
        try: self.midi_out.write_short(0xB0 | CHANNEL, CC_VOLUME, int(self.volume * 127))
        except Exception: logging.debug("[Synth] volume change failed", exc_info=True)
