# midi/input.py
import logging, time
from typing import Callable, Dict, List, Optional
import mido

from audio.base import AudioOutput
from utils.events import EventBus

RESCAN_SECS = 1.0

def status_text(count: int) -> str:
    return f"MIDI connected: {count} input{'s' if count != 1 else ''} available"

class MidiInput:
    """External MIDI keyboards -> audio + note events.

    Ports are polled from the main loop (``poll()``), so handlers run on the
    same thread as everything else. Once connected, ``poll()`` also rescans
    the port list about once a second: keyboards plugged in later are
    opened, unplugged ones are closed and the status text follows.
    """
    def __init__(self, audio: AudioOutput, bus: Optional[EventBus] = None,
                 clock: Callable[[], float] = time.monotonic, rescan_secs: float = RESCAN_SECS):
        self.audio = audio
        self.bus = bus or EventBus()
        self.clock = clock
        self.rescan_secs = rescan_secs
        self._ports: Dict[str, object] = {}
        self.wanted: Optional[str] = None
        self.connected = False
        self.status = "MIDI not connected"
        self._last_scan = 0.0

    @property
    def ports(self) -> List:
        return list(self._ports.values())

    def connect(self, name: Optional[str] = None) -> bool:
        self.close()
        self.wanted = name
        try:
            names = [name] if name else mido.get_input_names()
            for n in names:
                self._ports[n] = mido.open_input(n)
            self.connected = True
            self.status = status_text(len(self._ports))
        except Exception as e:
            logging.warning("MIDI connect failed: %s", e)
            self.close()
            self.status = f"Failed to connect MIDI: {e}"
        self._last_scan = self.clock()
        self.bus.publish("midi_status", status=self.status)
        return self.connected

    def rescan(self) -> bool:
        """Sync open ports with the system's input list. True if it changed."""
        try:
            names = mido.get_input_names()
        except Exception:
            logging.debug("MIDI rescan failed", exc_info=True)
            return False
        if self.wanted:
            names = [n for n in names if n == self.wanted]

        changed = False
        for n in [n for n in self._ports if n not in names]:
            self._close_port(self._ports.pop(n))
            logging.info("MIDI input removed: %s", n)
            changed = True
        for n in names:
            if n in self._ports:
                continue
            try:
                self._ports[n] = mido.open_input(n)
            except Exception as e:
                logging.warning("MIDI input %s could not be opened: %s", n, e)
                continue
            logging.info("MIDI input added: %s", n)
            changed = True

        if changed:
            self.status = status_text(len(self._ports))
            self.bus.publish("midi_status", status=self.status)
        return changed

    def poll(self, now: Optional[float] = None) -> int:
        if self.connected:
            now = self.clock() if now is None else now
            if now - self._last_scan >= self.rescan_secs:
                self._last_scan = now
                self.rescan()
        handled = 0
        for port in self.ports:
            for msg in port.iter_pending():
                if self.handle_message(msg):
                    handled += 1
        return handled

    def handle_message(self, msg) -> bool:
        if msg.type == "note_on" and msg.velocity > 0:
            self.audio.play_note(msg.note, msg.velocity / 127)
            self.bus.publish("note_on", pitch=msg.note, source="midi", velocity=msg.velocity)
            return True
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            self.audio.stop_note(msg.note)
            self.bus.publish("note_off", pitch=msg.note, source="midi")
            return True
        return False

    def _close_port(self, port):
        try:
            port.close()
        except Exception:
            logging.debug("closing MIDI port failed", exc_info=True)

    def close(self):
        for port in self._ports.values():
            self._close_port(port)
        self._ports = {}
        self.connected = False
