# app.py
import logging
import pygame

from config import AppConfig
from audio.base import WAVEFORMS
from audio.synth import Synth
from input.keyboard import LiveKeyboard
from input.keymap import DEFAULT_KEYMAP, key_label
from midi.input import MidiInput
from render.renderer import Renderer
from script.parser import check_script
from session import GameSession
from ui.editor import ScriptEditor
from utils.crashlog import log_exception
from utils.events import EventBus

STARTER_SCRIPT = "octave 4\nstep 1/4\nC\nE\nG\nrest\nG\nE\nC"
BUTTONS = ["PLAY/STOP", "REPLAY", "SONG", "WAVE", "VOL-", "VOL+", "BPM-", "BPM+", "MIDI", "QUIT"]

class App:
    def __init__(self, cfg: AppConfig):
        self.cfg = cfg
        self.renderer = Renderer(cfg.render)
        self.synth = Synth(cfg.audio)
        self.bus = EventBus()

        self.session = GameSession(self.synth, cfg.playback, bus=self.bus)
        self.session.scheduler.velocity = cfg.audio.velocity
        self.keyboard = LiveKeyboard(self.synth, self.bus, velocity=cfg.audio.live_velocity)
        self.midi_in = MidiInput(self.synth, self.bus)

        # 目前發聲中的音（任何來源），用於鍵盤高亮
        self.highlight: set[int] = set()
        self.labels = {p: key_label(p) for p in DEFAULT_KEYMAP.values()}

        self._msg = ""
        self._msg_time = 0.0

        self.bus.subscribe("note_on", lambda pitch, **_: self.highlight.add(pitch))
        self.bus.subscribe("note_off", lambda pitch, **_: self.highlight.discard(pitch))
        self.bus.subscribe("transport", self._on_transport)
        self.bus.subscribe("midi_status", lambda status: self._toast(status, 5.0))
        self.bus.subscribe("text_changed", self._on_text_changed)

        self.editor = ScriptEditor(self.renderer.editor_rect(), self.bus)

        songs = self.session.song_names()
        self._song_idx = songs.index(cfg.ghost_song) if cfg.ghost_song in songs else 0
        self.session.load_song(songs[self._song_idx])
        self.editor.set_text(self._initial_script())

    # ---------- UI 訊息 ----------
    def _toast(self, msg: str, secs: float = 4.0):
        self._msg = msg
        self._msg_time = max(self._msg_time, secs)

    def _initial_script(self) -> str:
        path = self.cfg.script_path
        if not path:
            return STARTER_SCRIPT
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            log_exception("load_script", e)
            self._toast(f"Cannot read {path} (see logs)", 6.0)
            return STARTER_SCRIPT

    # ---------- events ----------
    def _on_text_changed(self, text: str):
        notes, self.editor.error = check_script(text)
        self.session.set_notes(notes)

    def _on_transport(self, playing: bool):
        if not playing:
            # stop_all 已讓所有音停止，手動按著的鍵仍保留高亮
            self.highlight = set(self.keyboard.active)

    def _cycle_song(self):
        names = self.session.song_names()
        self._song_idx = (self._song_idx + 1) % (len(names) + 1)
        name = names[self._song_idx] if self._song_idx < len(names) else None
        self.session.load_song(name)
        self._toast(f"Ghost: {name or 'off'}", 2.0)

    def _cycle_waveform(self):
        i = WAVEFORMS.index(self.synth.waveform) if self.synth.waveform in WAVEFORMS else -1
        self.synth.set_waveform(WAVEFORMS[(i + 1) % len(WAVEFORMS)])

    def _on_button(self, label: str) -> bool:
        """False means quit."""
        if label == "PLAY/STOP":
            self.session.play_stop()
        elif label == "REPLAY":
            self.session.replay()
        elif label == "SONG":
            self._cycle_song()
        elif label == "WAVE":
            self._cycle_waveform()
        elif label in ("VOL-", "VOL+"):
            self.synth.set_volume(self.synth.volume + (0.1 if label == "VOL+" else -0.1))
        elif label in ("BPM-", "BPM+"):
            self.session.set_bpm(self.session.bpm + (10 if label == "BPM+" else -10))
        elif label == "MIDI":
            self.midi_in.connect(self.cfg.midi_in)
        elif label == "QUIT":
            return False
        return True

    def _handle_event(self, e: pygame.event.Event) -> bool:
        if e.type == pygame.QUIT:
            return False
        if self.editor.handle_event(e):
            return True

        if e.type == pygame.KEYDOWN:
            if e.key == pygame.K_SPACE:
                self.session.play_stop()
            elif e.key in DEFAULT_KEYMAP:
                self.keyboard.press(DEFAULT_KEYMAP[e.key])
        elif e.type == pygame.KEYUP and e.key in DEFAULT_KEYMAP:
            self.keyboard.release(DEFAULT_KEYMAP[e.key])
        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            for label, rect in self.renderer.button_rects.items():
                if rect.collidepoint(e.pos):
                    return self._on_button(label)
            pitch = self.renderer.key_at(e.pos)
            if pitch is not None:
                self.keyboard.press(pitch)
        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            self.keyboard.release_all()
        return True

    # ---------- Main loop ----------
    def run(self):
        logging.info("main loop started")
        running = True
        try:
            while running:
                dt = self.renderer.tick(self.cfg.render.fps)
                for e in pygame.event.get():
                    if not self._handle_event(e):
                        running = False
                        break
                if not running:
                    break

                if self._msg_time > 0:
                    self._msg_time -= dt
                    if self._msg_time <= 0:
                        self._msg_time = 0; self._msg = ""

                self.midi_in.poll()

                # ----- Render -----
                self.renderer.begin_frame()
                fields = [
                    f"PLAY: {'ON' if self.session.playing else 'OFF'}",
                    f"BPM: {self.session.bpm:.0f}",
                    f"WAVE: {self.synth.waveform}",
                    f"VOL: {int(self.synth.volume * 100)}%",
                    f"NOTES: {len(self.session.notes)}",
                ]
                if self._msg: fields.append(self._msg)
                self.renderer.draw_status_bar(BUTTONS, dt, "  |  ".join(fields), self.session.song or "")
                self.session.render(self.renderer.draw_frame)
                self.editor.draw(self.renderer.screen)
                self.renderer.draw_keyboard(highlight=self.highlight, labels=self.labels)
                self.renderer.end_frame()
        finally:
            self.session.stop()
            self.keyboard.release_all()
            self.midi_in.close()
            self.synth.close()
            pygame.quit()
            logging.info("main loop finished")
