# render/renderer.py
from typing import Optional
import pygame

from config import RenderConfig
from render.layout import (keyboard_layout, lane_y, marker_y, row_height,
                           scroll_x, static_x)
from session import Frame

STATUS_H = 36
BTN_PAD_X = 12
BTN_GAP = 8

MONSTER_COLORS = {
    "slime": (120, 210, 110), "bat": (150, 110, 200), "ghost": (220, 220, 235),
    "skull": (200, 200, 180), "imp": (230, 90, 80), "frog": (90, 190, 150),
    "crab": (240, 130, 70), "owl": (190, 150, 100),
}

class Renderer:
    """pygame drawing for the status bar, the piano roll and the keyboard."""
    def __init__(self, cfg: RenderConfig):
        pygame.init()
        self.cfg = cfg
        self.screen = pygame.display.set_mode((cfg.window_w, cfg.window_h))
        pygame.display.set_caption("Melody Roll")
        self.font = pygame.font.SysFont("consolas", 18)
        self.font_small = pygame.font.SysFont("consolas", 14)
        self.clock = pygame.time.Clock()
        self.button_rects: dict[str, pygame.Rect] = {}

        self.marquee_offset = 0.0
        self.marquee_speed = 80.0
        self.marquee_gap = 48

        self.xw_by_pitch = keyboard_layout(cfg.first_midi, cfg.last_midi, 0, cfg.window_w)

    # ------- geometry -------
    def roll_rect(self) -> pygame.Rect:
        c = self.cfg
        return pygame.Rect(c.editor_w, STATUS_H, c.window_w - c.editor_w, c.window_h - STATUS_H - c.piano_h)

    def editor_rect(self) -> pygame.Rect:
        c = self.cfg
        return pygame.Rect(0, STATUS_H, c.editor_w, c.window_h - STATUS_H - c.piano_h)

    def key_at(self, pos) -> Optional[int]:
        mx, my = pos
        top = self.cfg.window_h - self.cfg.piano_h
        if my < top:
            return None
        # 先測黑鍵（疊在白鍵上方）
        if my <= top + self.cfg.piano_h * 0.6:
            for p, (x, w, black) in self.xw_by_pitch.items():
                if black and x <= mx <= x + w:
                    return p
        for p, (x, w, black) in self.xw_by_pitch.items():
            if not black and x <= mx <= x + w:
                return p
        return None

    # ------- frame -------
    def tick(self, fps: int = 60) -> float:
        return self.clock.tick(fps) / 1000.0

    def begin_frame(self):
        self.screen.fill((12, 12, 14))
        pygame.draw.rect(self.screen, (18, 18, 22), self.roll_rect())

    def end_frame(self):
        pygame.display.flip()

    def draw_status_bar(self, buttons: list[str], dt: float, right_info_text: str = "", song_title: str = ""):
        self.marquee_offset = (self.marquee_offset + self.marquee_speed * dt) % 1_000_000
        w = self.cfg.window_w
        pygame.draw.rect(self.screen, (24, 24, 28), (0, 0, w, STATUS_H))
        pygame.draw.line(self.screen, (60, 60, 66), (0, STATUS_H), (w, STATUS_H), 1)

        x = 10; self.button_rects.clear()
        for label in buttons:
            surf = self.font_small.render(label, True, (220, 220, 230))
            rect = surf.get_rect(); rect.topleft = (x + BTN_PAD_X, (STATUS_H - rect.height) // 2)
            box = pygame.Rect(x, 4, rect.width + BTN_PAD_X * 2, STATUS_H - 8)
            pygame.draw.rect(self.screen, (40, 40, 46), box, border_radius=6)
            pygame.draw.rect(self.screen, (75, 75, 85), box, 1, border_radius=6)
            self.screen.blit(surf, rect)
            self.button_rects[label] = box
            x += box.width + BTN_GAP

        right_w = 0
        if right_info_text:
            right = self.font_small.render(right_info_text, True, (180, 180, 190))
            right_w = right.get_width()
            self.screen.blit(right, (w - right_w - 10, (STATUS_H - right.get_height()) // 2))

        area = pygame.Rect(x + 6, 4, max(0, w - right_w - 20 - (x + 6)), STATUS_H - 8)
        if area.w > 50 and song_title:
            pygame.draw.rect(self.screen, (34, 34, 40), area, border_radius=6)
            surf = self.font_small.render(song_title + "   •   ", True, (220, 220, 230))
            tw = surf.get_width() + self.marquee_gap
            clip_prev = self.screen.get_clip()
            self.screen.set_clip(area)
            x_draw = area.x - self.marquee_offset % tw
            while x_draw < area.right:
                self.screen.blit(surf, (x_draw, (STATUS_H - surf.get_height()) // 2))
                x_draw += tw
            self.screen.set_clip(clip_prev)

    def draw_frame(self, frame: Frame):
        rect = self.roll_rect()
        self._draw_grid(frame, rect)
        clip_prev = self.screen.get_clip()
        self.screen.set_clip(rect)
        try:
            if frame.playing:
                self._draw_animated(frame, rect)
            else:
                self._draw_static(frame, rect)
        finally:
            self.screen.set_clip(clip_prev)

    def _draw_grid(self, frame: Frame, rect: pygame.Rect):
        rng = frame.range
        rh = row_height(rng, rect.h)
        for i in range(rng.rows):
            pitch = rng.highest_value - i
            y = rect.y + i * rh
            shade = (24, 24, 30) if (pitch % 12) in (1, 3, 6, 8, 10) else (30, 30, 36)
            pygame.draw.rect(self.screen, shade, (rect.x, y, rect.w, rh))
            if pitch % 12 == 0:
                lbl = self.font_small.render(f"C{pitch // 12 - 1}", True, (110, 110, 120))
                self.screen.blit(lbl, (rect.x + 4, y + 1))
        hi = self.font_small.render(rng.highest_label, True, (150, 150, 160))
        lo = self.font_small.render(rng.lowest_label, True, (150, 150, 160))
        self.screen.blit(hi, (rect.right - hi.get_width() - 6, rect.y + 2))
        self.screen.blit(lo, (rect.right - lo.get_width() - 6, rect.bottom - lo.get_height() - 2))

    def _draw_static(self, frame: Frame, rect: pygame.Rect):
        rng = frame.range
        rh = max(2.0, row_height(rng, rect.h) - 2)
        # 每拍一條格線
        beat = 0.0
        while frame.view_end > frame.view_start and beat <= frame.view_end:
            x = static_x(beat, frame.view_start, frame.view_end, rect.x, rect.w)
            pygame.draw.line(self.screen, (44, 44, 52), (x, rect.y), (x, rect.bottom), 1)
            beat += 1.0
        for i, g in enumerate(frame.ghost_notes):
            x0 = static_x(g.start_time, frame.view_start, frame.view_end, rect.x, rect.w)
            x1 = static_x(g.end_time, frame.view_start, frame.view_end, rect.x, rect.w)
            y = lane_y(g.pitch_value, rng, rect.y, rect.h)
            color = (110, 170, 120) if i in frame.struck else (90, 90, 110)
            pygame.draw.rect(self.screen, color, (x0, y + 1, max(2, x1 - x0 - 1), rh), 1, border_radius=4)
        for n in frame.notes:
            x0 = static_x(n.start_time, frame.view_start, frame.view_end, rect.x, rect.w)
            x1 = static_x(n.end_time, frame.view_start, frame.view_end, rect.x, rect.w)
            y = lane_y(n.pitch_value, rng, rect.y, rect.h)
            pygame.draw.rect(self.screen, (80, 200, 120), (x0, y + 1, max(2, x1 - x0 - 1), rh), border_radius=4)

    def _draw_animated(self, frame: Frame, rect: pygame.Rect):
        rng = frame.range
        ppb = self.cfg.pixels_per_beat
        hit_x = rect.x + self.cfg.hit_x
        rh = max(2.0, row_height(rng, rect.h) - 2)
        pygame.draw.line(self.screen, (90, 90, 90), (hit_x, rect.y), (hit_x, rect.bottom), 2)

        for i, g in enumerate(frame.ghost_notes):
            x = scroll_x(g.start_time, frame.elapsed_beats, frame.start_delay, hit_x, ppb)
            if x > rect.right or x + g.duration * ppb < rect.x:
                continue
            y = lane_y(g.pitch_value, rng, rect.y, rect.h)
            color = (110, 170, 120) if i in frame.struck else (90, 90, 110)
            pygame.draw.rect(self.screen, color, (x, y + 1, max(2, g.duration * ppb - 1), rh), 1, border_radius=4)

        for n in frame.notes:
            x = scroll_x(n.start_time, frame.elapsed_beats, frame.start_delay, hit_x, ppb)
            if x > rect.right or x + n.duration * ppb < rect.x:
                continue
            y = lane_y(n.pitch_value, rng, rect.y, rect.h)
            monster = frame.monsters[n.pitch_value % len(frame.monsters)]
            color = MONSTER_COLORS.get(monster, (200, 200, 200))
            r = max(4, int(min(rh, 28) / 2))
            pygame.draw.circle(self.screen, color, (int(x) + r, int(y + rh / 2) + 1), r)
            pygame.draw.circle(self.screen, (12, 12, 14), (int(x) + r - r // 3, int(y + rh / 2)), max(1, r // 4))

        # 打擊者：位置跟著最後一個 note-on，swing 切換揮棒方向
        py = marker_y(frame.marker_pos, rect.y, rect.h) + rh / 2
        pygame.draw.circle(self.screen, (255, 220, 120), (hit_x - 24, int(py)), 10)
        tip = (hit_x + 6, int(py - 14)) if frame.swing else (hit_x + 6, int(py + 14))
        pygame.draw.line(self.screen, (255, 240, 170), (hit_x - 18, int(py)), tip, 4)

    # ------- piano -------
    def draw_keyboard(self, highlight: Optional[set[int]] = None, labels: Optional[dict[int, str]] = None):
        highlight = highlight or set()
        labels = labels or {}
        w, h, ph = self.cfg.window_w, self.cfg.window_h, self.cfg.piano_h
        top = h - ph
        pygame.draw.rect(self.screen, (28, 28, 32), (0, top, w, ph))

        for black in (False, True):
            for p, (x, kw, is_blk) in self.xw_by_pitch.items():
                if is_blk != black:
                    continue
                kh = ph * 0.6 if black else ph
                if black:
                    fill = (255, 200, 120) if p in highlight else (18, 18, 20)
                else:
                    fill = (255, 240, 170) if p in highlight else (230, 230, 230)
                pygame.draw.rect(self.screen, fill, (x, top, kw, kh))
                pygame.draw.rect(self.screen, (60, 60, 66), (x, top, kw, kh), 1)
                if p in labels:
                    t = self.font_small.render(labels[p], True, (231, 76, 60))
                    self.screen.blit(t, (x + (kw - t.get_width()) / 2, top + kh - t.get_height() - 4))

