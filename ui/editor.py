# ui/editor.py
import pygame
from typing import Optional
from utils.events import EventBus

class ScriptEditor:
    """Plain text panel for the melody script.

    Click to focus, Esc (or a click outside) to give the keys back to the
    piano. Every edit publishes ``text_changed``.
    """
    def __init__(self, rect: pygame.Rect, bus: EventBus, text: str = ""):
        self.rect = rect
        self.bus = bus
        self.lines: list[str] = text.split("\n") if text else [""]
        self.row = len(self.lines) - 1
        self.col = len(self.lines[self.row])
        self.focused = False
        self.scroll = 0
        self.error: Optional[str] = None

        self.font = pygame.font.SysFont("consolas", 16)
        self.font_small = pygame.font.SysFont("consolas", 13)
        self.line_h = self.font.get_linesize()

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def set_text(self, text: str):
        self.lines = text.split("\n") if text else [""]
        self.row = len(self.lines) - 1
        self.col = len(self.lines[self.row])
        self._changed()

    def _changed(self):
        self.bus.publish("text_changed", text=self.text)

    # ---- 事件 ----
    def handle_event(self, e: pygame.event.Event) -> bool:
        """True when the editor consumed the event."""
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self.focused = self.rect.collidepoint(e.pos)
            if self.focused:
                self._place_cursor(e.pos)
            return self.focused
        if not self.focused:
            return False

        if e.type == pygame.TEXTINPUT:
            line = self.lines[self.row]
            self.lines[self.row] = line[:self.col] + e.text + line[self.col:]
            self.col += len(e.text)
            self._changed()
            return True

        if e.type == pygame.KEYDOWN:
            line = self.lines[self.row]
            if e.key == pygame.K_ESCAPE:
                self.focused = False
            elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.lines[self.row] = line[:self.col]
                self.lines.insert(self.row + 1, line[self.col:])
                self.row += 1; self.col = 0
                self._changed()
            elif e.key == pygame.K_BACKSPACE:
                if self.col > 0:
                    self.lines[self.row] = line[:self.col - 1] + line[self.col:]
                    self.col -= 1
                    self._changed()
                elif self.row > 0:
                    prev = self.lines[self.row - 1]
                    self.lines[self.row - 1] = prev + line
                    del self.lines[self.row]
                    self.row -= 1; self.col = len(prev)
                    self._changed()
            elif e.key == pygame.K_DELETE:
                if self.col < len(line):
                    self.lines[self.row] = line[:self.col] + line[self.col + 1:]
                    self._changed()
                elif self.row + 1 < len(self.lines):
                    self.lines[self.row] = line + self.lines.pop(self.row + 1)
                    self._changed()
            elif e.key == pygame.K_UP and self.row > 0:
                self.row -= 1; self.col = min(self.col, len(self.lines[self.row]))
            elif e.key == pygame.K_DOWN and self.row + 1 < len(self.lines):
                self.row += 1; self.col = min(self.col, len(self.lines[self.row]))
            elif e.key == pygame.K_LEFT:
                self.col = max(0, self.col - 1)
            elif e.key == pygame.K_RIGHT:
                self.col = min(len(line), self.col + 1)
            return True
        return e.type == pygame.KEYUP

    def _place_cursor(self, pos):
        r = self.scroll + int((pos[1] - self.rect.y - 6) // self.line_h)
        self.row = min(max(0, r), len(self.lines) - 1)
        self.col = len(self.lines[self.row])

    # ---- 繪製 ----
    def draw(self, surface: pygame.Surface):
        border = (120, 160, 230) if self.focused else (70, 70, 80)
        pygame.draw.rect(surface, (22, 22, 26), self.rect)
        pygame.draw.rect(surface, border, self.rect, 1)

        visible = max(1, (self.rect.h - 30) // self.line_h)
        if self.row < self.scroll:
            self.scroll = self.row
        elif self.row >= self.scroll + visible:
            self.scroll = self.row - visible + 1

        y = self.rect.y + 6
        for i in range(self.scroll, min(len(self.lines), self.scroll + visible)):
            num = self.font_small.render(f"{i + 1:3d}", True, (90, 90, 100))
            surface.blit(num, (self.rect.x + 4, y + 2))
            txt = self.font.render(self.lines[i], True, (220, 220, 230))
            surface.blit(txt, (self.rect.x + 36, y))
            if self.focused and i == self.row:
                cx = self.rect.x + 36 + self.font.size(self.lines[i][:self.col])[0]
                pygame.draw.line(surface, (240, 240, 240), (cx, y), (cx, y + self.line_h - 2), 1)
            y += self.line_h

        if self.error:
            msg = self.font_small.render(self.error, True, (231, 76, 60))
            surface.blit(msg, (self.rect.x + 6, self.rect.bottom - msg.get_height() - 6))
