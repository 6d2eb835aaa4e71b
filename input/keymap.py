# ========================= input/keymap.py =========================
import pygame
from typing import Dict, Optional

# 一個八度：白鍵 a s d f g h j，黑鍵 w e t y u
DEFAULT_KEYMAP: Dict[int, int] = {
    pygame.K_a: 60,  # C4
    pygame.K_w: 61,
    pygame.K_s: 62,
    pygame.K_e: 63,
    pygame.K_d: 64,
    pygame.K_f: 65,
    pygame.K_t: 66,
    pygame.K_g: 67,
    pygame.K_y: 68,
    pygame.K_h: 69,
    pygame.K_u: 70,
    pygame.K_j: 71,  # B4
}

def pitch_for_key(key: int, keymap: Optional[Dict[int, int]] = None) -> Optional[int]:
    return (keymap or DEFAULT_KEYMAP).get(key)

def key_label(pitch: int, keymap: Optional[Dict[int, int]] = None) -> str:
    """Computer key bound to a pitch, for drawing on the on-screen piano."""
    for k, p in (keymap or DEFAULT_KEYMAP).items():
        if p == pitch:
            try:
                return pygame.key.name(k)
            except Exception:
                return ""
    return ""
