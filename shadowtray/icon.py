# -*- coding: utf-8 -*-
"""
Tray icon drawn with Pillow: a dark disc with a crescent "shadow", plus a
small status dot (green while the engine runs, grey otherwise).
"""

from __future__ import annotations

from PIL import Image, ImageDraw

_BG = (38, 42, 54, 255)
_FG = (235, 238, 245, 255)
_ON = (46, 204, 113, 255)
_OFF = (140, 146, 160, 255)


def make_shadow_icon(size: int = 64, running: bool = False) -> Image.Image:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)

    pad = int(size * 0.04)
    d.ellipse([pad, pad, size - pad, size - pad], fill=_BG)

    # Crescent: light disc with an offset background disc cut out of it
    r = int(size * 0.30)
    cx, cy = size // 2, size // 2
    d.ellipse([cx - r, cy - r, cx + r, cy + r], fill=_FG)
    off = int(size * 0.14)
    d.ellipse([cx - r + off, cy - r - off // 2, cx + r + off, cy + r - off // 2], fill=_BG)

    dot = int(size * 0.13)
    x1 = size - pad
    y1 = size - pad
    d.ellipse([x1 - 2 * dot, y1 - 2 * dot, x1, y1], fill=_ON if running else _OFF, outline=_BG, width=max(1, size // 32))
    return img
