"""Primary colour parsing and the HSL values the stylesheet consumes."""
from __future__ import annotations

import colorsys
import re
from dataclasses import dataclass

from brandportal.errors import ValidationError

# Foreground switches to dark text strictly above this lightness.
DARK_FOREGROUND_ABOVE = 0.6

FOREGROUND_CSS = {
    "dark": "0 0% 10%",
    "light": "0 0% 98%",
}

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_HSL_RE = re.compile(
    r"^hsla?\(\s*(-?[\d.]+)(?:deg)?[\s,]+([\d.]+)%[\s,]+([\d.]+)%\s*(?:[,/]\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})[\s,]+(\d{1,3})[\s,]+(\d{1,3})\s*(?:[,/]\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class HSL:
    hue: float  # degrees, [0, 360)
    saturation: float  # [0, 1]
    lightness: float  # [0, 1]

    def css(self) -> str:
        """`--primary` value: "h s% l%"."""
        return f"{self.hue:.1f} {self.saturation * 100:.1f}% {self.lightness * 100:.1f}%"


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    h, l, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    return HSL(hue=(h * 360) % 360, saturation=s, lightness=l)


def parse_color(raw: str) -> HSL:
    """Accepts #rgb, #rrggbb, rgb(...) and hsl(...)."""
    text = (raw or "").strip()
    m = _HEX_RE.match(text)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return rgb_to_hsl(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    m = _RGB_RE.match(text)
    if m:
        r, g, b = (int(v) for v in m.groups())
        if max(r, g, b) > 255:
            raise ValidationError(f"Invalid colour {raw!r}")
        return rgb_to_hsl(r, g, b)
    m = _HSL_RE.match(text)
    if m:
        h, s, l = (float(v) for v in m.groups())
        if s > 100 or l > 100:
            raise ValidationError(f"Invalid colour {raw!r}")
        return HSL(hue=h % 360, saturation=s / 100, lightness=l / 100)
    raise ValidationError(f"Invalid colour {raw!r}")


def foreground_for_lightness(lightness: float) -> str:
    return "dark" if lightness > DARK_FOREGROUND_ABOVE else "light"


def foreground_css(color: HSL) -> str:
    return FOREGROUND_CSS[foreground_for_lightness(color.lightness)]
