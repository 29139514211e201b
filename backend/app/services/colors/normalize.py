"""
Color Normalization Module

Canonicalizes color tokens scraped from page markup (CSS names, hex shorthand,
rgb()/rgba(), hsl()/hsla()) into ``#RRGGBB`` uppercase hex strings.
Tokens that cannot be converted are returned unchanged so the caller can
decide whether to discard them.
"""

import re
from loguru import logger

from .utils import HEX6_RE, rgb_to_hex, round_half_up, clamp_channel


# Literal CSS values for the common names sites put in color meta tags
NAMED_COLORS = {
    "black": "#000000",
    "white": "#FFFFFF",
    "red": "#FF0000",
    "green": "#008000",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "cyan": "#00FFFF",
    "magenta": "#FF00FF",
    "gray": "#808080",
    "grey": "#808080",
    "orange": "#FFA500",
    "purple": "#800080",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
}

SHORT_HEX_RE = re.compile(r"^#([0-9A-Fa-f]{3,4})$")
HEX8_RE = re.compile(r"^#([0-9A-Fa-f]{6})[0-9A-Fa-f]{2}$")
RGB_RE = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE
)
HSL_RE = re.compile(
    r"^hsla?\(\s*(\d+(?:\.\d+)?)(?:deg)?\s*,\s*(\d+(?:\.\d+)?)%\s*,\s*(\d+(?:\.\d+)?)%"
    r"\s*(?:,\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE
)


def is_hex_color(value: str) -> bool:
    """True if value is a canonical 6-digit hex color."""
    return bool(value) and bool(HEX6_RE.match(value))


def expand_short_hex(digits: str) -> str:
    """Expand ``abc``/``abcd`` nibbles to ``#AABBCC`` (alpha nibble dropped)."""
    r, g, b = digits[0], digits[1], digits[2]
    return f"#{r}{r}{g}{g}{b}{b}".upper()


def normalize_color(token: str) -> str:
    """
    Normalize a raw color token to 6-digit uppercase hex.

    Attempted in order: named colors, 3/4-digit hex, 6-digit hex,
    rgb()/rgba(), hsl()/hsla() (grays only), 8-digit hex.

    Args:
        token: Raw color value, e.g. ``"#fff"``, ``"rgb(10, 20, 30)"``, ``"red"``

    Returns:
        ``#RRGGBB`` when the token could be converted, otherwise the
        stripped token unchanged
    """
    if token is None:
        return token
    color = token.strip()

    named = NAMED_COLORS.get(color.lower())
    if named:
        return named

    match = SHORT_HEX_RE.match(color)
    if match:
        return expand_short_hex(match.group(1))

    if HEX6_RE.match(color):
        return color.upper()

    match = RGB_RE.match(color)
    if match:
        return rgb_to_hex([clamp_channel(int(match.group(i))) for i in (1, 2, 3)])

    match = HSL_RE.match(color)
    if match:
        saturation = float(match.group(2))
        lightness = float(match.group(3))
        if saturation == 0:
            gray = clamp_channel(round_half_up(lightness * 255 / 100))
            return rgb_to_hex((gray, gray, gray))
        # Chromatic HSL is passed through as-is
        logger.debug(f"Leaving chromatic HSL color unconverted: {color}")
        return color

    match = HEX8_RE.match(color)
    if match:
        return f"#{match.group(1)}".upper()

    return color
