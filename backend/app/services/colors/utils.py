"""
Shared color conversion helpers.
"""
import math
import re
from typing import Sequence, Tuple

HEX6_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp_channel(value: float) -> int:
    """Clamp a channel value into the 0-255 range."""
    return max(0, min(255, int(value)))


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple (tuple, list or uint8 array) to ``#RRGGBB``."""
    r, g, b = [clamp_channel(x) for x in rgb[:3]]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert a 6-digit hex color string to an RGB tuple.

    Raises:
        ValueError: If the value is not a 6-digit hex color
    """
    if not HEX6_RE.match(hex_color or ""):
        raise ValueError(f"Not a 6-digit hex color: {hex_color!r}")
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
