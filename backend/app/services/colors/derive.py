"""
Secondary color derivation.
"""

from loguru import logger

from .utils import hex_to_rgb, rgb_to_hex, round_half_up, clamp_channel

DEFAULT_FACTOR = 0.8


def derive_secondary(primary_hex: str, factor: float = DEFAULT_FACTOR) -> str:
    """
    Derive a secondary color by scaling each channel of the primary.

    Args:
        primary_hex: Primary color as ``#RRGGBB``
        factor: Channel multiplier; values below 1.0 darken

    Returns:
        Scaled color as uppercase ``#RRGGBB``, or ``primary_hex`` unchanged
        if it cannot be parsed
    """
    try:
        r, g, b = hex_to_rgb(primary_hex)
    except (ValueError, TypeError):
        logger.debug(f"Cannot derive secondary from {primary_hex!r}, returning as-is")
        return primary_hex

    return rgb_to_hex([clamp_channel(round_half_up(c * factor)) for c in (r, g, b)])
