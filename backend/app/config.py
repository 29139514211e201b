"""
BrandColor Configuration
Manages environment variables and defaults for the color resolution services.
"""
import os


class Config:
    """Configuration class for BrandColor services."""

    # Network
    FETCH_TIMEOUT_S: float = float(os.environ.get("BRANDCOLOR_FETCH_TIMEOUT_S", "10"))
    IMAGE_TIMEOUT_S: float = float(os.environ.get("BRANDCOLOR_IMAGE_TIMEOUT_S", "10"))
    USER_AGENT: str = os.environ.get(
        "BRANDCOLOR_USER_AGENT",
        "Mozilla/5.0 (compatible; BrandColorBot/1.0)"
    )
    MAX_PAGE_MB: int = int(os.environ.get("BRANDCOLOR_MAX_PAGE_MB", "2"))
    MAX_IMAGE_MB: int = int(os.environ.get("BRANDCOLOR_MAX_IMAGE_MB", "5"))

    # Color derivation and quantization
    SECONDARY_FACTOR: float = float(os.environ.get("BRANDCOLOR_SECONDARY_FACTOR", "0.8"))
    PALETTE_K: int = int(os.environ.get("BRANDCOLOR_PALETTE_K", "6"))
    PALETTE_MAX_EDGE: int = int(os.environ.get("BRANDCOLOR_PALETTE_MAX_EDGE", "64"))
    PALETTE_RNG_SEED: int = 42

    # Batch seeding
    BATCH_INTERVAL_S: float = float(os.environ.get("BRANDCOLOR_BATCH_INTERVAL_S", "1.0"))

    # Logging
    LOG_LEVEL: str = os.environ.get("BRANDCOLOR_LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.environ.get("BRANDCOLOR_LOG_JSON", "false").lower() in ("1", "true", "yes")

    # Swatch targets (HLS, normalized)
    VIBRANT_MIN_SATURATION: float = 0.35
    MUTED_MAX_SATURATION: float = 0.4
    MIN_LIGHTNESS: float = 0.3
    MAX_LIGHTNESS: float = 0.7

    SUPPORTED_IMAGE_FORMATS = {"ICO", "PNG", "JPEG", "GIF", "WEBP", "BMP"}

    @classmethod
    def validate_factor(cls, factor: float) -> bool:
        """Validate secondary derivation factor."""
        return 0.0 < factor <= 1.0


# Global config instance
config = Config()
