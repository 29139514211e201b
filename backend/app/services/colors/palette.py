"""
Image Palette Extraction Module

Downloads a site's icon, quantizes its pixels into a small palette with
MiniBatchKMeans and picks two representative swatches: a vibrant one for the
primary color and a muted one for the secondary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image
from sklearn.cluster import MiniBatchKMeans
from loguru import logger

from app.config import config
from app.services.brand.http import HttpFetcher
from app.services.reliability import Deadline, FetchError
from app.utils.metrics import get_metrics
from .utils import rgb_to_hex

# Scoring weights: saturation, lightness, population
WEIGHT_SATURATION = 3.0
WEIGHT_LIGHTNESS = 6.5
WEIGHT_POPULATION = 0.5

TARGET_LIGHTNESS = 0.5
VIBRANT_TARGET_SATURATION = 1.0
MUTED_TARGET_SATURATION = 0.3

ALPHA_OPAQUE_MIN = 128
SHRINK_FIRST_MODES = {"RGB", "RGBA", "L", "LA"}


@dataclass(frozen=True)
class Swatch:
    """One representative color of a quantized palette."""
    hex: str
    rgb: Tuple[int, int, int]
    population: int
    saturation: float  # HLS saturation [0, 1]
    lightness: float   # HLS lightness [0, 1]


@dataclass(frozen=True)
class Palette:
    """Quantized palette with its labelled swatches."""
    swatches: List[Swatch] = field(default_factory=list)
    vibrant: Optional[Swatch] = None
    muted: Optional[Swatch] = None


class PaletteQuantizer(ABC):
    """Turns encoded image bytes into a labelled palette."""

    @abstractmethod
    def extract_palette(self, image_bytes: bytes) -> Palette:
        """
        Raises:
            ValueError: If the image cannot be decoded or has no usable pixels
        """


def decode_image_pixels(image_bytes: bytes, max_edge: int = 64) -> np.ndarray:
    """
    Decode an image and return its opaque pixels.

    Args:
        image_bytes: Encoded image (ICO, PNG, JPEG, GIF, WebP, BMP)
        max_edge: Long edge the image is downscaled to before sampling

    Returns:
        RGB pixels array (N, 3) uint8

    Raises:
        ValueError: If decoding fails or every pixel is transparent
    """
    try:
        image = Image.open(BytesIO(image_bytes))
        # JPEG decoders can scale down while decoding
        image.draft("RGB", (max_edge, max_edge))
        image.load()
    except Exception as e:
        raise ValueError(f"Failed to decode image: {e}") from e

    if image.format and image.format not in config.SUPPORTED_IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format: {image.format}")

    # Palette and bilevel modes only resample with NEAREST, so expand them first
    if image.mode not in SHRINK_FIRST_MODES:
        image = image.convert("RGBA")
    image.thumbnail((max_edge, max_edge), Image.LANCZOS)
    image = image.convert("RGBA")

    rgba = np.asarray(image, dtype=np.uint8).reshape(-1, 4)
    pixels = rgba[rgba[:, 3] >= ALPHA_OPAQUE_MIN][:, :3]

    if pixels.shape[0] == 0:
        raise ValueError("Image has no opaque pixels")

    logger.debug(f"Decoded {image.size[0]}x{image.size[1]} image, {pixels.shape[0]} opaque pixels")
    return pixels


def _to_swatches(centers: np.ndarray, counts: np.ndarray) -> List[Swatch]:
    """Build swatches from RGB centers, most populous first."""
    centers = np.clip(centers, 0, 255).astype(np.uint8)
    hls = cv2.cvtColor(centers.reshape(-1, 1, 3), cv2.COLOR_RGB2HLS).reshape(-1, 3)

    swatches = []
    for center, (_, lightness, saturation), count in zip(centers, hls, counts):
        if count <= 0:
            continue
        swatches.append(Swatch(
            hex=rgb_to_hex(center),
            rgb=tuple(int(c) for c in center),
            population=int(count),
            saturation=float(saturation) / 255.0,
            lightness=float(lightness) / 255.0
        ))

    swatches.sort(key=lambda s: -s.population)
    return swatches


def cluster_swatches(pixels_rgb_u8: np.ndarray, k: int = 6, rng_seed: int = 42) -> List[Swatch]:
    """
    Quantize pixels into at most ``k`` swatches.

    Images with no more than ``k`` distinct colors (typical for icons) use
    the distinct colors directly; otherwise MiniBatchKMeans clusters them.

    Raises:
        ValueError: If there are no pixels
        RuntimeError: If clustering fails
    """
    if pixels_rgb_u8.size == 0:
        raise ValueError("No pixels to cluster")

    unique_colors, unique_counts = np.unique(pixels_rgb_u8, axis=0, return_counts=True)
    if len(unique_colors) <= k:
        logger.debug(f"Using {len(unique_colors)} distinct colors without clustering")
        return _to_swatches(unique_colors, unique_counts)

    try:
        kmeans = MiniBatchKMeans(
            n_clusters=k,
            random_state=rng_seed,
            batch_size=min(2048, len(pixels_rgb_u8)),
            n_init="auto",
            max_iter=100
        )
        labels = kmeans.fit_predict(pixels_rgb_u8.astype(np.float32))
    except Exception as e:
        logger.error(f"Clustering failed: {str(e)}")
        raise RuntimeError(f"K-means clustering failed: {str(e)}") from e

    counts = np.bincount(labels, minlength=k)
    return _to_swatches(kmeans.cluster_centers_, counts)


def _score(swatch: Swatch, target_saturation: float, max_population: int) -> float:
    saturation_score = 1.0 - abs(swatch.saturation - target_saturation)
    lightness_score = 1.0 - abs(swatch.lightness - TARGET_LIGHTNESS)
    population_score = swatch.population / max_population if max_population else 0.0
    total = WEIGHT_SATURATION + WEIGHT_LIGHTNESS + WEIGHT_POPULATION
    return (saturation_score * WEIGHT_SATURATION +
            lightness_score * WEIGHT_LIGHTNESS +
            population_score * WEIGHT_POPULATION) / total


def _in_lightness_band(swatch: Swatch) -> bool:
    return config.MIN_LIGHTNESS <= swatch.lightness <= config.MAX_LIGHTNESS


def select_vibrant(swatches: List[Swatch]) -> Optional[Swatch]:
    """Most saturated mid-lightness swatch, or None."""
    candidates = [s for s in swatches
                  if s.saturation >= config.VIBRANT_MIN_SATURATION and _in_lightness_band(s)]
    if not candidates:
        return None
    max_population = max(s.population for s in swatches)
    return max(candidates, key=lambda s: _score(s, VIBRANT_TARGET_SATURATION, max_population))


def select_muted(swatches: List[Swatch], exclude: Optional[Swatch] = None) -> Optional[Swatch]:
    """Desaturated mid-lightness swatch, or None."""
    candidates = [s for s in swatches
                  if s is not exclude
                  and s.saturation <= config.MUTED_MAX_SATURATION and _in_lightness_band(s)]
    if not candidates:
        return None
    max_population = max(s.population for s in swatches)
    return max(candidates, key=lambda s: _score(s, MUTED_TARGET_SATURATION, max_population))


class KMeansPaletteQuantizer(PaletteQuantizer):
    """Default quantizer: Pillow decode + MiniBatchKMeans clustering."""

    def __init__(self, k: Optional[int] = None, max_edge: Optional[int] = None,
                 rng_seed: Optional[int] = None):
        self.k = k or config.PALETTE_K
        self.max_edge = max_edge or config.PALETTE_MAX_EDGE
        self.rng_seed = config.PALETTE_RNG_SEED if rng_seed is None else rng_seed

    def extract_palette(self, image_bytes: bytes) -> Palette:
        pixels = decode_image_pixels(image_bytes, max_edge=self.max_edge)
        swatches = cluster_swatches(pixels, k=self.k, rng_seed=self.rng_seed)
        vibrant = select_vibrant(swatches)
        muted = select_muted(swatches, exclude=vibrant)

        logger.info(f"Palette: {[s.hex for s in swatches]} "
                    f"vibrant={vibrant.hex if vibrant else None} "
                    f"muted={muted.hex if muted else None}")
        return Palette(swatches=swatches, vibrant=vibrant, muted=muted)


class ImagePaletteExtractor:
    """Fetches an image and reduces it to primary/secondary hex candidates."""

    def __init__(self, fetcher=None, quantizer: Optional[PaletteQuantizer] = None):
        self.fetcher = fetcher or HttpFetcher()
        self.quantizer = quantizer or KMeansPaletteQuantizer()

    def extract_from_image(self, url: str, deadline: Optional[Deadline] = None) -> Dict[str, str]:
        """
        Extract a vibrant/muted color pair from the image at ``url``.

        Returns:
            ``{"primary", "secondary"}`` when both swatches exist, ``{"primary"}``
            when only a vibrant swatch exists, otherwise ``{}``. Never raises.
        """
        metrics = get_metrics()
        try:
            image_bytes = self.fetcher.fetch_bytes(url, deadline=deadline)
        except FetchError as e:
            logger.warning(f"Failed to fetch image {url}: {e}")
            metrics.increment_failure_count("image_fetch")
            return {}

        try:
            palette = self.quantizer.extract_palette(image_bytes)
        except Exception as e:
            logger.warning(f"Failed to extract colors from image {url}: {e}")
            metrics.increment_failure_count("image_decode")
            return {}

        if palette.vibrant and palette.muted:
            return {"primary": palette.vibrant.hex, "secondary": palette.muted.hex}
        if palette.vibrant:
            return {"primary": palette.vibrant.hex}
        return {}
