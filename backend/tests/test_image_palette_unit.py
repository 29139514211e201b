"""
Unit tests for image palette extraction.

Tests the palette pipeline components:
- image decoding with transparency filtering
- swatch quantization (distinct colors and MiniBatchKMeans)
- vibrant/muted swatch selection
- extractor failure handling
"""

from io import BytesIO
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from app.services.colors.palette import (
    ImagePaletteExtractor, KMeansPaletteQuantizer, Palette, PaletteQuantizer, Swatch,
    cluster_swatches, decode_image_pixels, select_muted, select_vibrant
)
from app.services.reliability import FetchError
from app.utils.metrics import get_metrics


def encode_image(array: np.ndarray, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.fromarray(array.astype(np.uint8)).save(buffer, format=fmt)
    return buffer.getvalue()


def red_and_gray_icon(size: int = 32) -> bytes:
    img = np.zeros((size, size, 3), dtype=np.uint8)
    img[:, : size // 2] = (255, 0, 0)
    img[:, size // 2:] = (128, 128, 128)
    return encode_image(img)


def swatch(hex_color: str, rgb, saturation: float, lightness: float, population: int = 100) -> Swatch:
    return Swatch(hex=hex_color, rgb=tuple(rgb), population=population,
                  saturation=saturation, lightness=lightness)


class FakeFetcher:
    """Serves fixed bytes or raises FetchError."""

    def __init__(self, payload: bytes = b"", error: Exception = None):
        self.payload = payload
        self.error = error
        self.urls = []

    def fetch_bytes(self, url, deadline=None, **kwargs):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.payload


class FixedQuantizer(PaletteQuantizer):
    """Returns a fixed palette regardless of input."""

    def __init__(self, palette: Palette):
        self.palette = palette

    def extract_palette(self, image_bytes: bytes) -> Palette:
        return self.palette


class TestDecodeImagePixels:
    """Test image decoding"""

    def test_decode_png(self):
        pixels = decode_image_pixels(red_and_gray_icon(16), max_edge=16)
        assert pixels.shape == (256, 3)
        assert pixels.dtype == np.uint8

    def test_downscales_to_max_edge(self):
        img = np.full((128, 64, 3), 200, dtype=np.uint8)
        pixels = decode_image_pixels(encode_image(img), max_edge=32)
        assert pixels.shape[0] == 32 * 16

    def test_large_rgb_image_shrunk_before_rgba_conversion(self):
        img = np.full((1024, 768, 3), (10, 120, 200), dtype=np.uint8)
        converted_sizes = []
        original_convert = Image.Image.convert

        def recording_convert(self, *args, **kwargs):
            converted_sizes.append(self.size)
            return original_convert(self, *args, **kwargs)

        with patch.object(Image.Image, "convert", recording_convert):
            pixels = decode_image_pixels(encode_image(img), max_edge=64)

        assert pixels.shape == (64 * 48, 3)
        assert converted_sizes
        assert all(max(size) <= 64 for size in converted_sizes)

    def test_large_jpeg_decoded_at_reduced_scale(self):
        img = np.full((800, 800, 3), (200, 30, 30), dtype=np.uint8)
        pixels = decode_image_pixels(encode_image(img, fmt="JPEG"), max_edge=64)
        assert pixels.shape == (64 * 64, 3)

    def test_palette_mode_image(self):
        image = Image.new("RGB", (20, 20), (255, 0, 0)).convert("P")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        pixels = decode_image_pixels(buffer.getvalue(), max_edge=10)
        assert pixels.shape == (100, 3)
        assert np.all(pixels == [255, 0, 0])

    def test_transparent_pixels_dropped(self):
        img = np.zeros((10, 10, 4), dtype=np.uint8)
        img[:5, :, :] = (0, 0, 255, 255)
        pixels = decode_image_pixels(encode_image(img), max_edge=10)
        assert pixels.shape[0] == 50
        assert np.all(pixels == [0, 0, 255])

    def test_fully_transparent_rejected(self):
        img = np.zeros((8, 8, 4), dtype=np.uint8)
        with pytest.raises(ValueError):
            decode_image_pixels(encode_image(img))

    def test_ico_decodes(self):
        img = np.zeros((16, 16, 3), dtype=np.uint8)
        img[:, :] = (0, 128, 255)
        pixels = decode_image_pixels(encode_image(img, fmt="ICO"), max_edge=16)
        assert pixels.shape[1] == 3

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            decode_image_pixels(b"<svg xmlns='http://www.w3.org/2000/svg'></svg>")


class TestClusterSwatches:
    """Test palette quantization"""

    def test_few_colors_used_directly(self):
        pixels = np.array([[255, 0, 0]] * 30 + [[128, 128, 128]] * 10, dtype=np.uint8)
        swatches = cluster_swatches(pixels, k=6)
        assert [s.hex for s in swatches] == ["#FF0000", "#808080"]
        assert swatches[0].population == 30

    def test_kmeans_limits_swatch_count(self):
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, size=(2000, 3), dtype=np.uint8)
        swatches = cluster_swatches(pixels, k=4, rng_seed=42)
        assert 1 <= len(swatches) <= 4
        assert sum(s.population for s in swatches) == 2000
        for s in swatches:
            assert s.hex.startswith("#") and len(s.hex) == 7
            assert 0.0 <= s.saturation <= 1.0
            assert 0.0 <= s.lightness <= 1.0

    def test_kmeans_deterministic(self):
        rng = np.random.default_rng(1)
        pixels = rng.integers(0, 256, size=(1000, 3), dtype=np.uint8)
        first = [s.hex for s in cluster_swatches(pixels, k=5, rng_seed=7)]
        second = [s.hex for s in cluster_swatches(pixels, k=5, rng_seed=7)]
        assert first == second

    def test_empty_pixels_rejected(self):
        with pytest.raises(ValueError):
            cluster_swatches(np.zeros((0, 3), dtype=np.uint8))


class TestSwatchSelection:
    """Test vibrant/muted selection"""

    def test_vibrant_prefers_saturated(self):
        swatches = [
            swatch("#808080", (128, 128, 128), 0.0, 0.5, population=500),
            swatch("#FF0000", (255, 0, 0), 1.0, 0.5, population=50),
        ]
        assert select_vibrant(swatches).hex == "#FF0000"

    def test_vibrant_requires_mid_lightness(self):
        swatches = [swatch("#FFCCCC", (255, 204, 204), 1.0, 0.9)]
        assert select_vibrant(swatches) is None

    def test_muted_prefers_desaturated(self):
        red = swatch("#FF0000", (255, 0, 0), 1.0, 0.5)
        slate = swatch("#5A6B7C", (90, 107, 124), 0.16, 0.42)
        assert select_muted([red, slate], exclude=red).hex == "#5A6B7C"

    def test_muted_excludes_vibrant(self):
        only = swatch("#7F8C99", (127, 140, 153), 0.38, 0.55)
        assert select_muted([only], exclude=only) is None

    def test_quantizer_labels_red_and_gray(self):
        palette = KMeansPaletteQuantizer(k=6, max_edge=32).extract_palette(red_and_gray_icon())
        assert palette.vibrant.hex == "#FF0000"
        assert palette.muted.hex == "#808080"


class TestImagePaletteExtractor:
    """Test extractor contract"""

    def test_vibrant_and_muted(self):
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(red_and_gray_icon()))
        assert extractor.extract_from_image("https://example.com/favicon.ico") == {
            "primary": "#FF0000", "secondary": "#808080"
        }

    def test_vibrant_only(self):
        img = np.zeros((16, 16, 3), dtype=np.uint8)
        img[:, :] = (0, 0, 255)
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(encode_image(img)))
        assert extractor.extract_from_image("https://example.com/i.png") == {"primary": "#0000FF"}

    def test_no_usable_swatch(self):
        img = np.full((16, 16, 3), 255, dtype=np.uint8)
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(encode_image(img)))
        assert extractor.extract_from_image("https://example.com/white.png") == {}

    def test_undecodable_image(self):
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(b"not an image"))
        assert extractor.extract_from_image("https://example.com/favicon.ico") == {}
        assert get_metrics().get_counters()["brand_failed_total_image_decode"] == 1

    def test_fetch_failure(self):
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(error=FetchError("HTTP 404")))
        assert extractor.extract_from_image("https://example.com/favicon.ico") == {}
        assert get_metrics().get_counters()["brand_failed_total_image_fetch"] == 1

    def test_quantizer_failure_is_swallowed(self):
        class Exploding(PaletteQuantizer):
            def extract_palette(self, image_bytes):
                raise RuntimeError("boom")

        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(b"x"), quantizer=Exploding())
        assert extractor.extract_from_image("https://example.com/i.png") == {}

    def test_fake_quantizer_seam(self):
        palette = Palette(
            swatches=[],
            vibrant=swatch("#123456", (18, 52, 86), 0.65, 0.2),
            muted=swatch("#654321", (101, 67, 33), 0.5, 0.26),
        )
        extractor = ImagePaletteExtractor(fetcher=FakeFetcher(b"ignored"),
                                          quantizer=FixedQuantizer(palette))
        assert extractor.extract_from_image("https://example.com/i.png") == {
            "primary": "#123456", "secondary": "#654321"
        }
