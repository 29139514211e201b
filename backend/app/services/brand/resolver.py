"""
Brand Color Resolution Orchestrator

Derives a primary/secondary brand color pair from nothing but a domain:

1. fetch ``https://{domain}``
2. read color hints from meta tags
3. normalize the raw tokens
4. fill gaps from the favicon palette
5. derive a secondary from the primary if still missing

Every stage degrades to "field absent"; ``resolve`` never raises.
"""
import time
from typing import Optional

from app.config import config
from app.schemas import BrandColorResult
from app.services.brand.http import HttpFetcher
from app.services.brand.meta import MetaHints, extract_meta_hints
from app.services.colors.derive import derive_secondary
from app.services.colors.normalize import normalize_color, is_hex_color
from app.services.colors.palette import ImagePaletteExtractor
from app.services.reliability import Deadline, DeadlineExceeded, FetchError
from app.utils.ids import generate_request_id
from app.utils.logging import get_logger
from app.utils.metrics import get_metrics


class _ColorAccumulator:
    """Mutable primary/secondary slots filled stage by stage."""

    def __init__(self):
        self.primary: Optional[str] = None
        self.secondary: Optional[str] = None
        self.sources = {}

    @property
    def complete(self) -> bool:
        return self.primary is not None and self.secondary is not None

    def offer(self, slot: str, value: Optional[str], source: str) -> bool:
        """Fill an empty slot with a valid hex value; returns True if taken."""
        if value is None or getattr(self, slot) is not None:
            return False
        if not is_hex_color(value):
            return False
        setattr(self, slot, value)
        self.sources[slot] = source
        return True

    def freeze(self) -> BrandColorResult:
        return BrandColorResult(primary=self.primary, secondary=self.secondary)


class BrandColorResolver:
    """Resolves brand colors for a domain. Stateless between calls."""

    def __init__(self,
                 fetcher: Optional[HttpFetcher] = None,
                 palette_extractor: Optional[ImagePaletteExtractor] = None,
                 secondary_factor: Optional[float] = None):
        self.fetcher = fetcher or HttpFetcher()
        self.palette_extractor = palette_extractor or ImagePaletteExtractor(fetcher=self.fetcher)
        self.secondary_factor = config.SECONDARY_FACTOR if secondary_factor is None else secondary_factor
        if not config.validate_factor(self.secondary_factor):
            raise ValueError(f"secondary_factor must be in (0, 1], got {self.secondary_factor}")

    def resolve(self, domain: str, deadline: Optional[Deadline] = None) -> BrandColorResult:
        """
        Resolve the brand color pair for ``domain``.

        Args:
            domain: Bare hostname, e.g. ``"nike.com"``
            deadline: Optional cap on the total time spent on outbound requests

        Returns:
            BrandColorResult with whichever fields could be determined
        """
        log = get_logger()
        metrics = get_metrics()
        resolution_id = generate_request_id()
        extra = {"domain": domain, "resolution_id": resolution_id}
        start_time = time.time()
        colors = _ColorAccumulator()

        metrics.increment_resolution_count()
        log.info(f"Resolving colors for {domain}", extra=extra)

        try:
            html = self._fetch_homepage(domain, deadline, extra)
            if html is not None:
                hints = extract_meta_hints(html, domain)
                self._apply_meta_hints(colors, hints)

                if not colors.complete and hints.favicon_url:
                    self._apply_favicon_palette(colors, hints.favicon_url, deadline, extra)

                if colors.primary and not colors.secondary:
                    colors.offer("secondary", derive_secondary(colors.primary, self.secondary_factor),
                                 "derived")

        except Exception as e:
            # Keep whatever was accumulated before the failure
            log.error(f"Unexpected error resolving colors for {domain}: {e}", extra=extra)
            metrics.increment_failure_count("unexpected")

        finally:
            metrics.record_timing("resolve", (time.time() - start_time) * 1000)

        result = colors.freeze()
        for source in colors.sources.values():
            metrics.increment_source_count(source)
        if result.is_empty:
            metrics.increment_empty_count()

        log.info(f"Colors resolved for {domain}: {result.as_dict()}",
                 extra={**extra, "sources": colors.sources})
        return result

    def _fetch_homepage(self, domain: str, deadline: Optional[Deadline], extra: dict) -> Optional[str]:
        log = get_logger()
        metrics = get_metrics()
        with metrics.timed("page_fetch"):
            try:
                return self.fetcher.fetch_text(f"https://{domain}", deadline=deadline)
            except DeadlineExceeded as e:
                log.warning(f"Deadline exceeded for {domain}: {e}", extra=extra)
                metrics.increment_failure_count("deadline")
            except FetchError as e:
                log.warning(f"Failed to resolve colors for {domain}: {e}", extra=extra)
                metrics.increment_failure_count("page_fetch")
        return None

    def _apply_meta_hints(self, colors: _ColorAccumulator, hints: MetaHints) -> None:
        if hints.primary_token:
            colors.offer("primary", normalize_color(hints.primary_token), "meta")
        if hints.secondary_token and not hints.secondary_is_favicon:
            colors.offer("secondary", normalize_color(hints.secondary_token), "meta")

    def _apply_favicon_palette(self, colors: _ColorAccumulator, favicon_url: str,
                               deadline: Optional[Deadline], extra: dict) -> None:
        metrics = get_metrics()
        with metrics.timed("favicon_palette"):
            try:
                image_colors = self.palette_extractor.extract_from_image(favicon_url, deadline=deadline)
            except Exception as e:
                get_logger().error(f"Favicon palette failed for {favicon_url}: {e}", extra=extra)
                metrics.increment_failure_count("unexpected")
                return

        colors.offer("primary", image_colors.get("primary"), "favicon")
        colors.offer("secondary", image_colors.get("secondary"), "favicon")
        get_logger().debug(f"Favicon palette {favicon_url}: {image_colors}", extra=extra)


_default_resolver: Optional[BrandColorResolver] = None


def get_resolver() -> BrandColorResolver:
    """Get or create the default resolver instance."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = BrandColorResolver()
    return _default_resolver


def resolve_brand_colors(domain: str, deadline: Optional[Deadline] = None) -> BrandColorResult:
    """Resolve brand colors for ``domain`` with the default resolver."""
    return get_resolver().resolve(domain, deadline=deadline)
