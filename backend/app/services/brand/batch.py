"""
Batch brand color seeding.

Resolves colors for a list of brands one after another, pacing requests
through a rate limiter, and hands every non-empty result to a caller
supplied persistence callback. Storage is owned by the caller.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from app.config import config
from app.schemas import BrandColorResult
from app.services.brand.resolver import BrandColorResolver, get_resolver
from app.services.security.rate_limiter import TokenBucketRateLimiter
from app.utils.ids import generate_request_id
from app.utils.logging import get_logger

PersistCallback = Callable[["SeedBrand", BrandColorResult], None]


@dataclass(frozen=True)
class SeedBrand:
    """Brand to resolve colors for."""
    name: str
    domain: str


@dataclass
class BatchSummary:
    """Tallies for one seeding run."""
    batch_id: str
    total: int = 0
    with_colors: int = 0
    without_colors: int = 0
    persist_failed: int = 0
    duration_s: float = 0.0
    failed_brands: List[str] = field(default_factory=list)


def seed_brand_colors(brands: Iterable[SeedBrand],
                      persist: PersistCallback,
                      resolver: Optional[BrandColorResolver] = None,
                      limiter: Optional[TokenBucketRateLimiter] = None) -> BatchSummary:
    """
    Resolve and persist colors for each brand in order.

    Args:
        brands: Brands to process
        persist: Called with ``(brand, result)`` for results with at least one color
        resolver: Resolver to use (default resolver if omitted)
        limiter: Paces resolutions; defaults to one per ``BATCH_INTERVAL_S``

    Returns:
        BatchSummary for the run
    """
    resolver = resolver or get_resolver()
    limiter = limiter or TokenBucketRateLimiter.fixed_interval(config.BATCH_INTERVAL_S)
    summary = BatchSummary(batch_id=generate_request_id("seed"))
    log = get_logger().bind(batch_id=summary.batch_id)
    start_time = time.time()

    log.info("Starting brand color seeding")

    for brand in brands:
        summary.total += 1
        limiter.acquire()

        result = resolver.resolve(brand.domain)
        extra = {"brand": brand.name, "domain": brand.domain}

        if result.is_empty:
            summary.without_colors += 1
            log.info(f"Seeded brand {brand.name} (no colors detected)", extra=extra)
            continue

        try:
            persist(brand, result)
        except Exception as e:
            summary.persist_failed += 1
            summary.failed_brands.append(brand.name)
            log.warning(f"Failed to persist colors for {brand.name}: {e}", extra=extra)
            continue

        summary.with_colors += 1
        log.info(f"Seeded brand {brand.name}: {result.primary or 'N/A'}, {result.secondary or 'N/A'}",
                 extra=extra)

    summary.duration_s = time.time() - start_time
    log.info(f"Brand color seeding finished: {summary.with_colors}/{summary.total} with colors",
             extra={"duration_s": round(summary.duration_s, 2)})
    return summary
