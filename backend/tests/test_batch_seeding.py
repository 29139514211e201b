"""
Tests for batch brand color seeding.
"""

from dataclasses import fields

from app.schemas import BrandColorResult
from app.services.brand.batch import SeedBrand, seed_brand_colors
from app.services.security.rate_limiter import TokenBucketRateLimiter


class StubResolver:
    """Returns canned results per domain."""

    def __init__(self, results):
        self.results = results
        self.domains = []

    def resolve(self, domain, deadline=None):
        self.domains.append(domain)
        return self.results.get(domain, BrandColorResult())


class CountingLimiter:
    def __init__(self):
        self.acquired = 0

    def acquire(self):
        self.acquired += 1
        return 0.0


BRANDS = [
    SeedBrand(name="Nike", domain="nike.com"),
    SeedBrand(name="Sephora", domain="sephora.com"),
    SeedBrand(name="Offline", domain="offline.invalid"),
]

RESULTS = {
    "nike.com": BrandColorResult(primary="#111111", secondary="#0E0E0E"),
    "sephora.com": BrandColorResult(primary="#000000"),
}


def test_persists_only_non_empty_results():
    persisted = []
    resolver = StubResolver(RESULTS)
    limiter = CountingLimiter()

    summary = seed_brand_colors(BRANDS, lambda brand, result: persisted.append((brand.name, result)),
                                resolver=resolver, limiter=limiter)

    assert resolver.domains == ["nike.com", "sephora.com", "offline.invalid"]
    assert [name for name, _ in persisted] == ["Nike", "Sephora"]
    assert persisted[0][1].as_dict() == {"primary": "#111111", "secondary": "#0E0E0E"}
    assert summary.total == 3
    assert summary.with_colors == 2
    assert summary.without_colors == 1
    assert summary.batch_id.startswith("seed-")


def test_every_resolution_goes_through_limiter():
    limiter = CountingLimiter()
    seed_brand_colors(BRANDS, lambda b, r: None, resolver=StubResolver(RESULTS), limiter=limiter)
    assert limiter.acquired == len(BRANDS)


def test_persist_failure_does_not_stop_batch():
    def persist(brand, result):
        if brand.name == "Nike":
            raise RuntimeError("db down")

    summary = seed_brand_colors(BRANDS, persist, resolver=StubResolver(RESULTS),
                                limiter=CountingLimiter())
    assert summary.persist_failed == 1
    assert summary.failed_brands == ["Nike"]
    assert summary.with_colors == 1
    assert summary.total == 3


def test_default_spacing_is_one_second_between_brands():
    now = [0.0]
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        now[0] += seconds

    limiter = TokenBucketRateLimiter.fixed_interval(1.0, clock=lambda: now[0], sleep=sleep)
    seed_brand_colors(BRANDS, lambda b, r: None, resolver=StubResolver(RESULTS), limiter=limiter)

    assert sum(sleeps) == 2.0
    assert now[0] == 2.0


def test_empty_batch():
    summary = seed_brand_colors([], lambda b, r: None, resolver=StubResolver({}),
                                limiter=CountingLimiter())
    assert summary.total == 0
    assert summary.with_colors == 0


def test_seed_brand_carries_only_name_and_domain():
    assert [f.name for f in fields(SeedBrand)] == ["name", "domain"]
    assert SeedBrand("Nike", "nike.com") == SeedBrand(name="Nike", domain="nike.com")
