"""
Outbound traffic controls for batch resolution.
"""

from .rate_limiter import RateLimit, RateLimitStatus, TokenBucketRateLimiter

__all__ = [
    'RateLimit', 'RateLimitStatus', 'TokenBucketRateLimiter'
]
