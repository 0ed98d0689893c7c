# core/rate_limiter.py
"""
Sliding-window rate limiting for form submissions

Each submission kind gets its own quota and its own counter namespace. The
counting itself is delegated to the `limits` moving-window strategy (the engine
behind Flask-Limiter) over Redis, so coordination between concurrent workers
happens in the counter store, not in this process.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Any

from limits import RateLimitItemPerHour
from limits.storage import Storage, storage_from_string
from limits.strategies import MovingWindowRateLimiter
from werkzeug.datastructures import Headers

logger = logging.getLogger(__name__)

UNKNOWN_CALLER = 'unknown'


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Per-request allow/deny decision with quota state

    Attributes:
        allowed: Whether the caller may proceed
        limit: Requests allowed per window
        remaining: Requests left in the current window
        reset_at: Epoch milliseconds at which the window frees a slot
    """
    allowed: bool
    limit: int
    remaining: int
    reset_at: int


def get_client_ip(headers: Mapping[str, str]) -> str:
    """
    Derive the caller identity from proxy headers

    Uses the first entry of X-Forwarded-For, then X-Real-IP, then falls back
    to the "unknown" sentinel, which is rate limited like any other caller.
    Header names match case-insensitively.
    """
    if not isinstance(headers, Headers):
        headers = Headers(headers)

    forwarded = headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()

    real_ip = headers.get('X-Real-IP')
    if real_ip:
        return real_ip

    return UNKNOWN_CALLER


class SlidingWindowRateLimiter:
    """
    Rolling one-hour quota for a single submission kind
    """

    def __init__(self, storage: Storage, limit: int, prefix: str):
        """
        Args:
            storage: Shared `limits` storage backend
            limit: Requests allowed per caller per rolling hour
            prefix: Counter namespace, unique per submission kind
        """
        self.storage = storage
        self.item = RateLimitItemPerHour(limit)
        self.prefix = prefix
        self._strategy = MovingWindowRateLimiter(storage)

    @property
    def limit(self) -> int:
        return self.item.amount

    def check(self, caller_id: str) -> RateLimitDecision:
        """
        Count one request for the caller and decide whether it may proceed

        Args:
            caller_id: Identity derived from network address headers

        Returns:
            RateLimitDecision for this request
        """
        allowed = self._strategy.hit(self.item, self.prefix, caller_id)
        reset_time, remaining = self._strategy.get_window_stats(self.item, self.prefix, caller_id)

        return RateLimitDecision(
            allowed=allowed,
            limit=self.limit,
            remaining=max(int(remaining), 0),
            reset_at=int(reset_time * 1000)
        )


def create_rate_limit_storage(storage_url: Optional[str],
                              options: Optional[Dict[str, Any]] = None) -> Optional[Storage]:
    """
    Build the counter store, or None when rate limiting is not configured
    """
    if not storage_url:
        logger.info("Rate limit storage not configured, submissions will not be rate limited")
        return None

    storage = storage_from_string(storage_url, **(options or {}))
    logger.info(f"Rate limit storage configured: {storage_url.split('@')[-1]}")
    return storage


def build_rate_limiters(storage: Optional[Storage],
                        quotas: Mapping[str, int]) -> Dict[str, SlidingWindowRateLimiter]:
    """
    Create one limiter per submission kind

    Args:
        storage: Counter store; None disables rate limiting
        quotas: Requests per hour keyed by submission kind

    Returns:
        Limiters keyed by submission kind (empty when disabled)
    """
    if storage is None:
        return {}

    return {
        kind: SlidingWindowRateLimiter(storage, limit, prefix=f"ratelimit:{kind}")
        for kind, limit in quotas.items()
    }
