"""
Per-caller rate limiting for AI Explain requests.

Two strategies over a TimestampedStore:
- FixedWindowRateLimiter: counter per caller, window starts at first request
- SlidingWindowRateLimiter: request timestamps per caller over the last window

The search core never depends on a limiter; only collaborator calls are gated.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

from .stores import InMemoryStore, TimestampedStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_WINDOW_SECONDS = 3600
PRUNE_THRESHOLD = 10000  # tracked callers before stale entries are swept


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_in: int = 0  # seconds until a request is allowed again (denied only)


def client_identity(headers: Mapping[str, str]) -> str:
    """
    Caller identity from proxy headers.
    
    First X-Forwarded-For hop, then X-Real-IP, else "unknown".
    `headers` must do case-insensitive lookup (Starlette Headers does).
    """
    forwarded = headers.get("x-forwarded-for") or ""
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    return headers.get("x-real-ip") or "unknown"


class RateLimiter(ABC):
    """Quota of `limit` requests per `window_seconds` per caller"""
    
    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        store: Optional[TimestampedStore] = None
    ):
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")
        self.limit = limit
        self.window_seconds = window_seconds
        self.store = store if store is not None else InMemoryStore()
    
    def check(self, identity: str) -> RateLimitDecision:
        """Record a request from identity and decide whether it may proceed"""
        if len(self.store) > PRUNE_THRESHOLD:
            removed = self.store.prune(self.window_seconds)
            logger.debug(f"Pruned {removed} idle rate-limit entries")
        
        decision = self._check(identity, self.store.clock())
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {identity}, reset in {decision.reset_in}s")
        return decision
    
    @abstractmethod
    def _check(self, identity: str, now: float) -> RateLimitDecision:
        pass
    
    def _reset_in(self, window_start: float, now: float) -> int:
        return max(1, math.ceil(window_start + self.window_seconds - now))


class FixedWindowRateLimiter(RateLimiter):
    """Store value: request count; entry timestamp: window start"""
    
    def _check(self, identity: str, now: float) -> RateLimitDecision:
        entry = self.store.get(identity)
        
        if entry is None or now - entry.timestamp > self.window_seconds:
            self.store.set(identity, 1, timestamp=now)
            return RateLimitDecision(allowed=True, remaining=self.limit - 1)
        
        if entry.value >= self.limit:
            return RateLimitDecision(
                allowed=False,
                remaining=0,
                reset_in=self._reset_in(entry.timestamp, now)
            )
        
        count = entry.value + 1
        self.store.set(identity, count, timestamp=entry.timestamp)
        return RateLimitDecision(allowed=True, remaining=self.limit - count)


class SlidingWindowRateLimiter(RateLimiter):
    """Store value: tuple of request times within the window"""
    
    def _check(self, identity: str, now: float) -> RateLimitDecision:
        entry = self.store.get(identity)
        recent = tuple(
            t for t in (entry.value if entry else ())
            if now - t < self.window_seconds
        )
        
        if len(recent) >= self.limit:
            self.store.set(identity, recent, timestamp=recent[-1])
            return RateLimitDecision(
                allowed=False,
                remaining=0,
                reset_in=self._reset_in(recent[0], now)
            )
        
        recent = recent + (now,)
        self.store.set(identity, recent, timestamp=now)
        return RateLimitDecision(allowed=True, remaining=self.limit - len(recent))


def create_rate_limiter(
    strategy: str = "fixed",
    limit: int = DEFAULT_LIMIT,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    store: Optional[TimestampedStore] = None
) -> RateLimiter:
    """Build a limiter by strategy name ("fixed" | "sliding")"""
    strategies = {
        "fixed": FixedWindowRateLimiter,
        "sliding": SlidingWindowRateLimiter,
    }
    if strategy not in strategies:
        raise ValueError(f"Unknown rate limit strategy: {strategy}. Valid options: fixed, sliding")
    return strategies[strategy](limit=limit, window_seconds=window_seconds, store=store)
