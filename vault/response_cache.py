"""
Answer cache for AI Explain responses.

Key: normalized question + headings of the excerpts it was answered from, so
the same question against a changed set of sections is a different entry.
"""

import logging
from typing import Iterable, Optional

from .stores import InMemoryStore, TimestampedStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
DEFAULT_MAX_ENTRIES = 100


def make_cache_key(question: str, headings: Iterable[str]) -> str:
    """
    Examples:
        >>> make_cache_key("  What is the FEE? ", ["SECTION 1", "SECTION 3"])
        'what is the fee?::SECTION 1|SECTION 3'
    """
    return f"{question.lower().strip()}::{'|'.join(headings)}"


class ResponseCache:
    """TTL cache of answers; expired entries are swept once size exceeds max_entries"""
    
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        store: Optional[TimestampedStore] = None
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.store = store if store is not None else InMemoryStore()
    
    def get(self, key: str) -> Optional[str]:
        entry = self.store.get(key)
        if entry is None:
            return None
        if self.store.age(entry) >= self.ttl_seconds:
            return None
        return entry.value
    
    def put(self, key: str, answer: str) -> None:
        self.store.set(key, answer)
        if len(self.store) > self.max_entries:
            removed = self.store.prune(self.ttl_seconds)
            logger.debug(f"Answer cache over {self.max_entries} entries, pruned {removed} expired")
    
    def __len__(self) -> int:
        return len(self.store)
