"""
Timestamped key-value stores backing the document cache, rate limiter and
answer cache.

Every entry is (timestamp, value). Consumers decide what "expired" means, so
the store never evicts on its own. InMemoryStore is per-process and resets on
restart; a deployment needing shared state across instances implements
TimestampedStore over Redis, a database, etc.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

Clock = Callable[[], float]


@dataclass(frozen=True)
class StoreEntry:
    timestamp: float  # seconds since epoch (clock units)
    value: Any


class TimestampedStore(ABC):
    """Key -> (timestamp, value) storage interface"""
    
    def __init__(self, clock: Clock = time.time):
        self.clock = clock
    
    @abstractmethod
    def get(self, key: str) -> Optional[StoreEntry]:
        """Return entry for key, or None"""
        pass
    
    @abstractmethod
    def set(self, key: str, value: Any, timestamp: Optional[float] = None) -> StoreEntry:
        """Store value under key, stamped with timestamp (default: now)"""
        pass
    
    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key; True if it existed"""
        pass
    
    @abstractmethod
    def items(self) -> Iterator[Tuple[str, StoreEntry]]:
        pass
    
    @abstractmethod
    def __len__(self) -> int:
        pass
    
    def age(self, entry: StoreEntry) -> float:
        """Seconds elapsed since entry was written"""
        return self.clock() - entry.timestamp
    
    def prune(self, max_age: float) -> int:
        """Delete entries older than max_age seconds, return count removed"""
        expired = [key for key, entry in list(self.items()) if self.age(entry) > max_age]
        for key in expired:
            self.delete(key)
        return len(expired)


class InMemoryStore(TimestampedStore):
    """Dict-backed store (single process)"""
    
    def __init__(self, clock: Clock = time.time):
        super().__init__(clock)
        self._data: Dict[str, StoreEntry] = {}
    
    def get(self, key: str) -> Optional[StoreEntry]:
        return self._data.get(key)
    
    def set(self, key: str, value: Any, timestamp: Optional[float] = None) -> StoreEntry:
        entry = StoreEntry(timestamp=self.clock() if timestamp is None else timestamp, value=value)
        self._data[key] = entry
        return entry
    
    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None
    
    def items(self) -> Iterator[Tuple[str, StoreEntry]]:
        return iter(list(self._data.items()))
    
    def __len__(self) -> int:
        return len(self._data)
