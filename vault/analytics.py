"""
In-memory analytics sink: bounded event log plus aggregated metrics.

Resets on restart. Events are fire-and-forget from the caller's side; the
store only sanitizes and caps what it keeps.
"""

import logging
import time
from collections import Counter, deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, List, Mapping, Optional

from .stores import Clock
from .utils import sanitize_input

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 10000
MAX_FIELD_LENGTH = 500
MAX_USER_AGENT_LENGTH = 200
DAY_SECONDS = 24 * 60 * 60
TOP_SEARCHES = 10
RECENT_EVENTS = 20


@dataclass(frozen=True)
class AnalyticsEvent:
    event: str
    session_id: str
    timestamp: float
    path: str = ""
    query: str = ""
    mode: str = ""
    user_agent: str = ""
    ip: str = "unknown"
    headings: tuple = ()
    scores: tuple = ()


class AnalyticsStore:
    """Keeps the newest max_events events"""
    
    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS, clock: Clock = time.time):
        self.max_events = max_events
        self.clock = clock
        self._events: Deque[AnalyticsEvent] = deque(maxlen=max_events)
    
    def record(
        self,
        payload: Mapping[str, Any],
        user_agent: str = "",
        ip: str = "unknown"
    ) -> AnalyticsEvent:
        """Sanitize and store one event payload ({"event", "session_id", "path", "query", "mode", ...})"""
        event = AnalyticsEvent(
            event=sanitize_input(payload.get("event") or "unknown", MAX_FIELD_LENGTH),
            session_id=sanitize_input(payload.get("session_id") or "", MAX_FIELD_LENGTH),
            timestamp=self.clock(),
            path=sanitize_input(payload.get("path") or "", MAX_FIELD_LENGTH),
            query=sanitize_input(payload.get("query") or "", MAX_FIELD_LENGTH),
            mode=sanitize_input(payload.get("mode") or "", MAX_FIELD_LENGTH),
            user_agent=(user_agent or "")[:MAX_USER_AGENT_LENGTH],
            ip=ip or "unknown",
            headings=tuple(payload.get("headings") or ()),
            scores=tuple(payload.get("scores") or ()),
        )
        self._events.append(event)
        logger.debug(f"Recorded analytics event: {event.event} (session={event.session_id})")
        return event
    
    def __len__(self) -> int:
        return len(self._events)
    
    def _window(self, seconds: float, now: float) -> List[AnalyticsEvent]:
        return [e for e in self._events if now - e.timestamp < seconds]
    
    @staticmethod
    def _summary(events: List[AnalyticsEvent]) -> Dict[str, int]:
        kinds = Counter(e.event for e in events)
        return {
            "events": len(events),
            "page_views": kinds["page_view"],
            "searches": kinds["search"],
            "ai_queries": kinds["ai_query"],
            "unique_sessions": len({e.session_id for e in events}),
        }
    
    def metrics(self, now: Optional[float] = None) -> Dict[str, Any]:
        """
        Aggregate metrics:
        - totals and per-window counts (last 24h, last 7d)
        - top searched queries over 7d
        - most recent events over 24h, newest first
        """
        now = self.clock() if now is None else now
        last_24h = self._window(DAY_SECONDS, now)
        last_7d = self._window(7 * DAY_SECONDS, now)
        
        searches = Counter(e.query for e in last_7d if e.event == "search" and e.query)
        
        return {
            "total_events": len(self._events),
            "last_24h": self._summary(last_24h),
            "last_7d": self._summary(last_7d),
            "top_searches": [
                {"term": term, "count": count}
                for term, count in searches.most_common(TOP_SEARCHES)
            ],
            "recent_events": [asdict(e) for e in reversed(last_24h[-RECENT_EVENTS:])],
        }
