"""
Agreement loading with a freshness window and stale-while-error fallback.

Flow per request:
1. Cached copy younger than the freshness window -> use it ("cached")
2. Otherwise fetch from the source -> store and use it ("loaded")
3. Fetch failed but an older copy exists -> keep using it ("cached")
4. Nothing cached at all -> error text ("error")

Parsed sections are memoized per document snapshot (SHA256 of the text), so
repeated searches against the same text never re-segment it.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from .errors import DocumentFetchError
from .search import Section, segment
from .stores import InMemoryStore, TimestampedStore
from .utils import calculate_text_hash

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_SECONDS = 3600
LOAD_ERROR_TEXT = "Unable to load agreement. Please contact support."

STATUS_LOADED = "loaded"
STATUS_CACHED = "cached"
STATUS_ERROR = "error"


class DocumentSource(ABC):
    """Read-only source of raw agreement text"""

    @abstractmethod
    def fetch(self, document_id: str) -> str:
        """
        Fetch raw text for document_id.

        Raises:
            DocumentFetchError: On network, timeout or HTTP errors
        """
        pass


class GoogleDocSource(DocumentSource):
    """Google Docs plain-text export (document must be link-shared)"""

    EXPORT_URL = "https://docs.google.com/document/d/{document_id}/export?format=txt"

    def __init__(self, timeout: float = 10, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, document_id: str) -> str:
        url = self.EXPORT_URL.format(document_id=document_id)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DocumentFetchError(f"Failed to fetch document {document_id}: {e}") from e

        # Export is UTF-8 with a BOM
        response.encoding = "utf-8-sig"
        return response.text


@dataclass
class AgreementSnapshot:
    """Agreement text as served to one request"""
    text: str
    status: str
    fetched_at: Optional[float] = None
    sections: List[Section] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.status != STATUS_ERROR


class AgreementLoader:
    """Caches one agreement document and its parsed sections"""

    def __init__(
        self,
        source: DocumentSource,
        document_id: str,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        store: Optional[TimestampedStore] = None
    ):
        self.source = source
        self.document_id = document_id
        self.freshness_seconds = freshness_seconds
        self.store = store if store is not None else InMemoryStore()
        self._sections: Dict[str, List[Section]] = {}

    @property
    def cache_key(self) -> str:
        return f"agreement:{self.document_id}"

    async def load(self) -> AgreementSnapshot:
        """Return the current agreement, refreshing it when stale. Never raises."""
        cached = self.store.get(self.cache_key)

        if cached is not None and self.store.age(cached) < self.freshness_seconds:
            return self._snapshot(cached.value, STATUS_CACHED, cached.timestamp)

        try:
            text = await asyncio.to_thread(self.source.fetch, self.document_id)
        except Exception as e:
            if cached is not None:
                logger.warning(f"Agreement refresh failed, serving stale copy: {e}")
                return self._snapshot(cached.value, STATUS_CACHED, cached.timestamp)
            logger.error(f"Agreement unavailable and nothing cached: {e}")
            return AgreementSnapshot(text=LOAD_ERROR_TEXT, status=STATUS_ERROR)

        entry = self.store.set(self.cache_key, text)
        logger.info(f"Loaded agreement {self.document_id}: {len(text)} chars")
        return self._snapshot(text, STATUS_LOADED, entry.timestamp)

    def _snapshot(self, text: str, status: str, fetched_at: float) -> AgreementSnapshot:
        return AgreementSnapshot(
            text=text,
            status=status,
            fetched_at=fetched_at,
            sections=self.sections_for(text)
        )

    def sections_for(self, text: str) -> List[Section]:
        """Segment text once per distinct snapshot"""
        text_hash = calculate_text_hash(text)
        sections = self._sections.get(text_hash)
        if sections is None:
            sections = segment(text)
            # Only the current snapshot matters; drop parses of replaced text
            self._sections = {text_hash: sections}
            logger.debug(f"Parsed agreement snapshot {text_hash[:12]}: {len(sections)} sections")
        return sections
