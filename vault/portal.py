"""
Agreement portal: question answering over the loaded agreement.

Quick mode shows the best-matching section excerpt directly. AI Explain mode
sends the top matches to the ask service and falls back to a fixed message
when the collaborator is unavailable. The search core is the same in both.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .analytics import AnalyticsStore
from .ask import AskService
from .document_source import AgreementLoader, AgreementSnapshot
from .errors import RateLimitExceededError, VaultError
from .explain import Excerpt
from .search import (
    DEFAULT_SYNONYMS,
    MAX_QUERY_TOKENS,
    ScoredSection,
    SynonymTable,
    excerpt,
    rank_sections,
    table_of_contents,
)
from .utils import is_non_empty_string

logger = logging.getLogger(__name__)

MODE_QUICK = "quick"
MODE_AI = "ai"

AI_EXCERPT_LENGTH = 1200

NOT_FOUND_TEXT = (
    "I couldn't locate that in the agreement text. Try keywords like: "
    "cancellation, late fee, liability, arbitration, scope, snow, mowing."
)
AI_UNAVAILABLE_TEXT = "AI Explain is unavailable right now. Use Quick mode or contact support."
DISCLAIMER = "(Informational only - the signed agreement controls.)"


@dataclass
class ChatReply:
    text: str
    mode: str
    matches: List[ScoredSection] = field(default_factory=list)
    found: bool = True
    cached: bool = False
    agreement_status: str = ""


def format_quick_answer(match: ScoredSection) -> str:
    return f'Here you go.\n\nSOURCE: {match.heading}\n\n"{excerpt(match.body)}"\n\n{DISCLAIMER}'


class AgreementPortal:
    """Wires loader, search core, ask service and analytics together"""

    def __init__(
        self,
        loader: AgreementLoader,
        ask_service: Optional[AskService] = None,
        analytics: Optional[AnalyticsStore] = None,
        synonyms: SynonymTable = DEFAULT_SYNONYMS,
        top: int = 3,
        max_query_tokens: int = MAX_QUERY_TOKENS
    ):
        self.loader = loader
        self.ask_service = ask_service
        self.analytics = analytics
        self.synonyms = synonyms
        self.top = top
        self.max_query_tokens = max_query_tokens

    async def agreement(self) -> AgreementSnapshot:
        return await self.loader.load()

    async def table_of_contents(self):
        snapshot = await self.loader.load()
        if not snapshot.available:
            return snapshot, []
        return snapshot, table_of_contents(snapshot.sections)

    async def search(self, query: str, top: Optional[int] = None) -> Tuple[AgreementSnapshot, List[ScoredSection]]:
        """
        Ranked sections for query, with the snapshot they were ranked against.

        Matches are empty when nothing matches, the query is blank, or the
        agreement is unavailable (snapshot.available tells the last case apart).
        """
        snapshot = await self.loader.load()
        if not snapshot.available or not is_non_empty_string(query):
            return snapshot, []
        return snapshot, self._rank(snapshot, query, top or self.top)

    def _rank(self, snapshot: AgreementSnapshot, query: str, top: int) -> List[ScoredSection]:
        return rank_sections(
            snapshot.sections,
            query,
            top=top,
            table=self.synonyms,
            max_tokens=self.max_query_tokens
        )

    def _track(self, event: str, **data) -> None:
        if self.analytics is None:
            return
        try:
            self.analytics.record({"event": event, **data}, ip=data.get("ip", "unknown"))
        except Exception as e:
            # Analytics must never break a chat reply
            logger.warning(f"Failed to record analytics event {event}: {e}")

    async def chat(
        self,
        question: str,
        mode: str = MODE_QUICK,
        client_id: str = "unknown",
        session_id: str = ""
    ) -> Optional[ChatReply]:
        """
        Answer a question in Quick or AI Explain mode.

        Returns:
            None for blank questions (nothing is searched or sent), else a ChatReply

        Raises:
            RateLimitExceededError: AI mode caller over quota
        """
        if not is_non_empty_string(question):
            return None

        snapshot = await self.loader.load()
        if not snapshot.available:
            return ChatReply(text=snapshot.text, mode=mode, found=False, agreement_status=snapshot.status)

        hits = self._rank(snapshot, question, self.top)
        self._track(
            "search",
            session_id=session_id,
            query=question,
            mode=mode,
            ip=client_id,
            headings=[h.heading for h in hits],
            scores=[h.score for h in hits],
        )

        if not hits:
            return ChatReply(text=NOT_FOUND_TEXT, mode=mode, found=False, agreement_status=snapshot.status)

        if mode != MODE_AI:
            return ChatReply(
                text=format_quick_answer(hits[0]),
                mode=MODE_QUICK,
                matches=hits,
                agreement_status=snapshot.status
            )

        self._track("ai_query", session_id=session_id, query=question, mode=mode, ip=client_id)

        if self.ask_service is None:
            return ChatReply(text=AI_UNAVAILABLE_TEXT, mode=MODE_AI, matches=hits, agreement_status=snapshot.status)

        excerpts = [Excerpt(heading=h.heading, text=excerpt(h.body, AI_EXCERPT_LENGTH)) for h in hits]
        try:
            result = await self.ask_service.ask(question, excerpts, client_id=client_id)
        except RateLimitExceededError:
            raise
        except VaultError as e:
            logger.warning(f"AI Explain failed ({type(e).__name__}): {e.message}")
            return ChatReply(text=AI_UNAVAILABLE_TEXT, mode=MODE_AI, matches=hits, agreement_status=snapshot.status)

        return ChatReply(
            text=result.answer,
            mode=MODE_AI,
            matches=hits,
            cached=result.cached,
            agreement_status=snapshot.status
        )
