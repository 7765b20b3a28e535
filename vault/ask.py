"""
AI Explain request handling: quota, input hygiene, answer cache, collaborator.

Order of checks for one request:
1. Rate limit (per caller identity)
2. Validate + sanitize question and excerpts
3. Answer cache lookup
4. Explainer call, then cache write
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from .errors import (
    ExplainerError,
    InvalidRequestError,
    NotConfiguredError,
    RateLimitExceededError,
    UpstreamError,
)
from .explain import BaseExplainer, Excerpt
from .rate_limit import RateLimiter
from .response_cache import ResponseCache, make_cache_key
from .utils import sanitize_input

logger = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 2000
MAX_EXCERPTS = 5
MAX_EXCERPT_LENGTH = 1500


@dataclass(frozen=True)
class AskResult:
    answer: str
    cached: bool = False
    remaining: Optional[int] = None  # quota left for this caller, None without a limiter


def clean_excerpts(raw_excerpts: Iterable) -> List[Excerpt]:
    """First MAX_EXCERPTS excerpts, tags stripped, text capped at MAX_EXCERPT_LENGTH"""
    cleaned = []
    for raw in list(raw_excerpts)[:MAX_EXCERPTS]:
        if isinstance(raw, Excerpt):
            heading, text = raw.heading, raw.text
        elif isinstance(raw, Mapping):
            heading, text = raw.get("heading") or "", raw.get("text") or ""
        else:
            continue
        cleaned.append(Excerpt(
            heading=sanitize_input(heading, MAX_QUESTION_LENGTH),
            text=sanitize_input(text, MAX_QUESTION_LENGTH)[:MAX_EXCERPT_LENGTH]
        ))
    return cleaned


class AskService:
    """Gatekeeper in front of the explainer"""
    
    def __init__(
        self,
        explainer: Optional[BaseExplainer],
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.explainer = explainer
        self.cache = cache if cache is not None else ResponseCache()
        self.rate_limiter = rate_limiter
    
    @property
    def configured(self) -> bool:
        return self.explainer is not None
    
    async def ask(self, question, excerpts, client_id: str = "unknown") -> AskResult:
        """
        Answer question from excerpts.
        
        Args:
            question: Raw user question
            excerpts: Excerpt objects or {"heading", "text"} mappings
            client_id: Caller identity for rate limiting
            
        Raises:
            RateLimitExceededError: Caller over quota
            InvalidRequestError: Missing question or excerpts
            NotConfiguredError: No explainer configured
            UpstreamError: Explainer failed
        """
        remaining = None
        if self.rate_limiter is not None:
            decision = self.rate_limiter.check(client_id)
            if not decision.allowed:
                raise RateLimitExceededError(decision.reset_in)
            remaining = decision.remaining
        
        clean_question = sanitize_input(question, MAX_QUESTION_LENGTH)
        if not clean_question.strip() or isinstance(excerpts, (str, bytes)):
            raise InvalidRequestError("Missing question or excerpts")
        cleaned = clean_excerpts(excerpts or [])
        if not cleaned:
            raise InvalidRequestError("Missing question or excerpts")
        
        cache_key = make_cache_key(clean_question, (e.heading for e in cleaned))
        cached_answer = self.cache.get(cache_key)
        if cached_answer is not None:
            logger.info(f"Answer cache hit for {client_id}")
            return AskResult(answer=cached_answer, cached=True, remaining=remaining)
        
        if self.explainer is None:
            raise NotConfiguredError("Server not configured (missing GEMINI_API_KEY)")
        
        try:
            answer = await self.explainer.explain(clean_question, cleaned)
        except ExplainerError as e:
            raise UpstreamError("Gemini error", details=str(e)) from e
        
        self.cache.put(cache_key, answer)
        return AskResult(answer=answer, cached=False, remaining=remaining)
