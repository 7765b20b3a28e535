"""
Agreement Vault - FastAPI application for the client agreement portal

Lets clients ask plain-language questions about their service agreement:
- Quick mode: best-matching agreement section, ranked locally
- AI Explain mode: Gemini answer grounded in the top-ranked sections

Also hosts the small collaborators the portal front-end talks to:
analytics collection and email notifications.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import Settings, load_environment
from .logging_config import setup_logging

loaded_env = load_environment()
settings = Settings.from_env()

setup_logging(
    log_file="logs/agreement-vault.log",
    console_level=settings.log_level,
    file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
)

logger = logging.getLogger(__name__)
if loaded_env:
    logger.info(f"Loaded environment from: {loaded_env}")
else:
    logger.warning("No .env.local or .env file found - using system environment variables only")

from .analytics import AnalyticsStore
from .ask import AskService
from .document_source import AgreementLoader, GoogleDocSource
from .errors import UnauthorizedError, VaultError, RateLimitExceededError
from .explain import ExplainerFactory
from .portal import MODE_QUICK, AgreementPortal
from .rate_limit import client_identity, create_rate_limiter
from .notifier import Notifier
from .response_cache import ResponseCache
from .search import DEFAULT_SYNONYMS, SynonymTable, excerpt
from .utils import generate_session_id, truncate

APP_VERSION = "0.3.0"
APP_START_TIME = datetime.now(timezone.utc)
MAX_ERROR_DETAIL = 200

# Global instances (built in lifespan, replaceable in tests)
portal: Optional[AgreementPortal] = None
ask_service: Optional[AskService] = None
analytics_store: Optional[AnalyticsStore] = None
notifier: Optional[Notifier] = None


def build_services(config: Settings):
    """Construct portal services from settings"""
    synonyms = SynonymTable.from_json(config.synonyms_file) if config.synonyms_file else DEFAULT_SYNONYMS

    loader = AgreementLoader(
        source=GoogleDocSource(timeout=config.agreement_fetch_timeout),
        document_id=config.agreement_doc_id,
        freshness_seconds=config.agreement_cache_seconds
    )
    asker = AskService(
        explainer=ExplainerFactory.create(config),
        cache=ResponseCache(ttl_seconds=config.answer_cache_seconds),
        rate_limiter=create_rate_limiter(
            strategy=config.rate_limit_strategy,
            limit=config.rate_limit,
            window_seconds=config.rate_window_seconds
        )
    )
    analytics = AnalyticsStore(max_events=config.analytics_max_events)
    agreement_portal = AgreementPortal(
        loader=loader,
        ask_service=asker,
        analytics=analytics,
        synonyms=synonyms,
        top=config.top_matches,
        max_query_tokens=config.max_query_tokens
    )
    mailer = Notifier(api_key=config.sendgrid_api_key, from_email=config.sendgrid_from_email)
    return agreement_portal, asker, analytics, mailer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources"""
    global portal, ask_service, analytics_store, notifier

    logger.info(f"Initializing portal (doc={settings.agreement_doc_id}, rate_limit={settings.rate_limit}/{settings.rate_window_seconds}s)")
    portal, ask_service, analytics_store, notifier = build_services(settings)
    logger.info(f"AI Explain {'enabled' if ask_service.configured else 'disabled'}")

    yield

    logger.info("Shutting down...")
    if ask_service is not None and ask_service.explainer is not None:
        ask_service.explainer.close()
    portal = ask_service = analytics_store = notifier = None


app = FastAPI(
    title="Agreement Vault API",
    description="Client portal Q&A over a service agreement (Quick search + AI Explain)",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    ai_explain: bool


class TocEntry(BaseModel):
    id: int
    heading: str


class AgreementResponse(BaseModel):
    status: str = Field(..., description="loaded | cached | error")
    fetched_at: Optional[float] = None
    sections: List[TocEntry]
    message: Optional[str] = Field(None, description="Load error text when status=error")


class SearchRequest(BaseModel):
    query: str = Field(..., description="User question", min_length=1)
    top_k: Optional[int] = Field(default=None, ge=1, le=20, description="Number of sections (default: TOP_MATCHES)")
    excerpt_length: int = Field(default=900, ge=50, le=5000, description="Excerpt length per section")


class SearchResultItem(BaseModel):
    heading: str
    score: int
    excerpt: str


class SearchResponse(BaseModel):
    query: str
    results: List[SearchResultItem]
    total: int
    agreement_status: str = Field(..., description="loaded | cached | error")
    message: Optional[str] = Field(None, description="Load error text when agreement_status=error")


class ChatRequest(BaseModel):
    question: str = Field(..., description="User question", min_length=1)
    mode: str = Field(default=MODE_QUICK, pattern="^(quick|ai)$", description="quick | ai")
    session_id: Optional[str] = Field(None, description="Client session id (generated when absent)")


class ChatResponse(BaseModel):
    answer: str
    mode: str
    found: bool
    cached: bool = False
    sources: List[SearchResultItem]
    session_id: str
    agreement_status: str


class ExcerptItem(BaseModel):
    heading: str = ""
    text: str = ""


class AskRequest(BaseModel):
    question: str = ""
    excerpts: List[ExcerptItem] = Field(default_factory=list)


class AskResponse(BaseModel):
    answer: str
    cached: bool = False


class AnalyticsEventRequest(BaseModel):
    event: str = "unknown"
    session_id: str = ""
    path: str = ""
    query: str = ""
    mode: str = ""


class NotifyRequest(BaseModel):
    to: str = ""
    subject: str = ""
    message: str = ""
    type: str = "general"


class OkResponse(BaseModel):
    ok: bool
    note: Optional[str] = None


def _require(service, name: str):
    if service is None:
        raise VaultError(f"{name} not initialized")
    return service


def _rate_headers(remaining: Optional[int]) -> dict:
    return {} if remaining is None else {"X-RateLimit-Remaining": str(remaining)}


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "Agreement Vault API",
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    uptime = (datetime.now(timezone.utc) - APP_START_TIME).total_seconds()
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=round(uptime, 2),
        ai_explain=bool(ask_service and ask_service.configured),
    )


@app.get("/v1/agreement", response_model=AgreementResponse)
async def get_agreement():
    """Agreement load status and table of contents"""
    snapshot, toc = await _require(portal, "Portal").table_of_contents()
    return AgreementResponse(
        status=snapshot.status,
        fetched_at=snapshot.fetched_at,
        sections=[TocEntry(**entry) for entry in toc],
        message=None if snapshot.available else snapshot.text,
    )


@app.post("/v1/search", response_model=SearchResponse)
async def search_agreement(request: SearchRequest):
    """
    Rank agreement sections against a question (no AI involved)

    Example:
        POST /v1/search
        {"query": "can I cancel my service?", "top_k": 3}
    """
    snapshot, matches = await _require(portal, "Portal").search(request.query, top=request.top_k)
    results = [
        SearchResultItem(heading=m.heading, score=m.score, excerpt=excerpt(m.body, request.excerpt_length))
        for m in matches
    ]
    return SearchResponse(
        query=request.query,
        results=results,
        total=len(results),
        agreement_status=snapshot.status,
        message=None if snapshot.available else snapshot.text,
    )


@app.post("/v1/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request):
    """
    Answer a question in Quick or AI Explain mode

    AI mode is rate limited per client IP (429 with Retry-After when exceeded).
    """
    session_id = request.session_id or generate_session_id()
    reply = await _require(portal, "Portal").chat(
        request.question,
        mode=request.mode,
        client_id=client_identity(http_request.headers),
        session_id=session_id,
    )
    if reply is None:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Question is empty"})

    return ChatResponse(
        answer=reply.text,
        mode=reply.mode,
        found=reply.found,
        cached=reply.cached,
        sources=[
            SearchResultItem(heading=m.heading, score=m.score, excerpt=excerpt(m.body))
            for m in reply.matches
        ],
        session_id=session_id,
        agreement_status=reply.agreement_status,
    )


@app.post("/v1/ask", response_model=AskResponse)
async def ask(request: AskRequest, http_request: Request):
    """
    AI Explain proxy: question + caller-supplied excerpts -> Gemini answer

    Rate limited per client IP; answers cached by question + excerpt headings.
    """
    result = await _require(ask_service, "Ask service").ask(
        request.question,
        [e.model_dump() for e in request.excerpts],
        client_id=client_identity(http_request.headers),
    )
    body = AskResponse(answer=result.answer, cached=result.cached)
    return JSONResponse(
        content=body.model_dump(exclude_defaults=True),
        headers=_rate_headers(result.remaining),
    )


@app.post("/v1/analytics", response_model=OkResponse)
async def track_event(request: AnalyticsEventRequest, http_request: Request):
    """Record a client analytics event (fire-and-forget from the front-end)"""
    _require(analytics_store, "Analytics").record(
        request.model_dump(),
        user_agent=http_request.headers.get("user-agent", ""),
        ip=client_identity(http_request.headers),
    )
    return OkResponse(ok=True)


@app.get("/v1/analytics")
async def get_metrics(key: str = Query("", description="Admin key (ANALYTICS_KEY)")):
    """Aggregated analytics (admin only)"""
    admin_key = settings.analytics_key if settings else None
    if not admin_key or key != admin_key:
        raise UnauthorizedError("Unauthorized")
    return _require(analytics_store, "Analytics").metrics()


@app.post("/v1/notify", response_model=OkResponse)
async def notify(request: NotifyRequest):
    """Send an email notification (logged only when SendGrid is not configured)"""
    result = await _require(notifier, "Notifier").send(
        request.to, request.subject, request.message, kind=request.type
    )
    return OkResponse(ok=True, note=None if result.sent else result.message)


@app.exception_handler(VaultError)
async def vault_exception_handler(request, exc: VaultError):
    """Known failures: status from the error class, short user-facing message"""
    content = {"error": exc.message}
    headers = {}
    if exc.details:
        content["details"] = truncate(exc.details, MAX_ERROR_DETAIL)
    if isinstance(exc, RateLimitExceededError):
        content["resetIn"] = exc.reset_in
        headers = {"Retry-After": str(exc.reset_in), "X-RateLimit-Remaining": "0"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": truncate(str(exc), MAX_ERROR_DETAIL),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vault.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=True,  # Development only
    )
