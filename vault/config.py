"""
Runtime configuration for the agreement portal.

Values come from environment variables. `load_environment()` reads
.env.local (local dev) or .env first, mirroring the deployment setup where
Netlify/Cloud Run inject variables directly.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


def load_environment(root: Path = PROJECT_ROOT) -> Optional[Path]:
    """
    Load .env.local (highest priority) or .env from the project root.
    
    Returns:
        Path of the loaded file, or None when only system env vars are used
    """
    for candidate in (root / ".env.local", root / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=True)
            return candidate
    return None


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {value!r}")


@dataclass(frozen=True)
class Settings:
    """Portal configuration (see .env.example for variable names)"""
    
    # Agreement source
    agreement_doc_id: str = "1lRhOh_Ji2jWlI7BUEo32GGskDAqFEmQp"
    agreement_cache_seconds: int = 3600
    agreement_fetch_timeout: int = 10
    
    # Search
    synonyms_file: Optional[str] = None
    max_query_tokens: int = 30
    top_matches: int = 3
    
    # AI Explain (Gemini API key, or Vertex AI project/location)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-pro"
    google_cloud_project: Optional[str] = None
    google_cloud_location: str = "us-central1"
    
    # Rate limiting and answer cache
    rate_limit: int = 20
    rate_window_seconds: int = 3600
    rate_limit_strategy: str = "fixed"
    answer_cache_seconds: int = 3600
    
    # Analytics and notifications
    analytics_key: Optional[str] = None
    analytics_max_events: int = 10000
    sendgrid_api_key: Optional[str] = None
    sendgrid_from_email: str = "notifications@freshwatervault.com"
    
    # Server
    log_level: str = "INFO"
    port: int = 8080
    
    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from current environment variables"""
        strategy = os.getenv("RATE_LIMIT_STRATEGY", "fixed").lower()
        if strategy not in ("fixed", "sliding"):
            raise ValueError(f"RATE_LIMIT_STRATEGY must be 'fixed' or 'sliding', got: {strategy!r}")
        
        return cls(
            agreement_doc_id=os.getenv("AGREEMENT_DOC_ID", cls.agreement_doc_id),
            agreement_cache_seconds=_int_env("AGREEMENT_CACHE_SECONDS", cls.agreement_cache_seconds),
            agreement_fetch_timeout=_int_env("AGREEMENT_FETCH_TIMEOUT", cls.agreement_fetch_timeout),
            synonyms_file=os.getenv("SYNONYMS_FILE") or None,
            max_query_tokens=_int_env("MAX_QUERY_TOKENS", cls.max_query_tokens),
            top_matches=_int_env("TOP_MATCHES", cls.top_matches),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            google_cloud_project=os.getenv("GOOGLE_CLOUD_PROJECT") or None,
            google_cloud_location=os.getenv("GOOGLE_CLOUD_LOCATION", cls.google_cloud_location),
            rate_limit=_int_env("RATE_LIMIT", cls.rate_limit),
            rate_window_seconds=_int_env("RATE_WINDOW_SECONDS", cls.rate_window_seconds),
            rate_limit_strategy=strategy,
            answer_cache_seconds=_int_env("ANSWER_CACHE_SECONDS", cls.answer_cache_seconds),
            analytics_key=os.getenv("ANALYTICS_KEY") or None,
            analytics_max_events=_int_env("ANALYTICS_MAX_EVENTS", cls.analytics_max_events),
            sendgrid_api_key=os.getenv("SENDGRID_API_KEY") or None,
            sendgrid_from_email=os.getenv("SENDGRID_FROM_EMAIL", cls.sendgrid_from_email),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            port=_int_env("PORT", cls.port),
        )
