"""
Unit tests for environment-driven settings.
"""

import pytest
from vault.config import Settings, load_environment

pytestmark = pytest.mark.unit

ENV_VARS = [
    "AGREEMENT_DOC_ID", "AGREEMENT_CACHE_SECONDS", "GEMINI_API_KEY", "RATE_LIMIT",
    "RATE_LIMIT_STRATEGY", "ANALYTICS_KEY", "SYNONYMS_FILE", "LOG_LEVEL", "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores variables that load_dotenv adds
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env()
        
        assert settings.agreement_cache_seconds == 3600
        assert settings.rate_limit == 20
        assert settings.rate_window_seconds == 3600
        assert settings.rate_limit_strategy == "fixed"
        assert settings.gemini_api_key is None
        assert settings.analytics_key is None
    
    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("AGREEMENT_DOC_ID", "doc-xyz")
        monkeypatch.setenv("RATE_LIMIT", "5")
        monkeypatch.setenv("RATE_LIMIT_STRATEGY", "Sliding")
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PORT", "9000")
        
        settings = Settings.from_env()
        
        assert settings.agreement_doc_id == "doc-xyz"
        assert settings.rate_limit == 5
        assert settings.rate_limit_strategy == "sliding"
        assert settings.gemini_api_key == "key"
        assert settings.log_level == "DEBUG"
        assert settings.port == 9000
    
    def test_blank_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT", "  ")
        monkeypatch.setenv("GEMINI_API_KEY", "")
        
        settings = Settings.from_env()
        
        assert settings.rate_limit == 20
        assert settings.gemini_api_key is None
    
    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ValueError, match="PORT"):
            Settings.from_env()
    
    def test_invalid_strategy(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_STRATEGY", "token-bucket")
        with pytest.raises(ValueError, match="RATE_LIMIT_STRATEGY"):
            Settings.from_env()


class TestLoadEnvironment:
    def test_prefers_env_local(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("ANALYTICS_KEY=from-env\n")
        (tmp_path / ".env.local").write_text("ANALYTICS_KEY=from-local\n")
        
        loaded = load_environment(tmp_path)
        
        assert loaded == tmp_path / ".env.local"
        assert Settings.from_env().analytics_key == "from-local"
    
    def test_no_files(self, tmp_path):
        assert load_environment(tmp_path) is None
