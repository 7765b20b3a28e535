"""
Unit tests for agreement loading: freshness window, stale-while-error, memoized parsing.
"""

from unittest.mock import Mock

import pytest
import requests
from vault.document_source import (
    LOAD_ERROR_TEXT,
    STATUS_CACHED,
    STATUS_ERROR,
    STATUS_LOADED,
    AgreementLoader,
    GoogleDocSource,
)
from vault.errors import DocumentFetchError
from vault.stores import InMemoryStore

pytestmark = pytest.mark.unit


@pytest.fixture
def loader(fake_source, clock):
    return AgreementLoader(
        source=fake_source,
        document_id="doc-123",
        freshness_seconds=3600,
        store=InMemoryStore(clock=clock)
    )


class TestAgreementLoader:
    """Test load() status transitions"""
    
    @pytest.mark.asyncio
    async def test_first_load_fetches(self, loader, fake_source, clock):
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_LOADED
        assert snapshot.available
        assert snapshot.fetched_at == clock.now
        assert snapshot.text == fake_source.text
        assert [s.heading for s in snapshot.sections] == [
            "MASTER SERVICE AGREEMENT",
            "SECTION 1: PAYMENT TERMS",
            "SECTION 2: CANCELLATION POLICY",
            "SECTION 3: LIABILITY AND DAMAGES",
            "SECTION 4: SNOW REMOVAL SERVICES",
        ]
        assert fake_source.calls == 1
    
    @pytest.mark.asyncio
    async def test_fresh_copy_is_reused(self, loader, fake_source, clock):
        await loader.load()
        clock.advance(1800)
        
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_CACHED
        assert fake_source.calls == 1
    
    @pytest.mark.asyncio
    async def test_stale_copy_is_refreshed(self, loader, fake_source, clock):
        await loader.load()
        clock.advance(3601)
        fake_source.text = "SECTION 9: NEW TERMS\nUpdated text."
        
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_LOADED
        assert fake_source.calls == 2
        assert [s.heading for s in snapshot.sections] == ["SECTION 9: NEW TERMS"]
    
    @pytest.mark.asyncio
    async def test_stale_copy_served_when_refresh_fails(self, loader, fake_source, clock):
        first = await loader.load()
        clock.advance(7200)
        fake_source.fail = True
        
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_CACHED
        assert snapshot.text == first.text
        assert snapshot.fetched_at == first.fetched_at
    
    @pytest.mark.asyncio
    async def test_error_when_nothing_cached(self, loader, fake_source):
        fake_source.fail = True
        
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_ERROR
        assert not snapshot.available
        assert snapshot.text == LOAD_ERROR_TEXT
        assert snapshot.sections == []
    
    @pytest.mark.asyncio
    async def test_unexpected_source_error_never_propagates(self, clock):
        source = Mock()
        source.fetch.side_effect = RuntimeError("boom")
        loader = AgreementLoader(source=source, document_id="x", store=InMemoryStore(clock=clock))
        
        snapshot = await loader.load()
        
        assert snapshot.status == STATUS_ERROR


class TestSectionMemo:
    def test_same_text_parsed_once(self, loader, sample_agreement):
        first = loader.sections_for(sample_agreement)
        second = loader.sections_for(sample_agreement)
        assert first is second
    
    def test_new_text_replaces_memo(self, loader, sample_agreement):
        loader.sections_for(sample_agreement)
        loader.sections_for("SECTION 1: X\nbody")
        assert len(loader._sections) == 1


class TestGoogleDocSource:
    def test_fetch_uses_export_url(self):
        response = Mock(text="agreement text")
        session = Mock()
        session.get.return_value = response
        
        text = GoogleDocSource(timeout=5, session=session).fetch("abc")
        
        assert text == "agreement text"
        session.get.assert_called_once_with(
            "https://docs.google.com/document/d/abc/export?format=txt", timeout=5
        )
        assert response.encoding == "utf-8-sig"
    
    def test_http_error_wrapped(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        session = Mock()
        session.get.return_value = response
        
        with pytest.raises(DocumentFetchError, match="abc"):
            GoogleDocSource(session=session).fetch("abc")
    
    def test_timeout_wrapped(self):
        session = Mock()
        session.get.side_effect = requests.Timeout("timed out")
        
        with pytest.raises(DocumentFetchError):
            GoogleDocSource(session=session).fetch("abc")
