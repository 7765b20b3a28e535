"""Unit test configuration - fakes for isolated testing"""

from typing import List

import pytest

from vault.errors import DocumentFetchError, ExplainerError
from vault.explain import BaseExplainer, Excerpt

SAMPLE_AGREEMENT = """MASTER SERVICE AGREEMENT

This agreement is between Freshwater Landscaping and the client.

SECTION 1: PAYMENT TERMS

Payment is due within 30 days of invoice. Late payments incur a 1.5% monthly fee.

SECTION 2: CANCELLATION POLICY

Client may cancel with 30 days written notice. Deposits are non-refundable.

SECTION 3: LIABILITY AND DAMAGES

Freshwater is not liable for pre-existing damage. Client assumes responsibility for property conditions.

SECTION 4: SNOW REMOVAL SERVICES

Snow plowing is triggered at 2 inch accumulation. Salt and deicing are additional charges."""


class FakeClock:
    """Manually advanced clock (seconds)"""
    
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, seconds: float):
        self.now += seconds


class FakeSource:
    """DocumentSource stand-in: returns text or raises, counts fetches"""
    
    def __init__(self, text: str = SAMPLE_AGREEMENT):
        self.text = text
        self.fail = False
        self.calls = 0
    
    def fetch(self, document_id: str) -> str:
        self.calls += 1
        if self.fail:
            raise DocumentFetchError("connection timed out")
        return self.text


class FakeExplainer(BaseExplainer):
    """Records calls and returns a canned answer"""
    
    def __init__(self, answer: str = "You may cancel with 30 days notice (SOURCE 1).", fail: bool = False):
        self.answer = answer
        self.fail = fail
        self.calls: List[tuple] = []
    
    async def explain(self, question: str, excerpts: List[Excerpt]) -> str:
        self.calls.append((question, list(excerpts)))
        if self.fail:
            raise ExplainerError("quota exhausted")
        return self.answer
    
    def get_model_info(self) -> dict:
        return {"name": "fake", "type": "fake", "provider": "tests"}


@pytest.fixture
def sample_agreement() -> str:
    return SAMPLE_AGREEMENT


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def fake_explainer() -> FakeExplainer:
    return FakeExplainer()
