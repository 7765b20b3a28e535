"""
Unit tests for the Gemini explainer (client mocked) and explainer factory.

Tests are marked with @pytest.mark.unit for explicit categorization.
"""

from unittest.mock import Mock

import pytest
from vault.config import Settings
from vault.errors import ExplainerError
from vault.explain import Excerpt, ExplainerFactory, GeminiExplainer, build_context

pytestmark = pytest.mark.unit

EXCERPTS = [
    Excerpt("SECTION 2: CANCELLATION POLICY", "Client may cancel with 30 days notice."),
    Excerpt("SECTION 1: PAYMENT TERMS", "Payment is due within 30 days."),
]


def _client(text="You may cancel with 30 days notice (SOURCE 1)."):
    client = Mock()
    client.models.generate_content.return_value = Mock(text=text)
    return client


class TestBuildContext:
    def test_numbered_sources(self):
        context = build_context(EXCERPTS)
        
        assert context == (
            "SOURCE 1: SECTION 2: CANCELLATION POLICY\nClient may cancel with 30 days notice."
            "\n\n---\n\n"
            "SOURCE 2: SECTION 1: PAYMENT TERMS\nPayment is due within 30 days."
        )


class TestGeminiExplainer:
    def test_prompt_contents(self):
        explainer = GeminiExplainer(client=_client(), company="Acme Lawns")
        
        prompt = explainer.build_prompt("Can I cancel?", EXCERPTS)
        
        assert prompt.startswith("You are a contract assistant for Acme Lawns.")
        assert "USER QUESTION: Can I cancel?" in prompt
        assert "SOURCE 2: SECTION 1: PAYMENT TERMS" in prompt
        assert "signed agreement controls" in prompt
    
    @pytest.mark.asyncio
    async def test_explain_calls_model(self):
        client = _client()
        explainer = GeminiExplainer(model_name="gemini-test", client=client)
        
        answer = await explainer.explain("Can I cancel?", EXCERPTS)
        
        assert answer == "You may cancel with 30 days notice (SOURCE 1)."
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "Can I cancel?" in kwargs["contents"]
        config = kwargs["config"]
        assert config.temperature == 0.2
        assert config.max_output_tokens == 600
        assert config.top_p == 0.8
        assert len(config.safety_settings) == 2
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None])
    async def test_empty_answer_raises(self, text):
        explainer = GeminiExplainer(client=_client(text=text))
        
        with pytest.raises(ExplainerError, match="no answer"):
            await explainer.explain("Can I cancel?", EXCERPTS)
    
    @pytest.mark.asyncio
    async def test_api_error_wrapped(self):
        client = Mock()
        client.models.generate_content.side_effect = RuntimeError("429 RESOURCE_EXHAUSTED")
        
        with pytest.raises(ExplainerError, match="RESOURCE_EXHAUSTED"):
            await GeminiExplainer(client=client).explain("q", EXCERPTS)
    
    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            GeminiExplainer()
    
    def test_model_info(self):
        info = GeminiExplainer(model_name="gemini-test", client=_client()).get_model_info()
        assert info["name"] == "gemini-test"
        assert info["provider"] == "Google GenAI"


class TestExplainerFactory:
    def test_disabled_without_credentials(self):
        assert ExplainerFactory.create(Settings()) is None
    
    def test_api_key(self):
        explainer = ExplainerFactory.create(Settings(gemini_api_key="test-key", gemini_model="gemini-test"))
        
        assert isinstance(explainer, GeminiExplainer)
        assert explainer.model_name == "gemini-test"
