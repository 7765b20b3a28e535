"""
Gemini-backed explainer using the Google GenAI SDK.

Supports both Gemini Developer API (API key) and Vertex AI (project/location)
clients. The prompt restricts the model to the provided excerpts and asks it
to cite SOURCE numbers.
"""

import asyncio
import logging
from typing import List, Optional

from google import genai
from google.genai import types

from ..errors import ExplainerError
from .base import BaseExplainer, Excerpt

logger = logging.getLogger(__name__)


def build_context(excerpts: List[Excerpt]) -> str:
    """
    Format excerpts as numbered sources.
    
    Example:
        >>> build_context([Excerpt("SECTION 2", "Client may cancel.")])
        'SOURCE 1: SECTION 2\\nClient may cancel.'
    """
    return "\n\n---\n\n".join(
        f"SOURCE {i}: {excerpt.heading}\n{excerpt.text}"
        for i, excerpt in enumerate(excerpts, start=1)
    )


class GeminiExplainer(BaseExplainer):
    """
    Single generate_content call per question.
    
    Low temperature and a small output budget keep answers short and close to
    the agreement wording.
    """
    
    PROMPT_TEMPLATE = """You are a contract assistant for {company}.
Answer the user's question in plain English, and cite which SOURCE number(s) you used.
Rules:
- Be clear this is informational only and the signed agreement controls.
- If the excerpt does not contain enough info, say so and suggest what to search.
- Keep answers concise and helpful.
- Do not make up terms or conditions not present in the sources.

USER QUESTION: {question}

EXCERPTS:
{context}"""
    
    SAFETY_CATEGORIES = (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    )
    
    def __init__(
        self,
        model_name: str = "gemini-1.5-pro",
        api_key: Optional[str] = None,
        project_id: Optional[str] = None,
        location: str = "us-central1",
        temperature: float = 0.2,
        max_output_tokens: int = 600,
        top_p: float = 0.8,
        company: str = "Freshwater Landscaping",
        client: Optional[genai.Client] = None
    ):
        """
        Initialize Gemini explainer.
        
        Args:
            model_name: Gemini model to use
            api_key: Gemini Developer API key (takes precedence over Vertex AI)
            project_id: GCP project for Vertex AI mode
            location: GCP region for Vertex AI mode
            temperature: Sampling temperature
            max_output_tokens: Answer length budget
            top_p: Nucleus sampling parameter
            company: Name used in the assistant persona
            client: Pre-built client (tests)
        """
        self.model_name = model_name
        self.project_id = project_id
        self.location = location
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.top_p = top_p
        self.company = company
        
        if client is not None:
            self.client = client
        elif api_key:
            self.client = genai.Client(api_key=api_key)
            logger.info(f"Gemini explainer initialized: {model_name} (API key)")
        elif project_id:
            self.client = genai.Client(vertexai=True, project=project_id, location=location)
            logger.info(f"Gemini explainer initialized: {model_name} (project={project_id}, location={location})")
        else:
            raise ValueError("Gemini explainer requires api_key or project_id")
    
    def build_prompt(self, question: str, excerpts: List[Excerpt]) -> str:
        return self.PROMPT_TEMPLATE.format(
            company=self.company,
            question=question,
            context=build_context(excerpts)
        ).strip()
    
    def _generate(self, prompt: str) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                    top_p=self.top_p,
                    safety_settings=[
                        types.SafetySetting(
                            category=category,
                            threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE
                        )
                        for category in self.SAFETY_CATEGORIES
                    ]
                )
            )
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise ExplainerError(f"Gemini API error: {e}") from e
        
        text = (response.text or "").strip()
        if not text:
            logger.warning("Gemini returned an empty answer (possibly blocked by safety filters)")
            raise ExplainerError("Gemini returned no answer")
        
        logger.debug(f"Gemini answer (first 200 chars): {text[:200]}")
        return text
    
    async def explain(self, question: str, excerpts: List[Excerpt]) -> str:
        prompt = self.build_prompt(question, excerpts)
        logger.info(f"Explaining with Gemini ({self.model_name}): {len(excerpts)} excerpts, prompt {len(prompt)} chars")
        # Sync SDK call in thread pool to avoid blocking the event loop
        return await asyncio.to_thread(self._generate, prompt)
    
    def get_model_info(self) -> dict:
        """Get information about the Gemini explainer."""
        return {
            "name": self.model_name,
            "type": "gemini-llm",
            "provider": "Google GenAI",
            "project": self.project_id,
            "location": self.location,
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
        }
    
    def close(self):
        """Cleanup (Gemini client doesn't require explicit cleanup)."""
        logger.info("Gemini explainer closed")
