"""
AI Explain collaborators for the agreement portal.

Usage:
    from vault.explain import ExplainerFactory, Excerpt

    explainer = ExplainerFactory.create(settings)
    if explainer:
        answer = await explainer.explain(question, [Excerpt(heading, text)])
"""

from .base import BaseExplainer, Excerpt
from .gemini import GeminiExplainer, build_context
from .factory import ExplainerFactory

__all__ = [
    'BaseExplainer',
    'Excerpt',
    'GeminiExplainer',
    'build_context',
    'ExplainerFactory',
]
