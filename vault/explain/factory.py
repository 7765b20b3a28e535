"""
Factory to create the explainer from settings.
"""

import logging
from typing import Optional

from ..config import Settings
from .base import BaseExplainer
from .gemini import GeminiExplainer

logger = logging.getLogger(__name__)


class ExplainerFactory:
    """Builds the configured explainer, or None when AI Explain is not configured."""
    
    @staticmethod
    def create(settings: Settings) -> Optional[BaseExplainer]:
        """
        Create explainer based on settings.
        
        Credentials (first match wins):
            GEMINI_API_KEY: Gemini Developer API
            GOOGLE_CLOUD_PROJECT (+ GOOGLE_CLOUD_LOCATION): Vertex AI
        
        Returns:
            Explainer instance, or None if no credentials are set
        """
        if not settings.gemini_api_key and not settings.google_cloud_project:
            logger.warning("AI Explain disabled: set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT")
            return None
        
        try:
            return GeminiExplainer(
                model_name=settings.gemini_model,
                api_key=settings.gemini_api_key,
                project_id=settings.google_cloud_project,
                location=settings.google_cloud_location
            )
        except Exception as e:
            logger.error(f"Failed to create Gemini explainer: {e}")
            raise
