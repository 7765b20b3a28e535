"""
Abstract base class for AI explanation collaborators.

All explainers must implement this interface to be swappable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Excerpt:
    """Agreement excerpt handed to the explainer"""
    heading: str
    text: str


class BaseExplainer(ABC):
    """
    Turns a question plus matched agreement excerpts into a plain-English answer.
    """
    
    @abstractmethod
    async def explain(self, question: str, excerpts: List[Excerpt]) -> str:
        """
        Answer question using only the given excerpts.
        
        Args:
            question: User question (already sanitized)
            excerpts: Ordered excerpts, most relevant first
            
        Returns:
            Non-empty answer text
            
        Raises:
            ExplainerError: On API failure or empty output
        """
        pass
    
    @abstractmethod
    def get_model_info(self) -> dict:
        """
        Get information about the explainer model.
        
        Returns:
            Dict with keys: name, type, provider
        """
        pass
    
    def close(self):
        """Optional cleanup (close API clients, etc.)"""
        pass
