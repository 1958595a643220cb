"""Shared classification result and classifier interface"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

NEUTRAL_SCORE = 0.5


class Reasoning(str, Enum):
    MODEL_INFERENCE = "model_inference"
    FALLBACK_UNAVAILABLE = "fallback_unavailable"
    FALLBACK_ERROR = "fallback_error"


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of classifying one post.

    ``sentiment_score`` runs from 0.0 (negative) to 1.0 (positive).
    """

    sentiment_score: float
    is_hate_speech: bool
    reasoning: Reasoning
    detail: str | None = None

    @classmethod
    def fallback(cls, reasoning: Reasoning, detail: str | None = None) -> Classification:
        """Neutral, non-blocking result used whenever a classifier cannot decide."""
        return cls(sentiment_score=NEUTRAL_SCORE, is_hate_speech=False, reasoning=reasoning, detail=detail)

    @property
    def is_fallback(self) -> bool:
        return self.reasoning is not Reasoning.MODEL_INFERENCE


class BaseClassifier(ABC):
    """Abstract base class for sentiment classifiers"""

    name: str = "classifier"

    @abstractmethod
    async def classify(self, content: str) -> Classification:
        """
        Classify post content

        Args:
            content: Raw post text

        Returns:
            Classification; implementations degrade to ``Classification.fallback``
            instead of raising for backend failures
        """
