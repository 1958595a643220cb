"""Sentiment classifiers feeding the content policy."""

from .base import BaseClassifier, Classification, Reasoning
from .llm import LlmClassifier
from .local import HATE_SPEECH_CUTOFF, LocalModelClassifier

__all__ = [
    "BaseClassifier",
    "Classification",
    "HATE_SPEECH_CUTOFF",
    "LlmClassifier",
    "LocalModelClassifier",
    "Reasoning",
]
