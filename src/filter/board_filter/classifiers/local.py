"""Local ONNX model classifier"""
from __future__ import annotations

import asyncio
import logging

from board_filter.errors import InferenceError
from board_filter.inference.engine import InferenceEngine
from board_filter.scoring import score
from board_filter.tokenizer import Tokenizer

from .base import BaseClassifier, Classification, Reasoning

logger = logging.getLogger(__name__)

HATE_SPEECH_CUTOFF = 0.3


class LocalModelClassifier(BaseClassifier):
    """Tokenizer -> ONNX model -> sigmoid score, entirely in-process."""

    name = "tract"

    def __init__(
        self,
        tokenizer: Tokenizer,
        engine: InferenceEngine,
        hate_speech_cutoff: float = HATE_SPEECH_CUTOFF,
    ) -> None:
        self.tokenizer = tokenizer
        self.engine = engine
        self.hate_speech_cutoff = hate_speech_cutoff

    def sentiment_score(self, content: str) -> float:
        """Raw model score; raises ``InferenceError`` when the model fails."""
        tokens = self.tokenizer.tokenize(content)
        return score(self.engine.run(tokens))

    def classify_text(self, content: str) -> Classification:
        try:
            sentiment_score = self.sentiment_score(content)
        except InferenceError as exc:
            logger.error("Local inference failed, allowing content: %s", exc)
            return Classification.fallback(Reasoning.FALLBACK_ERROR, detail=str(exc))

        logger.info("Local model sentiment score: %.4f", sentiment_score)
        return Classification(
            sentiment_score=sentiment_score,
            is_hate_speech=sentiment_score < self.hate_speech_cutoff,
            reasoning=Reasoning.MODEL_INFERENCE,
        )

    async def classify(self, content: str) -> Classification:
        return await asyncio.to_thread(self.classify_text, content)
