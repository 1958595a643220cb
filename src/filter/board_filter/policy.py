from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from board_filter.classifiers import (
    BaseClassifier,
    Classification,
    LlmClassifier,
    LocalModelClassifier,
    Reasoning,
)
from board_filter.config import Settings
from board_filter.inference import InferenceEngine, get_backend
from board_filter.tokenizer import Tokenizer
from board_filter.vocabulary import get_vocabulary

logger = logging.getLogger(__name__)

SPAM_MESSAGE = "Spam detected - this content won't be posted."
HATE_SPEECH_MESSAGE = "Content contains hate speech"
NEGATIVE_SENTIMENT_MESSAGE = "Content sentiment too negative"


@dataclass(frozen=True, slots=True)
class PolicyDecision:
    allowed: bool
    reason: str | None = None
    classification: Classification | None = None
    flagged: bool = False

    @classmethod
    def allow(cls, classification: Classification | None = None, flagged: bool = False) -> PolicyDecision:
        return cls(allowed=True, classification=classification, flagged=flagged)

    @classmethod
    def block(cls, reason: str, classification: Classification | None = None) -> PolicyDecision:
        return cls(allowed=False, reason=reason, classification=classification)


def parse_forbidden_words(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    words = (word.strip().lower() for word in raw.split(","))
    return tuple(word for word in words if word)


class ContentPolicy:
    """Forbidden-word gate followed by an optional sentiment gate.

    Only ``is_hate_speech`` blocks. A score under ``threshold`` is logged as a
    soft flag and the post is still allowed. Classifier failures fail open.
    """

    def __init__(
        self,
        forbidden_words: Iterable[str] = (),
        classifier: BaseClassifier | None = None,
        threshold: float = 0.3,
        block_message: str = HATE_SPEECH_MESSAGE,
    ) -> None:
        self.forbidden_words = tuple(word.lower() for word in forbidden_words if word)
        self.classifier = classifier
        self.threshold = threshold
        self.block_message = block_message

    def contains_forbidden_content(self, content: str) -> bool:
        lowered = content.lower()
        for word in self.forbidden_words:
            if word in lowered:
                # The matched word stays in the logs, never in the response.
                logger.warning("Forbidden word found in content: %s", word)
                return True
        return False

    async def evaluate(self, content: str) -> PolicyDecision:
        if self.contains_forbidden_content(content):
            return PolicyDecision.block(SPAM_MESSAGE)

        if self.classifier is None:
            return PolicyDecision.allow()

        try:
            classification = await self.classifier.classify(content)
        except Exception as exc:
            logger.error("Classification failed, allowing content: %s", exc, exc_info=True)
            classification = Classification.fallback(Reasoning.FALLBACK_ERROR, detail=str(exc))

        if classification.is_fallback:
            # A neutral stand-in score is never flagged.
            logger.warning(
                "No verdict from %s classifier (%s), allowing", self.classifier.name, classification.reasoning.value
            )
            return PolicyDecision.allow(classification)

        if classification.is_hate_speech:
            logger.warning(
                "Blocked by %s classifier: score=%.3f", self.classifier.name, classification.sentiment_score
            )
            return PolicyDecision.block(self.block_message, classification)

        flagged = classification.sentiment_score < self.threshold
        if flagged:
            logger.warning("Flagged very negative sentiment (%.3f), allowing", classification.sentiment_score)
        return PolicyDecision.allow(classification, flagged=flagged)


def build_classifier(settings: Settings) -> BaseClassifier | None:
    if settings.enable_llm:
        return LlmClassifier(
            address=settings.llm_address,
            model=settings.llm_model,
            prompt=settings.llm_prompt,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout_seconds,
        )
    if settings.enable_tract:
        tokenizer = Tokenizer(get_vocabulary(settings.vocab_path))
        engine = InferenceEngine(get_backend(settings.model_path))
        return LocalModelClassifier(tokenizer, engine, hate_speech_cutoff=settings.hate_speech_cutoff)
    return None


def build_policy(settings: Settings) -> ContentPolicy:
    """Assemble the policy for the configured mode. LLM takes precedence over the local model."""
    classifier = build_classifier(settings)
    block_message = NEGATIVE_SENTIMENT_MESSAGE if isinstance(classifier, LocalModelClassifier) else HATE_SPEECH_MESSAGE
    logger.info("Content policy mode: %s", settings.mode)
    return ContentPolicy(
        forbidden_words=parse_forbidden_words(settings.forbidden_words),
        classifier=classifier,
        threshold=settings.sentiment_score_threshold,
        block_message=block_message,
    )
