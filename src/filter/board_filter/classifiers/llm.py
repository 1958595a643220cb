"""Remote LLM classifier (Ollama-style generate API)"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

import httpx

from board_filter.errors import ClassificationError

from .base import BaseClassifier, Classification, Reasoning

logger = logging.getLogger(__name__)


class LlmClassifier(BaseClassifier):
    """Asks a remote LLM to score a post and flag hate speech.

    The prompt template's ``{}`` placeholder is replaced with the post. The
    model must answer with a JSON object carrying ``sentiment_score``,
    ``has_hate_speech`` and ``reason``. No retries: an unreachable server or
    a malformed answer degrades to a neutral, non-blocking classification.
    """

    name = "llm"

    def __init__(
        self,
        address: str,
        model: str,
        prompt: str,
        temperature: float = 0.0,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = f"{address.rstrip('/')}/api/generate"
        self.model = model
        self.prompt = prompt
        self.temperature = temperature
        self.timeout = timeout
        self.transport = transport

    def build_prompt(self, content: str) -> str:
        return self.prompt.replace("{}", content)

    async def _call_api(self, prompt: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.endpoint,
                headers={"Content-Type": "application/json"},
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "options": {"temperature": self.temperature},
                },
            )
            response.raise_for_status()
            return response.json()

    def _parse_response(self, payload: Any) -> Classification:
        try:
            raw = payload["response"]
            data = json.loads(raw)
            sentiment_score = float(data["sentiment_score"])
            has_hate_speech = data["has_hate_speech"]
            reason = str(data.get("reason", ""))
        except (KeyError, TypeError, ValueError) as exc:
            raise ClassificationError(f"Failed to parse LLM response: {exc}") from exc

        if not math.isfinite(sentiment_score) or not 0.0 <= sentiment_score <= 1.0:
            raise ClassificationError(f"LLM sentiment_score {sentiment_score!r} is outside [0, 1]")

        if not isinstance(has_hate_speech, bool):
            raise ClassificationError("LLM response field has_hate_speech is not a boolean")

        return Classification(
            sentiment_score=sentiment_score,
            is_hate_speech=has_hate_speech,
            reasoning=Reasoning.MODEL_INFERENCE,
            detail=reason,
        )

    async def classify(self, content: str) -> Classification:
        prompt = self.build_prompt(content)
        try:
            payload = await self._call_api(prompt)
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            logger.error("LLM call failed, allowing content: %s", exc)
            return Classification.fallback(Reasoning.FALLBACK_UNAVAILABLE, detail=str(exc))
        except ValueError as exc:
            logger.error("LLM returned a non-JSON body, allowing content: %s", exc)
            return Classification.fallback(Reasoning.FALLBACK_ERROR, detail=str(exc))

        try:
            classification = self._parse_response(payload)
        except ClassificationError as exc:
            logger.error("%s; allowing content", exc)
            return Classification.fallback(Reasoning.FALLBACK_ERROR, detail=str(exc))

        logger.info(
            "LLM classified content: sentiment=%.3f hate_speech=%s",
            classification.sentiment_score,
            classification.is_hate_speech,
        )
        return classification
