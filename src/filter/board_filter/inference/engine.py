from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from board_filter.errors import InferenceError
from board_filter.inference.backend import InferenceBackend
from board_filter.tokenizer import MAX_LEN, TokenizedInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InferenceOutput:
    negative_logit: float
    positive_logit: float


class InferenceEngine:
    """Turns a tokenized post into the classifier's (negative, positive) logits."""

    def __init__(self, backend: InferenceBackend, max_length: int = MAX_LEN) -> None:
        self.backend = backend
        self.max_length = max_length

    def build_tensors(self, tokens: TokenizedInput) -> tuple[np.ndarray, np.ndarray]:
        input_ids = np.zeros((1, self.max_length), dtype=np.int64)
        attention_mask = np.zeros((1, self.max_length), dtype=np.int64)
        length = min(len(tokens.input_ids), self.max_length)
        input_ids[0, :length] = tokens.input_ids[:length]
        attention_mask[0, :length] = tokens.attention_mask[:length]
        return input_ids, attention_mask

    def run(self, tokens: TokenizedInput) -> InferenceOutput:
        input_ids, attention_mask = self.build_tensors(tokens)
        logger.debug("Running inference on tensors of shape %s", input_ids.shape)

        raw = self.backend.run(input_ids, attention_mask)
        try:
            logits = np.asarray(raw, dtype=np.float32).reshape(-1)
        except (TypeError, ValueError) as exc:
            raise InferenceError(f"Model output is not a float tensor: {exc}") from exc

        if logits.size < 2:
            raise InferenceError(f"Unexpected model output shape: expected at least 2 logits, got {logits.size}")
        if not np.all(np.isfinite(logits[:2])):
            raise InferenceError("Model produced non-finite logits")

        output = InferenceOutput(negative_logit=float(logits[0]), positive_logit=float(logits[1]))
        logger.debug(
            "Inference complete: negative_logit=%.4f positive_logit=%.4f",
            output.negative_logit,
            output.positive_logit,
        )
        return output
