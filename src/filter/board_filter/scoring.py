from __future__ import annotations

import math

from board_filter.inference.engine import InferenceOutput

# Bounds that keep a saturated sigmoid inside the open interval (0, 1).
_SCORE_MIN = math.ulp(0.0)
_SCORE_MAX = math.nextafter(1.0, 0.0)


def sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def score(output: InferenceOutput) -> float:
    """Positivity of a post: sigmoid of the positive/negative logit margin."""
    value = sigmoid(output.positive_logit - output.negative_logit)
    return min(max(value, _SCORE_MIN), _SCORE_MAX)
