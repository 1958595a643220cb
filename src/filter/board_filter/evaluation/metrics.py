from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(slots=True)
class ModerationMetrics:
    """Binary metrics where the positive class is "toxic"."""

    accuracy: float
    precision: float
    recall: float
    f1: float
    true_positives: int
    false_positives: int
    true_negatives: int
    false_negatives: int

    def to_dict(self) -> dict[str, float | int]:
        return {
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "true_negatives": self.true_negatives,
            "false_negatives": self.false_negatives,
        }


def confusion_matrix(actual: Sequence[bool], predicted: Sequence[bool]) -> tuple[int, int, int, int]:
    tp = fp = tn = fn = 0
    for truth, guess in zip(actual, predicted, strict=True):
        if truth and guess:
            tp += 1
        elif guess:
            fp += 1
        elif truth:
            fn += 1
        else:
            tn += 1
    return tp, fp, tn, fn


def calculate_metrics(actual: Sequence[bool], predicted: Sequence[bool]) -> ModerationMetrics:
    if not actual:
        raise ValueError("actual must not be empty.")
    if len(actual) != len(predicted):
        raise ValueError("actual and predicted must have the same length.")

    tp, fp, tn, fn = confusion_matrix(actual, predicted)

    precision = tp / (tp + fp) if (tp + fp) else 0.0
    recall = tp / (tp + fn) if (tp + fn) else 0.0
    f1 = (2 * precision * recall) / (precision + recall) if (precision + recall) else 0.0

    return ModerationMetrics(
        accuracy=(tp + tn) / len(actual),
        precision=precision,
        recall=recall,
        f1=f1,
        true_positives=tp,
        false_positives=fp,
        true_negatives=tn,
        false_negatives=fn,
    )
