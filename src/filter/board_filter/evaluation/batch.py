"""Batch evaluation of the local sentiment model.

Scores every sample of a labeled TSV dataset once, then reports how well
``score < threshold`` separates toxic from neutral comments for each
candidate threshold.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from board_filter.classifiers.base import NEUTRAL_SCORE
from board_filter.classifiers.local import LocalModelClassifier
from board_filter.config import get_settings
from board_filter.errors import InferenceError
from board_filter.evaluation.datasets import Sample, load_samples
from board_filter.evaluation.metrics import ModerationMetrics, calculate_metrics
from board_filter.inference import InferenceEngine, get_backend
from board_filter.tokenizer import Tokenizer
from board_filter.utils.logging import configure_logging
from board_filter.vocabulary import get_vocabulary

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = "0.2,0.25,0.3,0.35,0.4"

Scorer = Callable[[str], float]


@dataclass(slots=True)
class SampleResult:
    id: str
    predicted_toxic: bool
    actual_toxic: bool
    score: float


@dataclass(slots=True)
class ThresholdReport:
    threshold: float
    toxic_count: int
    neutral_count: int
    metrics: ModerationMetrics
    results: list[SampleResult]

    def to_dict(self) -> dict[str, object]:
        return {
            "threshold": self.threshold,
            "toxic_count": self.toxic_count,
            "neutral_count": self.neutral_count,
            "metrics": self.metrics.to_dict(),
            "results": [
                {
                    "id": r.id,
                    "predicted_toxic": r.predicted_toxic,
                    "actual_toxic": r.actual_toxic,
                    "score": r.score,
                }
                for r in self.results
            ],
        }


def parse_thresholds(raw: str) -> list[float]:
    thresholds: list[float] = []
    for part in raw.split(","):
        try:
            thresholds.append(float(part.strip()))
        except ValueError:
            continue
    return thresholds


def score_samples(samples: Sequence[Sample], scorer: Scorer) -> list[float | None]:
    """Score each sample once; ``None`` marks an inference failure."""
    scores: list[float | None] = []
    for idx, sample in enumerate(samples, start=1):
        try:
            scores.append(scorer(sample.text))
        except InferenceError as exc:
            logger.warning("Inference failed for %s: %s", sample.id, exc)
            scores.append(None)
        if idx % 1000 == 0:
            logger.info("Scored %d/%d samples", idx, len(samples))
    return scores


def evaluate_threshold(samples: Sequence[Sample], scores: Sequence[float | None], threshold: float) -> ThresholdReport:
    results: list[SampleResult] = []
    for sample, value in zip(samples, scores, strict=True):
        if value is None:
            # Failed inference is treated the way the proxy treats it: allowed.
            results.append(SampleResult(sample.id, False, sample.is_toxic, NEUTRAL_SCORE))
            continue
        results.append(SampleResult(sample.id, value < threshold, sample.is_toxic, value))

    toxic_count = sum(1 for r in results if r.predicted_toxic)
    metrics = calculate_metrics([r.actual_toxic for r in results], [r.predicted_toxic for r in results])
    return ThresholdReport(
        threshold=threshold,
        toxic_count=toxic_count,
        neutral_count=len(results) - toxic_count,
        metrics=metrics,
        results=results,
    )


def _build_scorer() -> Scorer:
    settings = get_settings()
    classifier = LocalModelClassifier(
        Tokenizer(get_vocabulary(settings.vocab_path)),
        InferenceEngine(get_backend(settings.model_path)),
        hate_speech_cutoff=settings.hate_speech_cutoff,
    )
    return classifier.sentiment_score


def run(data: Path, thresholds: Sequence[float], output: Path | None, scorer: Scorer) -> list[ThresholdReport]:
    logger.info("Loading dataset from %s", data)
    samples = load_samples(data)
    logger.info("Loaded %d samples", len(samples))
    if not samples:
        logger.warning("No samples loaded")
        return []

    scores = score_samples(samples, scorer)
    reports: list[ThresholdReport] = []
    for threshold in thresholds:
        report = evaluate_threshold(samples, scores, threshold)
        m = report.metrics
        logger.info(
            "threshold=%.2f toxic=%d neutral=%d accuracy=%.4f precision=%.4f recall=%.4f f1=%.4f",
            threshold,
            report.toxic_count,
            report.neutral_count,
            m.accuracy,
            m.precision,
            m.recall,
            m.f1,
        )
        reports.append(report)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps([r.to_dict() for r in reports], indent=2), encoding="utf-8")
        logger.info("Wrote results to %s", output)
    return reports


def main(argv: Sequence[str] | None = None, scorer: Scorer | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="board-filter-eval",
        description="Evaluate the local sentiment model against a labeled dataset",
    )
    parser.add_argument(
        "-d",
        "--data",
        type=Path,
        required=True,
        help="TSV file with columns: id, comment_text, hate_score",
    )
    parser.add_argument("-o", "--output", type=Path, help="Write JSON results to this file")
    parser.add_argument(
        "-t",
        "--thresholds",
        default=DEFAULT_THRESHOLDS,
        help=f"Comma-separated thresholds to test (default: {DEFAULT_THRESHOLDS})",
    )
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)

    thresholds = parse_thresholds(args.thresholds)
    if not thresholds:
        parser.error("No valid thresholds provided")

    run(args.data, thresholds, args.output, scorer or _build_scorer())
    return 0


if __name__ == "__main__":
    sys.exit(main())
