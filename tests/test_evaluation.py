import json
import pathlib
import sys

import pytest

pytest.importorskip("onnxruntime")

ROOT = pathlib.Path(__file__).resolve().parents[1]
FILTER_PATH = ROOT / "src" / "filter"
if str(FILTER_PATH) not in sys.path:
    sys.path.insert(0, str(FILTER_PATH))

from board_filter.errors import InferenceError
from board_filter.evaluation import calculate_metrics, load_samples
from board_filter.evaluation.batch import evaluate_threshold, main, parse_thresholds, score_samples
from board_filter.evaluation.datasets import Sample

DATASET = (
    "id\tcomment_text\thate_score\n"
    "a\tyou are wonderful\t0\n"
    "b\tyou are awful\t1\n"
    "broken-row\n"
    "c\tnot sure\tn/a\n"
    "d\tworst people ever\t2\n"
)

SCORES = {"you are wonderful": 0.9, "you are awful": 0.1, "not sure": 0.33, "worst people ever": 0.28}


def _scorer(text: str) -> float:
    return SCORES[text]


@pytest.fixture()
def dataset(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "comments.tsv"
    path.write_text(DATASET, encoding="utf-8")
    return path


def test_load_samples_skips_malformed_rows(dataset: pathlib.Path) -> None:
    samples = load_samples(dataset)

    assert [s.id for s in samples] == ["a", "b", "c", "d"]
    assert [s.label for s in samples] == [0, 1, 0, 2]
    assert [s.is_toxic for s in samples] == [False, True, False, True]


def test_parse_thresholds_ignores_garbage() -> None:
    assert parse_thresholds("0.2, x,0.35,") == [0.2, 0.35]
    assert parse_thresholds("nope") == []


def test_evaluate_threshold_counts_predictions(dataset: pathlib.Path) -> None:
    samples = load_samples(dataset)
    scores = score_samples(samples, _scorer)

    low = evaluate_threshold(samples, scores, 0.25)
    high = evaluate_threshold(samples, scores, 0.3)

    assert low.toxic_count == 1
    assert low.metrics.recall == pytest.approx(0.5)
    assert high.toxic_count == 2
    assert high.neutral_count == 2
    assert high.metrics.accuracy == pytest.approx(1.0)
    assert high.metrics.f1 == pytest.approx(1.0)


def test_inference_failures_count_as_allowed() -> None:
    samples = [Sample("x", "boom", 1)]

    def failing(_text: str) -> float:
        raise InferenceError("no model")

    report = evaluate_threshold(samples, score_samples(samples, failing), 0.4)

    assert report.results[0].predicted_toxic is False
    assert report.results[0].score == 0.5
    assert report.metrics.false_negatives == 1


def test_calculate_metrics_rejects_mismatched_lengths() -> None:
    with pytest.raises(ValueError):
        calculate_metrics([True], [True, False])
    with pytest.raises(ValueError):
        calculate_metrics([], [])


def test_cli_writes_json_report(dataset: pathlib.Path, tmp_path: pathlib.Path) -> None:
    output = tmp_path / "out" / "report.json"

    exit_code = main(["--data", str(dataset), "--output", str(output), "--thresholds", "0.25,0.3"], scorer=_scorer)

    assert exit_code == 0
    report = json.loads(output.read_text(encoding="utf-8"))
    assert [entry["threshold"] for entry in report] == [0.25, 0.3]
    assert report[1]["metrics"]["accuracy"] == pytest.approx(1.0)
    assert {r["id"] for r in report[0]["results"]} == {"a", "b", "c", "d"}


def test_cli_rejects_empty_threshold_list(dataset: pathlib.Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--data", str(dataset), "--thresholds", "x,y"], scorer=_scorer)
    assert excinfo.value.code == 2


def test_cli_with_empty_dataset_succeeds(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "empty.tsv"
    path.write_text("id\tcomment_text\thate_score\n", encoding="utf-8")
    output = tmp_path / "report.json"

    assert main(["--data", str(path), "--output", str(output)], scorer=_scorer) == 0
    assert not output.exists()
