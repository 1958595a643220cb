import pathlib
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
FILTER_PATH = ROOT / "src" / "filter"
if str(FILTER_PATH) not in sys.path:
    sys.path.insert(0, str(FILTER_PATH))

from board_filter import vocabulary
from board_filter.errors import VocabularyError
from board_filter.vocabulary import Vocabulary, get_vocabulary, load_vocabulary, reset_vocabulary


@pytest.fixture(autouse=True)
def _fresh_singleton():
    reset_vocabulary()
    yield
    reset_vocabulary()


def test_ids_are_zero_based_line_numbers(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_text("[PAD]\nhello\n  world  \n", encoding="utf-8")

    vocab = load_vocabulary(path)

    assert vocab.get("[PAD]") == 0
    assert vocab.get("hello") == 1
    assert vocab.get("world") == 2
    assert len(vocab) == 3
    assert "missing" not in vocab


def test_only_newlines_separate_tokens(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_bytes("[PAD]\r\nfoo\x1cbar\nbaz\u2028qux\nhello\rworld\n".encode("utf-8"))

    vocab = load_vocabulary(path)

    assert vocab.get("[PAD]") == 0
    assert vocab.get("foo\x1cbar") == 1
    assert vocab.get("baz\u2028qux") == 2
    assert vocab.get("hello\rworld") == 3
    assert len(vocab) == 4


def test_duplicate_tokens_keep_last_occurrence() -> None:
    vocab = Vocabulary.from_lines(["a", "b", "a"])
    assert vocab.get("a") == 2
    assert vocab.get("b") == 1


def test_vocabulary_is_read_only() -> None:
    vocab = Vocabulary.from_lines(["a"])
    with pytest.raises(TypeError):
        vocab._table["b"] = 1  # type: ignore[index]


def test_missing_vocabulary_is_fatal(tmp_path: pathlib.Path) -> None:
    with pytest.raises(VocabularyError):
        load_vocabulary(tmp_path / "absent.txt")


def test_blank_vocabulary_is_fatal(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_text("\n  \n", encoding="utf-8")
    with pytest.raises(VocabularyError):
        load_vocabulary(path)


def test_non_utf8_vocabulary_is_fatal(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(VocabularyError):
        load_vocabulary(path)


def test_bundled_vocabulary_uses_bert_special_ids() -> None:
    vocab = get_vocabulary()
    assert vocab.get("[PAD]") == 0
    assert vocab.get("[UNK]") == 100
    assert vocab.get("[CLS]") == 101
    assert vocab.get("[SEP]") == 102


def test_concurrent_first_use_loads_once(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_text("[PAD]\nhello\n", encoding="utf-8")

    calls = []
    lock = threading.Lock()
    real_load = vocabulary.load_vocabulary

    def counting_load(source):
        with lock:
            calls.append(source)
        return real_load(source)

    monkeypatch.setattr(vocabulary, "load_vocabulary", counting_load)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: get_vocabulary(path), range(32)))

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
