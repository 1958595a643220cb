import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
FILTER_PATH = ROOT / "src" / "filter"
if str(FILTER_PATH) not in sys.path:
    sys.path.insert(0, str(FILTER_PATH))

from board_filter.tokenizer import MAX_LEN, Tokenizer, attention_mask_for
from board_filter.vocabulary import Vocabulary

PAD, UNK, CLS, SEP = 0, 100, 101, 102


def _bert_like_vocab(extra: list[str]) -> Vocabulary:
    lines = ["[PAD]"] + [f"[unused{i}]" for i in range(99)] + ["[UNK]", "[CLS]", "[SEP]", "[MASK]"]
    return Vocabulary.from_lines(lines + extra)


@pytest.fixture()
def tokenizer() -> Tokenizer:
    # ids: ! = 104, , = 105, - = 106, hello = 107, world = 108, #ing = 109, great = 110
    return Tokenizer(_bert_like_vocab(["!", ",", "-", "hello", "world", "#ing", "great"]))


def test_empty_text_is_markers_then_padding(tokenizer: Tokenizer) -> None:
    tokens = tokenizer.tokenize("")
    assert len(tokens.input_ids) == MAX_LEN
    assert tokens.input_ids[0] == CLS
    assert tokens.input_ids[1] == SEP
    assert set(tokens.input_ids[2:]) == {PAD}
    assert tokens.attention_mask[:2] == (1, 1)
    assert set(tokens.attention_mask[2:]) == {0}


def test_lowercases_and_splits_on_whitespace(tokenizer: Tokenizer) -> None:
    tokens = tokenizer.tokenize("Hello   WORLD")
    assert tokens.input_ids[:4] == (CLS, 107, 108, SEP)


def test_punctuation_flushes_word_and_is_emitted(tokenizer: Tokenizer) -> None:
    tokens = tokenizer.tokenize("hello,world!")
    assert tokens.input_ids[:6] == (CLS, 107, 105, 108, 104, SEP)


def test_hyphen_is_punctuation(tokenizer: Tokenizer) -> None:
    assert tokenizer.encode("great-hello") == [CLS, 110, 106, 107, SEP]


def test_subword_marker_fallback(tokenizer: Tokenizer) -> None:
    assert tokenizer.token_id("ing") == 109


def test_unknown_words_map_to_unk(tokenizer: Tokenizer) -> None:
    assert tokenizer.token_id("zebra") == UNK
    assert tokenizer.tokenize("zebra").input_ids[:3] == (CLS, UNK, SEP)


def test_unknown_defaults_to_100_without_unk_entry() -> None:
    tok = Tokenizer(Vocabulary.from_lines(["[PAD]", "[CLS]", "[SEP]"]))
    assert tok.token_id("anything") == 100


def test_missing_pad_entry_pads_with_zero() -> None:
    tok = Tokenizer(Vocabulary.from_lines(["[CLS]", "[SEP]", "hi"]))
    tokens = tok.tokenize("hi")
    assert tokens.input_ids[:3] == (0, 2, 1)
    assert set(tokens.input_ids[3:]) == {0}


def test_missing_markers_are_skipped() -> None:
    tok = Tokenizer(Vocabulary.from_lines(["[PAD]", "hi"]))
    assert tok.encode("hi") == [1]


@pytest.mark.parametrize(
    "text",
    ["", "hello", "hello " * 127, "hello " * 500, "!!!" * 200, "mixed, text - with: punctuation?"],
)
def test_length_is_always_max_len(tokenizer: Tokenizer, text: str) -> None:
    tokens = tokenizer.tokenize(text)
    assert len(tokens.input_ids) == MAX_LEN
    assert len(tokens.attention_mask) == MAX_LEN


def test_long_input_is_truncated_on_the_right(tokenizer: Tokenizer) -> None:
    tokens = tokenizer.tokenize("hello " * 300)
    assert tokens.input_ids[0] == CLS
    assert set(tokens.input_ids[1:]) == {107}
    assert SEP not in tokens.input_ids


def test_tokenize_is_deterministic(tokenizer: Tokenizer) -> None:
    text = "Hello, world - great!"
    assert tokenizer.tokenize(text) == tokenizer.tokenize(text)


def test_mask_is_zero_exactly_where_token_is_zero() -> None:
    ids = (101, 7, 0, 102, 0, 0)
    assert attention_mask_for(ids) == (1, 1, 0, 1, 0, 0)


def test_mask_uses_literal_zero_not_resolved_pad_id_regression() -> None:
    # [PAD] resolves to 2 here; padding positions are therefore NOT masked,
    # while a legitimate token with id 0 IS masked.
    tok = Tokenizer(Vocabulary.from_lines(["hi", "[CLS]", "[PAD]", "[SEP]"]))
    tokens = tok.tokenize("hi")

    assert tokens.input_ids[:4] == (1, 0, 3, 2)
    assert tokens.attention_mask[:4] == (1, 0, 1, 1)
    assert set(tokens.attention_mask[3:]) == {1}
