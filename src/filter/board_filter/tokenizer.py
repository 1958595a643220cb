from __future__ import annotations

import logging
from dataclasses import dataclass

from board_filter.vocabulary import Vocabulary

logger = logging.getLogger(__name__)

MAX_LEN = 128
CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"
PAD_TOKEN = "[PAD]"
UNK_TOKEN = "[UNK]"
SUBWORD_MARKER = "#"
UNKNOWN_FALLBACK_ID = 100
PAD_FALLBACK_ID = 0
PUNCTUATION = frozenset(",.!?;:\"'-")


@dataclass(frozen=True, slots=True)
class TokenizedInput:
    input_ids: tuple[int, ...]
    attention_mask: tuple[int, ...]


def attention_mask_for(input_ids: tuple[int, ...] | list[int]) -> tuple[int, ...]:
    # Masks on the literal id 0, not on the resolved [PAD] id.
    return tuple(0 if token_id == 0 else 1 for token_id in input_ids)


class Tokenizer:
    """Whitespace/punctuation splitter with a BERT-style vocabulary lookup."""

    def __init__(self, vocabulary: Vocabulary, max_length: int = MAX_LEN) -> None:
        self.vocabulary = vocabulary
        self.max_length = max_length
        self.cls_id = vocabulary.get(CLS_TOKEN)
        self.sep_id = vocabulary.get(SEP_TOKEN)
        pad_id = vocabulary.get(PAD_TOKEN)
        self.pad_id = PAD_FALLBACK_ID if pad_id is None else pad_id
        unk_id = vocabulary.get(UNK_TOKEN)
        self.unk_id = UNKNOWN_FALLBACK_ID if unk_id is None else unk_id

    def token_id(self, token: str) -> int:
        exact = self.vocabulary.get(token)
        if exact is not None:
            return exact
        continuation = self.vocabulary.get(f"{SUBWORD_MARKER}{token}")
        if continuation is not None:
            return continuation
        return self.unk_id

    def encode(self, text: str) -> list[int]:
        """Token ids for ``text`` with [CLS]/[SEP] markers, before padding."""
        ids: list[int] = []
        if self.cls_id is not None:
            ids.append(self.cls_id)

        word: list[str] = []
        for ch in text.lower():
            if ch.isspace() or ch in PUNCTUATION:
                if word:
                    ids.append(self.token_id("".join(word)))
                    word.clear()
                if ch in PUNCTUATION:
                    ids.append(self.token_id(ch))
            else:
                word.append(ch)
        if word:
            ids.append(self.token_id("".join(word)))

        if self.sep_id is not None:
            ids.append(self.sep_id)
        return ids

    def tokenize(self, text: str) -> TokenizedInput:
        ids = self.encode(text)
        if len(ids) < self.max_length:
            ids.extend([self.pad_id] * (self.max_length - len(ids)))
        del ids[self.max_length:]

        input_ids = tuple(ids)
        logger.debug("Tokenized %d characters into %d ids", len(text), len(input_ids))
        return TokenizedInput(input_ids=input_ids, attention_mask=attention_mask_for(input_ids))
