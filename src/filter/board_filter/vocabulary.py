from __future__ import annotations

import logging
import threading
from importlib import resources
from importlib.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from board_filter.errors import VocabularyError

logger = logging.getLogger(__name__)

_DEFAULT_VOCAB = resources.files("board_filter.assets").joinpath("vocab.txt")


class Vocabulary:
    """Immutable token -> id table. The id of a token is its zero-based line number."""

    def __init__(self, table: Mapping[str, int]) -> None:
        self._table: Mapping[str, int] = MappingProxyType(dict(table))

    @classmethod
    def from_lines(cls, lines: Iterator[str] | list[str]) -> Vocabulary:
        table: dict[str, int] = {}
        # Duplicate tokens: the last occurrence wins.
        for idx, line in enumerate(lines):
            table[line.strip()] = idx
        return cls(table)

    def get(self, token: str) -> int | None:
        return self._table.get(token)

    def __contains__(self, token: object) -> bool:
        return token in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)


def load_vocabulary(source: Path | Traversable) -> Vocabulary:
    """Parse a newline-delimited vocabulary file.

    Raises:
        VocabularyError: the file is absent, unreadable, not UTF-8, or empty.
    """
    try:
        raw = source.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise VocabularyError(f"Unable to read vocabulary from {source}: {exc}") from exc

    # Only "\n" and "\r\n" end a line; other Unicode breaks may appear inside tokens.
    lines = [line.removesuffix("\r") for line in raw.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    if not any(line.strip() for line in lines):
        raise VocabularyError(f"Vocabulary at {source} contains no tokens")

    vocabulary = Vocabulary.from_lines(lines)
    logger.info("Loaded %d tokens from vocabulary %s", len(vocabulary), source)
    return vocabulary


_VOCABULARY: Vocabulary | None = None
_VOCABULARY_LOCK = threading.Lock()


def get_vocabulary(path: Path | None = None) -> Vocabulary:
    """Return the process-wide vocabulary, loading it on first use.

    The first caller's ``path`` decides which file is loaded; later calls
    return the cached table regardless of the argument.
    """
    global _VOCABULARY
    if _VOCABULARY is not None:
        return _VOCABULARY
    with _VOCABULARY_LOCK:
        if _VOCABULARY is None:
            _VOCABULARY = load_vocabulary(path or _DEFAULT_VOCAB)
    return _VOCABULARY


def reset_vocabulary() -> None:
    global _VOCABULARY
    with _VOCABULARY_LOCK:
        _VOCABULARY = None
