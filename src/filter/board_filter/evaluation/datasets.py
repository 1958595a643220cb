from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Sample:
    id: str
    text: str
    label: int

    @property
    def is_toxic(self) -> bool:
        return self.label > 0


def _parse_label(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def load_samples(path: Path) -> list[Sample]:
    """Read a tab-separated file with a header row and ``id, comment_text, hate_score`` columns.

    Rows with fewer than three columns are skipped; an unparsable label counts as 0.
    """
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}.")

    samples: list[Sample] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, delimiter="\t")
        next(reader, None)
        for row in reader:
            if len(row) < 3:
                logger.warning("Skipping malformed record (expected 3 columns): %r", row)
                continue
            samples.append(Sample(id=row[0], text=row[1], label=_parse_label(row[2])))
    return samples
