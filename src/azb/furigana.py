from __future__ import annotations

from typing import Iterable

from .logging_utils import debug_log
from .nlp import Segmenter
from .text import is_reading_char

__all__ = ["READING_OPEN_MARKER", "extract_reading", "parse_furigana_pairs"]

READING_OPEN_MARKER = "（"


def extract_reading(raw: str) -> str | None:
    """Return the first contiguous run of kana/iteration marks in ``raw``."""
    start: int | None = None
    for index, ch in enumerate(raw):
        if is_reading_char(ch):
            if start is None:
                start = index
        elif start is not None:
            return raw[start:index]
    if start is None:
        return None
    return raw[start:]


def parse_furigana_pairs(
    pairs: Iterable[tuple[str, str]],
    segmenter: Segmenter,
) -> dict[str, str]:
    """
    Build a term -> reading map from the corpus furigana table.

    Each pair is ``(context, reading)`` where ``context`` holds the annotated
    term followed by ``（``. Malformed pairs are skipped; a term seen twice
    keeps the last reading.
    """
    mapping: dict[str, str] = {}
    for context, raw_reading in pairs:
        if not isinstance(context, str) or not isinstance(raw_reading, str):
            debug_log(f"furigana pair skipped, non-text field: {context!r}")
            continue
        tokens = segmenter.segment(context)
        try:
            marker_index = tokens.index(READING_OPEN_MARKER)
        except ValueError:
            debug_log(f"furigana pair skipped, no reading marker: {context!r}")
            continue
        if marker_index == 0:
            debug_log(f"furigana pair skipped, nothing precedes marker: {context!r}")
            continue
        reading = extract_reading(raw_reading)
        if not reading:
            debug_log(f"furigana pair skipped, no kana in reading: {raw_reading!r}")
            continue
        mapping[tokens[marker_index - 1]] = reading
    return mapping
