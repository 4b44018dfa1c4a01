from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .lookup import LookupRecord
from .nlp import Segmenter
from .text import contains_cjk, split_sentences

__all__ = ["SentenceRecord", "annotate_text", "filter_tokens", "token_annotation"]


@dataclass(frozen=True)
class SentenceRecord:
    """
    Per-sentence view of the lookup table under one set of filter options.

    ``token_info`` maps each distinct surviving token to its inline
    annotation, in first-occurrence order.
    """

    sentence: str
    tokens: tuple[str, ...]
    filtered_tokens: tuple[str, ...]
    token_lookups: Mapping[str, LookupRecord] = field(default_factory=dict)
    token_info: Mapping[str, str] = field(default_factory=dict)


def token_annotation(token: str, record: LookupRecord) -> str:
    return f"[{token};{record.furigana or ''};{record.meaning or ''}]"


def _keep_token(
    token: str,
    lookups: Mapping[str, LookupRecord],
    exclude_common: bool,
    kanji_only: bool,
) -> bool:
    record = lookups.get(token)
    if record is None or not record.matched:
        return False
    if exclude_common and record.common is True:
        return False
    if kanji_only and not contains_cjk(token):
        return False
    return True


def filter_tokens(
    tokens: list[str] | tuple[str, ...],
    lookups: Mapping[str, LookupRecord],
    *,
    exclude_common: bool = False,
    kanji_only: bool = False,
) -> list[str]:
    return [token for token in tokens if _keep_token(token, lookups, exclude_common, kanji_only)]


def annotate_text(
    full_text: str,
    lookups: Mapping[str, LookupRecord],
    segmenter: Segmenter,
    *,
    exclude_common: bool = False,
    kanji_only: bool = False,
) -> list[SentenceRecord]:
    records: list[SentenceRecord] = []
    for sentence in split_sentences(full_text):
        tokens = segmenter.segment(sentence)
        filtered = filter_tokens(
            tokens,
            lookups,
            exclude_common=exclude_common,
            kanji_only=kanji_only,
        )
        token_lookups = {token: lookups[token] for token in filtered}
        token_info = {token: token_annotation(token, record) for token, record in token_lookups.items()}
        records.append(
            SentenceRecord(
                sentence=sentence,
                tokens=tuple(tokens),
                filtered_tokens=tuple(filtered),
                token_lookups=token_lookups,
                token_info=token_info,
            )
        )
    return records
