from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .annotate import SentenceRecord

__all__ = [
    "FORMAT_NAMES",
    "RenderedText",
    "layered_block",
    "render_annotations",
    "render_sentence",
    "ruby_annotation",
    "sidebyside_block",
    "sized_span",
]

FORMAT_NAMES = (
    "alternating",
    "parallel",
    "layered",
    "sidebyside",
    "alternating_plaintext",
    "layered_plaintext",
)


@dataclass(frozen=True)
class RenderedText:
    alternating: tuple[str, ...] = ()
    parallel: tuple[str, ...] = ()
    layered: tuple[str, ...] = ()
    sidebyside: tuple[str, ...] = ()
    alternating_plaintext: tuple[str, ...] = ()
    layered_plaintext: tuple[str, ...] = ()

    def as_mapping(self) -> dict[str, tuple[str, ...]]:
        return {name: getattr(self, name) for name in FORMAT_NAMES}


def sized_span(text: str, size_str: str) -> str:
    return f'<span style = "font-size: {size_str}">{text}</span>'


def ruby_annotation(term: str, reading: str, meaning: str) -> str:
    """Three-tier ruby: reading above the term, meaning below."""
    return f"<ruby><rb>{term}</rb><rt>{reading}</rt><rtc>{meaning}</rtc></ruby>"


def layered_block(sentence: str, annotation: str) -> str:
    return f"""
    <div style = "display: block; width: 100%;">
    <p>{sentence}</p>
    <p>{annotation}</p>
    </div>
    """


def sidebyside_block(sentence: str, annotation: str, size_str: str) -> str:
    return f"""
    <div style = "display: inline-block; width: 100%">
        <div class = "column" style = "width: 20%; float: left; font-size: {size_str}"><p>{sentence}</p></div>
        <div class = "column" style = "width: 80%; float: left"><p>{annotation}</p></div>
    </div>
    """


def render_sentence(record: SentenceRecord, size_str: str) -> dict[str, str]:
    annotations = "".join(record.token_info.values())
    alternating: list[str] = []
    parallel: list[str] = []
    alternating_plain: list[str] = []
    for token in record.tokens:
        info = record.token_info.get(token, "")
        alternating.append(f"{sized_span(token, size_str)}{info}")
        alternating_plain.append(f"{token}{info}")
        lookup = record.token_lookups.get(token)
        reading = (lookup.furigana or "") if lookup else ""
        meaning = (lookup.meaning or "") if lookup else ""
        parallel.append(ruby_annotation(token, reading, meaning))
    return {
        "alternating": "".join(alternating),
        "parallel": "".join(parallel),
        "layered": layered_block(sized_span(record.sentence, size_str), annotations),
        "sidebyside": sidebyside_block(record.sentence, annotations, size_str),
        "alternating_plaintext": "".join(alternating_plain),
        "layered_plaintext": f"{record.sentence}\n\n{annotations}",
    }


def render_annotations(records: Iterable[SentenceRecord], size_str: str = "100%") -> RenderedText:
    """
    Render every sentence into the six output layouts.

    ``size_str`` is any CSS font-size value (``125%``, ``61px``, ``1.1em``)
    and is inserted as given. Font scaling applies to the alternating,
    layered and side-by-side HTML layouts only.
    """
    columns: dict[str, list[str]] = {name: [] for name in FORMAT_NAMES}
    for record in records:
        for name, value in render_sentence(record, size_str).items():
            columns[name].append(value)
    return RenderedText(**{name: tuple(values) for name, values in columns.items()})
