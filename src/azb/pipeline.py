from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Mapping

from .annotate import SentenceRecord, annotate_text
from .cache import LookupCache, ProgressCallback, populate_lookups
from .corpus import CorpusStore, Work
from .export import output_prefix_for
from .furigana import parse_furigana_pairs
from .lookup import LookupRecord, LookupResolver
from .nlp import Segmenter
from .render import RenderedText, render_annotations

__all__ = [
    "AnnotationRun",
    "PipelineStateError",
    "annotate",
    "cache_key_for",
    "load_work",
    "populate",
    "render",
    "rendered_output",
]


class PipelineStateError(RuntimeError):
    """Raised when a stage runs before the stage it depends on."""


@dataclass(frozen=True)
class AnnotationRun:
    """
    Immutable state threaded through the pipeline stages.

    Each stage returns a copy with its own output filled in and refuses to
    run until its predecessor's output is present.
    """

    work: Work
    furigana: Mapping[str, str]
    lookups: Mapping[str, LookupRecord] | None = None
    sentences: tuple[SentenceRecord, ...] | None = None
    rendered: RenderedText | None = None


def cache_key_for(work: Work) -> str:
    return output_prefix_for(work.work_id, work.title)


def load_work(store: CorpusStore, segmenter: Segmenter, work_id: str) -> AnnotationRun:
    work = store.get_work(work_id)
    furigana = parse_furigana_pairs(store.get_furigana_pairs(work_id), segmenter)
    return AnnotationRun(work=work, furigana=furigana)


def populate(
    run: AnnotationRun,
    *,
    segmenter: Segmenter,
    resolver: LookupResolver,
    cache: LookupCache,
    progress: ProgressCallback | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> AnnotationRun:
    lookups = populate_lookups(
        run.work.full_text,
        run.furigana,
        cache_key_for(run.work),
        segmenter=segmenter,
        resolver=resolver,
        cache=cache,
        progress=progress,
        should_stop=should_stop,
    )
    return replace(run, lookups=lookups, sentences=None, rendered=None)


def annotate(
    run: AnnotationRun,
    segmenter: Segmenter,
    *,
    exclude_common: bool = False,
    kanji_only: bool = False,
) -> AnnotationRun:
    if run.lookups is None:
        raise PipelineStateError("Lookups must be populated before annotating.")
    sentences = annotate_text(
        run.work.full_text,
        run.lookups,
        segmenter,
        exclude_common=exclude_common,
        kanji_only=kanji_only,
    )
    return replace(run, sentences=tuple(sentences), rendered=None)


def render(run: AnnotationRun, size_str: str = "100%") -> AnnotationRun:
    if run.sentences is None:
        raise PipelineStateError("Text must be annotated before rendering.")
    return replace(run, rendered=render_annotations(run.sentences, size_str))


def rendered_output(run: AnnotationRun) -> RenderedText:
    if run.rendered is None:
        raise PipelineStateError("Text must be rendered before exporting.")
    return run.rendered
