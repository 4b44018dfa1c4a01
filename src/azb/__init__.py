from .annotate import SentenceRecord, annotate_text
from .cache import CacheCorruptionError, LookupCache, LookupCancelled, populate_lookups
from .corpus import CorpusStore, CorpusUnavailableError, Work, WorkNotFoundError, WorkSummary
from .export import ExportContext, export_documents
from .furigana import parse_furigana_pairs
from .lookup import (
    NO_MATCH,
    JotobaClient,
    JotobaError,
    JotobaUnavailableError,
    LookupRecord,
    LookupResolver,
    is_lookup_eligible,
)
from .nlp import FugashiSegmenter, NLPBackendUnavailableError, Segmenter
from .pipeline import AnnotationRun, PipelineStateError
from .render import RenderedText, render_annotations
from .text import split_sentences

__all__ = [
    "AnnotationRun",
    "CacheCorruptionError",
    "CorpusStore",
    "CorpusUnavailableError",
    "ExportContext",
    "FugashiSegmenter",
    "JotobaClient",
    "JotobaError",
    "JotobaUnavailableError",
    "LookupCache",
    "LookupCancelled",
    "LookupRecord",
    "LookupResolver",
    "NLPBackendUnavailableError",
    "NO_MATCH",
    "PipelineStateError",
    "RenderedText",
    "Segmenter",
    "SentenceRecord",
    "Work",
    "WorkNotFoundError",
    "WorkSummary",
    "annotate_text",
    "export_documents",
    "is_lookup_eligible",
    "parse_furigana_pairs",
    "populate_lookups",
    "render_annotations",
    "split_sentences",
]
