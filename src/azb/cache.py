from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Mapping

from .logging_utils import debug_log
from .lookup import LOOKUP_FIELDS, LookupRecord, LookupResolver
from .nlp import Segmenter, unique_tokens

__all__ = [
    "CACHE_SUFFIX",
    "CacheCorruptionError",
    "LookupCache",
    "LookupCancelled",
    "ProgressCallback",
    "deserialize_lookups",
    "populate_lookups",
    "serialize_lookups",
]

CACHE_SUFFIX = ".json"
ProgressCallback = Callable[[dict[str, object]], None]

_BOOL_FIELDS = {"common"}


class CacheCorruptionError(ValueError):
    """Raised when a persisted lookup file cannot be parsed."""


class LookupCancelled(RuntimeError):
    """Raised when lookup population is stopped before every token resolved."""


def serialize_lookups(lookups: Mapping[str, LookupRecord]) -> dict[str, dict[str, object]]:
    return {token: record.to_payload() for token, record in lookups.items()}


def _deserialize_record(token: str, entry: object, source: str) -> LookupRecord:
    if not isinstance(entry, Mapping):
        raise CacheCorruptionError(f"{source}: entry for {token!r} must be an object.")
    unknown = set(entry) - set(LOOKUP_FIELDS)
    if unknown:
        names = ", ".join(sorted(str(name) for name in unknown))
        raise CacheCorruptionError(f"{source}: entry for {token!r} has unknown fields: {names}")
    values: dict[str, object] = {}
    for name in LOOKUP_FIELDS:
        value = entry.get(name)
        if value is not None:
            expected = bool if name in _BOOL_FIELDS else str
            if not isinstance(value, expected):
                raise CacheCorruptionError(
                    f"{source}: field {name!r} of {token!r} must be {expected.__name__} or null."
                )
        values[name] = value
    return LookupRecord(**values)  # type: ignore[arg-type]


def deserialize_lookups(payload: object, source: str = "lookup cache") -> dict[str, LookupRecord]:
    if not isinstance(payload, Mapping):
        raise CacheCorruptionError(f"{source} must contain a JSON object keyed by token.")
    return {
        str(token): _deserialize_record(str(token), entry, source)
        for token, entry in payload.items()
    }


class LookupCache:
    """
    Durable token -> LookupRecord tables, one JSON file per key.

    Files are read and written whole and are meant to be hand-edited between
    runs. Only one writer per key is expected.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_SUFFIX}"

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def load(self, key: str) -> dict[str, LookupRecord]:
        path = self.path_for(key)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheCorruptionError(f"Failed to parse lookup cache: {path} ({exc})") from exc
        return deserialize_lookups(raw, source=path.name)

    def save(self, key: str, lookups: Mapping[str, LookupRecord]) -> Path:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(serialize_lookups(lookups), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        return path


def populate_lookups(
    full_text: str,
    furigana: Mapping[str, str],
    cache_key: str,
    *,
    segmenter: Segmenter,
    resolver: LookupResolver,
    cache: LookupCache,
    progress: ProgressCallback | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> dict[str, LookupRecord]:
    """
    Return the lookup table for ``full_text``.

    A cached table for ``cache_key`` is returned as stored, without checking
    it against the current tokens. Otherwise every unique token is resolved
    exactly once and the result is saved before returning.
    """
    if cache.exists(cache_key):
        debug_log(f"lookups loaded from {cache.path_for(cache_key)}")
        return cache.load(cache_key)

    tokens = unique_tokens(full_text, segmenter)
    total = len(tokens)
    if progress:
        progress({"event": "lookup_start", "total": total})
    lookups: dict[str, LookupRecord] = {}
    for completed, token in enumerate(tokens, start=1):
        if should_stop is not None and should_stop():
            raise LookupCancelled(f"Lookup stopped after {completed - 1} of {total} tokens.")
        lookups[token] = resolver.resolve(token, furigana.get(token))
        if progress:
            progress(
                {
                    "event": "lookup_progress",
                    "completed": completed,
                    "total": total,
                    "token": token,
                }
            )
    path = cache.save(cache_key, lookups)
    debug_log(f"lookups written to {path}")
    if progress:
        progress({"event": "lookup_done", "total": total, "path": path})
    return lookups
