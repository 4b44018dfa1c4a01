from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from .lookup import DEFAULT_API_URL, DEFAULT_TIMEOUT

__all__ = ["AnnotatorSettings"]

DEFAULT_DB_PATH = Path("data/aozora_corpus.db")
DEFAULT_CACHE_DIR = Path("data")
DEFAULT_OUTPUT_DIR = Path("outputs")


@dataclass(frozen=True, slots=True)
class AnnotatorSettings:
    db_path: Path = DEFAULT_DB_PATH
    cache_dir: Path = DEFAULT_CACHE_DIR
    output_dir: Path = DEFAULT_OUTPUT_DIR
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AnnotatorSettings":
        env = os.environ if environ is None else environ
        settings = cls()
        db_path = env.get("AZB_DB_PATH")
        if db_path:
            settings = replace(settings, db_path=Path(db_path).expanduser())
        cache_dir = env.get("AZB_CACHE_DIR")
        if cache_dir:
            settings = replace(settings, cache_dir=Path(cache_dir).expanduser())
        output_dir = env.get("AZB_OUTPUT_DIR")
        if output_dir:
            settings = replace(settings, output_dir=Path(output_dir).expanduser())
        api_url = env.get("AZB_API_URL")
        if api_url:
            settings = replace(settings, api_url=api_url)
        timeout = env.get("AZB_TIMEOUT")
        if timeout:
            try:
                settings = replace(settings, timeout=float(timeout))
            except ValueError as exc:
                raise ValueError(f"AZB_TIMEOUT must be a number of seconds, got {timeout!r}") from exc
        return settings

    def with_overrides(self, **overrides: object) -> "AnnotatorSettings":
        """Apply non-None overrides, e.g. values parsed from the command line."""
        values = {key: value for key, value in overrides.items() if value is not None}
        for key in ("db_path", "cache_dir", "output_dir"):
            if key in values:
                values[key] = Path(str(values[key])).expanduser()
        return replace(self, **values)  # type: ignore[arg-type]
