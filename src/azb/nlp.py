from __future__ import annotations

import importlib
import os
import shlex
from pathlib import Path
from typing import Callable, Protocol

__all__ = [
    "FugashiSegmenter",
    "LazySegmenter",
    "NLPBackendUnavailableError",
    "Segmenter",
    "get_unidic_dicdir",
    "unique_tokens",
]


class NLPBackendUnavailableError(RuntimeError):
    """Raised when the MeCab segmenter cannot be initialized."""


class Segmenter(Protocol):
    def segment(self, text: str) -> list[str]: ...


def get_unidic_dicdir() -> Path | None:
    env_dir = os.environ.get("AZB_UNIDIC_DIR")
    if env_dir:
        candidate = Path(env_dir).expanduser()
        if (candidate / "dicrc").exists():
            return candidate
    for module_name in ("unidic", "unidic_lite"):
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        dicdir = getattr(module, "DICDIR", None)
        if dicdir and (Path(dicdir) / "dicrc").exists():
            return Path(dicdir)
    return None


class FugashiSegmenter:
    """Fugashi-based word segmenter; only token surfaces are used."""

    def __init__(self) -> None:
        try:
            from fugashi import Tagger  # type: ignore
        except ImportError as exc:
            raise NLPBackendUnavailableError(
                "Tokenization requires 'fugashi' (MeCab) to be installed."
            ) from exc

        dicdir = get_unidic_dicdir()
        args = f"-d {shlex.quote(str(dicdir))}" if dicdir else ""
        try:
            self._tagger = Tagger(args)
        except RuntimeError as exc:
            location = f" at '{dicdir}'" if dicdir else ""
            raise NLPBackendUnavailableError(
                f"Failed to initialize the MeCab dictionary{location}: {exc}"
            ) from exc

    def segment(self, text: str) -> list[str]:
        if not text:
            return []
        return [word.surface for word in self._tagger(text) if word.surface]


class LazySegmenter:
    """Defers building the wrapped segmenter until the first ``segment`` call."""

    def __init__(self, factory: Callable[[], Segmenter]) -> None:
        self._factory = factory
        self._segmenter: Segmenter | None = None

    def segment(self, text: str) -> list[str]:
        if self._segmenter is None:
            self._segmenter = self._factory()
        return self._segmenter.segment(text)


def unique_tokens(text: str, segmenter: Segmenter) -> list[str]:
    """Distinct tokens of ``text`` in first-occurrence order."""
    return list(dict.fromkeys(segmenter.segment(text)))
