from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Mapping

import requests

from .logging_utils import debug_log
from .text import is_ascii_word_char, is_cjk_symbol, is_kana

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "LOOKUP_FIELDS",
    "NO_MATCH",
    "JotobaClient",
    "JotobaError",
    "JotobaUnavailableError",
    "LookupFailure",
    "LookupRecord",
    "LookupResolver",
    "is_lookup_eligible",
    "record_from_word",
]

DEFAULT_API_URL = "https://jotoba.de"
DEFAULT_TIMEOUT = 60.0


class JotobaError(RuntimeError):
    """Raised when the Jotoba API returns an unexpected response."""


class JotobaUnavailableError(ConnectionError):
    """Raised when the Jotoba API is unreachable or times out."""


@dataclass(frozen=True)
class LookupRecord:
    """
    Normalized dictionary entry for one token.

    ``NO_MATCH`` (every field ``None``) stands for "no usable entry"; a real
    match always carries ``term``.
    """

    term: str | None = None
    common: bool | None = None
    kana: str | None = None
    kanji: str | None = None
    furigana: str | None = None
    meaning: str | None = None
    info: str | None = None

    @property
    def matched(self) -> bool:
        return self.term is not None

    def to_payload(self) -> dict[str, object]:
        return asdict(self)


LOOKUP_FIELDS = tuple(LookupRecord.__dataclass_fields__)
NO_MATCH = LookupRecord()


@dataclass(frozen=True)
class LookupFailure:
    token: str
    reason: str


def is_lookup_eligible(token: str | None) -> bool:
    """Single kana, symbols and ASCII word characters are never looked up."""
    if not token:
        return False
    if len(token) == 1:
        return not (is_kana(token) or is_cjk_symbol(token) or is_ascii_word_char(token))
    return True


def _strip_chars(text: str, chars: str) -> str:
    return "".join(ch for ch in text if ch not in chars)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _candidate_index(words: list[dict[str, Any]], target_reading: str | None) -> int:
    if target_reading is None:
        return 0
    for index, word in enumerate(words):
        reading = word.get("reading") or {}
        if reading.get("kana") == target_reading:
            return index
    return 0


def record_from_word(query: str, word: Mapping[str, Any]) -> LookupRecord:
    reading = word.get("reading") or {}
    senses = word.get("senses") or []
    first_sense = senses[0] if senses else {}
    furigana = reading.get("furigana")
    glosses = first_sense.get("glosses") or []
    if isinstance(glosses, list):
        meaning = ", ".join(str(gloss) for gloss in glosses)
    else:
        meaning = str(glosses)
    common = word.get("common")
    return LookupRecord(
        term=query,
        common=bool(common) if common is not None else None,
        kana=_optional_str(reading.get("kana")),
        kanji=_optional_str(reading.get("kanji")),
        furigana=_strip_chars(str(furigana), "[]") if furigana is not None else "",
        meaning=_strip_chars(meaning, '[]"'),
        info=_optional_str(first_sense.get("information")),
    )


class JotobaClient:
    """
    Thin wrapper around the Jotoba word search API.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        language: str = "English",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.language = language
        self._session = session or requests.Session()

    def search_words(self, query: str) -> list[dict[str, Any]]:
        try:
            response = self._session.post(
                f"{self.base_url}/api/search/words",
                json={"query": query, "language": self.language, "no_english": False},
                headers={"accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise JotobaUnavailableError(
                f"Failed to contact Jotoba at {self.base_url}: {exc}"
            ) from exc

        if response.status_code != 200:
            raise JotobaError(
                f"/api/search/words failed with status {response.status_code}: {response.text}"
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise JotobaError("Jotoba returned invalid JSON for /api/search/words") from exc

        if not isinstance(payload, dict):
            raise JotobaError("Jotoba response is not a JSON object")
        words = payload.get("words")
        if words is None:
            return []
        if not isinstance(words, list):
            raise JotobaError("Jotoba response field 'words' is not a list")
        return [word for word in words if isinstance(word, dict)]

    def close(self) -> None:
        self._session.close()


class LookupResolver:
    """Resolve tokens into LookupRecords, degrading every failure to NO_MATCH."""

    def __init__(self, client: JotobaClient) -> None:
        self.client = client
        self.failures: list[LookupFailure] = []

    def resolve(self, token: str | None, target_reading: str | None = None) -> LookupRecord:
        if token is None or not is_lookup_eligible(token):
            return NO_MATCH
        try:
            words = self.client.search_words(token)
        except (JotobaError, JotobaUnavailableError) as exc:
            self.failures.append(LookupFailure(token=token, reason=str(exc)))
            debug_log(f"lookup for {token!r} degraded to no match: {exc}")
            return NO_MATCH
        if not words:
            return NO_MATCH
        try:
            return record_from_word(token, words[_candidate_index(words, target_reading)])
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            self.failures.append(LookupFailure(token=token, reason=f"malformed entry: {exc}"))
            debug_log(f"lookup for {token!r} returned a malformed entry: {exc}")
            return NO_MATCH
