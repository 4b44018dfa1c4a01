from __future__ import annotations

import json

import pytest
import requests

from azb.lookup import (
    NO_MATCH,
    JotobaClient,
    JotobaError,
    JotobaUnavailableError,
    LookupResolver,
    is_lookup_eligible,
    record_from_word,
)

NEKO = {
    "common": True,
    "reading": {"kana": "ねこ", "kanji": "猫", "furigana": "[猫|ねこ]"},
    "senses": [{"glosses": ["cat"], "information": None}],
}


def _word(kana: str, kanji: str, glosses: list[str], *, common: bool = False, info: str | None = None) -> dict:
    return {
        "common": common,
        "reading": {"kana": kana, "kanji": kanji, "furigana": f"[{kanji}|{kana}]"},
        "senses": [{"glosses": glosses, "information": info}],
    }


class DummyResponse:
    def __init__(self, status_code: int, payload: object) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> object:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    @property
    def text(self) -> str:
        return str(self._payload)


class DummySession:
    def __init__(self, response: DummyResponse | Exception) -> None:
        self.response = response
        self.calls: list[tuple[str, dict[str, object] | None, float | None]] = []

    def post(self, url, *, json=None, headers=None, timeout=None):
        self.calls.append((url, json, timeout))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def close(self) -> None:
        pass


class CountingClient:
    def __init__(self, responses: dict[str, list[dict]] | None = None) -> None:
        self.responses = responses or {}
        self.queries: list[str] = []

    def search_words(self, query: str) -> list[dict]:
        self.queries.append(query)
        return self.responses.get(query, [])


class FailingClient:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def search_words(self, query: str) -> list[dict]:
        raise self.exc


@pytest.mark.parametrize("token", ["", "が", "ネ", "　", "。", "a", "7", "_"])
def test_single_kana_and_symbols_are_ineligible(token: str) -> None:
    assert not is_lookup_eligible(token)


@pytest.mark.parametrize("token", ["猫", "鳴いた", "ねこ", "ab"])
def test_kanji_and_longer_tokens_are_eligible(token: str) -> None:
    assert is_lookup_eligible(token)


def test_ineligible_tokens_never_reach_the_service() -> None:
    client = CountingClient({"が": [NEKO]})
    resolver = LookupResolver(client)  # type: ignore[arg-type]
    for token in ["が", "ア", "　", "x", "", None]:
        assert resolver.resolve(token) is NO_MATCH
    assert client.queries == []


def test_resolve_normalizes_first_candidate() -> None:
    client = CountingClient({"猫": [NEKO]})
    record = LookupResolver(client).resolve("猫")  # type: ignore[arg-type]
    assert record.term == "猫"
    assert record.common is True
    assert record.kana == "ねこ"
    assert record.kanji == "猫"
    assert record.furigana == "猫|ねこ"
    assert record.meaning == "cat"
    assert record.info is None
    assert record.matched
    assert client.queries == ["猫"]


def test_resolve_prefers_candidate_matching_target_reading() -> None:
    words = [
        _word("いちにち", "一日", ["one day"], common=True),
        _word("ついたち", "一日", ["first day of the month"], info="usu. written in kana"),
    ]
    resolver = LookupResolver(CountingClient({"一日": words}))  # type: ignore[arg-type]
    record = resolver.resolve("一日", "ついたち")
    assert record.kana == "ついたち"
    assert record.meaning == "first day of the month"
    assert record.info == "usu. written in kana"
    assert record.common is False


def test_resolve_falls_back_to_first_candidate_when_reading_unknown() -> None:
    words = [_word("いちにち", "一日", ["one day"]), _word("ついたち", "一日", ["1st"])]
    resolver = LookupResolver(CountingClient({"一日": words}))  # type: ignore[arg-type]
    assert resolver.resolve("一日", "ひとひ").kana == "いちにち"
    assert resolver.resolve("一日").kana == "いちにち"


def test_resolve_without_candidates_is_no_match() -> None:
    resolver = LookupResolver(CountingClient())  # type: ignore[arg-type]
    assert resolver.resolve("鳴いた") is NO_MATCH
    assert resolver.failures == []


@pytest.mark.parametrize(
    "exc",
    [JotobaUnavailableError("timed out"), JotobaError("status 500")],
)
def test_service_failures_degrade_to_no_match(exc: Exception) -> None:
    resolver = LookupResolver(FailingClient(exc))  # type: ignore[arg-type]
    assert resolver.resolve("猫") is NO_MATCH
    assert len(resolver.failures) == 1
    assert resolver.failures[0].token == "猫"
    assert str(exc) in resolver.failures[0].reason


def test_record_strips_list_punctuation() -> None:
    word = {
        "common": False,
        "reading": {"kana": "くもり", "kanji": "曇り", "furigana": "[曇|くも]り"},
        "senses": [{"glosses": ["cloudiness", "cloudy weather"], "information": None}],
    }
    record = record_from_word("曇り", word)
    assert record.furigana == "曇|くもり"
    assert record.meaning == "cloudiness, cloudy weather"


def test_client_posts_query_and_returns_words() -> None:
    session = DummySession(DummyResponse(200, {"words": [NEKO], "kanji": []}))
    client = JotobaClient("https://dict.example/", 5.0, session=session)  # type: ignore[arg-type]
    assert client.search_words("猫") == [NEKO]
    url, payload, timeout = session.calls[0]
    assert url == "https://dict.example/api/search/words"
    assert payload == {"query": "猫", "language": "English", "no_english": False}
    assert timeout == 5.0


def test_client_treats_missing_words_as_empty() -> None:
    session = DummySession(DummyResponse(200, {"kanji": []}))
    client = JotobaClient(session=session)  # type: ignore[arg-type]
    assert client.search_words("猫") == []


def test_client_wraps_connection_errors() -> None:
    session = DummySession(requests.ConnectionError("refused"))
    client = JotobaClient(session=session)  # type: ignore[arg-type]
    with pytest.raises(JotobaUnavailableError):
        client.search_words("猫")


def test_client_rejects_bad_status_and_invalid_json() -> None:
    client = JotobaClient(session=DummySession(DummyResponse(500, "boom")))  # type: ignore[arg-type]
    with pytest.raises(JotobaError):
        client.search_words("猫")
    invalid = DummyResponse(200, json.JSONDecodeError("bad", "", 0))
    client = JotobaClient(session=DummySession(invalid))  # type: ignore[arg-type]
    with pytest.raises(JotobaError):
        client.search_words("猫")
