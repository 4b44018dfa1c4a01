from __future__ import annotations

from pathlib import Path

import sys
import types

import pytest

from azb.nlp import LazySegmenter, get_unidic_dicdir, unique_tokens


class _SplitSegmenter:
    def segment(self, text: str) -> list[str]:
        return text.split()


def test_unique_tokens_collapse_duplicates_in_order() -> None:
    assert unique_tokens("b a b c a", _SplitSegmenter()) == ["b", "a", "c"]


def test_unidic_dir_from_environment(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / "dicrc").write_text("", encoding="utf-8")
    monkeypatch.setenv("AZB_UNIDIC_DIR", str(tmp_path))
    assert get_unidic_dicdir() == tmp_path


def test_unidic_dir_falls_back_to_unidic_lite(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / "dicrc").write_text("", encoding="utf-8")
    monkeypatch.delenv("AZB_UNIDIC_DIR", raising=False)
    monkeypatch.setitem(sys.modules, "unidic", None)
    monkeypatch.setitem(sys.modules, "unidic_lite", types.SimpleNamespace(DICDIR=str(tmp_path)))
    assert get_unidic_dicdir() == tmp_path


def test_unidic_dir_skips_packages_without_dictionary(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("AZB_UNIDIC_DIR", raising=False)
    monkeypatch.setitem(sys.modules, "unidic", types.SimpleNamespace(DICDIR=str(tmp_path / "missing")))
    monkeypatch.setitem(sys.modules, "unidic_lite", None)
    assert get_unidic_dicdir() is None


def test_lazy_segmenter_builds_backend_on_first_use() -> None:
    built: list[_SplitSegmenter] = []

    def _factory() -> _SplitSegmenter:
        built.append(_SplitSegmenter())
        return built[-1]

    segmenter = LazySegmenter(_factory)
    assert built == []
    assert segmenter.segment("a b") == ["a", "b"]
    assert segmenter.segment("c") == ["c"]
    assert len(built) == 1


def test_fugashi_segmentation_is_deterministic() -> None:
    pytest.importorskip("fugashi")
    from azb.nlp import FugashiSegmenter, NLPBackendUnavailableError

    try:
        segmenter = FugashiSegmenter()
    except NLPBackendUnavailableError as exc:
        pytest.skip(str(exc))
    text = "猫が鳴いた。犬も鳴いた。"
    tokens = segmenter.segment(text)
    assert tokens
    assert tokens == segmenter.segment(text)
    assert "猫" in tokens
    assert "".join(tokens) == text
    assert segmenter.segment("") == []
