from __future__ import annotations

__all__ = [
    "SENTENCE_TERMINALS",
    "contains_cjk",
    "is_ascii_word_char",
    "is_cjk_char",
    "is_cjk_symbol",
    "is_hiragana",
    "is_kana",
    "is_katakana",
    "is_reading_char",
    "split_sentences",
]

SENTENCE_TERMINALS = frozenset("。！？")

# Iteration marks and the vertical-text repeat glyphs used inside furigana.
_READING_EXTRAS = frozenset("ヽゞゝ／″＼")


def is_cjk_char(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch)
    return (
        0x4E00 <= code <= 0x9FFF
        or 0x3400 <= code <= 0x4DBF
        or 0x20000 <= code <= 0x2A6DF
        or 0x2A700 <= code <= 0x2B73F
        or 0x2B740 <= code <= 0x2B81F
        or 0x2B820 <= code <= 0x2CEAF
        or 0x2CEB0 <= code <= 0x2EBEF
        or 0x30000 <= code <= 0x3134F
        or 0xF900 <= code <= 0xFAFF
        or 0x2F800 <= code <= 0x2FA1F
    )


def contains_cjk(text: str) -> bool:
    return any(is_cjk_char(ch) for ch in text)


def is_hiragana(ch: str) -> bool:
    return bool(ch) and 0x3041 <= ord(ch) <= 0x3093


def is_katakana(ch: str) -> bool:
    return bool(ch) and 0x30A1 <= ord(ch) <= 0x30F3


def is_kana(ch: str) -> bool:
    return is_hiragana(ch) or is_katakana(ch)


def is_cjk_symbol(ch: str) -> bool:
    """CJK symbols and punctuation block, including the ideographic space."""
    return bool(ch) and 0x3000 <= ord(ch) <= 0x303F


def is_ascii_word_char(ch: str) -> bool:
    return bool(ch) and ch.isascii() and (ch.isalnum() or ch == "_")


def is_reading_char(ch: str) -> bool:
    return is_kana(ch) or ch in _READING_EXTRAS


def split_sentences(text: str) -> list[str]:
    """
    Split ``text`` after every sentence terminal, keeping the terminal on the
    preceding sentence. A trailing fragment without a terminal is kept, so the
    pieces always join back into ``text``.
    """
    sentences: list[str] = []
    start = 0
    for index, ch in enumerate(text):
        if ch in SENTENCE_TERMINALS:
            sentences.append(text[start : index + 1])
            start = index + 1
    if start < len(text):
        sentences.append(text[start:])
    return sentences
