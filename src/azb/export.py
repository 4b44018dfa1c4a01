from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .render import RenderedText

__all__ = [
    "HTML_EXPORTS",
    "TEXT_EXPORTS",
    "ExportContext",
    "export_documents",
    "output_prefix_for",
]

HTML_EXPORTS = ("alternating", "layered", "parallel", "sidebyside", "unannotated")
TEXT_EXPORTS = ("alternating", "layered", "unannotated")

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


@dataclass(frozen=True)
class ExportContext:
    """Fields available to every exported page, bound by name."""

    title: str
    author: str
    char_count: int
    full_text: str
    rendered: RenderedText

    @property
    def text_info(self) -> str:
        return f"Written by {self.author}, {self.char_count} characters in length"


def output_prefix_for(work_id: str, title: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", title).strip() or "untitled"
    return f"{work_id}_{cleaned}"


def _html_page(context: ExportContext, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="ja">
<head>
<meta charset="utf-8">
<title>{context.title}</title>
<style>
  body {{ font-family: "Hiragino Mincho ProN", "Yu Mincho", serif; line-height: 1.8; margin: 2em; }}
  ruby {{ ruby-position: over; }}
  rtc {{ ruby-position: under; font-size: 60%; }}
  .column p {{ margin: 0.2em 0.5em; }}
</style>
</head>
<body>
<h1>{context.title}</h1>
<p>{context.text_info}</p>
{body}
</body>
</html>
"""


def _text_page(context: ExportContext, body: str) -> str:
    return f"{context.title}\n{context.text_info}\n\n{body}\n"


def _paragraphs(entries: tuple[str, ...]) -> str:
    return "\n".join(f"<p>{entry}</p>" for entry in entries)


def _unannotated_html(context: ExportContext) -> str:
    return "\n".join(f"<p>{line}</p>" for line in context.full_text.splitlines())


_HTML_BODIES: dict[str, Callable[[ExportContext], str]] = {
    "alternating": lambda ctx: _paragraphs(ctx.rendered.alternating),
    "layered": lambda ctx: "\n".join(ctx.rendered.layered),
    "parallel": lambda ctx: _paragraphs(ctx.rendered.parallel),
    "sidebyside": lambda ctx: "\n".join(ctx.rendered.sidebyside),
    "unannotated": _unannotated_html,
}

_TEXT_BODIES: dict[str, Callable[[ExportContext], str]] = {
    "alternating": lambda ctx: "\n".join(ctx.rendered.alternating_plaintext),
    "layered": lambda ctx: "\n\n".join(ctx.rendered.layered_plaintext),
    "unannotated": lambda ctx: ctx.full_text,
}


def export_documents(context: ExportContext, output_dir: Path, prefix: str) -> list[Path]:
    """Write the HTML and plain text renderings; returns the written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name in HTML_EXPORTS:
        path = output_dir / f"{prefix}_{name}.html"
        path.write_text(_html_page(context, _HTML_BODIES[name](context)), encoding="utf-8")
        written.append(path)
    for name in TEXT_EXPORTS:
        path = output_dir / f"{prefix}_{name}.txt"
        path.write_text(_text_page(context, _TEXT_BODIES[name](context)), encoding="utf-8")
        written.append(path)
    return written
