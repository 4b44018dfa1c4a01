from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path

import tomllib
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
)

from .cache import CacheCorruptionError, LookupCache, LookupCancelled
from .corpus import CorpusStore, CorpusUnavailableError, WorkNotFoundError
from .export import ExportContext, export_documents, output_prefix_for
from .logging_utils import console, set_debug_logging
from .lookup import JotobaClient, LookupResolver
from .nlp import FugashiSegmenter, LazySegmenter, NLPBackendUnavailableError
from .pipeline import annotate, load_work, populate, render, rendered_output
from .settings import AnnotatorSettings


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("azb")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="azb",
        description="Aozora Bunko annotator: dictionary-annotated renderings of corpus texts.",
    )
    ap.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"azb {__version__}",
    )
    target = ap.add_mutually_exclusive_group()
    target.add_argument(
        "-s",
        "--search",
        metavar="QUERY",
        help=(
            "Search query compared against the work_id, title, author, subtitle, genre and "
            "publication date fields. Returns partial or complete matches."
        ),
    )
    target.add_argument(
        "-i",
        "--id",
        dest="work_id",
        metavar="WORK_ID",
        help="6 digit work id, as returned by --search or listed on https://www.aozora.gr.jp/.",
    )
    ap.add_argument(
        "-f",
        "--font-string",
        default="100%",
        metavar="SIZE",
        help="CSS size used to scale text where applicable: percent (125%%), pixels (61px) or em (1.1em).",
    )
    ap.add_argument(
        "-k",
        "--kanji-only",
        action="store_true",
        help="Only render annotations for terms containing one or more kanji.",
    )
    ap.add_argument(
        "-c",
        "--exclude-common",
        action="store_true",
        help="Exclude terms marked common by the Jotoba API from rendered annotations.",
    )
    ap.add_argument("--db", dest="db_path", help="Corpus database path (env: AZB_DB_PATH).")
    ap.add_argument("--cache-dir", help="Directory holding lookup files (env: AZB_CACHE_DIR).")
    ap.add_argument("--output-dir", help="Directory for exported documents (env: AZB_OUTPUT_DIR).")
    ap.add_argument("--api-url", help="Base URL of the Jotoba API (env: AZB_API_URL).")
    ap.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds for dictionary lookups (env: AZB_TIMEOUT).",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging (skipped furigana, degraded lookups, cache IO).",
    )
    return ap


class _LookupProgress:
    def __init__(self) -> None:
        self.progress: Progress | None = None
        self.task_id = None

    def handle(self, event: dict[str, object]) -> None:
        kind = event.get("event")
        total = event.get("total")
        if kind == "lookup_start":
            self.progress = Progress(
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeRemainingColumn(),
                console=console,
                transient=True,
            )
            self.progress.start()
            self.task_id = self.progress.add_task(
                "Token lookup progress",
                total=total if isinstance(total, int) else None,
            )
        elif kind == "lookup_progress" and self.progress is not None and self.task_id is not None:
            completed = event.get("completed")
            if isinstance(completed, int):
                self.progress.update(self.task_id, completed=completed)
        elif kind == "lookup_done":
            self.close()
            path = event.get("path")
            if path is not None:
                console.print(f"Annotations written to {path}", markup=False)

    def close(self) -> None:
        if self.progress is not None:
            self.progress.stop()
            self.progress = None


def _run_search(store: CorpusStore, query: str) -> int:
    results = store.find_works(query)
    console.print(f"Search results for query {query}", markup=False)
    console.print("work_id | title | author | subtitle | genre | publication_date", markup=False)
    for work in results:
        console.print(" | ".join(work.as_row()), markup=False)
    if not results:
        console.print("No matching works.")
    return 0


def _run_annotate(args: argparse.Namespace, settings: AnnotatorSettings, store: CorpusStore) -> int:
    # MeCab is only loaded once the work is known to exist.
    segmenter = LazySegmenter(FugashiSegmenter)
    run = load_work(store, segmenter, args.work_id)
    work = run.work
    console.print(
        f"Text added successfully | ID: {work.work_id} | Title: {work.title} | "
        f"Author: {work.author} | Length: {work.char_count}",
        markup=False,
    )

    cache = LookupCache(settings.cache_dir)
    client = JotobaClient(settings.api_url, settings.timeout)
    resolver = LookupResolver(client)
    progress = _LookupProgress()
    try:
        run = populate(
            run,
            segmenter=segmenter,
            resolver=resolver,
            cache=cache,
            progress=progress.handle,
        )
    finally:
        progress.close()
        client.close()
    if resolver.failures:
        console.print(
            f"[yellow]{len(resolver.failures)} lookup(s) failed and were stored without "
            "annotations; rerun with --debug for details.[/yellow]"
        )

    run = annotate(
        run,
        segmenter,
        exclude_common=args.exclude_common,
        kanji_only=args.kanji_only,
    )
    run = render(run, args.font_string)
    context = ExportContext(
        title=work.title,
        author=work.author,
        char_count=work.char_count,
        full_text=work.full_text,
        rendered=rendered_output(run),
    )
    for path in export_documents(context, settings.output_dir, output_prefix_for(work.work_id, work.title)):
        console.print(f"Text exported to {path}", markup=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_debug_logging(bool(args.debug))
    try:
        settings = AnnotatorSettings.from_env().with_overrides(
            db_path=args.db_path,
            cache_dir=args.cache_dir,
            output_dir=args.output_dir,
            api_url=args.api_url,
            timeout=args.timeout,
        )
    except ValueError as exc:
        parser.error(str(exc))

    if args.search is None and args.work_id is None:
        parser.print_help()
        return 0

    store = CorpusStore(settings.db_path)
    try:
        if args.search is not None:
            return _run_search(store, args.search)
        return _run_annotate(args, settings, store)
    except WorkNotFoundError as exc:
        console.print(f"[red]WorkNotFoundError:[/red] {escape(str(exc))}")
        return 2
    except (CorpusUnavailableError, NLPBackendUnavailableError, CacheCorruptionError) as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        return 1
    except (LookupCancelled, KeyboardInterrupt):
        console.print("Lookup cancelled; no lookup file was written.")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
