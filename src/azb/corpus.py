from __future__ import annotations

import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "CORPUS_SCHEMA",
    "CorpusStore",
    "CorpusUnavailableError",
    "Work",
    "WorkNotFoundError",
    "WorkSummary",
    "initialize_corpus",
]

# Column names follow the Aozora Bunko index CSV the corpus is imported from.
CORPUS_SCHEMA = """
CREATE TABLE IF NOT EXISTS authors (
    人物ID TEXT PRIMARY KEY,
    著者 TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS works (
    作品ID TEXT PRIMARY KEY,
    作品名 TEXT NOT NULL,
    人物ID TEXT NOT NULL REFERENCES authors (人物ID),
    副題 TEXT,
    分類 TEXT,
    底本初版発行年1 TEXT
);
CREATE TABLE IF NOT EXISTS texts (
    作品ID TEXT PRIMARY KEY REFERENCES works (作品ID),
    本文 TEXT NOT NULL,
    本文字数 INTEGER
);
CREATE TABLE IF NOT EXISTS furigana (
    作品ID TEXT NOT NULL REFERENCES works (作品ID),
    前後関係 TEXT,
    振り仮名 TEXT
);
"""

_SEARCH_QUERY = """
SELECT works.作品ID, works.作品名, authors.著者, works.副題, works.分類, works.底本初版発行年1
FROM works
JOIN authors USING (人物ID)
WHERE works.作品ID LIKE :pattern
   OR works.作品名 LIKE :pattern
   OR authors.著者 LIKE :pattern
   OR works.副題 LIKE :pattern
   OR works.分類 LIKE :pattern
   OR works.底本初版発行年1 LIKE :pattern
ORDER BY works.作品ID
"""

_WORK_QUERY = """
SELECT works.作品ID, works.作品名, authors.著者, texts.本文, texts.本文字数
FROM works
JOIN authors USING (人物ID)
JOIN texts USING (作品ID)
WHERE works.作品ID = ?
"""

_FURIGANA_QUERY = "SELECT 前後関係, 振り仮名 FROM furigana WHERE 作品ID = ? ORDER BY rowid"


class CorpusUnavailableError(RuntimeError):
    """Raised when the corpus database file cannot be opened."""


class WorkNotFoundError(LookupError):
    """Raised when a work id does not exist in the corpus."""


@dataclass(frozen=True, slots=True)
class WorkSummary:
    work_id: str
    title: str
    author: str
    subtitle: str | None
    genre: str | None
    publication_date: str | None

    def as_row(self) -> tuple[str, ...]:
        return (
            self.work_id,
            self.title,
            self.author,
            self.subtitle or "",
            self.genre or "",
            self.publication_date or "",
        )


@dataclass(frozen=True, slots=True)
class Work:
    work_id: str
    title: str
    author: str
    full_text: str
    char_count: int


def initialize_corpus(db_path: Path) -> None:
    """Create an empty corpus database with the expected tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(db_path)) as conn:
        conn.executescript(CORPUS_SCHEMA)
        conn.commit()


class CorpusStore:
    """Read-only access to works, authors and furigana in the corpus database."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.is_file():
            raise CorpusUnavailableError(f"Corpus database not found: {self.db_path}")
        try:
            return sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise CorpusUnavailableError(f"Failed to open corpus database {self.db_path}: {exc}") from exc

    def find_works(self, query: str) -> list[WorkSummary]:
        pattern = f"%{query}%"
        with closing(self._connect()) as conn:
            rows = conn.execute(_SEARCH_QUERY, {"pattern": pattern}).fetchall()
        return [
            WorkSummary(
                work_id=row[0],
                title=row[1],
                author=row[2],
                subtitle=row[3],
                genre=row[4],
                publication_date=row[5],
            )
            for row in rows
        ]

    def get_work(self, work_id: str) -> Work:
        with closing(self._connect()) as conn:
            row = conn.execute(_WORK_QUERY, (work_id,)).fetchone()
        if row is None:
            raise WorkNotFoundError(
                f"ID {work_id!r} does not exist in the corpus, please provide a valid 6 digit work_id"
            )
        full_text = row[3] or ""
        char_count = row[4] if isinstance(row[4], int) else len(full_text)
        return Work(
            work_id=row[0],
            title=row[1],
            author=row[2],
            full_text=full_text,
            char_count=char_count,
        )

    def get_furigana_pairs(self, work_id: str) -> list[tuple[str, str]]:
        with closing(self._connect()) as conn:
            rows = conn.execute(_FURIGANA_QUERY, (work_id,)).fetchall()
        return [(row[0], row[1]) for row in rows]
