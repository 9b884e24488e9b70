"""SQLite storage adapter.

Implements the core SettingsPort, ContentRepositoryPort and TaxonomyPort
using a single SQLite database.
"""

from __future__ import annotations

import json
import math
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Sequence

from core.errors import StoreFailure, TermExistsError
from core.models import Post, PostPage

# Statuses hidden from an "any" status query.
_EXCLUDED_FROM_ANY = ("trash", "auto-draft")


class SQLiteStore:
    """Thin SQLite wrapper that satisfies the settings, content and taxonomy ports."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        # sqlite3's context manager only commits/rolls back; close explicitly.
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StoreFailure(str(exc)) from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreFailure(str(exc)) from exc
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - options: named JSON settings records
        - posts: content items, including revisions and autosaves
        - terms: known tag slugs
        - post_terms: post-tag associations
        """

        with self._session() as conn:
            # options holds one JSON document per option name.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS options (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            # posts mirrors the host's content table. Revisions are rows with
            # post_type='revision'; autosaves are revisions named *-autosave*.
            # Fields:
            # - name: host slug of the row, used to spot autosaves
            # - author_id: owner, consulted by the authorizer for own-post edits
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS posts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL DEFAULT '',
                    content TEXT NOT NULL DEFAULT '',
                    post_type TEXT NOT NULL DEFAULT 'post',
                    status TEXT NOT NULL DEFAULT 'publish',
                    name TEXT NOT NULL DEFAULT '',
                    author_id TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS terms (
                    slug TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS post_terms (
                    post_id INTEGER NOT NULL,
                    slug TEXT NOT NULL,
                    PRIMARY KEY (post_id, slug)
                )
                """
            )

    # -- settings -----------------------------------------------------------

    def load_options(self, name: str) -> Any:
        """Return the stored options record, or None if it was never saved."""

        with self._session() as conn:
            row = conn.execute("SELECT value FROM options WHERE name = ?", (name,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return None

    def save_options(self, name: str, value: dict) -> None:
        """Upsert an options record."""

        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO options (name, value)
                VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET value = excluded.value
                """,
                (name, json.dumps(value)),
            )

    # -- content ------------------------------------------------------------

    def insert_post(
        self,
        title: str,
        content: str,
        post_type: str = "post",
        status: str = "publish",
        name: str = "",
        author_id: Optional[str] = None,
    ) -> int:
        """Insert a content row and return its id."""

        with self._session() as conn:
            cur = conn.execute(
                """
                INSERT INTO posts (title, content, post_type, status, name, author_id)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (title, content, post_type, status, name, author_id),
            )
            return int(cur.lastrowid)

    def get_post(self, post_id: int) -> Optional[Post]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT id, title, content, post_type, status FROM posts WHERE id = ?",
                (post_id,),
            ).fetchone()
        if row is None:
            return None
        return Post(
            id=int(row["id"]),
            title=row["title"],
            content=row["content"],
            type=row["post_type"],
            status=row["status"],
        )

    def post_author(self, post_id: int) -> Optional[str]:
        with self._session() as conn:
            row = conn.execute("SELECT author_id FROM posts WHERE id = ?", (post_id,)).fetchone()
        return row["author_id"] if row else None

    def is_revision(self, post_id: int) -> bool:
        with self._session() as conn:
            row = conn.execute("SELECT post_type FROM posts WHERE id = ?", (post_id,)).fetchone()
        return bool(row) and row["post_type"] == "revision"

    def is_autosave(self, post_id: int) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT post_type, name FROM posts WHERE id = ?",
                (post_id,),
            ).fetchone()
        return bool(row) and row["post_type"] == "revision" and "autosave" in row["name"]

    def query_posts(
        self,
        post_type: str,
        status: str = "any",
        page: int = 1,
        page_size: int = 200,
    ) -> PostPage:
        """Return one page of ids ordered by id, plus the total page count."""

        if status == "any":
            placeholders = ", ".join("?" for _ in _EXCLUDED_FROM_ANY)
            where = f"post_type = ? AND status NOT IN ({placeholders})"
            params: tuple = (post_type, *_EXCLUDED_FROM_ANY)
        else:
            where = "post_type = ? AND status = ?"
            params = (post_type, status)

        offset = (max(1, page) - 1) * page_size
        with self._session() as conn:
            total = conn.execute(f"SELECT COUNT(*) AS n FROM posts WHERE {where}", params).fetchone()["n"]
            rows = conn.execute(
                f"SELECT id FROM posts WHERE {where} ORDER BY id LIMIT ? OFFSET ?",
                (*params, page_size, offset),
            ).fetchall()
        return PostPage(
            ids=[int(row["id"]) for row in rows],
            total_pages=math.ceil(total / page_size) if total else 0,
        )

    # -- taxonomy -----------------------------------------------------------

    def term_exists(self, slug: str) -> bool:
        with self._session() as conn:
            row = conn.execute("SELECT 1 FROM terms WHERE slug = ?", (slug,)).fetchone()
        return row is not None

    def create_term(self, slug: str) -> None:
        """Insert a new tag; raises TermExistsError if the slug is taken."""

        created_at = datetime.now(timezone.utc)
        with self._session() as conn:
            cur = conn.execute(
                "INSERT OR IGNORE INTO terms (slug, name, created_at) VALUES (?, ?, ?)",
                (slug, slug, created_at.isoformat()),
            )
        if cur.rowcount == 0:
            raise TermExistsError(slug)

    def set_post_tags(self, post_id: int, slugs: Sequence[str], additive: bool = True) -> None:
        """Associate tags with a post; additive keeps existing associations."""

        with self._session() as conn:
            if not additive:
                conn.execute("DELETE FROM post_terms WHERE post_id = ?", (post_id,))
            conn.executemany(
                "INSERT OR IGNORE INTO post_terms (post_id, slug) VALUES (?, ?)",
                [(post_id, slug) for slug in slugs],
            )

    def list_post_tags(self, post_id: int) -> set[str]:
        """Return all tag slugs currently attached to a post."""

        with self._session() as conn:
            rows = conn.execute(
                "SELECT slug FROM post_terms WHERE post_id = ?",
                (post_id,),
            ).fetchall()
        return {row["slug"] for row in rows}
