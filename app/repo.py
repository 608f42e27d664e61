# app/repo.py
import logging
import os
import re
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Union

from app.models import Director, Title, TITLE_FIELDS

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS directors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS titles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    show_id TEXT,
    type TEXT,
    title TEXT,
    director_id INTEGER,
    "cast" TEXT,
    country TEXT,
    date_added TEXT,
    release_year INTEGER,
    rating TEXT,
    duration TEXT,
    listed_in TEXT,
    description TEXT,
    FOREIGN KEY (director_id) REFERENCES directors(id)
);

CREATE INDEX IF NOT EXISTS idx_titles_director ON titles (director_id);
CREATE INDEX IF NOT EXISTS idx_titles_release_year ON titles (release_year);
"""

IdLike = Union[int, str]

# --- Exceptions ---
class RepoError(Exception):
    """Raised when the store cannot answer a query."""
    pass

class InvalidIdError(RepoError):
    """Raised when an identifier is not something the store can look up."""
    pass

_ID_RE = re.compile(r"[0-9]+")

# largest value SQLite can bind as INTEGER
MAX_INT = 2 ** 63 - 1

def parse_id(raw: IdLike) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        s = str(raw).strip()
        if not _ID_RE.fullmatch(s):
            raise InvalidIdError(f"invalid id: {raw!r}")
        value = int(s)
    if not 0 <= value <= MAX_INT:
        raise InvalidIdError(f"id out of range: {raw!r}")
    return value

def parse_year(raw: IdLike) -> int:
    """
    Coerce a year the way the store would: integers and integral numbers
    such as "2019.0" match; anything else is a query error.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        s = str(raw).strip()
        try:
            value = int(s)
        except ValueError:
            try:
                f = float(s)
            except ValueError:
                raise RepoError(f"invalid release_year: {raw!r}")
            if not f.is_integer():
                raise RepoError(f"invalid release_year: {raw!r}")
            value = int(f)
    if abs(value) > MAX_INT:
        raise RepoError(f"release_year out of range: {raw!r}")
    return value

def _icontains(haystack, needle) -> int:
    if haystack is None or needle is None:
        return 0
    return 1 if str(needle).casefold() in str(haystack).casefold() else 0

# --- SQLite repo ---
class SqliteRepo:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def _uri(self, mode: str) -> str:
        return f"{Path(self.db_path).absolute().as_uri()}?mode={mode}"

    @contextmanager
    def conn(self, create: bool = False):
        """
        Open a connection bounded by self.timeout.
        The file is only created when create=True (schema setup); otherwise a
        missing database is reported as a RepoError.
        """
        try:
            con = sqlite3.connect(self._uri("rwc" if create else "rw"), uri=True, timeout=self.timeout)
        except sqlite3.Error as e:
            raise RepoError(f"cannot open store {self.db_path}: {e}") from e
        con.row_factory = sqlite3.Row
        con.create_function("ICONTAINS", 2, _icontains, deterministic=True)
        deadline = time.monotonic() + self.timeout
        con.set_progress_handler(lambda: 1 if time.monotonic() > deadline else 0, 1000)
        try:
            yield con
            con.commit()
        except (sqlite3.Error, OverflowError) as e:
            # OverflowError: a Python int too large to bind as INTEGER
            con.rollback()
            raise RepoError(str(e)) from e
        finally:
            con.close()  # uncommitted work is discarded

    def init_schema(self) -> None:
        with self.conn(create=True) as c:
            c.executescript(SCHEMA_SQL)
        logger.debug("Schema ready at %s", self.db_path)

    def ping(self) -> bool:
        try:
            with self.conn() as c:
                c.execute("SELECT 1 FROM directors LIMIT 1").fetchone()
            return True
        except RepoError as e:
            logger.warning("Store not reachable: %s", e)
            return False

    def replace_catalog(self, directors: List[Director], titles: List[Title]) -> None:
        """
        Swap the whole catalog in one transaction; on any failure the previous
        catalog stays in place. Titles point at their director through
        `title.director`, whose id is only known once it has been inserted.
        """
        cols = ", ".join(f'"{f}"' for f in TITLE_FIELDS)
        marks = ", ".join("?" for _ in TITLE_FIELDS)
        with self.conn() as c:
            c.execute("DELETE FROM titles")
            c.execute("DELETE FROM directors")
            for d in directors:
                d.id = c.execute("INSERT INTO directors (name) VALUES (?)", (d.name,)).lastrowid
            for t in titles:
                t.director_id = t.director.id if t.director else None
            c.executemany(f"INSERT INTO titles ({cols}) VALUES ({marks})",
                          [tuple(getattr(t, f) for f in TITLE_FIELDS) for t in titles])

    # -- Directors --
    def create_director(self, d: Director) -> Director:
        with self.conn() as c:
            cur = c.execute("INSERT INTO directors (name) VALUES (?)", (d.name,))
            d.id = cur.lastrowid
            return d

    def get_director(self, director_id: IdLike) -> Optional[Director]:
        did = parse_id(director_id)
        with self.conn() as c:
            r = c.execute("SELECT * FROM directors WHERE id = ?", (did,)).fetchone()
            return Director(r["id"], r["name"]) if r else None

    def list_directors(self, name_contains: Optional[str] = None) -> List[Director]:
        sql = "SELECT * FROM directors"
        params = []
        if name_contains:
            sql += " WHERE ICONTAINS(name, ?)"
            params.append(name_contains)
        sql += " ORDER BY id"
        with self.conn() as c:
            rows = c.execute(sql, tuple(params)).fetchall()
            return [Director(r["id"], r["name"]) for r in rows]

    def count_directors(self) -> int:
        with self.conn() as c:
            return c.execute("SELECT COUNT(*) FROM directors").fetchone()[0]

    # -- Titles --
    def create_title(self, t: Title) -> Title:
        cols = ", ".join(f'"{f}"' for f in TITLE_FIELDS)
        marks = ", ".join("?" for _ in TITLE_FIELDS)
        with self.conn() as c:
            cur = c.execute(f"INSERT INTO titles ({cols}) VALUES ({marks})",
                            tuple(getattr(t, f) for f in TITLE_FIELDS))
            t.id = cur.lastrowid
            return t

    @staticmethod
    def _row_to_title(r) -> Title:
        t = Title(r["id"], **{f: r[f] for f in TITLE_FIELDS})
        # LEFT JOIN leaves director_name NULL for dangling references
        if r["director_name"] is not None:
            t.director = Director(r["director_id"], r["director_name"])
        return t

    _TITLE_SELECT = ("SELECT t.*, d.name AS director_name FROM titles t "
                     "LEFT JOIN directors d ON d.id = t.director_id")

    def get_title(self, title_id: IdLike) -> Optional[Title]:
        tid = parse_id(title_id)
        with self.conn() as c:
            r = c.execute(self._TITLE_SELECT + " WHERE t.id = ?", (tid,)).fetchone()
            return self._row_to_title(r) if r else None

    def list_titles(self, release_year: Optional[IdLike] = None, cast_contains: Optional[str] = None,
                    director_id: Optional[IdLike] = None) -> List[Title]:
        """
        List titles with their director joined, optionally filtered by exact
        release year, case-insensitive cast substring and director reference.
        """
        where = []
        params = []
        if release_year is not None:
            where.append("t.release_year = ?"); params.append(parse_year(release_year))
        if cast_contains:
            where.append('ICONTAINS(t."cast", ?)'); params.append(cast_contains)
        if director_id is not None:
            where.append("t.director_id = ?"); params.append(parse_id(director_id))
        sql = self._TITLE_SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY t.id"
        with self.conn() as c:
            rows = c.execute(sql, tuple(params)).fetchall()
            return [self._row_to_title(r) for r in rows]

    def count_titles(self) -> int:
        with self.conn() as c:
            return c.execute("SELECT COUNT(*) FROM titles").fetchone()[0]

# --- In-memory repo (simple, used for unit tests) ---
class InMemoryRepo:
    def __init__(self):
        self._directors: Dict[int, Director] = {}
        self._titles: Dict[int, Title] = {}
        self._next = {"director": 1, "title": 1}
        self.available = True  # flip to simulate a lost store

    # helper to assign id
    def _assign(self, kind: str) -> int:
        nid = self._next[kind]
        self._next[kind] += 1
        return nid

    def init_schema(self): pass
    def ping(self) -> bool: return self.available

    def replace_catalog(self, directors: List[Director], titles: List[Title]) -> None:
        next_ids = dict(self._next)
        new_directors: Dict[int, Director] = {}
        new_titles: Dict[int, Title] = {}
        for d in directors:
            d.id = next_ids["director"]; next_ids["director"] += 1
            new_directors[d.id] = d
        for t in titles:
            t.director_id = t.director.id if t.director else None
            t.id = next_ids["title"]; next_ids["title"] += 1
            new_titles[t.id] = replace(t, director=None)
        self._directors, self._titles, self._next = new_directors, new_titles, next_ids

    # Directors
    def create_director(self, d: Director) -> Director:
        d.id = self._assign("director"); self._directors[d.id] = d; return d
    def get_director(self, did: IdLike): return self._directors.get(parse_id(did))
    def count_directors(self): return len(self._directors)

    def list_directors(self, name_contains: Optional[str] = None) -> List[Director]:
        res = list(self._directors.values())
        if name_contains:
            res = [d for d in res if _icontains(d.name, name_contains)]
        return res

    # Titles
    def create_title(self, t: Title) -> Title:
        t.id = self._assign("title"); self._titles[t.id] = t; return t
    def count_titles(self): return len(self._titles)

    def _joined(self, t: Title) -> Title:
        d = self._directors.get(t.director_id) if t.director_id is not None else None
        return replace(t, director=d)

    def get_title(self, tid: IdLike) -> Optional[Title]:
        t = self._titles.get(parse_id(tid))
        return self._joined(t) if t else None

    def list_titles(self, release_year=None, cast_contains=None, director_id=None) -> List[Title]:
        res = list(self._titles.values())
        if release_year is not None:
            year = parse_year(release_year)
            res = [t for t in res if t.release_year == year]
        if cast_contains:
            res = [t for t in res if _icontains(t.cast, cast_contains)]
        if director_id is not None:
            did = parse_id(director_id)
            res = [t for t in res if t.director_id == did]
        return [self._joined(t) for t in res]
