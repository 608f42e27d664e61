# app/seed.py
"""
Destructive bulk load of the catalog from a static JSON dataset.

The dataset is a JSON array of objects shaped like the Netflix titles
export (show_id, type, title, director, cast, country, date_added,
release_year, rating, duration, listed_in, description). Only the first
``limit`` entries are loaded.

Directors are identified by their canonical name: surrounding whitespace is
dropped, inner runs of whitespace collapse to one space and the comparison
is case-insensitive. "Jane Doe", " jane  doe" and "JANE DOE" are therefore
one director, stored under the first spelling encountered. Entries with an
empty or blank director name get no director.
"""
import json
import logging
from typing import Dict, List, Optional, Tuple

from app.models import Director, Title
from app.repo import RepoError, parse_year

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 800

TEXT_FIELDS = ("show_id", "type", "title", "cast", "country", "date_added",
               "rating", "duration", "listed_in", "description")

def load_dataset(path: str) -> List[dict]:
    with open(path, "r", encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"{path}: expected a JSON array of titles")
    return rows

def display_name(raw) -> str:
    return " ".join(str(raw or "").split())

def canonical_name(raw) -> str:
    return display_name(raw).casefold()

def _year(raw) -> Optional[int]:
    if raw is None or isinstance(raw, bool) or not str(raw).strip():
        return None
    try:
        return parse_year(raw)
    except RepoError:
        return None

def _text(raw) -> Optional[str]:
    return None if raw is None else str(raw)

def seed_catalog(repo, rows: List[dict], limit: int = DEFAULT_LIMIT) -> Tuple[int, int]:
    """
    Replace the catalog with the first `limit` rows.
    Every row is checked before the store is touched, and the swap is a
    single transaction, so a failed seed leaves the previous catalog intact.
    Returns (titles_created, directors_created).
    """
    batch = rows[:limit]
    for i, item in enumerate(batch):
        if not isinstance(item, dict):
            raise ValueError(f"row {i + 1}: expected an object, got {type(item).__name__}")

    directors: Dict[str, Director] = {}
    titles: List[Title] = []
    for item in batch:
        key = canonical_name(item.get("director"))
        if key and key not in directors:
            directors[key] = Director(None, display_name(item.get("director")))
        t = Title(None, release_year=_year(item.get("release_year")),
                  **{f: _text(item.get(f)) for f in TEXT_FIELDS})
        t.director = directors.get(key)
        titles.append(t)

    logger.info("Resetting database")
    repo.replace_catalog(list(directors.values()), titles)
    logger.info("Seeded the database: %d titles, %d directors", len(titles), len(directors))
    return len(titles), len(directors)
