# scripts/init_db.py
# usage: python -m scripts.init_db [dataset.json] [limit]
import os
import sys

from app.repo import SqliteRepo
from app.seed import DEFAULT_LIMIT, load_dataset, seed_catalog

DB = os.environ.get("DATABASE_URL") or os.path.join("data", "catalog.db")

repo = SqliteRepo(DB)
repo.init_schema()
print("initialized db at", DB)

if len(sys.argv) > 1:
    limit = int(sys.argv[2]) if len(sys.argv) > 2 else DEFAULT_LIMIT
    titles, directors = seed_catalog(repo, load_dataset(sys.argv[1]), limit=limit)
    print(f"seeded {titles} titles and {directors} directors from {sys.argv[1]}")
