import json
import os
import logging
from typing import Optional
from flask import Flask
from app.repo import SqliteRepo
from app.seed import load_dataset, seed_catalog
from app.service import CatalogService
from app.web import register_routes, register_middleware, register_error_handlers

DEFAULT_CFG = {
    "database": "data/catalog.db",
    "debug": False,
    "host": "0.0.0.0",
    "port": 8080,
    "logging_level": "INFO",
    "reset_db": False,
    "seed_file": "data/netflix-titles.json",
    "seed_limit": 800,
    "store_timeout": 5.0
}

# environment variable -> config key
ENV_OVERRIDES = {
    "DATABASE_URL": "database",
    "PORT": "port",
    "RESET_DB": "reset_db",
    "LOG_LEVEL": "logging_level",
}

def _truthy(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")

def apply_env(cfg: dict, environ=os.environ) -> dict:
    merged = cfg.copy()
    for var, key in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        if key == "port":
            merged[key] = int(raw)
        elif key == "reset_db":
            merged[key] = _truthy(raw)
        else:
            merged[key] = raw
    return merged

def load_config(path="config.json"):
    if not os.path.exists(path):
        return apply_env(DEFAULT_CFG)
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except Exception as e:
        print("Failed to read config.json:", e, "- using defaults")
        return apply_env(DEFAULT_CFG)
    merged = DEFAULT_CFG.copy()
    merged.update(cfg)
    return apply_env(merged)

cfg = load_config()

def configure_logging(level_name: str, debug: bool = False):
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # quieter werkzeug when not debugging
    logging.getLogger("werkzeug").setLevel(logging.WARNING if not debug else logging.INFO)

def create_app(overrides: Optional[dict] = None):
    conf = cfg.copy()
    if overrides:
        conf.update(overrides)
    configure_logging(conf.get("logging_level", "INFO"), conf.get("debug", False))
    logger = logging.getLogger(__name__)
    logger.info("Starting app with config: %s", {k: v for k, v in conf.items() if k != "database"})

    app = Flask(__name__, static_folder=None)
    app.json.sort_keys = False
    repo = SqliteRepo(conf["database"], timeout=float(conf.get("store_timeout", 5.0)))
    repo.init_schema()
    if conf.get("reset_db"):
        rows = load_dataset(conf["seed_file"])
        seed_catalog(repo, rows, limit=int(conf.get("seed_limit", 800)))
    service = CatalogService(repo)
    app.config["SERVICE"] = service

    register_routes(app, service)
    register_middleware(app)
    register_error_handlers(app)
    return app

if __name__ == "__main__":
    app = create_app()
    logging.getLogger(__name__).info("Server running on http://localhost:%s", cfg.get("port", 8080))
    app.run(host=cfg.get("host", "0.0.0.0"), port=cfg.get("port", 8080), debug=cfg.get("debug", False))
