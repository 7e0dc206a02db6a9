import json
import os
import logging
from flask import Flask
from filmlib.storage import SqliteKV
from filmlib.session import SessionStore
from filmlib.library import LibraryStore
from filmlib.web import register_routes, register_error_handlers

DEFAULT_CFG = {
    "database": "data/filmlib.db",
    "debug": True,
    "host": "127.0.0.1",
    "port": 5000,
    "logging_level": "INFO"
}

def load_config(path="config.json"):
    if not os.path.exists(path):
        print("config.json not found, using defaults:", DEFAULT_CFG)
        return DEFAULT_CFG.copy()
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        print("Failed to read config.json:", e, "- using defaults")
        return DEFAULT_CFG.copy()
    merged = DEFAULT_CFG.copy()
    merged.update(cfg)
    return merged

cfg = load_config()

def configure_logging(level_name: str, debug: bool = True):
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # quieter werkzeug when not debugging
    logging.getLogger("werkzeug").setLevel(logging.WARNING if not debug else logging.INFO)

def create_app(config=None):
    """Build the Flask app with one SessionStore and one LibraryStore sharing a SqliteKV."""
    conf = DEFAULT_CFG.copy()
    conf.update(config if config is not None else cfg)
    configure_logging(conf.get("logging_level", "INFO"), conf.get("debug", True))
    logger = logging.getLogger(__name__)
    logger.info("Starting app with config: %s", {k: v for k, v in conf.items() if k != "database"})

    app = Flask(__name__)
    app.secret_key = os.environ.get("SECRET_KEY", "dev-key")
    kv = SqliteKV(conf["database"])
    session_store = SessionStore(kv)
    library = LibraryStore(kv)

    register_routes(app, session_store, library)
    register_error_handlers(app)
    return app

def server_options(conf):
    """Keyword arguments for app.run. The stores expect one request at a time."""
    return {
        "host": conf.get("host", "127.0.0.1"),
        "port": conf.get("port", 5000),
        "debug": conf.get("debug", True),
        "threaded": False,
    }

if __name__ == "__main__":
    app = create_app()
    app.run(**server_options(cfg))
