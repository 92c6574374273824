from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "TIMEBOX_HOME"
APP_ENV_DB = "TIMEBOX_DB"


def app_home() -> Path:
    """
    User-writable home for Timebox.
    Override with TIMEBOX_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".timebox").resolve()


def config_dir() -> Path:
    d = app_home() / "config"
    d.mkdir(parents=True, exist_ok=True)
    return d


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    """
    Canonical state DB path.

    Resolution order:
    1. TIMEBOX_DB env var (explicit override)
    2. ~/.timebox/data/timebox.db (default)
    """
    if os.environ.get(APP_ENV_DB):
        return Path(os.environ[APP_ENV_DB]).expanduser().resolve()
    return data_dir() / "timebox.db"


def categories_file() -> Path:
    """Default category definitions file read by the CLI."""
    return config_dir() / "categories.yaml"
