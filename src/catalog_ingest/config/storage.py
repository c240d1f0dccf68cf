"""Location of the catalog database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATA_DIR_VARIABLE: Final[str] = "CATALOG_INGEST_DATA_DIR"
DATABASE_URI_VARIABLE: Final[str] = "DATABASE_URI"
DATABASE_FILENAME: Final[str] = "catalog.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def data_dir() -> Path:
    """Directory of the SQLite database used when no ``DATABASE_URI`` is set.

    ``CATALOG_INGEST_DATA_DIR`` takes precedence over
    ``$XDG_DATA_HOME/catalog-ingest``.
    """

    configured = os.getenv(DATA_DIR_VARIABLE)
    if configured:
        return Path(configured).expanduser().resolve()
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return (base / "catalog-ingest").expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    uri = os.getenv(DATABASE_URI_VARIABLE)
    if uri:
        return DatabaseConfig(uri=uri)
    directory = data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{directory / DATABASE_FILENAME}")
