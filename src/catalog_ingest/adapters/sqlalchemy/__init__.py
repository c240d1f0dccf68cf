"""SQLAlchemy adapter package for catalog-ingest."""

from __future__ import annotations

from .repositories import SqlAlchemyCatalogEntityRepository, SqlAlchemyIntegrationContextRepository
from .stores import SqlAlchemyEntitySink, SqlAlchemyIntegrationContextStore
from .tables import catalog_entity_table, create_all_tables, integration_context_table, metadata
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    create_database_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogEntityRepository",
    "SqlAlchemyEntitySink",
    "SqlAlchemyIntegrationContextRepository",
    "SqlAlchemyIntegrationContextStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "catalog_entity_table",
    "create_all_tables",
    "create_database_engine",
    "integration_context_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
