"""SQLAlchemy table metadata for integration contexts and catalog entities.

sql.func.now() uses UTC for sqlite databases
-> see https://www.sqlite.org/lang_datefunc.html
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    func,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

integration_context_table = Table(
    "integration_context",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider", String(32), nullable=False),
    Column("organization_id", String(255), nullable=False),
    # never NULL: organization-wide contexts use the ORGANIZATION_WIDE sentinel
    Column("tenant_scope", String(255), nullable=False),
    Column("installation_id", String(64), nullable=True, index=True),
    Column("mapping_yaml", Text, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime(),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    UniqueConstraint("organization_id", "provider", "tenant_scope"),
)

catalog_entity_table = Table(
    "catalog_entity",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", String(255), nullable=False),
    Column("tenant_scope", String(255), nullable=False),
    Column("blueprint_id", String(255), nullable=False),
    Column("identifier", String(512), nullable=False),
    Column("title", String(1024), nullable=False),
    Column("properties", JSON, nullable=False),
    Column("relations", JSON, nullable=False),
    Column("icon", String(255), nullable=True),
    Column("created_by", String(255), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime(),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    UniqueConstraint("organization_id", "tenant_scope", "blueprint_id", "identifier"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the catalog metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
