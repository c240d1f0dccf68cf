"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from catalog_ingest.domain.model import (
    IntegrationContext,
    Provider,
    tenant_from_scope,
    tenant_scope,
)

from .tables import catalog_entity_table, integration_context_table

if TYPE_CHECKING:
    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from catalog_ingest.domain.model import EntityRecord


def _context_from_row(row: Row[Any]) -> IntegrationContext:
    return IntegrationContext(
        id=row.id,
        provider=Provider(row.provider),
        organization_id=row.organization_id,
        tenant_id=tenant_from_scope(row.tenant_scope),
        installation_id=row.installation_id,
        mapping_yaml=row.mapping_yaml,
    )


class SqlAlchemyIntegrationContextRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_provider(self, provider: Provider) -> list[IntegrationContext]:
        table = integration_context_table
        stmt = select(table).where(table.c.provider == provider.value).order_by(table.c.id)
        return [_context_from_row(row) for row in self.session.execute(stmt)]

    def get_by_installation(
        self, provider: Provider, installation_id: str
    ) -> IntegrationContext | None:
        table = integration_context_table
        stmt = (
            select(table)
            .where(table.c.provider == provider.value)
            .where(table.c.installation_id == installation_id)
            .order_by(table.c.id)
            .limit(1)
        )
        row = self.session.execute(stmt).first()
        return _context_from_row(row) if row is not None else None

    def get_for_scope(
        self, provider: Provider, organization_id: str, tenant_id: str | None
    ) -> IntegrationContext | None:
        table = integration_context_table
        stmt = (
            select(table)
            .where(table.c.provider == provider.value)
            .where(table.c.organization_id == organization_id)
            .where(table.c.tenant_scope == tenant_scope(tenant_id))
        )
        row = self.session.execute(stmt).first()
        return _context_from_row(row) if row is not None else None

    def save(self, context: IntegrationContext) -> IntegrationContext:
        """Insert ``context`` or replace the stored context of the same scope."""

        table = integration_context_table
        existing = self.get_for_scope(context.provider, context.organization_id, context.tenant_id)
        values = {
            "installation_id": context.installation_id,
            "mapping_yaml": context.mapping_yaml,
        }
        if existing is None:
            result = self.session.execute(
                insert(table).values(
                    provider=context.provider.value,
                    organization_id=context.organization_id,
                    tenant_scope=tenant_scope(context.tenant_id),
                    **values,
                )
            )
            context_id = result.inserted_primary_key[0] if result.inserted_primary_key else None
        else:
            self.session.execute(update(table).where(table.c.id == existing.id).values(**values))
            context_id = existing.id
        context.id = context_id
        return context

    def update_mapping(
        self,
        provider: Provider,
        organization_id: str,
        tenant_id: str | None,
        mapping_yaml: str,
    ) -> bool:
        table = integration_context_table
        result = self.session.execute(
            update(table)
            .where(table.c.provider == provider.value)
            .where(table.c.organization_id == organization_id)
            .where(table.c.tenant_scope == tenant_scope(tenant_id))
            .values(mapping_yaml=mapping_yaml)
        )
        return result.rowcount > 0


class SqlAlchemyCatalogEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, record: EntityRecord) -> int:
        """Insert ``record`` or overwrite the stored entity with the same identity."""

        table = catalog_entity_table
        scope = tenant_scope(record.tenant_id)
        stmt = (
            select(table.c.id)
            .where(table.c.organization_id == record.organization_id)
            .where(table.c.tenant_scope == scope)
            .where(table.c.blueprint_id == record.blueprint_id)
            .where(table.c.identifier == record.identifier)
        )
        existing_id = self.session.execute(stmt).scalar_one_or_none()
        values = {
            "title": record.title,
            "properties": record.properties,
            "relations": record.relations,
            "icon": record.icon,
        }
        if existing_id is not None:
            self.session.execute(update(table).where(table.c.id == existing_id).values(**values))
            return existing_id

        result = self.session.execute(
            insert(table).values(
                organization_id=record.organization_id,
                tenant_scope=scope,
                blueprint_id=record.blueprint_id,
                identifier=record.identifier,
                created_by=record.created_by,
                **values,
            )
        )
        return result.inserted_primary_key[0]

    def get(
        self,
        organization_id: str,
        tenant_id: str | None,
        blueprint_id: str,
        identifier: str,
    ) -> dict[str, Any] | None:
        table = catalog_entity_table
        stmt = (
            select(table)
            .where(table.c.organization_id == organization_id)
            .where(table.c.tenant_scope == tenant_scope(tenant_id))
            .where(table.c.blueprint_id == blueprint_id)
            .where(table.c.identifier == identifier)
        )
        row = self.session.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def count(self, organization_id: str | None = None) -> int:
        table = catalog_entity_table
        stmt = select(func.count()).select_from(table)
        if organization_id is not None:
            stmt = stmt.where(table.c.organization_id == organization_id)
        return self.session.execute(stmt).scalar_one()
