"""Port implementations that run every call in its own unit of work."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from catalog_ingest.domain.errors import SinkError
from catalog_ingest.domain.ports.persistence import EntitySink, IntegrationContextRepository

from .unit_of_work import SqlAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalog_ingest.domain.model import EntityRecord, IntegrationContext, Provider

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


class SqlAlchemyEntitySink:
    def __init__(self, uow_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork) -> None:
        self._uow_factory = uow_factory

    def create(self, record: EntityRecord) -> int:
        try:
            with self._uow_factory() as uow:
                entity_id = uow.repositories.entities.upsert(record)
                uow.commit()
        except SQLAlchemyError as exc:
            raise SinkError(
                f"Cannot store entity {record.identifier!r} ({record.blueprint_id})"
            ) from exc
        log.debug(
            "Stored entity %s (%s) as row %s", record.identifier, record.blueprint_id, entity_id
        )
        return entity_id


class SqlAlchemyIntegrationContextStore:
    def __init__(self, uow_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork) -> None:
        self._uow_factory = uow_factory

    def list_for_provider(self, provider: Provider) -> list[IntegrationContext]:
        with self._uow_factory() as uow:
            return uow.repositories.contexts.list_for_provider(provider)

    def get_by_installation(
        self, provider: Provider, installation_id: str
    ) -> IntegrationContext | None:
        with self._uow_factory() as uow:
            return uow.repositories.contexts.get_by_installation(provider, installation_id)

    def get_for_scope(
        self, provider: Provider, organization_id: str, tenant_id: str | None
    ) -> IntegrationContext | None:
        with self._uow_factory() as uow:
            return uow.repositories.contexts.get_for_scope(provider, organization_id, tenant_id)

    def save(self, context: IntegrationContext) -> IntegrationContext:
        with self._uow_factory() as uow:
            saved = uow.repositories.contexts.save(context)
            uow.commit()
        log.info("Saved integration context %s", saved.describe())
        return saved

    def update_mapping(
        self,
        provider: Provider,
        organization_id: str,
        tenant_id: str | None,
        mapping_yaml: str,
    ) -> bool:
        with self._uow_factory() as uow:
            updated = uow.repositories.contexts.update_mapping(
                provider, organization_id, tenant_id, mapping_yaml
            )
            uow.commit()
        return updated


if TYPE_CHECKING:
    _sink_check: EntitySink = SqlAlchemyEntitySink()
    _store_check: IntegrationContextRepository = SqlAlchemyIntegrationContextStore()
