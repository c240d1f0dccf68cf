"""Hand mapped entities to the entity sink one at a time."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from catalog_ingest.domain.errors import EntityValidationError
from catalog_ingest.domain.model import EntityRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalog_ingest.domain.model import CanonicalEntity, IntegrationContext
    from catalog_ingest.domain.ports.persistence import EntitySink

log = getLogger(__name__)

PROVIDER_ICON: Final[str] = "GitHub"
WEBHOOK_AUTHOR: Final[str] = "github-integration"
SYNC_AUTHOR: Final[str] = "system-sync"


def persist_entities(
    entities: Iterable[CanonicalEntity],
    *,
    context: IntegrationContext,
    sink: EntitySink,
    created_by: str,
    icon: str | None = PROVIDER_ICON,
) -> int:
    """Upsert every valid entity, returning how many the sink accepted.

    The sink runs on the event loop. Each upsert is a short single-row
    transaction, and keeping it on the loop thread keeps the SQLite
    connection out of cross-thread use.
    """

    persisted = 0
    for entity in entities:
        try:
            entity.validate()
        except EntityValidationError as exc:
            log.warning("Skipping invalid entity: %s", exc)
            continue

        record = EntityRecord.from_entity(
            entity,
            organization_id=context.organization_id,
            tenant_id=context.tenant_id,
            created_by=created_by,
            icon=icon,
        )
        try:
            sink.create(record)
        except Exception:
            log.exception("Failed to save entity %s (%s)", entity.identifier, entity.blueprint_id)
            continue
        persisted += 1
    return persisted
