"""Canonical catalog entities produced by the mapping engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalog_ingest.domain.errors import EntityValidationError

if TYPE_CHECKING:
    from catalog_ingest.domain.model.types import JSONValue


@dataclass(slots=True)
class CanonicalEntity:
    """Normalized output record of one mapping rule applied to one payload."""

    identifier: str
    title: str
    blueprint_id: str
    properties: dict[str, JSONValue] = field(default_factory=dict)
    relations: dict[str, JSONValue] = field(default_factory=dict)

    def missing_fields(self) -> tuple[str, ...]:
        required = (
            ("identifier", self.identifier),
            ("title", self.title),
            ("blueprint", self.blueprint_id),
        )
        return tuple(name for name, value in required if not value)

    def validate(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise EntityValidationError(
                f"Entity {self.identifier!r} is missing {', '.join(missing)}"
            )


@dataclass(slots=True, frozen=True)
class EntityRecord:
    """Entity plus ownership metadata, as handed to the entity sink."""

    identifier: str
    blueprint_id: str
    title: str
    properties: dict[str, JSONValue]
    relations: dict[str, JSONValue]
    organization_id: str
    tenant_id: str | None
    created_by: str
    icon: str | None = None

    @property
    def identity(self) -> tuple[str, str | None, str, str]:
        """Upsert key of the record."""
        return (self.organization_id, self.tenant_id, self.blueprint_id, self.identifier)

    @classmethod
    def from_entity(
        cls,
        entity: CanonicalEntity,
        *,
        organization_id: str,
        tenant_id: str | None,
        created_by: str,
        icon: str | None = None,
    ) -> EntityRecord:
        return cls(
            identifier=entity.identifier,
            blueprint_id=entity.blueprint_id,
            title=entity.title,
            properties=dict(entity.properties),
            relations=dict(entity.relations),
            organization_id=organization_id,
            tenant_id=tenant_id,
            created_by=created_by,
            icon=icon,
        )
