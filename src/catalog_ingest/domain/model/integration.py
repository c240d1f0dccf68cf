"""Integration contexts binding a provider installation to a catalog scope."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from catalog_ingest.domain.mapping.rules import MappingConfiguration

ORGANIZATION_WIDE: Final[str] = "__organization__"
"""Stored tenant scope of organization-wide contexts (``tenant_id is None``)."""


class Provider(StrEnum):
    GITHUB = "github"


def tenant_scope(tenant_id: str | None) -> str:
    """Return the non-nullable scope key used to enforce one context per scope."""

    if tenant_id is None:
        return ORGANIZATION_WIDE
    if tenant_id == ORGANIZATION_WIDE:
        raise ValueError(f"{ORGANIZATION_WIDE!r} is reserved and cannot be used as tenant id")
    return tenant_id


def tenant_from_scope(scope: str) -> str | None:
    return None if scope == ORGANIZATION_WIDE else scope


@dataclass(slots=True)
class IntegrationContext:
    """Stored configuration of one provider integration for one catalog scope.

    ``tenant_id`` of ``None`` marks the organization-wide context, which is a
    distinct configuration from any tenant-specific one. The pipeline only
    reads contexts; they change when an integration is set up or its mapping
    is edited.
    """

    provider: Provider
    organization_id: str
    mapping_yaml: str
    installation_id: str | None = None
    tenant_id: str | None = None
    id: int | None = None

    @property
    def scope(self) -> tuple[str, Provider, str]:
        return (self.organization_id, self.provider, tenant_scope(self.tenant_id))

    def mapping_config(self) -> MappingConfiguration:
        """Parse and validate the stored mapping YAML."""

        from catalog_ingest.domain.mapping import loader  # noqa: PLC0415

        return loader.parse_mapping_configuration(self.mapping_yaml)

    def describe(self) -> str:
        tenant = self.tenant_id or "organization-wide"
        return (
            f"{self.provider} installation {self.installation_id} "
            f"(org={self.organization_id}, tenant={tenant})"
        )
