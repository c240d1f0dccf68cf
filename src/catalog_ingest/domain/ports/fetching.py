"""Ports for reading resource collections from the provider."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager

    from catalog_ingest.domain.model import JSONObject


class RepositoryCollection(StrEnum):
    """Per-repository collections pulled by the reconciliation sweep."""

    ISSUES = "issues"
    PULL_REQUESTS = "pulls"
    WORKFLOW_RUNS = "workflow_runs"
    BRANCHES = "branches"
    TAGS = "tags"
    RELEASES = "releases"
    DEPLOYMENTS = "deployments"
    ENVIRONMENTS = "environments"
    DEPENDABOT_ALERTS = "dependabot_alerts"
    CODE_SCANNING_ALERTS = "code_scanning_alerts"


@runtime_checkable
class InstallationClient(Protocol):
    """Provider API client scoped to one installation."""

    def iter_repositories(self) -> AsyncIterator[JSONObject]: ...

    def iter_collection(
        self, repository: JSONObject, collection: RepositoryCollection
    ) -> AsyncIterator[JSONObject]: ...


@runtime_checkable
class InstallationClientFactory(Protocol):
    def installation_client(
        self, installation_id: str
    ) -> AbstractAsyncContextManager[InstallationClient]: ...
