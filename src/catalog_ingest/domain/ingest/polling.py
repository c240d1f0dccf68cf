"""Reconciliation sweep over every repository visible to each installation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from catalog_ingest.config.sync import SyncConfig
from catalog_ingest.domain.errors import RemoteFetchError
from catalog_ingest.domain.model import Provider
from catalog_ingest.domain.ports.fetching import RepositoryCollection

from .persist import SYNC_AUTHOR, persist_entities

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalog_ingest.domain.mapping import MappingConfiguration, MappingEngine
    from catalog_ingest.domain.model import IntegrationContext, JSONObject
    from catalog_ingest.domain.ports.fetching import (
        InstallationClient,
        InstallationClientFactory,
    )
    from catalog_ingest.domain.ports.persistence import EntitySink, IntegrationContextRepository

log = getLogger(__name__)

REPOSITORY_KIND: Final[str] = "repository"

COLLECTION_KINDS: Final[tuple[tuple[RepositoryCollection, str], ...]] = (
    (RepositoryCollection.ISSUES, "issue"),
    (RepositoryCollection.PULL_REQUESTS, "pull-request"),
    (RepositoryCollection.WORKFLOW_RUNS, "workflow-run"),
    (RepositoryCollection.BRANCHES, "branches"),
    (RepositoryCollection.TAGS, "tags"),
    (RepositoryCollection.RELEASES, "releases"),
    (RepositoryCollection.DEPLOYMENTS, "deployment"),
    (RepositoryCollection.ENVIRONMENTS, "environment"),
    (RepositoryCollection.DEPENDABOT_ALERTS, "dependabot-alert"),
    (RepositoryCollection.CODE_SCANNING_ALERTS, "code-scanning"),
)


@dataclass(slots=True)
class SyncResult:
    """Outcome of one integration's reconciliation sweep."""

    installation_id: str | None
    organization_id: str
    repositories: int = 0
    items: int = 0
    persisted: int = 0
    failed_collections: list[str] = field(default_factory=list)
    skipped: bool = False


@dataclass(slots=True)
class _SyncRun:
    context: IntegrationContext
    mapping: MappingConfiguration
    client: InstallationClient
    result: SyncResult

    @property
    def installation_id(self) -> str | None:
        return self.context.installation_id


class PollingSynchronizer:
    """Re-derive and re-upsert every entity observable through the provider API.

    Repositories are processed by a bounded pool; within one repository the
    collections are pulled one after another, each isolated so a failing
    collection never prevents the others. Repeating a sweep is safe because
    the entity sink upserts by entity identity.
    """

    def __init__(
        self,
        *,
        engine: MappingEngine,
        contexts: IntegrationContextRepository,
        sink: EntitySink,
        clients: InstallationClientFactory | None,
        config: SyncConfig | None = None,
        provider: Provider = Provider.GITHUB,
    ) -> None:
        self._engine = engine
        self._contexts = contexts
        self._sink = sink
        self._clients = clients
        self._config = config or SyncConfig()
        self._provider = provider

    async def sync_all(self) -> list[SyncResult]:
        log.info("Starting full sync")
        results: list[SyncResult] = []
        async with asyncio.timeout(self._config.deadline_seconds):
            for context in self._contexts.list_for_provider(self._provider):
                try:
                    results.append(await self.sync_one(context))
                except Exception:
                    log.exception("Sync failed for %s", context.describe())
        log.info(
            "Full sync completed: integrations=%s, persisted=%s",
            len(results),
            sum(result.persisted for result in results),
        )
        return results

    async def sync_one(self, context: IntegrationContext) -> SyncResult:
        result = SyncResult(
            installation_id=context.installation_id,
            organization_id=context.organization_id,
        )
        if not context.installation_id:
            log.warning("Skipping %s without installation id", context.describe())
            result.skipped = True
            return result
        if self._clients is None:
            raise RemoteFetchError("GitHub App not initialised")

        mapping = context.mapping_config()
        log.info("Syncing %s", context.describe())

        limit = asyncio.Semaphore(self._config.max_concurrent_repositories)
        async with (
            self._clients.installation_client(context.installation_id) as client,
            asyncio.TaskGroup() as group,
        ):
            run = _SyncRun(context=context, mapping=mapping, client=client, result=result)
            async for repository in client.iter_repositories():
                result.repositories += 1
                await limit.acquire()
                group.create_task(self._sync_repository_bounded(run, repository, limit))

        log.info(
            "Synced %s: repositories=%s, items=%s, persisted=%s, failed_collections=%s",
            context.describe(),
            result.repositories,
            result.items,
            result.persisted,
            len(result.failed_collections),
        )
        return result

    async def _sync_repository_bounded(
        self,
        run: _SyncRun,
        repository: JSONObject,
        limit: asyncio.Semaphore,
    ) -> None:
        try:
            await self._sync_repository(run, repository)
        finally:
            limit.release()

    async def _sync_repository(self, run: _SyncRun, repository: JSONObject) -> None:
        name = str(repository.get("full_name") or repository.get("name") or "<unknown>")
        kinds = run.mapping.kinds

        if REPOSITORY_KIND in kinds:
            try:
                await self._ingest(run, REPOSITORY_KIND, (repository,))
            except Exception:
                log.exception("Failed to sync repository record %s", name)
                run.result.failed_collections.append(f"{name}:repository")

        for collection, kind in COLLECTION_KINDS:
            if kind not in kinds:
                log.debug("No rules for %s, not fetching %s of %s", kind, collection, name)
                continue
            try:
                await self._ingest_collection(run, repository, collection, kind)
            except Exception:
                log.exception("Failed to sync %s for %s", collection, name)
                run.result.failed_collections.append(f"{name}:{collection}")

    async def _ingest_collection(
        self,
        run: _SyncRun,
        repository: JSONObject,
        collection: RepositoryCollection,
        kind: str,
    ) -> None:
        async for item in run.client.iter_collection(repository, collection):
            # the issues endpoint also lists pull requests
            if collection is RepositoryCollection.ISSUES and "pull_request" in item:
                continue
            await self._ingest(run, kind, (item,))

    async def _ingest(self, run: _SyncRun, kind: str, items: Iterable[JSONObject]) -> None:
        for item in items:
            run.result.items += 1
            entities = await self._engine.transform(item, kind, run.mapping, run.installation_id)
            run.result.persisted += persist_entities(
                entities,
                context=run.context,
                sink=self._sink,
                created_by=SYNC_AUTHOR,
            )
