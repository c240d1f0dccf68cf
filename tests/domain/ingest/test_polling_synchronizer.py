from __future__ import annotations

import asyncio

import pytest

from catalog_ingest.config import SyncConfig
from catalog_ingest.domain.errors import RemoteFetchError
from catalog_ingest.domain.ingest import SYNC_AUTHOR, PollingSynchronizer, SyncResult
from catalog_ingest.domain.mapping import MappingEngine
from catalog_ingest.domain.model import IntegrationContext
from tests.helpers.ingest import (
    FakeClientFactory,
    FakeContextRepository,
    FakeInstallationClient,
    RecordingSink,
    make_context,
)

REPOSITORIES = [
    {"name": "api", "full_name": "acme/api", "html_url": "https://github.com/acme/api"},
    {"name": "web", "full_name": "acme/web", "html_url": "https://github.com/acme/web"},
]

ISSUES = {
    ("acme/api", "issues"): [
        {"number": 1, "title": "Bug", "state": "open", "repository_url": "acme/api"},
        {
            "number": 2,
            "title": "A pull request",
            "state": "open",
            "repository_url": "acme/api",
            "pull_request": {"url": "..."},
        },
    ],
    ("acme/web", "issues"): [
        {"number": 3, "title": "Typo", "state": "closed", "repository_url": "acme/web"},
    ],
}


def _synchronizer(
    contexts: FakeContextRepository,
    sink: RecordingSink,
    client: FakeInstallationClient,
    *,
    config: SyncConfig | None = None,
) -> PollingSynchronizer:
    return PollingSynchronizer(
        engine=MappingEngine(),
        contexts=contexts,
        sink=sink,
        clients=FakeClientFactory(client),
        config=config or SyncConfig(max_concurrent_repositories=2),
    )


def _sync_one(synchronizer: PollingSynchronizer, context: IntegrationContext) -> SyncResult:
    return asyncio.run(synchronizer.sync_one(context))


def test_sync_one_maps_repositories_and_issues(repository_and_issue_mapping: str) -> None:
    sink = RecordingSink()
    client = FakeInstallationClient(REPOSITORIES, ISSUES)
    context = make_context(repository_and_issue_mapping)
    synchronizer = _synchronizer(FakeContextRepository(context), sink, client)

    result = _sync_one(synchronizer, context)

    assert result.repositories == 2
    assert result.items == 4
    assert result.persisted == 4
    assert result.failed_collections == []
    identifiers = {record.identifier for record in sink.calls}
    assert identifiers == {"api", "web", "acme/api#1", "acme/web#3"}
    assert {record.created_by for record in sink.calls} == {SYNC_AUTHOR}


def test_collections_without_rules_are_not_fetched(repository_mapping: str) -> None:
    client = FakeInstallationClient(REPOSITORIES, ISSUES)
    context = make_context(repository_mapping)
    synchronizer = _synchronizer(FakeContextRepository(context), RecordingSink(), client)

    result = _sync_one(synchronizer, context)

    assert result.persisted == 2
    assert client.requested == []


def test_failing_collection_is_isolated(repository_and_issue_mapping: str) -> None:
    sink = RecordingSink()
    client = FakeInstallationClient(REPOSITORIES, ISSUES, failing={("acme/api", "issues")})
    context = make_context(repository_and_issue_mapping)
    synchronizer = _synchronizer(FakeContextRepository(context), sink, client)

    result = _sync_one(synchronizer, context)

    assert result.failed_collections == ["acme/api:issues"]
    assert {record.identifier for record in sink.calls} == {"api", "web", "acme/web#3"}


def test_repeated_sweeps_converge(repository_and_issue_mapping: str) -> None:
    sink = RecordingSink()
    client = FakeInstallationClient(REPOSITORIES, ISSUES)
    context = make_context(repository_and_issue_mapping)
    synchronizer = _synchronizer(FakeContextRepository(context), sink, client)

    _sync_one(synchronizer, context)
    first = dict(sink.stored)
    _sync_one(synchronizer, context)

    assert sink.stored == first
    assert len(sink.calls) == 2 * len(first)


def test_context_without_installation_is_skipped(repository_mapping: str) -> None:
    client = FakeInstallationClient(REPOSITORIES)
    context = make_context(repository_mapping, installation_id=None)
    synchronizer = _synchronizer(FakeContextRepository(context), RecordingSink(), client)

    result = _sync_one(synchronizer, context)

    assert result.skipped
    assert result.repositories == 0


def test_sync_without_client_factory_fails(repository_mapping: str) -> None:
    context = make_context(repository_mapping)
    synchronizer = PollingSynchronizer(
        engine=MappingEngine(),
        contexts=FakeContextRepository(context),
        sink=RecordingSink(),
        clients=None,
    )

    with pytest.raises(RemoteFetchError):
        _sync_one(synchronizer, context)


def test_sync_all_continues_after_failing_integration(repository_mapping: str) -> None:
    broken = make_context("resources: 1", organization_id="org-broken")
    healthy = make_context(repository_mapping, organization_id="org-ok")
    sink = RecordingSink()
    synchronizer = _synchronizer(
        FakeContextRepository(broken, healthy), sink, FakeInstallationClient(REPOSITORIES)
    )

    results = asyncio.run(synchronizer.sync_all())

    assert [result.organization_id for result in results] == ["org-ok"]
    assert {record.organization_id for record in sink.calls} == {"org-ok"}


def test_sync_all_respects_deadline(repository_mapping: str) -> None:
    class SlowClient(FakeInstallationClient):
        async def iter_repositories(self):  # type: ignore[override]
            await asyncio.sleep(5)
            for repository in self.repositories:
                yield repository

    context = make_context(repository_mapping)
    synchronizer = _synchronizer(
        FakeContextRepository(context),
        RecordingSink(),
        SlowClient(REPOSITORIES),
        config=SyncConfig(deadline_seconds=0.05),
    )

    with pytest.raises(TimeoutError):
        asyncio.run(synchronizer.sync_all())


def test_repositories_in_flight_are_bounded(repository_and_issue_mapping: str) -> None:
    class TrackingClient(FakeInstallationClient):
        def __init__(self, repositories: list[dict]) -> None:
            super().__init__(repositories)
            self.in_flight = 0
            self.peak = 0

        async def iter_collection(self, repository, collection):  # type: ignore[override]
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            try:
                for _ in range(3):
                    await asyncio.sleep(0)
                yield {
                    "number": 1,
                    "title": "Bug",
                    "state": "open",
                    "repository_url": repository["full_name"],
                }
            finally:
                self.in_flight -= 1

    repositories = [
        {"name": f"svc-{index}", "full_name": f"acme/svc-{index}"} for index in range(6)
    ]
    client = TrackingClient(repositories)
    context = make_context(repository_and_issue_mapping)
    config = SyncConfig(max_concurrent_repositories=2)
    synchronizer = _synchronizer(
        FakeContextRepository(context), RecordingSink(), client, config=config
    )

    result = _sync_one(synchronizer, context)

    assert result.repositories == 6
    assert result.persisted == 12
    assert client.peak == config.max_concurrent_repositories
    assert client.in_flight == 0
