"""Application wiring and orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_ingest.adapters.github import GitHubApp, GitHubContentResolver, HmacSignatureVerifier
from catalog_ingest.adapters.sqlalchemy import (
    SqlAlchemyEntitySink,
    SqlAlchemyIntegrationContextStore,
    is_started,
    startup,
)
from catalog_ingest.config import SyncConfig, get_github_app_config, get_sync_config
from catalog_ingest.domain.errors import MappingConfigurationError
from catalog_ingest.domain.ingest import PollingSynchronizer, SyncTrigger, WebhookIngestor
from catalog_ingest.domain.mapping import MappingEngine, QueryEvaluator, parse_mapping_configuration
from catalog_ingest.domain.model import IntegrationContext, Provider
from catalog_ingest.resources import default_mapping_yaml

if TYPE_CHECKING:
    from catalog_ingest.config import GitHubAppConfig
    from catalog_ingest.domain.ports import (
        EntitySink,
        InstallationClientFactory,
        IntegrationContextRepository,
        RemoteContentResolver,
        WebhookVerifier,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class IngestionServices:
    """Every long-lived collaborator of the service, built once per process."""

    engine: MappingEngine
    contexts: IntegrationContextRepository
    sink: EntitySink
    ingestor: WebhookIngestor
    synchronizer: PollingSynchronizer
    trigger: SyncTrigger
    github: GitHubApp | None = None

    @property
    def github_initialised(self) -> bool:
        return self.ingestor.initialised


def build_services(
    *,
    github_config: GitHubAppConfig | None = None,
    sync_config: SyncConfig | None = None,
    contexts: IntegrationContextRepository | None = None,
    sink: EntitySink | None = None,
    clients: InstallationClientFactory | None = None,
    verifier: WebhookVerifier | None = None,
    content_resolver: RemoteContentResolver | None = None,
    database_uri: str | None = None,
) -> IngestionServices:
    """Assemble the pipeline.

    Collaborators not passed in are derived from ``github_config``; the
    SQLAlchemy stores are used when no context repository or sink is given.
    Without GitHub credentials the pipeline still maps and stores, but
    webhooks are answered as unavailable and sweeps cannot fetch.
    """

    sync = sync_config or SyncConfig()
    if (contexts is None or sink is None) and not is_started():
        startup(database_uri=database_uri)
    effective_contexts = contexts or SqlAlchemyIntegrationContextStore()
    effective_sink = sink or SqlAlchemyEntitySink()

    github: GitHubApp | None = None
    if github_config is not None:
        github = GitHubApp(github_config, per_page=sync.per_page)
        verifier = verifier or HmacSignatureVerifier(github_config.webhook_secret)
    effective_clients = clients or github
    effective_resolver = content_resolver or GitHubContentResolver(github)

    engine = MappingEngine(evaluator=QueryEvaluator(), content_resolver=effective_resolver)
    ingestor = WebhookIngestor(
        engine=engine,
        contexts=effective_contexts,
        sink=effective_sink,
        verifier=verifier,
    )
    synchronizer = PollingSynchronizer(
        engine=engine,
        contexts=effective_contexts,
        sink=effective_sink,
        clients=effective_clients,
        config=sync,
    )
    return IngestionServices(
        engine=engine,
        contexts=effective_contexts,
        sink=effective_sink,
        ingestor=ingestor,
        synchronizer=synchronizer,
        trigger=SyncTrigger(synchronizer),
        github=github,
    )


def load_services() -> IngestionServices:
    """Build the services from environment configuration."""

    return build_services(github_config=get_github_app_config(), sync_config=get_sync_config())


def setup_integration(
    services: IngestionServices,
    *,
    installation_id: str,
    organization_id: str,
    tenant_id: str | None = None,
    mapping_yaml: str | None = None,
) -> IntegrationContext:
    """Register an installation for a catalog scope, replacing any previous mapping.

    Falls back to the packaged default mapping.
    """

    mapping = mapping_yaml if mapping_yaml is not None else default_mapping_yaml()
    parse_mapping_configuration(mapping)
    context = services.contexts.save(
        IntegrationContext(
            provider=Provider.GITHUB,
            organization_id=organization_id,
            tenant_id=tenant_id,
            installation_id=str(installation_id),
            mapping_yaml=mapping,
        )
    )
    log.info("Set up %s", context.describe())
    return context


def update_mapping(
    services: IngestionServices,
    *,
    organization_id: str,
    tenant_id: str | None,
    mapping_yaml: str,
) -> bool:
    """Replace the mapping of one scope; ``False`` when the scope has no context.

    Raises ``MappingConfigurationError`` before storing anything when the
    document does not parse.
    """

    try:
        parse_mapping_configuration(mapping_yaml)
    except MappingConfigurationError:
        log.warning("Rejected mapping update for org %s: invalid document", organization_id)
        raise
    return services.contexts.update_mapping(
        Provider.GITHUB, organization_id, tenant_id, mapping_yaml
    )


def find_context(
    services: IngestionServices,
    *,
    organization_id: str,
    tenant_id: str | None,
) -> IntegrationContext | None:
    return services.contexts.get_for_scope(Provider.GITHUB, organization_id, tenant_id)
