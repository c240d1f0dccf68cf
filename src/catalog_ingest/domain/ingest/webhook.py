"""Synchronous ingestion of provider webhook deliveries."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_ingest.domain.model import Provider

from .events import PING_EVENT, classify_event, installation_id_of, select_payload
from .persist import WEBHOOK_AUTHOR, persist_entities

if TYPE_CHECKING:
    from catalog_ingest.domain.mapping import MappingEngine
    from catalog_ingest.domain.ports.persistence import EntitySink, IntegrationContextRepository
    from catalog_ingest.domain.ports.webhooks import WebhookVerifier

log = getLogger(__name__)


class WebhookStatus(StrEnum):
    UNAVAILABLE = "unavailable"
    PONG = "pong"
    UNSUPPORTED = "unsupported"
    IGNORED = "ignored"
    NOT_CONFIGURED = "not_configured"
    PROCESSED = "processed"


@dataclass(slots=True, frozen=True)
class WebhookDelivery:
    """One inbound delivery: provider headers plus the raw body."""

    event_type: str
    body: bytes
    signature: str | None = None
    delivery_id: str | None = None


@dataclass(slots=True, frozen=True)
class WebhookOutcome:
    status: WebhookStatus
    processed: int = 0
    kind: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status is not WebhookStatus.UNAVAILABLE


class WebhookIngestor:
    """Run one delivery through verify, classify, resolve, map and persist.

    Every path ends in a single ``WebhookOutcome``; only signature failures
    (``SignatureError``) and unexpected errors propagate to the caller.
    """

    def __init__(
        self,
        *,
        engine: MappingEngine,
        contexts: IntegrationContextRepository,
        sink: EntitySink,
        verifier: WebhookVerifier | None,
        provider: Provider = Provider.GITHUB,
    ) -> None:
        self._engine = engine
        self._contexts = contexts
        self._sink = sink
        self._verifier = verifier
        self._provider = provider

    @property
    def initialised(self) -> bool:
        return self._verifier is not None

    async def handle(self, delivery: WebhookDelivery) -> WebhookOutcome:
        if self._verifier is None:
            log.warning("GitHub integration not initialised, ignoring webhook")
            return WebhookOutcome(WebhookStatus.UNAVAILABLE)

        self._verifier.verify(delivery.body, delivery.signature)

        if delivery.event_type == PING_EVENT:
            log.info("Received ping event (delivery %s)", delivery.delivery_id)
            return WebhookOutcome(WebhookStatus.PONG)

        kind = classify_event(delivery.event_type)
        if kind is None:
            log.warning("Unsupported event type: %s", delivery.event_type)
            return WebhookOutcome(WebhookStatus.UNSUPPORTED)

        envelope = json.loads(delivery.body)
        installation_id = installation_id_of(envelope)
        if installation_id is None:
            log.warning("Webhook payload missing installation.id")
            return WebhookOutcome(WebhookStatus.IGNORED, kind=kind)

        context = self._contexts.get_by_installation(self._provider, installation_id)
        if context is None:
            log.warning("No integration config found for installation ID: %s", installation_id)
            return WebhookOutcome(WebhookStatus.NOT_CONFIGURED, kind=kind)

        log.info(
            "Processing %s event as %s for organization %s",
            delivery.event_type,
            kind,
            context.organization_id,
        )
        entities = await self._engine.transform(
            select_payload(delivery.event_type, envelope),
            kind,
            context.mapping_config(),
            installation_id,
        )
        log.info("Mapped %s entities from payload", len(entities))

        persisted = persist_entities(
            entities,
            context=context,
            sink=self._sink,
            created_by=WEBHOOK_AUTHOR,
        )
        log.info("Successfully saved %s entities", persisted)
        return WebhookOutcome(WebhookStatus.PROCESSED, processed=persisted, kind=kind)
