"""Webhook and polling ingestion flows built on the mapping engine."""

from .events import EVENT_KINDS, PING_EVENT, classify_event, installation_id_of, select_payload
from .persist import PROVIDER_ICON, SYNC_AUTHOR, WEBHOOK_AUTHOR, persist_entities
from .polling import COLLECTION_KINDS, REPOSITORY_KIND, PollingSynchronizer, SyncResult
from .trigger import SyncTrigger
from .webhook import WebhookDelivery, WebhookIngestor, WebhookOutcome, WebhookStatus

__all__ = [
    "COLLECTION_KINDS",
    "EVENT_KINDS",
    "PING_EVENT",
    "PROVIDER_ICON",
    "REPOSITORY_KIND",
    "SYNC_AUTHOR",
    "WEBHOOK_AUTHOR",
    "PollingSynchronizer",
    "SyncResult",
    "SyncTrigger",
    "WebhookDelivery",
    "WebhookIngestor",
    "WebhookOutcome",
    "WebhookStatus",
    "classify_event",
    "installation_id_of",
    "persist_entities",
    "select_payload",
]
