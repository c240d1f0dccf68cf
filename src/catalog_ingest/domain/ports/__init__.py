"""Domain port definitions for adapters."""

from __future__ import annotations

from .content import RemoteContentResolver
from .fetching import InstallationClient, InstallationClientFactory, RepositoryCollection
from .persistence import EntitySink, IntegrationContextRepository
from .webhooks import WebhookVerifier

__all__ = [
    "EntitySink",
    "InstallationClient",
    "InstallationClientFactory",
    "IntegrationContextRepository",
    "RemoteContentResolver",
    "RepositoryCollection",
    "WebhookVerifier",
]
