"""Port for webhook authenticity checks."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class WebhookVerifier(Protocol):
    def verify(self, body: bytes, signature: str | None) -> None:
        """Raise ``SignatureError`` unless ``signature`` authenticates ``body``."""
        ...
