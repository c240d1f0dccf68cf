"""HMAC verification of GitHub webhook deliveries."""

from __future__ import annotations

import hashlib
import hmac
from typing import TYPE_CHECKING, Final

from catalog_ingest.domain.errors import SignatureError
from catalog_ingest.domain.ports.webhooks import WebhookVerifier

SIGNATURE_PREFIX: Final[str] = "sha256="


def sign(body: bytes, secret: str) -> str:
    """Return the ``X-Hub-Signature-256`` header value GitHub sends for ``body``."""

    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


class HmacSignatureVerifier:
    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Webhook secret must not be empty")
        self._secret = secret

    def verify(self, body: bytes, signature: str | None) -> None:
        if not signature or not signature.startswith(SIGNATURE_PREFIX):
            raise SignatureError("Missing or malformed signature")
        if not hmac.compare_digest(sign(body, self._secret), signature):
            raise SignatureError("Invalid signature")


if TYPE_CHECKING:
    _verifier_check: type[WebhookVerifier] = HmacSignatureVerifier
