"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .auth import GitHubApp
from .client import GitHubAPIError, GitHubInstallationClient
from .content import GitHubContentResolver
from .schema import ContentFile, InstallationToken
from .signature import HmacSignatureVerifier, sign

__all__ = [
    "ContentFile",
    "GitHubAPIError",
    "GitHubApp",
    "GitHubContentResolver",
    "GitHubInstallationClient",
    "HmacSignatureVerifier",
    "InstallationToken",
    "sign",
]
