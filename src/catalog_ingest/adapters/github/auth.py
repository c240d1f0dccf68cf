"""GitHub App authentication and installation token management."""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
import jwt

from catalog_ingest.adapters.http_resilience import ResilientClient
from catalog_ingest.domain.ports.fetching import InstallationClientFactory

from .client import DEFAULT_PER_PAGE, GitHubAPIError, GitHubInstallationClient
from .schema import InstallationToken

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from catalog_ingest.config.github import GitHubAppConfig
    from catalog_ingest.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

_JWT_BACKDATE_SECONDS: Final[int] = 60
_JWT_LIFETIME_SECONDS: Final[int] = 540
_TOKEN_REFRESH_MARGIN: Final[timedelta] = timedelta(minutes=1)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class _OpenClient:
    http: ResilientClient
    client: GitHubInstallationClient
    users: int = 0


@dataclass(slots=True)
class GitHubApp:
    """Authenticates as the GitHub App and hands out installation clients.

    Installation tokens are cached per installation until shortly before
    they expire.
    """

    config: GitHubAppConfig
    per_page: int = DEFAULT_PER_PAGE
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _tokens: dict[str, InstallationToken] = field(default_factory=dict, init=False, repr=False)
    _open: dict[str, _OpenClient] = field(default_factory=dict, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def app_jwt(self, *, now: float | None = None) -> str:
        issued_at = int(now if now is not None else time.time())
        claims = {
            "iat": issued_at - _JWT_BACKDATE_SECONDS,
            "exp": issued_at + _JWT_LIFETIME_SECONDS,
            "iss": self.config.app_id,
        }
        return jwt.encode(claims, self.config.private_key, algorithm="RS256")

    @asynccontextmanager
    async def installation_client(
        self, installation_id: str
    ) -> AsyncIterator[GitHubInstallationClient]:
        """Yield a client for ``installation_id``.

        Nested and concurrent users of the same installation share one
        client, and with it one rate limiter and response cache. It is
        closed when the last user leaves.
        """

        entry = self._open.get(installation_id)
        if entry is None:
            entry = await self._open_client(installation_id)
        entry.users += 1
        try:
            yield entry.client
        finally:
            entry.users -= 1
            if entry.users == 0:
                if self._open.get(installation_id) is entry:
                    del self._open[installation_id]
                await entry.http.aclose()

    async def _open_client(self, installation_id: str) -> _OpenClient:
        http = self.client_factory(self.config.resilience)
        try:
            token = await self._installation_token(http, installation_id)
        except BaseException:
            await http.aclose()
            raise
        entry = _OpenClient(
            http=http, client=GitHubInstallationClient(http, token, per_page=self.per_page)
        )
        self._open.setdefault(installation_id, entry)
        return entry

    async def _installation_token(self, http: ResilientClient, installation_id: str) -> str:
        async with self._lock:
            cached = self._tokens.get(installation_id)
            if cached is not None and cached.expires_at - _TOKEN_REFRESH_MARGIN > datetime.now(UTC):
                return cached.token

            log.debug("Requesting access token for installation %s", installation_id)
            response = await http.post(
                f"/app/installations/{installation_id}/access_tokens",
                headers={"Authorization": f"Bearer {self.app_jwt()}"},
            )
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise GitHubAPIError(
                    f"Cannot obtain token for installation {installation_id}",
                    status=response.status_code,
                ) from exc
            token = InstallationToken.model_validate(response.json())
            self._tokens[installation_id] = token
            return token.token


if TYPE_CHECKING:
    _factory_check: type[InstallationClientFactory] = GitHubApp
