"""Installation-scoped GitHub REST client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from catalog_ingest.domain.errors import RemoteFetchError
from catalog_ingest.domain.ports.fetching import InstallationClient, RepositoryCollection

from .schema import ContentFile

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from catalog_ingest.adapters.http_resilience import ResilientClient
    from catalog_ingest.domain.model import JSONObject

log = getLogger(__name__)

DEFAULT_PER_PAGE: Final[int] = 100

# (path below /repos/{owner}/{repo}, key of the item list in wrapped responses, extra params)
_COLLECTION_ENDPOINTS: Final[
    dict[RepositoryCollection, tuple[str, str | None, dict[str, str]]]
] = {
    RepositoryCollection.ISSUES: ("issues", None, {"state": "all"}),
    RepositoryCollection.PULL_REQUESTS: ("pulls", None, {"state": "all"}),
    RepositoryCollection.WORKFLOW_RUNS: ("actions/runs", "workflow_runs", {}),
    RepositoryCollection.BRANCHES: ("branches", None, {}),
    RepositoryCollection.TAGS: ("tags", None, {}),
    RepositoryCollection.RELEASES: ("releases", None, {}),
    RepositoryCollection.DEPLOYMENTS: ("deployments", None, {}),
    RepositoryCollection.ENVIRONMENTS: ("environments", "environments", {}),
    RepositoryCollection.DEPENDABOT_ALERTS: ("dependabot/alerts", None, {}),
    RepositoryCollection.CODE_SCANNING_ALERTS: ("code-scanning/alerts", None, {}),
}


class GitHubAPIError(RemoteFetchError):
    """Raised when GitHub answers with an error status or an unexpected body."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GitHubInstallationClient:
    """Reads repositories and their collections with an installation token."""

    def __init__(
        self,
        http: ResilientClient,
        token: str,
        *,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self._http = http
        self._headers = {"Authorization": f"Bearer {token}"}
        self._per_page = per_page

    def iter_repositories(self) -> AsyncIterator[JSONObject]:
        return self._paginate("/installation/repositories", items_key="repositories")

    def iter_collection(
        self, repository: JSONObject, collection: RepositoryCollection
    ) -> AsyncIterator[JSONObject]:
        path, items_key, params = _COLLECTION_ENDPOINTS[collection]
        full_name = repository.get("full_name")
        if not isinstance(full_name, str) or "/" not in full_name:
            raise GitHubAPIError(f"Repository payload lacks full_name: {full_name!r}")
        return self._paginate(f"/repos/{full_name}/{path}", items_key=items_key, params=params)

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str | None = None,
    ) -> str | None:
        """Return the decoded text of one file, ``None`` when the path is no file."""

        params = {"ref": ref} if ref else None
        response = await self._get(f"/repos/{owner}/{repo}/contents/{path}", params=params)
        payload = response.json()
        if not isinstance(payload, dict):
            log.warning("Path is not a file: %s", path)
            return None
        item = ContentFile.model_validate(payload)
        if not item.is_file:
            log.warning("Path is not a file: %s", path)
            return None
        try:
            content = item.decoded()
        except (ValueError, UnicodeDecodeError) as exc:
            raise GitHubAPIError(f"Cannot decode {owner}/{repo}/{path}: {exc}") from exc
        log.debug("File fetched: %s (%s bytes)", path, len(content))
        return content

    async def _paginate(
        self,
        path: str,
        *,
        items_key: str | None = None,
        params: dict[str, str] | None = None,
    ) -> AsyncIterator[JSONObject]:
        url: str | None = path
        query: dict[str, str | int] | None = {"per_page": self._per_page, **(params or {})}
        while url is not None:
            response = await self._get(url, params=query)
            payload = response.json()
            items = payload.get(items_key) if items_key and isinstance(payload, dict) else payload
            if not isinstance(items, list):
                raise GitHubAPIError(f"Unexpected response shape from {url}")
            for item in items:
                if isinstance(item, dict):
                    yield item
            # the next link already carries every query parameter
            url = response.links.get("next", {}).get("url")
            query = None

    async def _get(
        self,
        url: str,
        *,
        params: dict[str, str | int] | dict[str, str] | None = None,
    ) -> httpx.Response:
        response = await self._http.get(url, params=params, headers=self._headers)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GitHubAPIError(
                f"GitHub API {response.status_code} for {exc.request.url}",
                status=response.status_code,
            ) from exc
        return response


if TYPE_CHECKING:
    _client_check: type[InstallationClient] = GitHubInstallationClient
