"""Resolve ``file://`` property mappings against repository contents."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalog_ingest.domain.ports.content import RemoteContentResolver

from .client import GitHubAPIError

if TYPE_CHECKING:
    from catalog_ingest.domain.model import JSONObject, JSONValue

    from .auth import GitHubApp

log = getLogger(__name__)


def _repository_of(payload: JSONValue) -> JSONObject:
    if not isinstance(payload, dict):
        return {}
    repository = payload.get("repository")
    if isinstance(repository, dict):
        return repository
    head = payload.get("head")
    if isinstance(head, dict) and isinstance(head.get("repo"), dict):
        return head["repo"]
    return payload


def _ref_of(payload: JSONValue, repository: JSONObject) -> str | None:
    default_branch = repository.get("default_branch")
    if isinstance(default_branch, str) and default_branch:
        return default_branch
    if isinstance(payload, dict):
        ref = payload.get("ref")
        if isinstance(ref, str) and ref:
            return ref
    return None


class GitHubContentResolver:
    """Fetch file contents of the repository a payload belongs to.

    Every failure is logged and reported as ``None``.
    """

    def __init__(self, app: GitHubApp | None) -> None:
        self._app = app

    async def fetch(
        self,
        path: str,
        payload: JSONValue,
        installation_id: str | None,
    ) -> str | None:
        if not installation_id:
            log.warning("No installation id available to fetch %s", path)
            return None
        if self._app is None:
            log.warning("GitHub App not initialised, cannot fetch %s", path)
            return None

        repository = _repository_of(payload)
        full_name = repository.get("full_name")
        if not isinstance(full_name, str) or full_name.count("/") != 1:
            log.warning("Cannot determine repository to fetch %s from", path)
            return None
        owner, repo = full_name.split("/")
        ref = _ref_of(payload, repository)

        try:
            async with self._app.installation_client(installation_id) as client:
                return await client.get_file_content(owner, repo, path, ref)
        except GitHubAPIError as exc:
            if exc.status == 404:
                log.warning("File not found: %s/%s", full_name, path)
            else:
                log.error("Error fetching file %s from %s: %s", path, full_name, exc)
            return None
        except Exception:
            log.exception("Error fetching file %s from %s", path, full_name)
            return None


if TYPE_CHECKING:
    _resolver_check: type[RemoteContentResolver] = GitHubContentResolver
