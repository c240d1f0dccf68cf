"""Synchronization defaults for the polling sweep."""

from __future__ import annotations

from dataclasses import dataclass

from .env import float_env_var, int_env_var

DEFAULT_PER_PAGE = 100
DEFAULT_MAX_CONCURRENT_REPOSITORIES = 4


@dataclass(frozen=True, slots=True)
class SyncConfig:
    per_page: int = DEFAULT_PER_PAGE
    max_concurrent_repositories: int = DEFAULT_MAX_CONCURRENT_REPOSITORIES
    deadline_seconds: float | None = None


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        per_page=min(int_env_var("SYNC_PER_PAGE", default=DEFAULT_PER_PAGE), 100),
        max_concurrent_repositories=int_env_var(
            "SYNC_MAX_CONCURRENT_REPOSITORIES",
            default=DEFAULT_MAX_CONCURRENT_REPOSITORIES,
        ),
        deadline_seconds=float_env_var("SYNC_DEADLINE_SECONDS"),
    )
