"""GitHub App configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

log = getLogger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_TIMEOUT_SECONDS = 15.0


def default_github_resilience(base_url: str = DEFAULT_GITHUB_API_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="github",
        base_url=base_url,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=CacheConfig(),
        default_headers={
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "catalog-ingest",
        },
    )


@dataclass(frozen=True)
class GitHubAppConfig:
    """Credentials of the GitHub App this service runs as."""

    app_id: str
    private_key: str
    webhook_secret: str
    api_url: str = DEFAULT_GITHUB_API_URL
    resilience: ResilienceConfig = field(default_factory=default_github_resilience)


def _read_private_key() -> str | None:
    inline = optional_env_var("GITHUB_APP_PRIVATE_KEY")
    if inline is not None:
        # PEM blocks are often stored with escaped newlines in .env files
        return inline.replace("\\n", "\n")
    key_path = optional_env_var("GITHUB_APP_PRIVATE_KEY_PATH")
    if key_path is None:
        return None
    path = Path(key_path).expanduser()
    try:
        return path.read_text()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read GitHub App private key at {path}") from exc


def get_github_app_config() -> GitHubAppConfig | None:
    """Return the GitHub App configuration, or ``None`` when no credentials are set.

    Partially configured credentials are an error rather than a silent opt-out.
    """

    private_key = _read_private_key()
    present = [optional_env_var(name) for name in ("GITHUB_APP_ID", "GITHUB_WEBHOOK_SECRET")]
    if private_key is None and not any(present):
        log.warning("GitHub App credentials missing, integration stays uninitialised")
        return None
    if private_key is None:
        raise MissingConfigurationError(
            "Missing configuration for: GITHUB_APP_PRIVATE_KEY (or GITHUB_APP_PRIVATE_KEY_PATH)"
        )

    values = require_env_vars(("GITHUB_APP_ID", "GITHUB_WEBHOOK_SECRET"))
    api_url = (optional_env_var("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL).rstrip("/")
    return GitHubAppConfig(
        app_id=values["GITHUB_APP_ID"].strip(),
        private_key=private_key,
        webhook_secret=values["GITHUB_WEBHOOK_SECRET"],
        api_url=api_url,
        resilience=default_github_resilience(api_url),
    )
