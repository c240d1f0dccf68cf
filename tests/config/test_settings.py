from __future__ import annotations

from pathlib import Path

import pytest

from catalog_ingest.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_database_config,
    get_github_app_config,
    get_sync_config,
    require_env_vars,
)

GITHUB_VARIABLES = (
    "GITHUB_APP_ID",
    "GITHUB_APP_PRIVATE_KEY",
    "GITHUB_APP_PRIVATE_KEY_PATH",
    "GITHUB_WEBHOOK_SECRET",
    "GITHUB_API_URL",
)


@pytest.fixture(autouse=True)
def _clean_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in GITHUB_VARIABLES:
        monkeypatch.delenv(name, raising=False)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_missing_and_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_github_config_absent_means_uninitialised() -> None:
    assert get_github_app_config() is None


def test_github_config_from_inline_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "123")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY", "-----BEGIN KEY-----\\nabc\\n-----END KEY-----")
    monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "s3cret")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.test/api/v3/")

    config = get_github_app_config()

    assert config is not None
    assert config.app_id == "123"
    assert config.private_key == "-----BEGIN KEY-----\nabc\n-----END KEY-----"
    assert config.api_url == "https://ghe.example.test/api/v3"
    assert config.resilience.base_url == config.api_url


def test_github_config_from_key_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    key_file = tmp_path / "app.pem"
    key_file.write_text("PEM")
    monkeypatch.setenv("GITHUB_APP_ID", "123")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY_PATH", str(key_file))
    monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "s3cret")

    config = get_github_app_config()

    assert config is not None
    assert config.private_key == "PEM"


def test_github_config_partial_is_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "123")

    with pytest.raises(MissingConfigurationError):
        get_github_app_config()


def test_github_config_missing_secret_is_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_APP_ID", "123")
    monkeypatch.setenv("GITHUB_APP_PRIVATE_KEY", "PEM")

    with pytest.raises(MissingConfigurationError) as exc:
        get_github_app_config()

    assert "GITHUB_WEBHOOK_SECRET" in str(exc.value)


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SYNC_PER_PAGE", "SYNC_MAX_CONCURRENT_REPOSITORIES", "SYNC_DEADLINE_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    config = get_sync_config()

    assert (config.per_page, config.max_concurrent_repositories, config.deadline_seconds) == (
        100,
        4,
        None,
    )


def test_sync_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYNC_PER_PAGE", "500")
    monkeypatch.setenv("SYNC_MAX_CONCURRENT_REPOSITORIES", "8")
    monkeypatch.setenv("SYNC_DEADLINE_SECONDS", "90")

    config = get_sync_config()

    assert config.per_page == 100
    assert config.max_concurrent_repositories == 8
    assert config.deadline_seconds == 90.0


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SYNC_PER_PAGE", "many"),
        ("SYNC_MAX_CONCURRENT_REPOSITORIES", "0"),
        ("SYNC_DEADLINE_SECONDS", "-1"),
    ],
)
def test_sync_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_database_lives_in_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("CATALOG_INGEST_DATA_DIR", str(data_dir))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    uri = get_database_config().uri

    assert data_dir.is_dir()
    assert uri == f"sqlite+pysqlite:///{data_dir.resolve() / 'catalog.db'}"


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://catalog@db/catalog")

    assert get_database_config().uri == "postgresql+psycopg://catalog@db/catalog"
