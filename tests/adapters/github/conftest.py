from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from catalog_ingest.adapters.github import GitHubApp
from catalog_ingest.adapters.http_resilience import ResilientClient
from catalog_ingest.config import GitHubAppConfig, ResilienceConfig
from tests.helpers.github import API_URL, FakeGitHub

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey


@pytest.fixture(scope="session")
def rsa_key() -> RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key: RSAPrivateKey) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def github_config(private_key_pem: str) -> GitHubAppConfig:
    return GitHubAppConfig(
        app_id="123",
        private_key=private_key_pem,
        webhook_secret="s3cret",
        api_url=API_URL,
        resilience=ResilienceConfig(name="github-test", base_url=API_URL, cache=None),
    )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def github_app(github_config: GitHubAppConfig, fake_github: FakeGitHub) -> GitHubApp:
    def factory(config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=httpx.MockTransport(fake_github.handle))

    return GitHubApp(github_config, per_page=2, client_factory=factory)
