from __future__ import annotations

import asyncio

import httpx

from catalog_ingest.adapters.http_resilience import ResilientClient
from catalog_ingest.config import RateLimit, ResilienceConfig, RetryPolicy


def _config(**overrides: object) -> ResilienceConfig:
    values: dict[str, object] = {
        "name": "test",
        "base_url": "https://example.test",
        "retry": RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
        "cache": None,
    }
    values.update(overrides)
    return ResilienceConfig(**values)  # type: ignore[arg-type]


def test_retries_transient_status() -> None:
    statuses = [503, 200]
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(statuses[len(calls) - 1], json={"ok": True})

    async def run() -> httpx.Response:
        async with ResilientClient(_config(), transport=httpx.MockTransport(handler)) as client:
            return await client.get("/status")

    response = asyncio.run(run())

    assert response.status_code == 200
    assert len(calls) == 2


def test_client_errors_are_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404)

    async def run() -> httpx.Response:
        async with ResilientClient(_config(), transport=httpx.MockTransport(handler)) as client:
            return await client.get("/missing")

    assert asyncio.run(run()).status_code == 404
    assert len(calls) == 1


def test_default_headers_and_rate_limit_are_applied() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Accept"])
        return httpx.Response(200)

    config = _config(
        default_headers={"Accept": "application/vnd.github+json"},
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )

    async def run() -> None:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            await asyncio.gather(*(client.get(f"/item/{index}") for index in range(3)))

    asyncio.run(run())

    assert seen == ["application/vnd.github+json"] * 3



def test_token_exchange_post_is_retried() -> None:
    statuses = [502, 201]
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(statuses[len(calls) - 1], json={"token": "t"})

    async def run() -> httpx.Response:
        async with ResilientClient(_config(), transport=httpx.MockTransport(handler)) as client:
            return await client.post("/app/installations/1/access_tokens")

    assert asyncio.run(run()).status_code == 201
    assert [request.method for request in calls] == ["POST", "POST"]
