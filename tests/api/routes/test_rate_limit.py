"""Tests for rate limiting on the trade endpoints."""

import pytest
from httpx import AsyncClient

from papertrade.core.config import settings

pytestmark = pytest.mark.integration

LIMIT = int(settings.TRADE_RATE_LIMIT.split("/")[0])


async def exhaust(client: AsyncClient, path: str) -> None:
    for i in range(LIMIT):
        response = await client.post(path, json={"symbol": "NOPE", "shares": "1"})
        assert response.status_code != 429, f"Request {i + 1} was rate limited too early"


async def test_rate_limit_enforced_on_buy(client: AsyncClient) -> None:
    """Test that buys beyond the limit get 429 with a retry hint."""
    await exhaust(client, "/api/v1/users/user-1/trades/buy")

    response = await client.post(
        "/api/v1/users/user-1/trades/buy", json={"symbol": "NOPE", "shares": "1"}
    )

    assert response.status_code == 429
    data = response.json()
    assert data["error_code"] == "RATE_LIMITED"
    assert "rate limit" in data["detail"].lower()
    assert data["retry_after"] == 60
    assert response.headers["Retry-After"] == "60"


async def test_rate_limit_per_endpoint(client: AsyncClient) -> None:
    """Test that buy and sell have independent limits."""
    await exhaust(client, "/api/v1/users/user-1/trades/buy")

    response = await client.post(
        "/api/v1/users/user-1/trades/sell", json={"symbol": "NOPE", "shares": "1"}
    )

    assert response.status_code != 429


async def test_reads_are_not_limited(client: AsyncClient) -> None:
    """Test that the portfolio endpoint is not rate limited."""
    for _ in range(LIMIT + 1):
        response = await client.get("/api/v1/users/user-1/portfolio")
        assert response.status_code == 404
