from __future__ import annotations

from typing import Any, Callable, Dict

import httpx
import pytest

from singapay_sdk.config import ClientConfig, Credentials


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_config() -> Callable[..., ClientConfig]:
    def factory(**overrides: Any) -> ClientConfig:
        defaults: Dict[str, Any] = dict(
            credentials=Credentials(
                client_id="client-id",
                client_secret="client-secret",
                api_key="api-key",
                hmac_validation_key="hmac-key",
            ),
            base_url="https://api.example.com",
            retry_delay=0,
            max_retries=3,
        )
        defaults.update(overrides)
        return ClientConfig(**defaults)

    return factory


@pytest.fixture()
def config(make_config) -> ClientConfig:
    return make_config()


@pytest.fixture()
def token_response() -> Callable[..., httpx.Response]:
    def factory(token: str = "token-1", expires_in: int = 3600) -> httpx.Response:
        return httpx.Response(
            200,
            json={"success": True, "data": {"access_token": token, "expires_in": expires_in}},
        )

    return factory
