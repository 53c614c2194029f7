from __future__ import annotations

import pytest

from singapay_sdk.errors import ConfigurationError
from singapay_sdk.registry import ClientRegistry
from singapay_sdk.sdk import SingaPay

CONFIG = {"client_id": "a", "client_secret": "b", "api_key": "c"}


def test_create_is_idempotent_per_name() -> None:
    registry = ClientRegistry()
    first = registry.create(CONFIG)
    second = registry.create({"client_id": "x", "client_secret": "y", "api_key": "z"})
    assert first is second
    assert isinstance(first, SingaPay)
    assert registry.get() is first
    assert registry.has("default")


def test_get_unknown_name() -> None:
    with pytest.raises(ConfigurationError, match="'missing' not found"):
        ClientRegistry().get("missing")


def test_remove_and_names() -> None:
    registry = ClientRegistry()
    registry.create(CONFIG, "one")
    registry.create(CONFIG, "two")
    assert registry.names() == ["one", "two"]
    assert isinstance(registry.remove("one"), SingaPay)
    assert registry.remove("one") is None
    assert registry.names() == ["two"]


def test_default_config_required() -> None:
    registry = ClientRegistry()
    with pytest.raises(ConfigurationError, match="Default configuration not set"):
        registry.create_with_default()
    registry.set_default_config(CONFIG)
    assert registry.create_with_default("tenant").config.credentials.client_id == "a"


def test_create_many_uses_factory() -> None:
    created = []

    def factory(config, **kwargs):
        created.append(config)
        return SingaPay(config, **kwargs)

    registry = ClientRegistry(factory=factory)
    instances = registry.create_many({"a": CONFIG, "b": CONFIG})
    assert set(instances) == {"a", "b"}
    assert len(created) == 2


@pytest.mark.asyncio
async def test_aclose_empties_registry() -> None:
    registry = ClientRegistry()
    registry.create(CONFIG)
    await registry.aclose()
    assert registry.names() == []


@pytest.mark.asyncio
async def test_aremove_closes_instance() -> None:
    closed = []

    class TrackingSingaPay(SingaPay):
        async def close(self) -> None:
            closed.append(True)
            await super().close()

    registry = ClientRegistry(factory=TrackingSingaPay)
    registry.create(CONFIG, "tenant")
    assert await registry.aremove("tenant") is True
    assert closed == [True]
    assert not registry.has("tenant")
    assert await registry.aremove("tenant") is False
