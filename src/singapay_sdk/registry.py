"""Named SDK instances owned by the host application."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .config import ClientConfig
from .errors import ConfigurationError
from .sdk import SingaPay

ConfigLike = Union[ClientConfig, Mapping[str, Any]]


class ClientRegistry:
    """Map of instance name to configured :class:`SingaPay` client.

    ``create`` is idempotent per name: asking for an existing name returns the
    instance already registered and ignores the new configuration.
    """

    def __init__(self, factory: Callable[..., SingaPay] = SingaPay) -> None:
        self._factory = factory
        self._instances: Dict[str, SingaPay] = {}
        self._default_config: Optional[ConfigLike] = None

    def create(self, config: ConfigLike, name: str = "default", **kwargs: Any) -> SingaPay:
        if name in self._instances:
            return self._instances[name]
        instance = self._factory(config, **kwargs)
        self._instances[name] = instance
        return instance

    def get(self, name: str = "default") -> SingaPay:
        try:
            return self._instances[name]
        except KeyError:
            raise ConfigurationError(f"SingaPay instance '{name}' not found") from None

    def has(self, name: str = "default") -> bool:
        return name in self._instances

    def remove(self, name: str = "default") -> Optional[SingaPay]:
        """Unregister ``name``; the caller owns the returned instance and must close it."""
        return self._instances.pop(name, None)

    async def aremove(self, name: str = "default") -> bool:
        instance = self._instances.pop(name, None)
        if instance is None:
            return False
        await instance.close()
        return True

    def names(self) -> List[str]:
        return list(self._instances)

    def set_default_config(self, config: ConfigLike) -> None:
        self._default_config = config

    def create_with_default(self, name: str = "default", **kwargs: Any) -> SingaPay:
        if self._default_config is None:
            raise ConfigurationError("Default configuration not set")
        return self.create(self._default_config, name, **kwargs)

    def create_many(self, configs: Mapping[str, ConfigLike]) -> Dict[str, SingaPay]:
        for name, config in configs.items():
            self.create(config, name)
        return dict(self._instances)

    async def aclose(self) -> None:
        for instance in list(self._instances.values()):
            await instance.close()
        self._instances.clear()


__all__ = ["ClientRegistry"]
