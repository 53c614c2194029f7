"""Configuration objects for the SingaPay Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError

ENV_SANDBOX = "sandbox"
ENV_PRODUCTION = "production"

SANDBOX_URL = "https://sandbox-payment-b2b.singapay.id"
PRODUCTION_URL = "https://payment-b2b.singapay.id"

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_AUTO_REAUTH = True
DEFAULT_CACHE_TTL = 3600

SDK_VERSION = "1.0.0"


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str
    api_key: str
    hmac_validation_key: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, client_secret='***', api_key='***')"


@dataclass(frozen=True)
class ClientConfig:
    credentials: Credentials
    environment: str = ENV_SANDBOX
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    auto_reauth: bool = DEFAULT_AUTO_REAUTH
    cache_ttl: int = DEFAULT_CACHE_TTL
    custom_headers: Dict[str, str] = field(default_factory=dict)
    user_agent: str = f"singapay-sdk-python/{SDK_VERSION}"

    def __post_init__(self) -> None:
        for name in ("client_id", "client_secret", "api_key"):
            if not getattr(self.credentials, name, None):
                raise ConfigurationError(f"Config field '{name}' is required")
        if self.environment not in (ENV_SANDBOX, ENV_PRODUCTION):
            raise ConfigurationError("Invalid environment. Must be 'sandbox' or 'production'")
        if self.max_retries < 0:
            raise ConfigurationError("Max retries must be non-negative")
        if self.retry_delay < 0:
            raise ConfigurationError("Retry delay must be non-negative")
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")
        if not self.base_url:
            default_url = PRODUCTION_URL if self.environment == ENV_PRODUCTION else SANDBOX_URL
            object.__setattr__(self, "base_url", default_url)
        object.__setattr__(self, "custom_headers", dict(self.custom_headers))

    @property
    def is_production(self) -> bool:
        return self.environment == ENV_PRODUCTION

    @classmethod
    def from_env(cls, prefix: str = "SINGAPAY_") -> "ClientConfig":
        def env(name: str, default: Optional[str] = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        credentials = Credentials(
            client_id=env("CLIENT_ID", "") or "",
            client_secret=env("CLIENT_SECRET", "") or "",
            api_key=env("API_KEY", "") or "",
            hmac_validation_key=env("HMAC_VALIDATION_KEY") or None,
        )
        return cls(
            credentials=credentials,
            environment=env("ENVIRONMENT", ENV_SANDBOX) or ENV_SANDBOX,
            base_url=env("BASE_URL") or None,
            timeout=float(env("TIMEOUT", str(DEFAULT_TIMEOUT))),
            max_retries=int(env("MAX_RETRIES", str(DEFAULT_MAX_RETRIES))),
            retry_delay=float(env("RETRY_DELAY", str(DEFAULT_RETRY_DELAY))),
            auto_reauth=parse_flag(env("AUTO_REAUTH", "true") or "true"),
            cache_ttl=int(env("CACHE_TTL", str(DEFAULT_CACHE_TTL))),
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ClientConfig":
        """Build a config from a plain mapping.

        Both ``snake_case`` and ``camelCase`` keys are accepted, so settings
        written as JSON-style documents can be reused as-is.
        """

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if mapping.get(snake) is not None:
                return mapping[snake]
            if mapping.get(camel) is not None:
                return mapping[camel]
            return default

        credentials = Credentials(
            client_id=pick("client_id", "clientId", ""),
            client_secret=pick("client_secret", "clientSecret", ""),
            api_key=pick("api_key", "apiKey", ""),
            hmac_validation_key=pick("hmac_validation_key", "hmacValidationKey"),
        )
        return cls(
            credentials=credentials,
            environment=pick("environment", "environment", ENV_SANDBOX),
            base_url=pick("base_url", "baseUrl"),
            timeout=float(pick("timeout", "timeout", DEFAULT_TIMEOUT)),
            max_retries=int(pick("max_retries", "maxRetries", DEFAULT_MAX_RETRIES)),
            retry_delay=float(pick("retry_delay", "retryDelay", DEFAULT_RETRY_DELAY)),
            auto_reauth=parse_flag(pick("auto_reauth", "autoReauth", DEFAULT_AUTO_REAUTH)),
            cache_ttl=int(pick("cache_ttl", "cacheTtl", DEFAULT_CACHE_TTL)),
            custom_headers=dict(pick("custom_headers", "customHeaders", {})),
        )

    def with_overrides(self, **changes: Any) -> "ClientConfig":
        if "environment" in changes and "base_url" not in changes:
            changes["base_url"] = None
        return replace(self, **changes)

    def with_header(self, name: str, value: str) -> "ClientConfig":
        headers = dict(self.custom_headers)
        headers[name] = value
        return replace(self, custom_headers=headers)

    def without_header(self, name: str) -> "ClientConfig":
        headers = {k: v for k, v in self.custom_headers.items() if k != name}
        return replace(self, custom_headers=headers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_id": self.credentials.client_id,
            "client_secret": "***HIDDEN***",
            "api_key": self.credentials.api_key[:8] + "...",
            "environment": self.environment,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_delay": self.retry_delay,
            "auto_reauth": self.auto_reauth,
            "cache_ttl": self.cache_ttl,
        }


__all__ = [
    "ClientConfig",
    "Credentials",
    "ENV_PRODUCTION",
    "ENV_SANDBOX",
    "PRODUCTION_URL",
    "SANDBOX_URL",
    "SDK_VERSION",
]
