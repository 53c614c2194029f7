"""Access-token lifecycle: acquisition, caching, expiry tracking and refresh."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .cache import Cache
from .config import ClientConfig
from .errors import AuthenticationError, ConfigurationError, SingaPayError
from .signer import auth_signature

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "/api/v1.1/access-token/b2b"
CACHE_KEY_PREFIX = "singapay_token_"
EXPIRY_MARGIN_SECONDS = 60
CACHE_BUFFER_SECONDS = 120
DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_valid(self, now: Optional[float] = None) -> bool:
        current = time.time() if now is None else now
        return current < self.expires_at - EXPIRY_MARGIN_SECONDS

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.value, "expiry": self.expires_at}

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["AccessToken"]:
        if not isinstance(payload, dict):
            return None
        token, expiry = payload.get("token"), payload.get("expiry")
        if not token or expiry is None:
            return None
        return cls(value=str(token), expires_at=float(expiry))


def parse_token_payload(data: Any) -> Tuple[Optional[str], int]:
    """Extract ``(access_token, expires_in)`` from a token-endpoint payload.

    The API has returned both ``{"access_token": ...}`` and
    ``{"data": {"access_token": ...}}`` over time; both are accepted, the flat
    shape taking precedence. ``expires_in`` defaults to one hour only when
    absent; a value that is not a number raises ``ValueError``.
    """
    if not isinstance(data, dict):
        return None, DEFAULT_EXPIRES_IN
    nested = data.get("data") if isinstance(data.get("data"), dict) else {}
    token = data.get("access_token") or nested.get("access_token")
    expires_in = data.get("expires_in")
    if expires_in is None:
        expires_in = nested.get("expires_in")
    if expires_in is None:
        return token, DEFAULT_EXPIRES_IN
    if isinstance(expires_in, bool):
        raise ValueError(f"expires_in must be numeric, got {expires_in!r}")
    try:
        return token, int(expires_in)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"expires_in must be numeric, got {expires_in!r}") from exc


class TokenManager:
    def __init__(
        self,
        config: ClientConfig,
        cache: Optional[Cache] = None,
        executor: Optional[Any] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._cache = cache
        self._executor = executor
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()

    def attach(self, executor: Any) -> None:
        self._executor = executor

    @property
    def cache_key(self) -> str:
        creds = self._config.credentials
        digest = hashlib.sha256(f"{creds.client_id}:{creds.client_secret}".encode("utf-8")).hexdigest()
        return CACHE_KEY_PREFIX + digest

    @property
    def current_token(self) -> Optional[AccessToken]:
        return self._token

    def is_valid(self, token: Optional[AccessToken]) -> bool:
        return token is not None and token.is_valid(self._clock())

    def is_authenticated(self) -> bool:
        """Report whether a token is held in memory; it may already be stale."""
        return self._token is not None

    async def get_access_token(self) -> str:
        if self.is_valid(self._token):
            return self._token.value  # type: ignore[union-attr]
        async with self._lock:
            if self.is_valid(self._token):
                return self._token.value  # type: ignore[union-attr]
            cached = await self._load_cached()
            if cached is not None:
                self._token = cached
                return cached.value
            return await self._authenticate()

    async def authenticate(self) -> str:
        async with self._lock:
            return await self._authenticate()

    async def refresh_token(self, stale_token: Optional[str] = None) -> str:
        async with self._lock:
            current = self._token
            if stale_token is not None and self.is_valid(current) and current.value != stale_token:  # type: ignore[union-attr]
                logger.debug("Access token already refreshed by a concurrent request")
                return current.value  # type: ignore[union-attr]
            self._token = None
            if self._cache is not None:
                await self._cache.delete(self.cache_key)
            logger.info("Refreshing SingaPay access token")
            return await self._authenticate()

    async def _load_cached(self) -> Optional[AccessToken]:
        if self._cache is None:
            return None
        token = AccessToken.from_dict(await self._cache.get(self.cache_key))
        if token is not None and self.is_valid(token):
            logger.debug("Using cached SingaPay access token")
            return token
        return None

    async def _authenticate(self) -> str:
        if self._executor is None:
            raise ConfigurationError("HTTP executor must be attached before requesting tokens")

        creds = self._config.credentials
        timestamp = int(self._clock())
        headers = {
            "X-CLIENT-ID": creds.client_id,
            "X-PARTNER-ID": creds.api_key,
            "X-Timestamp": str(timestamp),
            "X-Signature": auth_signature(creds.client_id, creds.client_secret),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        try:
            response = await self._executor.execute(
                "POST", TOKEN_ENDPOINT, {"grant_type": "client_credentials"}, headers
            )
        except AuthenticationError:
            raise
        except SingaPayError as exc:
            raise AuthenticationError(f"Authentication request failed: {exc.message}", exc.code, exc) from exc

        if not response.is_success:
            raise AuthenticationError(response.message or "Failed to obtain access token", response.code)

        try:
            value, expires_in = parse_token_payload(response.data)
        except ValueError as exc:
            raise AuthenticationError("Invalid expires_in in token response", response.status_code, exc) from exc
        if not value:
            raise AuthenticationError("Access token not found in response", response.status_code)

        token = AccessToken(value=value, expires_at=self._clock() + expires_in)
        self._token = token
        await self._store(token, expires_in)
        logger.info("Obtained SingaPay access token (expires_in=%ss)", expires_in)
        return token.value

    async def _store(self, token: AccessToken, expires_in: int) -> None:
        if self._cache is None:
            return
        ttl = min(expires_in - CACHE_BUFFER_SECONDS, self._config.cache_ttl)
        if ttl <= 0:
            logger.debug("Token lifetime too short to cache (expires_in=%ss)", expires_in)
            return
        await self._cache.set(self.cache_key, token.to_dict(), ttl)


__all__ = ["AccessToken", "TokenManager", "parse_token_payload", "TOKEN_ENDPOINT"]
