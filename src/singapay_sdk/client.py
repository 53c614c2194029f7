"""Retrying, authenticated HTTP client for the SingaPay API."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

from .config import ClientConfig
from .errors import ApiError, AuthenticationError, SingaPayError
from .executor import RequestExecutor
from .response import Response
from .signer import disbursement_signature
from .tokens import TokenManager

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
MAX_BACKOFF_SECONDS = 30.0
JITTER_RATIO = 0.3


def should_retry(error: BaseException, attempt: int, max_retries: int) -> bool:
    if attempt >= max_retries:
        return False
    return getattr(error, "code", None) in RETRYABLE_STATUS_CODES


def compute_backoff(attempt: int, base_delay: float, rng: Callable[[], float] = random.random) -> float:
    exponential = base_delay * (2 ** (attempt - 1))
    jitter = rng() * JITTER_RATIO * exponential
    return min(exponential + jitter, MAX_BACKOFF_SECONDS)


class RetryingClient:
    def __init__(
        self,
        config: ClientConfig,
        executor: RequestExecutor,
        tokens: TokenManager,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._executor = executor
        self._tokens = tokens
        self._sleep = sleep
        self._clock = clock

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    @property
    def tokens(self) -> TokenManager:
        return self._tokens

    async def _build_headers(
        self,
        method: str,
        endpoint: str,
        body: Any,
        headers: Optional[Mapping[str, str]],
        *,
        authenticated: bool,
        signed: bool,
    ) -> Tuple[Dict[str, str], Optional[str]]:
        outgoing: Dict[str, str] = {"X-PARTNER-ID": self._config.credentials.api_key}
        token: Optional[str] = None
        if authenticated or signed:
            token = await self._tokens.get_access_token()
            outgoing["Authorization"] = f"Bearer {token}"
        if signed:
            timestamp = int(self._clock())
            outgoing["X-Timestamp"] = str(timestamp)
            outgoing["X-Signature"] = disbursement_signature(
                method,
                endpoint,
                token or "",
                body,
                timestamp,
                self._config.credentials.client_secret,
            )
        if headers:
            outgoing.update(headers)
        return outgoing, token

    async def request_with_retry(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        authenticated: bool = True,
        signed: bool = False,
    ) -> Response:
        max_retries = self._config.max_retries
        attempt = 0
        last_error: Optional[SingaPayError] = None

        while attempt <= max_retries:
            outgoing, token = await self._build_headers(
                method, endpoint, body, headers, authenticated=authenticated, signed=signed
            )
            try:
                return await self._executor.execute(method, endpoint, body, outgoing, params=params)
            except AuthenticationError as exc:
                last_error = exc
                if not (self._config.auto_reauth and authenticated and attempt < max_retries):
                    break
                attempt += 1
                logger.warning(
                    "Authentication rejected for %s %s; refreshing token (attempt %s/%s)",
                    method,
                    endpoint,
                    attempt,
                    max_retries,
                )
                await self._tokens.refresh_token(stale_token=token)
                await self._sleep(self._config.retry_delay)
            except SingaPayError as exc:
                last_error = exc
                if not should_retry(exc, attempt, max_retries):
                    break
                attempt += 1
                delay = compute_backoff(attempt, self._config.retry_delay)
                logger.warning(
                    "Retrying %s %s after status=%s in %.2fs (attempt %s/%s)",
                    method,
                    endpoint,
                    exc.code,
                    delay,
                    attempt,
                    max_retries,
                )
                await self._sleep(delay)

        if last_error is not None:
            raise last_error
        raise ApiError(f"Request failed after {attempt} attempt(s)")

    async def get(
        self, endpoint: str, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return await self.request_with_retry("GET", endpoint, None, headers, **kwargs)

    async def post(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return await self.request_with_retry("POST", endpoint, body, headers, **kwargs)

    async def put(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return await self.request_with_retry("PUT", endpoint, body, headers, **kwargs)

    async def patch(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return await self.request_with_retry("PATCH", endpoint, body, headers, **kwargs)

    async def delete(
        self, endpoint: str, headers: Optional[Mapping[str, str]] = None, **kwargs: Any
    ) -> Response:
        return await self.request_with_retry("DELETE", endpoint, None, headers, **kwargs)


__all__ = ["MAX_BACKOFF_SECONDS", "RETRYABLE_STATUS_CODES", "RetryingClient", "compute_backoff", "should_retry"]
