"""Single HTTP exchange against the SingaPay API."""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from .config import ClientConfig
from .errors import ApiError, AuthenticationError, SingaPayError, ValidationError
from .response import Response
from .signer import serialize_body

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def parse_body(response: httpx.Response) -> Dict[str, Any]:
    if not response.content:
        return {}
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return {"message": text[:200]} if text else {}
    if isinstance(payload, dict):
        return payload
    return {"data": payload}


def classify(response: Response, cause: Optional[BaseException] = None) -> SingaPayError:
    status = response.status_code
    if status == 401:
        return AuthenticationError(response.message or "Authentication failed", status, cause)
    if status == 422:
        errors = response.body.get("errors") or {}
        return ValidationError(response.message or "Validation failed", errors, status, cause)
    return ApiError(response.message or "API request failed", status, cause)


class RequestExecutor:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        interceptors: Optional[Iterable[Any]] = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
            headers={"User-Agent": config.user_agent},
        )
        self._interceptors: List[Any] = list(interceptors or [])

    @property
    def interceptors(self) -> List[Any]:
        return list(self._interceptors)

    def add_interceptor(self, interceptor: Any) -> "RequestExecutor":
        self._interceptors.append(interceptor)
        return self

    def _headers(self, headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = dict(DEFAULT_HEADERS)
        merged.update(self._config.custom_headers)
        if headers:
            merged.update(headers)
        return merged

    async def _notify(self, hook: str, *args: Any) -> None:
        for interceptor in self._interceptors:
            callback = getattr(interceptor, hook, None)
            if callback is None:
                continue
            result = callback(*args)
            if inspect.isawaitable(result):
                await result

    async def execute(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        method = method.upper()
        options: Dict[str, Any] = {
            "method": method,
            "url": endpoint,
            "headers": self._headers(headers),
            "params": dict(params) if params else None,
            "content": serialize_body(body) if body is not None else None,
        }
        await self._notify("on_request", method, endpoint, options)

        start = time.perf_counter()
        try:
            raw = await self._client.request(
                method,
                endpoint,
                headers=options["headers"],
                params=options["params"],
                content=options["content"],
            )
        except httpx.HTTPError as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            error = ApiError(str(exc) or "HTTP request failed", 0, exc)
            await self._notify("on_error", method, endpoint, options, error, elapsed_ms)
            raise error from exc

        elapsed_ms = (time.perf_counter() - start) * 1000
        response = Response(raw.status_code, parse_body(raw))

        if raw.is_success:
            await self._notify("on_response", method, endpoint, options, response, elapsed_ms)
            return response

        error = classify(response)
        logger.debug("SingaPay %s %s failed status=%s", method, endpoint, raw.status_code)
        await self._notify("on_error", method, endpoint, options, error, elapsed_ms)
        raise error

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_HEADERS", "RequestExecutor", "classify", "parse_body"]
