"""Observers invoked around every HTTP exchange.

An interceptor is any object exposing some of ``on_request``, ``on_response``
and ``on_error``. Hooks may be plain functions or coroutines; missing hooks
are skipped. :class:`BaseInterceptor` supplies no-op defaults for callers who
prefer to subclass.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, Counter, Histogram

from .response import Response


@runtime_checkable
class Interceptor(Protocol):
    async def on_request(self, method: str, endpoint: str, options: Dict[str, Any]) -> None: ...

    async def on_response(
        self, method: str, endpoint: str, options: Dict[str, Any], response: Response, elapsed_ms: float
    ) -> None: ...

    async def on_error(
        self, method: str, endpoint: str, options: Dict[str, Any], error: Exception, elapsed_ms: float
    ) -> None: ...


class BaseInterceptor:
    async def on_request(self, method: str, endpoint: str, options: Dict[str, Any]) -> None:
        return None

    async def on_response(
        self, method: str, endpoint: str, options: Dict[str, Any], response: Response, elapsed_ms: float
    ) -> None:
        return None

    async def on_error(
        self, method: str, endpoint: str, options: Dict[str, Any], error: Exception, elapsed_ms: float
    ) -> None:
        return None


class LoggingInterceptor(BaseInterceptor):
    """Logs request metadata; header values and bodies are never written."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("singapay.http")

    async def on_request(self, method: str, endpoint: str, options: Dict[str, Any]) -> None:
        self._logger.info(
            "SingaPay API request method=%s endpoint=%s headers=%s has_body=%s",
            method,
            endpoint,
            sorted(options.get("headers", {}).keys()),
            options.get("content") is not None,
        )

    async def on_response(
        self, method: str, endpoint: str, options: Dict[str, Any], response: Response, elapsed_ms: float
    ) -> None:
        self._logger.info(
            "SingaPay API response method=%s endpoint=%s status=%s success=%s elapsed=%.2fms",
            method,
            endpoint,
            response.status_code,
            response.is_success,
            elapsed_ms,
        )

    async def on_error(
        self, method: str, endpoint: str, options: Dict[str, Any], error: Exception, elapsed_ms: float
    ) -> None:
        self._logger.error(
            "SingaPay API error method=%s endpoint=%s error=%s code=%s elapsed=%.2fms",
            method,
            endpoint,
            error,
            getattr(error, "code", None),
            elapsed_ms,
        )


@dataclass(frozen=True)
class MetricsSnapshot:
    total_requests: int
    successful_requests: int
    failed_requests: int
    total_response_time_ms: float
    last_request_at: Optional[float]
    average_response_time: float
    success_rate: float


class MetricsInterceptor(BaseInterceptor):
    """Accumulates request counts and latency in memory."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.total_response_time_ms = 0.0
        self.last_request_at: Optional[float] = None

    async def on_request(self, method: str, endpoint: str, options: Dict[str, Any]) -> None:
        self.total_requests += 1
        self.last_request_at = time.time()

    async def on_response(
        self, method: str, endpoint: str, options: Dict[str, Any], response: Response, elapsed_ms: float
    ) -> None:
        self.successful_requests += 1
        self.total_response_time_ms += elapsed_ms

    async def on_error(
        self, method: str, endpoint: str, options: Dict[str, Any], error: Exception, elapsed_ms: float
    ) -> None:
        self.failed_requests += 1
        self.total_response_time_ms += elapsed_ms

    @property
    def average_response_time(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_response_time_ms / self.total_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests * 100

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            total_requests=self.total_requests,
            successful_requests=self.successful_requests,
            failed_requests=self.failed_requests,
            total_response_time_ms=self.total_response_time_ms,
            last_request_at=self.last_request_at,
            average_response_time=self.average_response_time,
            success_rate=self.success_rate,
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self.snapshot())


class PrometheusInterceptor(BaseInterceptor):
    """Exports request counters and latency histograms via ``prometheus_client``."""

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "singapay") -> None:
        kwargs: Dict[str, Any] = {"namespace": namespace}
        if registry is not None:
            kwargs["registry"] = registry
        self.requests = Counter("requests_total", "SingaPay API requests", ["method", "outcome"], **kwargs)
        self.latency = Histogram("request_latency_seconds", "SingaPay API latency", ["method"], **kwargs)

    async def on_response(
        self, method: str, endpoint: str, options: Dict[str, Any], response: Response, elapsed_ms: float
    ) -> None:
        self.requests.labels(method=method, outcome="success").inc()
        self.latency.labels(method=method).observe(elapsed_ms / 1000)

    async def on_error(
        self, method: str, endpoint: str, options: Dict[str, Any], error: Exception, elapsed_ms: float
    ) -> None:
        self.requests.labels(method=method, outcome="error").inc()
        self.latency.labels(method=method).observe(elapsed_ms / 1000)


__all__ = [
    "BaseInterceptor",
    "Interceptor",
    "LoggingInterceptor",
    "MetricsInterceptor",
    "MetricsSnapshot",
    "PrometheusInterceptor",
]
