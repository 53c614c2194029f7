"""SingaPay Python SDK."""

from .cache import Cache, FileCache, MemoryCache, RedisCache
from .client import RetryingClient, compute_backoff, should_retry
from .config import ClientConfig, Credentials, SDK_VERSION
from .errors import ApiError, AuthenticationError, ConfigurationError, SingaPayError, ValidationError
from .executor import RequestExecutor
from .interceptors import BaseInterceptor, Interceptor, LoggingInterceptor, MetricsInterceptor, PrometheusInterceptor
from .registry import ClientRegistry
from .response import Response
from .sdk import SingaPay
from .tokens import AccessToken, TokenManager

__version__ = SDK_VERSION

__all__ = [
    "AccessToken",
    "ApiError",
    "AuthenticationError",
    "BaseInterceptor",
    "Cache",
    "ClientConfig",
    "ClientRegistry",
    "ConfigurationError",
    "Credentials",
    "FileCache",
    "Interceptor",
    "LoggingInterceptor",
    "MemoryCache",
    "MetricsInterceptor",
    "PrometheusInterceptor",
    "RedisCache",
    "RequestExecutor",
    "Response",
    "RetryingClient",
    "SingaPay",
    "SingaPayError",
    "TokenManager",
    "ValidationError",
    "compute_backoff",
    "should_retry",
]
