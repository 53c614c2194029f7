"""Top-level entry point wiring configuration, auth, transport and resources."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx

from .cache import Cache, MemoryCache
from .client import RetryingClient
from .config import SDK_VERSION, ClientConfig
from .errors import ConfigurationError, SingaPayError
from .executor import RequestExecutor
from .interceptors import LoggingInterceptor, MetricsInterceptor
from .resources import (
    Account,
    BalanceInquiry,
    CardlessWithdrawal,
    Disbursement,
    PaymentLink,
    PaymentLinkHistory,
    Qris,
    Statement,
    VATransaction,
    VirtualAccount,
)
from .signer import Body, verify_webhook
from .tokens import TokenManager

logger = logging.getLogger(__name__)


class SingaPay:
    VERSION = SDK_VERSION

    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any]],
        *,
        cache: Optional[Cache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        interceptors: Optional[Iterable[Any]] = None,
    ) -> None:
        self.config = config if isinstance(config, ClientConfig) else ClientConfig.from_mapping(config)
        self.cache: Cache = cache if cache is not None else MemoryCache()
        self._metrics = MetricsInterceptor()
        default_interceptors = [LoggingInterceptor(), self._metrics]
        self.executor = RequestExecutor(
            self.config,
            transport=transport,
            interceptors=default_interceptors if interceptors is None else list(interceptors),
        )
        self.auth = TokenManager(self.config, self.cache)
        self.auth.attach(self.executor)
        self.client = RetryingClient(self.config, self.executor, self.auth)

        self.account = Account(self.client)
        self.virtual_account = VirtualAccount(self.client)
        self.payment_link = PaymentLink(self.client)
        self.payment_link_history = PaymentLinkHistory(self.client)
        self.va_transaction = VATransaction(self.client)
        self.qris = Qris(self.client)
        self.disbursement = Disbursement(self.client)
        self.cardless_withdrawal = CardlessWithdrawal(self.client)
        self.balance_inquiry = BalanceInquiry(self.client)
        self.statement = Statement(self.client)

    async def __aenter__(self) -> "SingaPay":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def verify_webhook_signature(self, timestamp: Union[int, str], body: Body, received_signature: str) -> bool:
        key = self.config.credentials.hmac_validation_key
        if not key:
            raise ConfigurationError("HMAC validation key is required for webhook verification")
        return verify_webhook(timestamp, body, received_signature, key)

    def add_interceptor(self, interceptor: Any) -> "SingaPay":
        self.executor.add_interceptor(interceptor)
        return self

    def metrics(self) -> Dict[str, Any]:
        for interceptor in self.executor.interceptors:
            if isinstance(interceptor, MetricsInterceptor):
                return interceptor.as_dict()
        return {}

    async def flush_auth_cache(self) -> "SingaPay":
        await self.auth.refresh_token()
        return self

    async def test_connection(self) -> Dict[str, Any]:
        try:
            token = await self.auth.get_access_token()
        except SingaPayError as exc:
            logger.warning("SingaPay connection test failed: %s", exc)
            return {"success": False, "message": exc.message, "error_code": exc.code}
        return {"success": True, "message": "Connection successful", "token_obtained": bool(token)}

    async def close(self) -> None:
        await self.executor.close()


__all__ = ["SingaPay"]
