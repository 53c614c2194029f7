"""Endpoint wrappers for the SingaPay B2B API.

Each method returns the ``data`` section of a successful response. A
non-success response raises :class:`ApiError`, or :class:`ValidationError`
when the server reports field errors.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from . import schemas
from .client import RetryingClient
from .errors import ApiError, ValidationError
from .response import Response


class BaseResource:
    def __init__(self, client: RetryingClient) -> None:
        self._client = client

    @staticmethod
    def _unwrap(response: Response) -> Any:
        if response.is_success:
            return response.data
        error = response.error or {}
        message = response.message or "API request failed"
        if error.get("errors"):
            raise ValidationError(message, error["errors"], response.code)
        raise ApiError(message, response.code)

    @staticmethod
    def _page(page: int, per_page: int) -> Dict[str, int]:
        return {"page": page, "per_page": per_page}

    async def _get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._unwrap(await self._client.get(endpoint, params=params))

    async def _post(self, endpoint: str, body: Any = None, *, signed: bool = False) -> Any:
        return self._unwrap(await self._client.post(endpoint, body, signed=signed))

    async def _put(self, endpoint: str, body: Any = None) -> Any:
        return self._unwrap(await self._client.put(endpoint, body))

    async def _patch(self, endpoint: str, body: Any = None) -> Any:
        return self._unwrap(await self._client.patch(endpoint, body))

    async def _delete(self, endpoint: str) -> Any:
        return self._unwrap(await self._client.delete(endpoint))


class Account(BaseResource):
    async def list(self, page: int = 1, per_page: int = 25) -> Any:
        return await self._get("/api/v1.0/accounts", self._page(page, per_page))

    async def get(self, account_id: str) -> Any:
        return await self._get(f"/api/v1.0/accounts/{account_id}")

    async def create(self, data: Mapping[str, Any]) -> Any:
        schemas.validate_payload(schemas.AccountCreate, data)
        return await self._post("/api/v1.0/accounts", dict(data))

    async def update_status(self, account_id: str, status: str) -> Any:
        if status not in ("active", "inactive"):
            raise ValidationError(
                'Status must be either "active" or "inactive"',
                {"status": "Status must be either active or inactive"},
            )
        return await self._patch(f"/api/v1.0/accounts/update-status/{account_id}", {"status": status})

    async def delete(self, account_id: str) -> Any:
        return await self._delete(f"/api/v1.0/accounts/{account_id}")


class VirtualAccount(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/virtual-accounts/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, va_id: str) -> Any:
        return await self._get(f"/api/v1.0/virtual-accounts/{account_id}/{va_id}")

    async def create(self, account_id: str, data: Mapping[str, Any]) -> Any:
        schemas.validate_payload(schemas.VirtualAccountCreate, data)
        return await self._post(f"/api/v1.0/virtual-accounts/{account_id}", dict(data))

    async def update(self, account_id: str, va_id: str, data: Mapping[str, Any]) -> Any:
        return await self._put(f"/api/v1.0/virtual-accounts/{account_id}/{va_id}", dict(data))

    async def delete(self, account_id: str, va_id: str) -> Any:
        return await self._delete(f"/api/v1.0/virtual-accounts/{account_id}/{va_id}")


class PaymentLink(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/payment-link-manage/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, payment_link_id: str) -> Any:
        return await self._get(f"/api/v1.0/payment-link-manage/{account_id}/{payment_link_id}")

    async def create(self, account_id: str, data: Mapping[str, Any]) -> Any:
        schemas.validate_payload(schemas.PaymentLinkCreate, data)
        return await self._post(f"/api/v1.0/payment-link-manage/{account_id}", dict(data))

    async def update(self, account_id: str, payment_link_id: str, data: Mapping[str, Any]) -> Any:
        return await self._put(f"/api/v1.0/payment-link-manage/{account_id}/{payment_link_id}", dict(data))

    async def delete(self, account_id: str, payment_link_id: str) -> Any:
        return await self._delete(f"/api/v1.0/payment-link-manage/{account_id}/{payment_link_id}")

    async def available_payment_methods(self) -> Any:
        return await self._get("/api/v1.0/payment-link-manage/payment-methods")


class PaymentLinkHistory(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/payment-link-histories/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, history_id: str) -> Any:
        return await self._get(f"/api/v1.0/payment-link-histories/{account_id}/{history_id}")


class VATransaction(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/va-transactions/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, transaction_id: str) -> Any:
        return await self._get(f"/api/v1.0/va-transactions/{account_id}/{transaction_id}")


class Qris(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/qris-dynamic/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, qris_id: str) -> Any:
        return await self._get(f"/api/v1.0/qris-dynamic/{account_id}/show/{qris_id}")

    async def generate(self, account_id: str, data: Mapping[str, Any]) -> Any:
        schemas.validate_payload(schemas.QrisGenerate, data)
        return await self._post(f"/api/v1.0/qris-dynamic/{account_id}/generate-qr", dict(data))

    async def delete(self, qris_id: str) -> Any:
        return await self._delete(f"/api/v1.0/qris-dynamic/{qris_id}/delete")


class Disbursement(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/disbursement/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, transaction_id: str) -> Any:
        return await self._get(f"/api/v1.0/disbursement/{account_id}/{transaction_id}")

    async def check_fee(self, account_id: str, amount: float, bank_swift_code: str) -> Any:
        body = {"amount": amount, "bank_swift_code": bank_swift_code}
        return await self._post(f"/api/v1.0/disbursement/{account_id}/check-fee", body)

    async def check_beneficiary(self, bank_account_number: str, bank_swift_code: str) -> Any:
        body = {"bank_account_number": bank_account_number, "bank_swift_code": bank_swift_code}
        return await self._post("/api/v1.0/disbursement/check-beneficiary", body)

    async def transfer(self, account_id: str, data: Mapping[str, Any]) -> Any:
        """Move funds out of ``account_id``; the request carries an HMAC signature."""
        schemas.validate_payload(schemas.DisbursementTransfer, data)
        return await self._post(f"/api/v1.0/disbursement/{account_id}/transfer", dict(data), signed=True)


class CardlessWithdrawal(BaseResource):
    async def list(self, account_id: str, page: int = 1, per_page: int = 25) -> Any:
        return await self._get(f"/api/v1.0/cardless-withdrawals/{account_id}", self._page(page, per_page))

    async def get(self, account_id: str, transaction_id: str) -> Any:
        return await self._get(f"/api/v1.0/cardless-withdrawals/{account_id}/show/{transaction_id}")

    async def create(self, account_id: str, data: Mapping[str, Any]) -> Any:
        schemas.validate_payload(schemas.CardlessWithdrawalCreate, data)
        return await self._post(f"/api/v1.0/cardless-withdrawals/{account_id}", dict(data))

    async def cancel(self, account_id: str, transaction_id: str) -> Any:
        return await self._patch(f"/api/v1.0/cardless-withdrawals/{account_id}/cancel/{transaction_id}")

    async def delete(self, account_id: str, transaction_id: str) -> Any:
        return await self._delete(f"/api/v1.0/cardless-withdrawals/{account_id}/delete/{transaction_id}")


class BalanceInquiry(BaseResource):
    async def account_balance(self, account_id: str) -> Any:
        return await self._get(f"/api/v1.0/balance-inquiry/{account_id}")

    async def merchant_balance(self) -> Any:
        return await self._get("/api/v1.0/balance-inquiry")


class Statement(BaseResource):
    async def list(
        self,
        account_id: str,
        page: int = 1,
        per_page: int = 25,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Any:
        params: Dict[str, Any] = self._page(page, per_page)
        if start_date:
            params["start_date"] = start_date
        if end_date:
            params["end_date"] = end_date
        return await self._get(f"/api/v1.0/statements/{account_id}", params)

    async def get(self, account_id: str, statement_id: str) -> Any:
        return await self._get(f"/api/v1.0/statements/{account_id}/{statement_id}")


__all__ = [
    "Account",
    "BalanceInquiry",
    "BaseResource",
    "CardlessWithdrawal",
    "Disbursement",
    "PaymentLink",
    "PaymentLinkHistory",
    "Qris",
    "Statement",
    "VATransaction",
    "VirtualAccount",
]
