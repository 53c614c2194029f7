from __future__ import annotations

import json

import httpx
import pytest

from singapay_sdk.errors import ApiError, ValidationError
from singapay_sdk.sdk import SingaPay
from singapay_sdk.signer import disbursement_signature
from singapay_sdk.tokens import TOKEN_ENDPOINT


class Recorder:
    def __init__(self, token_response, reply=None):
        self.token_response = token_response
        self.reply = reply or {"success": True, "data": {"ok": True}}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_ENDPOINT:
            return self.token_response("token-1")
        self.requests.append(request)
        return httpx.Response(200, json=self.reply)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture()
def recorder(token_response):
    return Recorder(token_response)


@pytest.fixture()
def sdk(config, recorder):
    return SingaPay(config, transport=httpx.MockTransport(recorder), interceptors=[])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call, method, path",
    [
        (lambda s: s.account.list(page=2, per_page=10), "GET", "/api/v1.0/accounts"),
        (lambda s: s.account.get("acc"), "GET", "/api/v1.0/accounts/acc"),
        (lambda s: s.account.delete("acc"), "DELETE", "/api/v1.0/accounts/acc"),
        (lambda s: s.account.update_status("acc", "inactive"), "PATCH", "/api/v1.0/accounts/update-status/acc"),
        (lambda s: s.virtual_account.list("acc"), "GET", "/api/v1.0/virtual-accounts/acc"),
        (lambda s: s.virtual_account.get("acc", "va"), "GET", "/api/v1.0/virtual-accounts/acc/va"),
        (lambda s: s.virtual_account.update("acc", "va", {"amount": 5}), "PUT", "/api/v1.0/virtual-accounts/acc/va"),
        (lambda s: s.virtual_account.delete("acc", "va"), "DELETE", "/api/v1.0/virtual-accounts/acc/va"),
        (lambda s: s.payment_link.list("acc"), "GET", "/api/v1.0/payment-link-manage/acc"),
        (lambda s: s.payment_link.get("acc", "pl"), "GET", "/api/v1.0/payment-link-manage/acc/pl"),
        (lambda s: s.payment_link.update("acc", "pl", {"title": "t"}), "PUT", "/api/v1.0/payment-link-manage/acc/pl"),
        (lambda s: s.payment_link.delete("acc", "pl"), "DELETE", "/api/v1.0/payment-link-manage/acc/pl"),
        (lambda s: s.payment_link.available_payment_methods(), "GET", "/api/v1.0/payment-link-manage/payment-methods"),
        (lambda s: s.payment_link_history.list("acc"), "GET", "/api/v1.0/payment-link-histories/acc"),
        (lambda s: s.payment_link_history.get("acc", "h"), "GET", "/api/v1.0/payment-link-histories/acc/h"),
        (lambda s: s.va_transaction.list("acc"), "GET", "/api/v1.0/va-transactions/acc"),
        (lambda s: s.va_transaction.get("acc", "t"), "GET", "/api/v1.0/va-transactions/acc/t"),
        (lambda s: s.qris.list("acc"), "GET", "/api/v1.0/qris-dynamic/acc"),
        (lambda s: s.qris.get("acc", "q"), "GET", "/api/v1.0/qris-dynamic/acc/show/q"),
        (lambda s: s.qris.delete("q"), "DELETE", "/api/v1.0/qris-dynamic/q/delete"),
        (lambda s: s.disbursement.list("acc"), "GET", "/api/v1.0/disbursement/acc"),
        (lambda s: s.disbursement.get("acc", "t"), "GET", "/api/v1.0/disbursement/acc/t"),
        (lambda s: s.disbursement.check_fee("acc", 10000, "BNINIDJA"), "POST", "/api/v1.0/disbursement/acc/check-fee"),
        (lambda s: s.disbursement.check_beneficiary("123", "BNINIDJA"), "POST", "/api/v1.0/disbursement/check-beneficiary"),
        (lambda s: s.cardless_withdrawal.list("acc"), "GET", "/api/v1.0/cardless-withdrawals/acc"),
        (lambda s: s.cardless_withdrawal.get("acc", "t"), "GET", "/api/v1.0/cardless-withdrawals/acc/show/t"),
        (lambda s: s.cardless_withdrawal.cancel("acc", "t"), "PATCH", "/api/v1.0/cardless-withdrawals/acc/cancel/t"),
        (lambda s: s.cardless_withdrawal.delete("acc", "t"), "DELETE", "/api/v1.0/cardless-withdrawals/acc/delete/t"),
        (lambda s: s.balance_inquiry.account_balance("acc"), "GET", "/api/v1.0/balance-inquiry/acc"),
        (lambda s: s.balance_inquiry.merchant_balance(), "GET", "/api/v1.0/balance-inquiry"),
        (lambda s: s.statement.get("acc", "st"), "GET", "/api/v1.0/statements/acc/st"),
    ],
)
async def test_endpoint_routing(sdk, recorder, call, method, path) -> None:
    result = await call(sdk)
    assert result == {"ok": True}
    assert recorder.last.method == method
    assert recorder.last.url.path == path
    assert recorder.last.headers["Authorization"] == "Bearer token-1"


@pytest.mark.asyncio
async def test_pagination_params(sdk, recorder) -> None:
    await sdk.account.list(page=3, per_page=50)
    assert recorder.last.url.params["page"] == "3"
    assert recorder.last.url.params["per_page"] == "50"


@pytest.mark.asyncio
async def test_statement_date_filters(sdk, recorder) -> None:
    await sdk.statement.list("acc", start_date="2024-01-01", end_date="2024-01-31")
    params = recorder.last.url.params
    assert recorder.last.url.path == "/api/v1.0/statements/acc"
    assert params["start_date"] == "2024-01-01"
    assert params["end_date"] == "2024-01-31"
    assert params["page"] == "1"


@pytest.mark.asyncio
async def test_account_create_sends_payload(sdk, recorder) -> None:
    payload = {"name": "Ana", "phone": "0812", "email": "ana@example.com", "extra": "kept"}
    await sdk.account.create(payload)
    assert json.loads(recorder.last.content) == payload


@pytest.mark.asyncio
async def test_validation_happens_before_network(sdk, recorder) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await sdk.account.create({"name": "Ana", "phone": ""})
    assert set(exc_info.value.errors) == {"phone", "email"}
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_update_status_rejects_unknown_values(sdk, recorder) -> None:
    with pytest.raises(ValidationError):
        await sdk.account.update_status("acc", "suspended")
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_temporary_virtual_account_requires_expiry(sdk, recorder) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await sdk.virtual_account.create("acc", {"bank_code": "BRI", "amount": 1000, "kind": "temporary"})
    assert "expired_at" in exc_info.value.errors

    await sdk.virtual_account.create("acc", {"bank_code": "BRI", "amount": 1000, "kind": "permanent"})
    assert recorder.last.url.path == "/api/v1.0/virtual-accounts/acc"


@pytest.mark.asyncio
async def test_payment_link_item_errors_are_dotted(sdk) -> None:
    payload = {"reff_no": "R1", "title": "Order", "total_amount": 100, "items": [{"quantity": 1, "unit_price": 100}]}
    with pytest.raises(ValidationError) as exc_info:
        await sdk.payment_link.create("acc", payload)
    assert "items.0.name" in exc_info.value.errors


@pytest.mark.asyncio
async def test_payment_link_requires_items(sdk) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await sdk.payment_link.create("acc", {"reff_no": "R1", "title": "Order", "total_amount": 100, "items": []})
    assert "items" in exc_info.value.errors


@pytest.mark.asyncio
async def test_qris_generate(sdk, recorder) -> None:
    await sdk.qris.generate("acc", {"amount": 5000, "expired_at": "2030-01-01 00:00:00"})
    assert recorder.last.url.path == "/api/v1.0/qris-dynamic/acc/generate-qr"
    with pytest.raises(ValidationError):
        await sdk.qris.generate("acc", {"amount": 0, "expired_at": "2030-01-01"})


@pytest.mark.asyncio
async def test_cardless_withdrawal_create(sdk, recorder) -> None:
    await sdk.cardless_withdrawal.create("acc", {"withdraw_amount": 50000, "payment_vendor_code": "INDOMARET"})
    assert recorder.last.method == "POST"
    assert recorder.last.url.path == "/api/v1.0/cardless-withdrawals/acc"


@pytest.mark.asyncio
async def test_transfer_is_signed(sdk, recorder) -> None:
    payload = {
        "amount": 10000,
        "bank_swift_code": "BNINIDJA",
        "bank_account_number": "1234567890",
        "reference_number": "REF-1",
    }
    await sdk.disbursement.transfer("acc", payload)

    request = recorder.last
    endpoint = "/api/v1.0/disbursement/acc/transfer"
    expected = disbursement_signature(
        "POST", endpoint, "token-1", payload, request.headers["X-Timestamp"], "client-secret"
    )
    assert request.url.path == endpoint
    assert request.headers["X-Signature"] == expected


@pytest.mark.asyncio
async def test_transfer_validation(sdk, recorder) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await sdk.disbursement.transfer("acc", {"amount": -1, "bank_swift_code": "BNINIDJA"})
    assert {"amount", "bank_account_number", "reference_number"} <= set(exc_info.value.errors)
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_unsuccessful_body_raises_api_error(config, token_response) -> None:
    recorder = Recorder(token_response, reply={"success": False, "error": {"message": "Account frozen", "code": 4003}})
    sdk = SingaPay(config, transport=httpx.MockTransport(recorder), interceptors=[])
    with pytest.raises(ApiError) as exc_info:
        await sdk.account.get("acc")
    assert exc_info.value.message == "Account frozen"
    assert exc_info.value.code == 4003


@pytest.mark.asyncio
async def test_unsuccessful_body_with_field_errors(config, token_response) -> None:
    reply = {"success": False, "error": {"message": "Invalid", "errors": {"amount": "too small"}}}
    sdk = SingaPay(config, transport=httpx.MockTransport(Recorder(token_response, reply=reply)), interceptors=[])
    with pytest.raises(ValidationError) as exc_info:
        await sdk.disbursement.check_fee("acc", 1, "BNINIDJA")
    assert exc_info.value.errors == {"amount": "too small"}


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["100", True])
async def test_transfer_rejects_non_numeric_amounts(sdk, recorder, amount) -> None:
    payload = {
        "amount": amount,
        "bank_swift_code": "BNINIDJA",
        "bank_account_number": "1234567890",
        "reference_number": "REF-1",
    }
    with pytest.raises(ValidationError) as exc_info:
        await sdk.disbursement.transfer("acc", payload)
    assert "amount" in exc_info.value.errors
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_whole_number_amounts_are_accepted(sdk, recorder) -> None:
    await sdk.cardless_withdrawal.create("acc", {"withdraw_amount": 50000, "payment_vendor_code": "ALFAMART"})
    assert json.loads(recorder.last.content)["withdraw_amount"] == 50000
