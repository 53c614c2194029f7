from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import date

import pytest

from singapay_sdk.signer import (
    auth_signature,
    disbursement_signature,
    serialize_body,
    verify_webhook,
    webhook_signature,
)


def test_auth_signature_matches_reference_hmac() -> None:
    expected = hmac.new(b"secret", b"client_secret_20240115", hashlib.sha512).hexdigest()
    assert auth_signature("client", "secret", "20240115") == expected
    assert auth_signature("client", "secret", date(2024, 1, 15)) == expected


def test_auth_signature_is_deterministic_and_input_sensitive() -> None:
    base = auth_signature("client", "secret", "20240115")
    assert auth_signature("client", "secret", "20240115") == base
    assert auth_signature("client2", "secret", "20240115") != base
    assert auth_signature("client", "secret2", "20240115") != base
    assert auth_signature("client", "secret", "20240116") != base


def test_auth_signature_defaults_to_today() -> None:
    assert auth_signature("client", "secret") == auth_signature("client", "secret")


def test_auth_signature_requires_credentials() -> None:
    with pytest.raises(ValueError):
        auth_signature("", "secret")


def test_disbursement_signature_reference_value() -> None:
    body = {"amount": 10000, "bank_swift_code": "BNINIDJA"}
    hashed = hashlib.sha256(b'{"amount":10000,"bank_swift_code":"BNINIDJA"}').hexdigest()
    message = f"POST:/api/v1.0/disbursement/1/transfer:tok:{hashed}:1700000000".encode()
    expected = base64.b64encode(hmac.new(b"secret", message, hashlib.sha512).digest()).decode()
    signature = disbursement_signature("post", "/api/v1.0/disbursement/1/transfer", "tok", body, 1700000000, "secret")
    assert signature == expected


def test_disbursement_signature_sensitive_to_each_field() -> None:
    args = dict(
        method="POST",
        endpoint="/api/v1.0/disbursement/1/transfer",
        access_token="tok",
        body={"amount": 1},
        timestamp=1700000000,
        client_secret="secret",
    )
    base = disbursement_signature(**args)
    variations = {
        "method": "PUT",
        "endpoint": "/api/v1.0/disbursement/2/transfer",
        "access_token": "tok2",
        "body": {"amount": 2},
        "timestamp": 1700000001,
        "client_secret": "secret2",
    }
    for field, value in variations.items():
        changed = dict(args, **{field: value})
        assert disbursement_signature(**changed) != base, field


def test_disbursement_signature_hashes_empty_string_for_no_body() -> None:
    empty_hash = hashlib.sha256(b"").hexdigest()
    message = f"GET:/x:tok:{empty_hash}:1".encode()
    expected = base64.b64encode(hmac.new(b"s", message, hashlib.sha512).digest()).decode()
    assert disbursement_signature("GET", "/x", "tok", None, 1, "s") == expected


def test_serialize_body_is_compact() -> None:
    assert serialize_body({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'
    assert serialize_body(None) == ""
    assert serialize_body(b"raw") == "raw"


def test_verify_webhook_accepts_matching_signature() -> None:
    body = '{"event":"payment.paid","amount":1000}'
    signature = webhook_signature("1700000000", body, "hmac-key")
    assert verify_webhook("1700000000", body, signature, "hmac-key")
    assert verify_webhook("1700000000", body.encode(), signature, "hmac-key")


def test_verify_webhook_dict_body_uses_compact_json() -> None:
    body = {"event": "payment.paid"}
    signature = webhook_signature("1", '{"event":"payment.paid"}', "k")
    assert verify_webhook("1", body, signature, "k")


def test_verify_webhook_rejects_single_mutations() -> None:
    body = '{"event":"payment.paid","amount":1000}'
    signature = webhook_signature("1700000000", body, "hmac-key")
    assert not verify_webhook("1700000000", body.replace("1000", "1001"), signature, "hmac-key")
    assert not verify_webhook("1700000001", body, signature, "hmac-key")
    assert not verify_webhook("1700000000", body, signature, "hmac-kez")
    tampered = signature[:-1] + ("0" if signature[-1] != "0" else "1")
    assert not verify_webhook("1700000000", body, tampered, "hmac-key")


@pytest.mark.parametrize(
    "timestamp, signature, key",
    [("", "sig", "key"), ("1", "", "key"), ("1", "sig", "")],
)
def test_verify_webhook_requires_inputs(timestamp: str, signature: str, key: str) -> None:
    with pytest.raises(ValueError):
        verify_webhook(timestamp, "{}", signature, key)


def test_verify_webhook_hashes_raw_bytes() -> None:
    body = b"\xff\xfe{}"
    assert not verify_webhook("1700000000", body, "deadbeef", "hmac-key")
    signature = webhook_signature("1700000000", body, "hmac-key")
    assert verify_webhook("1700000000", body, signature, "hmac-key")
