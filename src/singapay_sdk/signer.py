"""HMAC signatures for authentication, signed transfers and webhooks.

All functions are pure. Three schemes are used by the API:

* token requests carry ``X-Signature`` = hex HMAC-SHA512 over
  ``{client_id}_{client_secret}_{YYYYMMDD}`` keyed by the client secret;
* disbursement transfers carry ``X-Signature`` = base64 HMAC-SHA512 over
  ``{METHOD}:{endpoint}:{access_token}:{sha256(body)}:{timestamp}``;
* inbound webhooks are signed with hex HMAC-SHA256 over
  ``{timestamp}{sha256(body)}`` keyed by the HMAC validation key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import date as date_cls
from datetime import datetime, timezone
from typing import Any, Optional, Union

Body = Union[str, bytes, dict, list, None]


def serialize_body(body: Any) -> str:
    """Serialise a request body exactly as it is sent on the wire."""
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8")
    if isinstance(body, str):
        return body
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def _sha256_hex(payload: Union[str, bytes]) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def _body_hash(body: Body) -> str:
    if isinstance(body, bytes):
        return _sha256_hex(body)
    return _sha256_hex(serialize_body(body))


def _format_date(value: Optional[Union[str, date_cls]]) -> str:
    if value is None:
        return datetime.now(timezone.utc).strftime("%Y%m%d")
    if isinstance(value, date_cls):
        return value.strftime("%Y%m%d")
    return value


def auth_signature(client_id: str, client_secret: str, date: Optional[Union[str, date_cls]] = None) -> str:
    if not client_id or not client_secret:
        raise ValueError("Client ID and client secret are required for signature generation")
    payload = f"{client_id}_{client_secret}_{_format_date(date)}"
    return hmac.new(client_secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha512).hexdigest()


def disbursement_signature(
    method: str,
    endpoint: str,
    access_token: str,
    body: Body,
    timestamp: Union[int, str],
    client_secret: str,
) -> str:
    if not method or not endpoint or not access_token or not client_secret:
        raise ValueError("Method, endpoint, access token and client secret are required")
    hashed_body = _body_hash(body)
    string_to_sign = f"{method.upper()}:{endpoint}:{access_token}:{hashed_body}:{timestamp}"
    digest = hmac.new(client_secret.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha512).digest()
    return base64.b64encode(digest).decode("ascii")


def webhook_signature(timestamp: Union[int, str], body: Body, hmac_key: str) -> str:
    """Compute the signature SingaPay attaches to a webhook delivery."""
    body_hash = _body_hash(body)
    payload = f"{timestamp}{body_hash}"
    return hmac.new(hmac_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_webhook(timestamp: Union[int, str], body: Body, received_signature: str, hmac_key: str) -> bool:
    if not timestamp or not received_signature or not hmac_key:
        raise ValueError("Timestamp, signature and HMAC key are required for webhook verification")
    expected = webhook_signature(timestamp, body, hmac_key)
    return hmac.compare_digest(expected.encode("ascii"), received_signature.encode("utf-8"))


__all__ = [
    "auth_signature",
    "disbursement_signature",
    "serialize_body",
    "verify_webhook",
    "webhook_signature",
]
