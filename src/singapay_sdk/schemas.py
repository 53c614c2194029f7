"""Pydantic models describing request payloads accepted by resource calls.

These are presence/shape checks only; business rules stay on the server.
Payloads are validated before any network activity and sent unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Type

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, confloat, conint, constr, field_validator

from .errors import ValidationError

NonEmptyStr = constr(min_length=1)
PositiveAmount = confloat(gt=0, strict=True)
PositiveInt = conint(ge=1)


class AccountCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: NonEmptyStr
    phone: NonEmptyStr
    email: NonEmptyStr


class AccountStatusUpdate(BaseModel):
    status: Literal["active", "inactive"]


class VirtualAccountCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    bank_code: NonEmptyStr
    amount: PositiveAmount
    kind: Literal["temporary", "permanent"]
    expired_at: Optional[str] = Field(default=None, validate_default=True)
    max_usage: Optional[conint(ge=1, le=255)] = None

    @field_validator("expired_at")
    @classmethod
    def _temporary_needs_expiry(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("kind") == "temporary" and not value:
            raise ValueError("The expired_at field is required for temporary VA")
        return value


class PaymentLinkItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: NonEmptyStr
    quantity: float
    unit_price: float


class PaymentLinkCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    reff_no: NonEmptyStr
    title: NonEmptyStr
    total_amount: PositiveAmount
    items: List[PaymentLinkItem] = Field(min_length=1)
    max_usage: Optional[PositiveInt] = None


class QrisGenerate(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: PositiveAmount
    expired_at: NonEmptyStr
    tip_indicator: Optional[Literal["fixed_amount", "percentage"]] = None


class DisbursementTransfer(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: PositiveAmount
    bank_swift_code: NonEmptyStr
    bank_account_number: NonEmptyStr
    reference_number: NonEmptyStr


class CardlessWithdrawalCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    withdraw_amount: PositiveAmount
    payment_vendor_code: NonEmptyStr


def field_errors(exc: pydantic.ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for item in exc.errors():
        key = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(key, item["msg"])
    return errors


def validate_payload(model: Type[BaseModel], payload: Mapping[str, Any]) -> None:
    if not isinstance(payload, Mapping):
        raise ValidationError("Validation failed", {"__root__": "Payload must be a mapping"})
    try:
        model.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation failed", field_errors(exc)) from exc


__all__ = [
    "AccountCreate",
    "AccountStatusUpdate",
    "CardlessWithdrawalCreate",
    "DisbursementTransfer",
    "PaymentLinkCreate",
    "PaymentLinkItem",
    "QrisGenerate",
    "VirtualAccountCreate",
    "field_errors",
    "validate_payload",
]
