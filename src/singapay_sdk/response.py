"""Normalised view over SingaPay API responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Response:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300 and self.body.get("success") is True

    @property
    def data(self) -> Any:
        value = self.body.get("data")
        return self.body if value is None else value

    @property
    def error(self) -> Optional[Dict[str, Any]]:
        error = self.body.get("error")
        return error if isinstance(error, dict) else None

    @property
    def message(self) -> Optional[str]:
        error = self.error
        if error and error.get("message"):
            return error["message"]
        return self.body.get("message") or None

    @property
    def code(self) -> int:
        error = self.error
        if error and error.get("code") is not None:
            return error["code"]
        return self.status_code

    @property
    def pagination(self) -> Optional[Dict[str, Any]]:
        return self.body.get("pagination")

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.body)


__all__ = ["Response"]
