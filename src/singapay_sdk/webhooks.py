"""FastAPI receiver for SingaPay webhook deliveries."""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from fastapi import APIRouter, Header, HTTPException, Request

from .sdk import SingaPay

logger = logging.getLogger("singapay.webhooks")

WebhookHandler = Callable[[Dict[str, Any]], Union[Awaitable[Any], Any]]


def build_webhook_router(sdk: SingaPay, handler: WebhookHandler, path: str = "/webhooks/singapay") -> APIRouter:
    router = APIRouter()

    @router.post(path, status_code=200)
    async def receive(
        request: Request,
        timestamp: Optional[str] = Header(default=None, alias="X-Timestamp"),
        signature: Optional[str] = Header(default=None, alias="X-Signature"),
    ) -> Dict[str, str]:
        if not timestamp or not signature:
            raise HTTPException(status_code=401, detail="Missing webhook signature headers")
        raw = await request.body()
        if not sdk.verify_webhook_signature(timestamp, raw, signature):
            logger.warning("Rejected webhook with invalid signature timestamp=%s", timestamp)
            raise HTTPException(status_code=401, detail="Invalid webhook signature")
        try:
            payload = json.loads(raw) if raw else {}
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Webhook body is not valid JSON") from exc

        result = handler(payload)
        if inspect.isawaitable(result):
            await result
        logger.info("Accepted webhook timestamp=%s", timestamp)
        return {"status": "accepted"}

    return router


__all__ = ["build_webhook_router"]
