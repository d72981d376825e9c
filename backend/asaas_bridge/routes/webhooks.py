from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from ..services.webhook_service import handle_asaas_webhook

router = APIRouter(prefix="/webhook", tags=["asaas-webhooks"])
logger = logging.getLogger(__name__)


def _is_json(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == "application/json"


@router.post("/asaas", status_code=status.HTTP_200_OK)
async def asaas_webhook(request: Request) -> Response:
    raw = await request.body()
    payload: Any = {}
    # empty or non-JSON bodies are acknowledged as an empty event
    if raw.strip() and _is_json(request.headers.get("content-type")):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            logger.warning("Asaas webhook rejected: invalid JSON (%s)", exc)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid JSON"}
            )

    handle_asaas_webhook(payload)
    return Response(status_code=status.HTTP_200_OK)
