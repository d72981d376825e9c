from __future__ import annotations

import json
import logging
from typing import Any

import sentry_sdk
from pydantic import ValidationError

from ..metrics import asaas_webhook_events_total
from ..schemas import AsaasWebhookEvent

logger = logging.getLogger(__name__)

PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"


def _sentry_enabled() -> bool:
    return sentry_sdk.get_client().is_active()


def _capture_message(*, event_type: str | None, event_id: str | None) -> None:
    if not _sentry_enabled():
        return
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("webhook.provider", "asaas")
        scope.set_tag("webhook.status", "received")
        if event_type:
            scope.set_tag("webhook.event_type", event_type)
        if event_id:
            scope.set_tag("webhook.event_id", event_id)
        sentry_sdk.capture_message(f"Asaas webhook received: {event_type}", level="info")


def _parse_event(payload: Any) -> AsaasWebhookEvent | None:
    if not isinstance(payload, dict):
        return None
    try:
        return AsaasWebhookEvent.model_validate(payload)
    except ValidationError:
        return None


def handle_asaas_webhook(payload: Any) -> None:
    """
    Record an Asaas webhook delivery.

    The delivery is always acknowledged; nothing downstream happens yet, so
    the only observable effect is the log line (and the metric).
    """
    event = _parse_event(payload)
    event_type = event.event if event else None
    customer_id = None
    if event is not None and event_type == PAYMENT_CONFIRMED and event.payment:
        customer_id = event.payment.customer

    logger.info(
        "Asaas webhook received: %s",
        json.dumps(payload, ensure_ascii=False, default=str),
        extra={
            "webhook_event": event_type,
            "webhook_event_id": event.id if event else None,
            "asaas_customer_id": customer_id,
        },
    )
    asaas_webhook_events_total.labels(event=event_type or "unknown").inc()
    _capture_message(event_type=event_type, event_id=event.id if event else None)

    # TODO: activate the customer's plan once PAYMENT_CONFIRMED has a downstream target.


__all__ = ["PAYMENT_CONFIRMED", "handle_asaas_webhook"]
