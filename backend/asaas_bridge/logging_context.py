from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from typing import Any

import sentry_sdk

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


class RequestContextFilter(logging.Filter):
    """Inject request metadata from ContextVars into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get({})
        record.request_id = context.get("request_id")
        # records logged with an explicit customer keep it
        if not hasattr(record, "asaas_customer_id"):
            record.asaas_customer_id = context.get("asaas_customer_id")
        return True


def push_request_context(request_id: str) -> Token:
    return _log_context.set({"request_id": request_id, "asaas_customer_id": None})


def pop_request_context(token: Token) -> None:
    _log_context.reset(token)


def set_customer_context(customer_id: str | None) -> None:
    context = _log_context.get({})
    if context:
        context["asaas_customer_id"] = customer_id
    else:  # fallback when middleware is bypassed (tests)
        _log_context.set({"request_id": None, "asaas_customer_id": customer_id})
    sentry_sdk.set_tag("asaas.customer_id", customer_id)


__all__ = [
    "RequestContextFilter",
    "push_request_context",
    "pop_request_context",
    "set_customer_context",
]
