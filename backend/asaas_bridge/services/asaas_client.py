from __future__ import annotations

import json
import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .. import __version__
from ..config import DEFAULT_ASAAS_BASE_URL, Settings
from ..metrics import asaas_requests_total

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 200

ModelT = TypeVar("ModelT", bound=BaseModel)


class AsaasError(RuntimeError):
    """Base class for failures while talking to the Asaas REST API."""

    def __init__(self, message: str, *, method: str, path: str) -> None:
        super().__init__(message)
        self.method = method
        self.path = path


class UpstreamError(AsaasError):
    """Asaas answered with a non-2xx status."""

    def __init__(self, *, method: str, path: str, status_code: int, body: str) -> None:
        super().__init__(f"Asaas {status_code} {path}", method=method, path=path)
        self.status_code = status_code
        self.body = body


class MalformedResponse(AsaasError):
    """Asaas answered 2xx but the body is not the JSON we expected."""

    def __init__(self, *, method: str, path: str, excerpt: str, reason: str | None = None) -> None:
        super().__init__(reason or "Resposta Asaas não-JSON", method=method, path=path)
        self.excerpt = excerpt


class NetworkFailure(AsaasError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""

    def __init__(self, *, method: str, path: str, reason: str) -> None:
        super().__init__(f"Asaas {method} {path} falhou: {reason}", method=method, path=path)
        self.reason = reason


class AsaasClient:
    """
    Thin authenticated JSON wrapper around the Asaas REST API.

    Every call returns the decoded JSON body, or ``{}`` when Asaas answers
    with an empty body. Failures are raised as ``AsaasError`` subclasses and
    are never retried.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_ASAAS_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise ValueError("Asaas token is required")
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"asaas-bridge/{__version__}",
                "access_token": token,
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsaasClient":
        return cls(
            settings.asaas_token,
            base_url=settings.asaas_base_url,
            timeout=settings.asaas_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AsaasClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(self, path: str, *, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request(path, method="GET", params=params)

    async def post(self, path: str, *, body: Any = None) -> Any:
        return await self.request(path, method="POST", body=body)

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        method = method.upper()
        try:
            response = await self._http.request(method, path, json=body, params=params)
        except httpx.HTTPError as exc:
            asaas_requests_total.labels(method=method, outcome="network_error").inc()
            logger.warning(
                "Asaas %s %s request failed: %s",
                method,
                path,
                exc,
                extra={"asaas_method": method, "asaas_path": path},
            )
            raise NetworkFailure(
                method=method, path=path, reason=str(exc) or type(exc).__name__
            ) from exc

        raw = response.text
        if not response.is_success:
            asaas_requests_total.labels(method=method, outcome="upstream_error").inc()
            logger.warning(
                "Asaas %s %s -> %s %s",
                method,
                path,
                response.status_code,
                raw,
                extra={
                    "asaas_method": method,
                    "asaas_path": path,
                    "status_code": response.status_code,
                    "body": raw,
                },
            )
            raise UpstreamError(
                method=method, path=path, status_code=response.status_code, body=raw
            )

        if not raw.strip():
            asaas_requests_total.labels(method=method, outcome="ok").inc()
            return {}

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            excerpt = raw[:EXCERPT_LIMIT]
            asaas_requests_total.labels(method=method, outcome="malformed").inc()
            logger.error(
                "Failed to parse Asaas JSON (%s): %s",
                path,
                excerpt,
                extra={"asaas_method": method, "asaas_path": path, "excerpt": excerpt},
            )
            raise MalformedResponse(method=method, path=path, excerpt=excerpt) from exc

        asaas_requests_total.labels(method=method, outcome="ok").inc()
        return payload


def parse_record(model: type[ModelT], payload: Any, *, method: str, path: str) -> ModelT:
    """Validate a decoded Asaas payload, treating schema drift as a malformed response."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        excerpt = json.dumps(payload, ensure_ascii=False, default=str)[:EXCERPT_LIMIT]
        logger.error(
            "Unexpected Asaas payload (%s): %s",
            path,
            excerpt,
            extra={"asaas_method": method, "asaas_path": path, "excerpt": excerpt},
        )
        raise MalformedResponse(
            method=method,
            path=path,
            excerpt=excerpt,
            reason=f"Resposta Asaas inesperada em {path}",
        ) from exc


__all__ = [
    "AsaasClient",
    "AsaasError",
    "MalformedResponse",
    "NetworkFailure",
    "UpstreamError",
    "parse_record",
]
