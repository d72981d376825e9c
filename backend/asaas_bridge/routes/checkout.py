from __future__ import annotations

import logging
from typing import Annotated, Optional

import sentry_sdk
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..metrics import checkout_requests_total
from ..schemas import CheckoutResponse, ErrorResponse
from ..services.asaas_client import AsaasError
from ..services.checkout_service import CheckoutService, MissingParameter

router = APIRouter(prefix="/checkout", tags=["checkout"])
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "erro interno"


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


CheckoutServiceDep = Annotated[CheckoutService, Depends(get_checkout_service)]


@router.get(
    "/asaas",
    response_model=CheckoutResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def asaas_checkout(
    service: CheckoutServiceDep,
    email: Optional[str] = None,
    name: Optional[str] = None,
):
    try:
        result = await service.checkout(email, name)
    except MissingParameter as exc:
        checkout_requests_total.labels(outcome="rejected").inc()
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    except AsaasError as exc:
        checkout_requests_total.labels(outcome="failed").inc()
        logger.error(
            "checkout/asaas failed: %s",
            exc,
            extra={"asaas_method": exc.method, "asaas_path": exc.path},
        )
        sentry_sdk.capture_exception(exc)
        return _internal_error(exc)
    except Exception as exc:
        checkout_requests_total.labels(outcome="failed").inc()
        logger.exception("checkout/asaas failed unexpectedly: %s", exc)
        sentry_sdk.capture_exception(exc)
        return _internal_error(exc)

    checkout_requests_total.labels(outcome="success").inc()
    return result


def _internal_error(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR, "message": str(exc)},
    )
