from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import sentry_sdk
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import __version__
from .config import Settings, load_settings
from .logging_utils import setup_logging
from .middleware import RequestContextMiddleware
from .routes import checkout, webhooks
from .services.asaas_client import AsaasClient
from .services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)


def _init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        release=f"asaas-bridge@{__version__}",
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the HTTP app around one shared Asaas client.

    ``transport`` replaces the network layer of the Asaas client; tests use it
    to answer with ``httpx.MockTransport``.
    """
    settings = settings or load_settings()
    if configure_logging:
        setup_logging(settings.log_level)
    _init_sentry(settings)

    client = AsaasClient.from_settings(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Asaas bridge ready",
            extra={
                "port": settings.port,
                "link_strategy": settings.checkout_link_strategy.value,
            },
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Asaas Checkout Bridge", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.asaas_client = client
    app.state.checkout_service = CheckoutService.from_settings(client, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(checkout.router)
    app.include_router(webhooks.router)

    @app.get("/")
    async def root():
        return {"status": "online"}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.get("/metrics")
    def metrics_endpoint():
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    return app
