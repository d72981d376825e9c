import sys
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from asaas_bridge.config import load_settings  # noqa: E402
from asaas_bridge.main import create_app  # noqa: E402

TEST_ENV = {
    "ASAAS_TOKEN": "test-token",
    "PLAN_VALUE": "49.90",
    "PLAN_DESCRIPTION": "Plano Mensal",
}


class FakeAsaas:
    """
    Stand-in for the Asaas REST API behind ``httpx.MockTransport``.

    Responses are registered per (method, path). A route answers with its
    queued responses in order and keeps repeating the last one. Unregistered
    routes answer 404 so unexpected calls fail loudly.
    """

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def add(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        status: int = 200,
        text: str | None = None,
        exc: Exception | None = None,
    ) -> "FakeAsaas":
        item: Any = exc if exc is not None else (status, json, text)
        self._routes.setdefault((method.upper(), path), []).append(item)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path.startswith("/v3"):
            path = path[len("/v3"):]
        queued = self._routes.get((request.method, path))
        if not queued:
            return httpx.Response(404, json={"errors": [{"description": f"no route {path}"}]})
        item = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(item, Exception):
            raise item
        status, payload, text = item
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def routes_called(self) -> list[tuple[str, str]]:
        return [(call.method, call.url.path.removeprefix("/v3")) for call in self.calls]


@pytest.fixture(scope="module")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def asaas_env(monkeypatch):
    monkeypatch.delenv("ASAAS_API_KEY", raising=False)
    monkeypatch.delenv("CHECKOUT_LINK_STRATEGY", raising=False)
    for key in ("ASAAS_BASE_URL", "PORT", "CORS_ALLOW_ORIGINS", "LOG_LEVEL", "SENTRY_DSN"):
        monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    return TEST_ENV


@pytest.fixture
def fake_asaas() -> FakeAsaas:
    return FakeAsaas()


@pytest.fixture
def settings(asaas_env):
    return load_settings(_env_file=None)


@pytest.fixture
def app(settings, fake_asaas):
    return create_app(settings, transport=fake_asaas.transport, configure_logging=False)


@pytest.fixture
async def async_client(anyio_backend, app) -> AsyncClient:
    if anyio_backend != "asyncio":
        pytest.skip("Backend tests require asyncio")

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        await app.state.asaas_client.aclose()
