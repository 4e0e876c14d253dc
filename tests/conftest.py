from __future__ import annotations

import re
import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from config.settings import Settings  # noqa: E402

AUTH_KEY = "sk_live_operator_secret"
BACKEND_URL = "https://backend.test"


class FakeBackend:
    """Stands in for the realtime backend; records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(200, text="v=0\r\n", headers={"content-type": "application/sdp"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond(self, status_code: int = 200, **kwargs) -> None:
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def refuse_connections(self) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        self.handler = _refuse

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakePlivoCalls:
    def __init__(self) -> None:
        self.created: list[dict] = []
        self.error: Exception | None = None

    def create(self, *, from_: str, to_: str, answer_url: str, answer_method: str):
        if self.error is not None:
            raise self.error
        self.created.append(
            {"from_": from_, "to_": to_, "answer_url": answer_url, "answer_method": answer_method}
        )
        return SimpleNamespace(request_uuid="c0ffee-uuid", message="call fired", api_id="api-1")


class FakePlivoClient:
    def __init__(self) -> None:
        self.calls = FakePlivoCalls()


def multipart_fields(request: httpx.Request) -> dict[str, str]:
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    fields: dict[str, str] = {}
    for part in request.content.split(b"--" + boundary):
        head, sep, body = part.partition(b"\r\n\r\n")
        if not sep:
            continue
        name = re.search(rb'name="([^"]+)"', head).group(1).decode()
        fields[name] = body.removesuffix(b"\r\n").decode()
    return fields


def make_settings(**overrides) -> Settings:
    values = {
        "backend_url": BACKEND_URL,
        "auth_key": AUTH_KEY,
        "plivo_auth_id": "MAXXXXXXXXXXXXXXXXXX",
        "plivo_auth_token": "plivo-token",
        "plivo_from_number": "+14155550100",
        "public_base_url": "https://gateway.example.com",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session")
def app():
    import importlib

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def plivo_client() -> FakePlivoClient:
    return FakePlivoClient()


@pytest.fixture()
def use_settings(app, backend, plivo_client):
    """Install dependency overrides for a given Settings record."""

    import api.dependencies as deps
    from integrations.plivo_client import get_plivo_config
    from realtime.relay import BackendRelay

    def _install(settings: Settings) -> None:
        app.dependency_overrides[deps.get_settings] = lambda: settings
        app.dependency_overrides[deps.get_relay] = lambda: BackendRelay(settings, transport=backend.transport)
        app.dependency_overrides[deps.get_plivo_cfg] = lambda: get_plivo_config(settings)
        app.dependency_overrides[deps.get_plivo_client] = lambda: plivo_client

    yield _install
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app, settings, use_settings):
    use_settings(settings)
    with TestClient(app) as test_client:
        yield test_client
