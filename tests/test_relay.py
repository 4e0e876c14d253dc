from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from realtime.errors import ConfigurationError, ConnectivityError, UpstreamError
from realtime.relay import CALLS_PATH, CLIENT_SECRETS_PATH, BackendRelay

from conftest import AUTH_KEY, FakeBackend, make_settings, multipart_fields


def test_post_json_sets_custom_bearer_header():
    backend = FakeBackend()
    backend.respond(200, json={"value": "eph_1"})
    relay = BackendRelay(make_settings(), transport=backend.transport)

    result = asyncio.run(relay.post_json(CLIENT_SECRETS_PATH, {"session": {}}, credential=AUTH_KEY))

    request = backend.requests[0]
    assert str(request.url) == "https://backend.test/v1/realtime/client_secrets"
    assert request.headers["X-Luna-Key"] == f"Bearer {AUTH_KEY}"
    assert "authorization" not in request.headers
    assert json.loads(request.content) == {"session": {}}
    assert result.status_code == 200
    assert json.loads(result.content) == {"value": "eph_1"}


def test_auth_header_name_is_configurable():
    backend = FakeBackend()
    relay = BackendRelay(make_settings(backend_auth_header="X-Api-Key"), transport=backend.transport)

    asyncio.run(relay.post_sdp(CALLS_PATH, "v=0\r\n", credential="eph_1"))

    assert backend.requests[0].headers["X-Api-Key"] == "Bearer eph_1"


def test_post_sdp_sends_raw_body():
    backend = FakeBackend()
    relay = BackendRelay(make_settings(), transport=backend.transport)
    offer = "v=0\r\no=- 1 2 IN IP4 127.0.0.1\r\n"

    asyncio.run(relay.post_sdp(CALLS_PATH, offer, credential="eph_1"))

    request = backend.requests[0]
    assert request.headers["content-type"] == "application/sdp"
    assert request.content == offer.encode()


def test_post_multipart_sends_two_form_parts():
    backend = FakeBackend()
    relay = BackendRelay(make_settings(), transport=backend.transport)

    asyncio.run(
        relay.post_multipart(CALLS_PATH, {"sdp": "v=0", "session": '{"a": 1}'}, credential=AUTH_KEY)
    )

    request = backend.requests[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert multipart_fields(request) == {"sdp": "v=0", "session": '{"a": 1}'}


def test_success_is_reported_as_200():
    backend = FakeBackend()
    backend.respond(201, text="answer-sdp", headers={"content-type": "application/sdp"})
    relay = BackendRelay(make_settings(), transport=backend.transport)

    result = asyncio.run(relay.post_sdp(CALLS_PATH, "v=0", credential="eph_1"))

    assert result.status_code == 200
    assert result.content == b"answer-sdp"
    assert result.media_type == "application/sdp"


def test_non_success_status_raises_upstream_error_with_backend_body():
    backend = FakeBackend()
    backend.respond(503, content=b"overloaded")
    relay = BackendRelay(make_settings(), transport=backend.transport)

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(relay.post_json(CLIENT_SECRETS_PATH, {}, credential=AUTH_KEY))

    assert excinfo.value.status_code == 503
    assert excinfo.value.body == b"overloaded"


def test_connection_failure_raises_connectivity_error():
    backend = FakeBackend()
    backend.refuse_connections()
    relay = BackendRelay(make_settings(), transport=backend.transport)

    with pytest.raises(ConnectivityError) as excinfo:
        asyncio.run(relay.get("/api/ice-servers"))

    assert excinfo.value.status_code == 502
    assert "Connection refused" in excinfo.value.details


def test_timeout_raises_connectivity_error():
    backend = FakeBackend()

    def _timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    backend.handler = _timeout
    relay = BackendRelay(make_settings(), transport=backend.transport)

    with pytest.raises(ConnectivityError):
        asyncio.run(relay.post_sdp(CALLS_PATH, "v=0", credential="eph_1"))


def test_real_refused_connection_fails_fast():
    relay = BackendRelay(make_settings(backend_url="http://127.0.0.1:1", upstream_timeout_seconds=2))

    with pytest.raises(ConnectivityError):
        asyncio.run(relay.get("/api/ice-servers"))


def test_missing_configuration_raises_before_any_request():
    backend = FakeBackend()
    relay = BackendRelay(make_settings(auth_key=None, backend_url=None), transport=backend.transport)

    with pytest.raises(ConfigurationError):
        relay.auth_key
    with pytest.raises(ConfigurationError):
        asyncio.run(relay.get("/api/ice-servers"))
    assert backend.requests == []
