"""HTTP relay to the realtime voice backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from config.settings import Settings
from realtime.errors import ConfigurationError, ConnectivityError, UpstreamError

LOGGER = logging.getLogger(__name__)

CLIENT_SECRETS_PATH = "/v1/realtime/client_secrets"
CALLS_PATH = "/v1/realtime/calls"
PLIVO_CONFIGURE_PATH = "/plivo/configure"
ICE_SERVERS_PATH = "/api/ice-servers"


@dataclass(frozen=True)
class RelayResponse:
    status_code: int
    content: bytes
    media_type: str | None = None


class BackendRelay:
    """Forwards one request to the backend and hands back its answer untouched.

    An ``httpx.AsyncClient`` is opened per call; nothing survives between
    calls. ``transport`` exists so tests can swap the network out.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        if not self._settings.backend_url:
            raise ConfigurationError("Missing BACKEND_URL configuration")
        return self._settings.backend_url

    @property
    def auth_key(self) -> str:
        if not self._settings.auth_key:
            raise ConfigurationError("Missing AUTH_KEY configuration")
        return self._settings.auth_key

    def _auth_headers(self, credential: str | None) -> dict[str, str]:
        if credential is None:
            return {}
        return {self._settings.backend_auth_header: f"Bearer {credential}"}

    async def post_json(self, path: str, payload: dict[str, Any], *, credential: str) -> RelayResponse:
        return await self._send("POST", path, credential=credential, json=payload)

    async def post_multipart(self, path: str, fields: dict[str, str], *, credential: str) -> RelayResponse:
        # (None, value) tuples make httpx emit plain form-data parts without a filename.
        files = {name: (None, value) for name, value in fields.items()}
        return await self._send("POST", path, credential=credential, files=files)

    async def post_sdp(self, path: str, sdp: str, *, credential: str) -> RelayResponse:
        return await self._send(
            "POST",
            path,
            credential=credential,
            content=sdp.encode("utf-8"),
            headers={"Content-Type": "application/sdp"},
        )

    async def get(self, path: str) -> RelayResponse:
        return await self._send("GET", path, credential=None)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        credential: str | None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> RelayResponse:
        url = f"{self.base_url}{path}"
        request_headers = self._auth_headers(credential)
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.upstream_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, headers=request_headers, **kwargs)
        except httpx.RequestError as exc:
            LOGGER.error("Backend %s %s unreachable: %s", method, path, exc)
            raise ConnectivityError(str(exc) or exc.__class__.__name__) from exc

        media_type = response.headers.get("content-type")
        if not response.is_success:
            LOGGER.error(
                "Backend %s %s failed: %s - %s",
                method,
                path,
                response.status_code,
                response.text,
            )
            raise UpstreamError(response.status_code, response.content, media_type)

        return RelayResponse(status_code=200, content=response.content, media_type=media_type)
