"""Session flows built on top of :class:`BackendRelay`."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from config.settings import Settings
from realtime.errors import UpstreamError, ValidationError
from realtime.relay import (
    CALLS_PATH,
    CLIENT_SECRETS_PATH,
    ICE_SERVERS_PATH,
    PLIVO_CONFIGURE_PATH,
    BackendRelay,
    RelayResponse,
)
from realtime.session_config import build_session_config, build_telephony_config

LOGGER = logging.getLogger(__name__)


def _require(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


class RealtimeService:
    def __init__(self, settings: Settings, relay: BackendRelay) -> None:
        self._settings = settings
        self._relay = relay

    def session_config(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return build_session_config(
            params,
            model=self._settings.realtime_model,
            voice=self._settings.realtime_voice,
        ).to_upstream()

    async def issue_ephemeral_token(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Mint a single-use client secret bound to the requested session config.

        Only ``value`` and ``expires_at`` are handed back; the token is opaque
        and its expiry is enforced by the backend alone.
        """

        credential = self._relay.auth_key
        payload = {"session": self.session_config(params)}
        result = await self._relay.post_json(CLIENT_SECRETS_PATH, payload, credential=credential)

        data = _decode_json(result)
        LOGGER.info("Ephemeral token issued, expires at %s", data.get("expires_at"))
        return {"value": data.get("value"), "expires_at": data.get("expires_at")}

    async def relay_offer_ephemeral(self, sdp: Any, ephemeral_token: Any) -> RelayResponse:
        # Session config was bound into the token at issuance, so only the SDP travels.
        offer = _require(sdp, "Missing SDP in request")
        token = _require(ephemeral_token, "Missing ephemeral_token in request")
        return await self._relay.post_sdp(CALLS_PATH, offer, credential=token)

    async def relay_offer_direct(self, sdp: Any, params: Mapping[str, Any]) -> RelayResponse:
        offer = _require(sdp, "Missing SDP in request")
        credential = self._relay.auth_key
        session = json.dumps(self.session_config(params))
        return await self._relay.post_multipart(
            CALLS_PATH,
            {"sdp": offer, "session": session},
            credential=credential,
        )

    async def issue_config_token(self, params: Mapping[str, Any]) -> RelayResponse:
        credential = self._relay.auth_key
        body = build_telephony_config(params)
        LOGGER.info("Requesting config token from %s%s", self._relay.base_url, PLIVO_CONFIGURE_PATH)
        return await self._relay.post_json(PLIVO_CONFIGURE_PATH, body, credential=credential)

    async def mint_config_token(self, params: Mapping[str, Any]) -> str | None:
        result = await self.issue_config_token(params)
        data = _decode_json(result)
        LOGGER.info("Config token generated, expires at %s", data.get("expires_at"))
        return data.get("config_token")

    async def fetch_ice_servers(self) -> RelayResponse:
        return await self._relay.get(ICE_SERVERS_PATH)


def _decode_json(result: RelayResponse) -> dict[str, Any]:
    try:
        data = json.loads(result.content)
    except ValueError as exc:
        LOGGER.error("Backend returned a non-JSON body: %r", result.content[:200])
        raise UpstreamError(502, result.content, result.media_type) from exc
    if not isinstance(data, dict):
        raise UpstreamError(502, result.content, result.media_type)
    return data
