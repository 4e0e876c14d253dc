"""Plivo Voice integration.

This module provides:
- Config-token endpoint that stores a session configuration on the backend.
- Answer URL (Plivo XML) that streams call audio to the backend.
- Outbound call endpoint.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response

from api.dependencies import get_plivo_cfg, get_plivo_client, get_service
from api.schemas import OutboundCallRequest, OutboundCallResponse, TelephonyConfigRequest
from config.settings import Settings, get_settings
from integrations.plivo_client import PlivoConfig
from realtime.errors import ConfigurationError, TelephonyError, ValidationError
from realtime.service import RealtimeService
from realtime.session_config import DEFAULT_TEMPERATURE, coerce_float, coerce_instructions, coerce_int
from telephony.answer import build_stream_url, plivo_stream_xml, redact_stream_url

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/plivo", tags=["plivo"])

DEFAULT_SILENCE_TIMEOUT = 30


def _plivo_xml_response(xml: str) -> Response:
    return Response(content=xml, media_type="application/xml")


async def _answer_params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = dict(request.query_params)
    if request.method != "POST":
        return params

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else {}
        except ValueError as exc:
            raise ValidationError("Invalid JSON body") from exc
        if isinstance(body, dict):
            params.update(body)
    else:
        form = await request.form()
        params.update({key: value for key, value in form.items() if isinstance(value, str)})
    return params


@router.post("/configure")
async def create_config_token(
    payload: TelephonyConfigRequest | None = None,
    service: RealtimeService = Depends(get_service),
) -> Response:
    params = payload.overrides() if payload else {}
    result = await service.issue_config_token(params)
    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=result.media_type or "application/json",
    )


@router.api_route("/answer", methods=["GET", "POST"])
async def plivo_answer(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    if not settings.backend_url or not settings.auth_key:
        raise ConfigurationError("Missing BACKEND_URL or AUTH_KEY configuration")

    params = await _answer_params(request)
    stream_url = build_stream_url(
        backend_url=settings.backend_url,
        api_key=settings.auth_key,
        params=params,
    )
    LOGGER.info("Plivo answer stream URL: %s", redact_stream_url(stream_url))
    return _plivo_xml_response(plivo_stream_xml(stream_url=stream_url))


def _phone_number(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    number = str(value).strip()
    return number or None


def _answer_url(request: Request, cfg: PlivoConfig) -> str:
    if cfg.public_base_url:
        return f"{cfg.public_base_url.rstrip('/')}/api/plivo/answer"
    return str(request.url_for("plivo_answer"))


@router.post("/call", response_model=OutboundCallResponse)
async def create_outbound_call(
    request: Request,
    payload: OutboundCallRequest,
    service: RealtimeService = Depends(get_service),
    plivo_client=Depends(get_plivo_client),
    cfg: PlivoConfig = Depends(get_plivo_cfg),
    settings: Settings = Depends(get_settings),
) -> OutboundCallResponse:
    # The answer URL streams to the backend, so a call without it could never connect.
    if not settings.backend_url or not settings.auth_key:
        raise ConfigurationError("Missing BACKEND_URL or AUTH_KEY configuration")

    to_number = _phone_number(payload.to_number)
    if not to_number:
        raise ValidationError("Missing to_number in request")
    from_number = _phone_number(payload.from_number) or cfg.from_number
    if not from_number:
        raise ValidationError("Missing from_number in request")

    config_token: str | None = None
    instructions = coerce_instructions(payload.model_dump(exclude_none=True), default="")
    if instructions:
        config_token = await service.mint_config_token(
            {
                "instructions": instructions,
                "temperature": coerce_float(payload.temperature, DEFAULT_TEMPERATURE),
                "silence_timeout": coerce_int(payload.silence_timeout, DEFAULT_SILENCE_TIMEOUT),
            }
        )

    query: dict[str, str] = {}
    if config_token:
        query["config_token"] = config_token
    else:
        if payload.temperature is not None:
            query["temperature"] = str(payload.temperature)
        if payload.silence_timeout is not None:
            query["silence_timeout"] = str(payload.silence_timeout)

    answer_url = _answer_url(request, cfg)
    if query:
        answer_url = f"{answer_url}?{urlencode(query)}"
    LOGGER.info("Initiating Plivo call to %s with answer URL %s", to_number, answer_url)

    try:
        call = plivo_client.calls.create(
            from_=from_number,
            to_=to_number,
            answer_url=answer_url,
            answer_method="GET",
        )
    except Exception as exc:
        LOGGER.exception("Plivo call creation failed: %s", exc)
        raise TelephonyError(str(exc) or None) from exc

    return OutboundCallResponse(
        success=True,
        call_uuid=getattr(call, "request_uuid", None),
        message=getattr(call, "message", None),
        answer_url=answer_url,
    )
