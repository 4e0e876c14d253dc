"""FastAPI routes for browser WebRTC sessions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_service
from api.schemas import DirectOfferRequest, EphemeralKeyResponse, EphemeralOfferRequest, SessionParams
from realtime.relay import RelayResponse
from realtime.service import RealtimeService

LOGGER = logging.getLogger(__name__)

router = APIRouter()

SDP_MEDIA_TYPE = "application/sdp"


def _relayed(result: RelayResponse, default_media_type: str) -> Response:
    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=result.media_type or default_media_type,
    )


@router.post("/ephemeral-key", response_model=EphemeralKeyResponse)
async def create_ephemeral_key(
    payload: SessionParams | None = None,
    service: RealtimeService = Depends(get_service),
) -> EphemeralKeyResponse:
    params = payload.overrides() if payload else {}
    token = await service.issue_ephemeral_token(params)
    return EphemeralKeyResponse(**token)


@router.post("/offer")
async def relay_offer(
    payload: EphemeralOfferRequest | None = None,
    service: RealtimeService = Depends(get_service),
) -> Response:
    payload = payload or EphemeralOfferRequest()
    result = await service.relay_offer_ephemeral(payload.sdp, payload.ephemeral_token)
    return _relayed(result, SDP_MEDIA_TYPE)


@router.post("/offer-direct")
async def relay_offer_direct(
    payload: DirectOfferRequest | None = None,
    service: RealtimeService = Depends(get_service),
) -> Response:
    payload = payload or DirectOfferRequest()
    result = await service.relay_offer_direct(payload.sdp, payload.overrides())
    return _relayed(result, SDP_MEDIA_TYPE)


@router.get("/ice-servers")
async def get_ice_servers(service: RealtimeService = Depends(get_service)) -> Response:
    result = await service.fetch_ice_servers()
    response = _relayed(result, "application/json")
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response
