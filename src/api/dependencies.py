"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules. Configuration is
resolved once through ``get_settings`` and handed explicitly to every
component built here.
"""

from __future__ import annotations

from fastapi import Depends

from config.settings import Settings, get_settings
from integrations.plivo_client import PlivoConfig, build_plivo_client, get_plivo_config
from realtime.relay import BackendRelay
from realtime.service import RealtimeService


def get_relay(settings: Settings = Depends(get_settings)) -> BackendRelay:
    return BackendRelay(settings)


def get_service(
    settings: Settings = Depends(get_settings),
    relay: BackendRelay = Depends(get_relay),
) -> RealtimeService:
    return RealtimeService(settings, relay)


def get_plivo_cfg(settings: Settings = Depends(get_settings)) -> PlivoConfig:
    return get_plivo_config(settings)


def get_plivo_client(cfg: PlivoConfig = Depends(get_plivo_cfg)):
    return build_plivo_client(cfg)
