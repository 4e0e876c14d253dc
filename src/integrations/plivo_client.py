from __future__ import annotations

from dataclasses import dataclass

from config.settings import Settings
from realtime.errors import ConfigurationError


@dataclass(frozen=True)
class PlivoConfig:
    auth_id: str
    auth_token: str
    from_number: str | None
    public_base_url: str | None


def get_plivo_config(settings: Settings) -> PlivoConfig:
    if not settings.plivo_auth_id or not settings.plivo_auth_token:
        raise ConfigurationError("Plivo credentials missing")

    return PlivoConfig(
        auth_id=settings.plivo_auth_id,
        auth_token=settings.plivo_auth_token,
        from_number=settings.plivo_from_number,
        public_base_url=settings.public_base_url,
    )


def build_plivo_client(cfg: PlivoConfig):
    import plivo

    return plivo.RestClient(auth_id=cfg.auth_id, auth_token=cfg.auth_token)
