"""Error taxonomy for relay operations.

Every error is terminal for the current request. ``main.py`` renders them
into HTTP responses; nothing here retries.
"""

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    status_code: int = 500
    default_detail: str = "Relay error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.detail}


class ValidationError(RelayError):
    """Caller input is missing a required field."""

    status_code = 400
    default_detail = "Invalid request."


class ConfigurationError(RelayError):
    """Required operator configuration is absent."""

    status_code = 500
    default_detail = "Missing configuration."


class TelephonyError(RelayError):
    status_code = 500
    default_detail = "Failed to initiate call"


class UpstreamError(RelayError):
    """The backend answered with a non-success status.

    Status, body and content type are relayed to the caller unchanged.
    """

    def __init__(self, status_code: int, body: bytes, media_type: str | None = None) -> None:
        super().__init__(f"Backend returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body
        self.media_type = media_type


class ConnectivityError(RelayError):
    """The backend could not be reached at all."""

    status_code = 502
    default_detail = "Failed to connect to backend"

    def __init__(self, details: str) -> None:
        super().__init__()
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.detail, "details": self.details}
