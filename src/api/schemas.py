"""API-facing Pydantic models.

Tunable fields are typed ``Any`` on purpose: coercion and defaulting happen in
``realtime.session_config``, and values the backend may reject are passed on.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SessionParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    instruction: Any = Field(default=None, description="System prompt for the assistant.")
    instructions: Any = None
    custom_prompt: Any = None
    temperature: Any = None
    top_p: Any = None
    top_k: Any = None
    vad_threshold: Any = None
    vad_prefix_padding_ms: Any = None
    vad_silence_duration_ms: Any = None

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DirectOfferRequest(SessionParams):
    sdp: Any = Field(default=None, description="SDP offer produced by the browser.")


class EphemeralOfferRequest(BaseModel):
    sdp: Any = None
    ephemeral_token: Any = None


class EphemeralKeyResponse(BaseModel):
    value: Any = None
    expires_at: Any = Field(default=None, description="Expiry as epoch seconds.")


class TelephonyConfigRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    instruction: Any = None
    instructions: Any = None
    temperature: Any = None
    top_p: Any = None
    top_k: Any = None
    max_tokens: Any = None
    vad_threshold: Any = None
    silence_ms: Any = None
    voice_ms: Any = None
    silence_timeout: Any = None

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OutboundCallRequest(BaseModel):
    to_number: Any = Field(default=None, description="E.164 phone number, e.g. +1415...")
    from_number: Any = None
    instructions: Any = None
    instruction: Any = None
    temperature: Any = None
    silence_timeout: Any = None


class OutboundCallResponse(BaseModel):
    success: bool
    call_uuid: Any = None
    message: Any = None
    answer_url: str
