"""Session configuration sent to the realtime backend.

Caller input is coerced, never validated: a field that is missing or not a
usable finite number falls back to its default, while finite values outside
the usual ranges are passed through and left for the backend to judge.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

DEFAULT_INSTRUCTIONS = "You are a helpful and friendly AI assistant."
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TOP_P = 0.95
DEFAULT_TOP_K = 50
DEFAULT_VAD_THRESHOLD = 0.5
DEFAULT_VAD_PREFIX_PADDING_MS = 300
DEFAULT_VAD_SILENCE_DURATION_MS = 500

# Caller-side names accepted for the instruction text, in priority order.
INSTRUCTION_KEYS = ("instruction", "instructions", "custom_prompt")

# Flat fields understood by the backend's telephony configure endpoint.
TELEPHONY_CONFIG_FIELDS = (
    "temperature",
    "top_p",
    "top_k",
    "max_tokens",
    "vad_threshold",
    "silence_ms",
    "voice_ms",
    "silence_timeout",
)


class AudioOutput(BaseModel):
    voice: str


class Audio(BaseModel):
    output: AudioOutput


class TurnDetection(BaseModel):
    type: Literal["server_vad"] = "server_vad"
    threshold: float = DEFAULT_VAD_THRESHOLD
    prefix_padding_ms: int = DEFAULT_VAD_PREFIX_PADDING_MS
    silence_duration_ms: int = DEFAULT_VAD_SILENCE_DURATION_MS


class InputAudioTranscription(BaseModel):
    model: str


class SessionConfig(BaseModel):
    """Canonical session object; field names are fixed by the backend."""

    type: Literal["realtime"] = "realtime"
    model: str
    audio: Audio
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)
    input_audio_transcription: InputAudioTranscription
    instructions: str = DEFAULT_INSTRUCTIONS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: int = DEFAULT_TOP_K

    def to_upstream(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def coerce_float(value: Any, default: float) -> float:
    """Return ``value`` as a finite float, or ``default`` if it is not one."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def coerce_int(value: Any, default: int) -> int:
    """Return ``value`` as an int when it denotes a whole finite number."""

    number = coerce_float(value, math.nan)
    if math.isnan(number) or not number.is_integer():
        return default
    return int(number)


def coerce_instructions(params: Mapping[str, Any], default: str = DEFAULT_INSTRUCTIONS) -> str:
    for key in INSTRUCTION_KEYS:
        value = params.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default


def build_session_config(
    params: Mapping[str, Any],
    *,
    model: str,
    voice: str,
) -> SessionConfig:
    """Build a fully populated :class:`SessionConfig` from partial caller input."""

    return SessionConfig(
        model=model,
        audio=Audio(output=AudioOutput(voice=voice)),
        turn_detection=TurnDetection(
            threshold=coerce_float(params.get("vad_threshold"), DEFAULT_VAD_THRESHOLD),
            prefix_padding_ms=coerce_int(
                params.get("vad_prefix_padding_ms"), DEFAULT_VAD_PREFIX_PADDING_MS
            ),
            silence_duration_ms=coerce_int(
                params.get("vad_silence_duration_ms"), DEFAULT_VAD_SILENCE_DURATION_MS
            ),
        ),
        input_audio_transcription=InputAudioTranscription(model=model),
        instructions=coerce_instructions(params),
        temperature=coerce_float(params.get("temperature"), DEFAULT_TEMPERATURE),
        top_p=coerce_float(params.get("top_p"), DEFAULT_TOP_P),
        top_k=coerce_int(params.get("top_k"), DEFAULT_TOP_K),
    )


def build_telephony_config(params: Mapping[str, Any]) -> dict[str, Any]:
    """Flat body for the telephony configure endpoint.

    Only fields the caller actually provided are included; the backend fills
    in its own defaults for the rest.
    """

    body: dict[str, Any] = {}
    instructions = coerce_instructions(params, default="")
    if instructions:
        body["instructions"] = instructions
    for key in TELEPHONY_CONFIG_FIELDS:
        value = params.get(key)
        if value is not None:
            body[key] = value
    return body
