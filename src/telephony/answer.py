"""Plivo answer documents that bridge a call's audio to the realtime backend.

The gateway never opens the stream itself; Plivo reads the XML and connects
to the backend's stream endpoint on its own.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode, urlsplit
from xml.sax.saxutils import escape, quoteattr

STREAM_PATH = "/plivo/stream"
STREAM_CONTENT_TYPE = "audio/x-l16;rate=8000"
STREAM_TIMEOUT_SECONDS = 86400

# Optional answer parameters forwarded to the stream, in URL order.
STREAM_OVERRIDES = ("config_token", "temperature", "silence_timeout", "vad_threshold")


def _to_ws_url(http_url: str) -> str:
    if http_url.startswith("https://"):
        return "wss://" + http_url.removeprefix("https://")
    if http_url.startswith("http://"):
        return "ws://" + http_url.removeprefix("http://")
    return http_url


def build_stream_url(*, backend_url: str, api_key: str, params: Mapping[str, Any]) -> str:
    base = _to_ws_url(backend_url.rstrip("/"))
    query: list[tuple[str, str]] = [("api_key", api_key)]
    for key in STREAM_OVERRIDES:
        value = params.get(key)
        if value is None or value == "":
            continue
        query.append((key, str(value)))
    return f"{base}{STREAM_PATH}?{urlencode(query)}"


def redact_stream_url(stream_url: str) -> str:
    parts = urlsplit(stream_url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}?api_key=***"


def plivo_stream_xml(*, stream_url: str) -> str:
    attrs = {
        "bidirectional": "true",
        "contentType": STREAM_CONTENT_TYPE,
        "keepCallAlive": "true",
        "streamTimeout": str(STREAM_TIMEOUT_SECONDS),
    }
    rendered = " ".join(f"{name}={quoteattr(value)}" for name, value in attrs.items())
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>"
        "<Response>"
        f"<Stream {rendered}>{escape(stream_url)}</Stream>"
        "</Response>"
    )
