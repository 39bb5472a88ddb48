"""Serialization — JSON encoding/decoding of wire messages."""

from __future__ import annotations

import json
from typing import Any


def encode(data: dict[str, Any]) -> str:
    """Encode an outbound message dict to a compact JSON text frame."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


def decode(raw: str | bytes) -> Any:
    """Decode an inbound text or binary frame.

    Raises:
        json.JSONDecodeError: If the frame is not valid JSON.
        UnicodeDecodeError: If a binary frame is not UTF-8.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)
