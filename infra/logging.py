"""Structured logging utilities for the onboarding form."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Final

LOGGER = logging.getLogger("onboarding")

_SECRET_KEYS: Final[frozenset[str]] = frozenset({"password", "confirm_password", "confirmPassword"})
_REDACTED: Final[str] = "[redacted]"


def redact_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``payload`` with secret values replaced."""

    redacted: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _SECRET_KEYS:
            redacted[key] = _REDACTED
        elif isinstance(value, Mapping):
            redacted[key] = redact_payload(value)
        else:
            redacted[key] = value
    return redacted


def log_event(
    level: str,
    *,
    event: str,
    step: str | None = None,
    field: str | None = None,
    payload: Mapping[str, Any] | None = None,
) -> str:
    """Emit a structured log line for a form event.

    Args:
        level: Logging level name (e.g., ``"info"``).
        event: Short event identifier such as ``"step.next"``.
        step: Optional wizard step key.
        field: Optional form field name.
        payload: Optional extra data; secrets are redacted before logging.

    Returns:
        The JSON line that was logged.
    """

    record: dict[str, Any] = {
        "level": level.lower(),
        "event": event,
        "step": step,
        "field": field,
    }
    if payload:
        record["payload"] = redact_payload(payload)
    line = json.dumps({k: v for k, v in record.items() if v is not None}, ensure_ascii=False, default=str)
    LOGGER.log(getattr(logging, level.upper(), logging.INFO), line)
    return line
