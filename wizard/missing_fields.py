"""Utilities for identifying missing values in form data."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def is_unfilled(value: Any) -> bool:
    """Return ``True`` when ``value`` should be treated as missing.

    Zero counts as missing here: progress indicators treat an untouched
    numeric input (``0``) as not filled in yet.
    """

    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        text = value.strip()
        return not text or text == "0"
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def missing_fields(values: Mapping[str, Any], fields: Iterable[str]) -> list[str]:
    """Return the subset of ``fields`` that are blank or missing in ``values``."""

    return [field for field in fields if is_unfilled(values.get(field))]
