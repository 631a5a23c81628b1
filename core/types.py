"""Shared type aliases for the onboarding core."""

from __future__ import annotations

from collections.abc import Callable, Mapping

# Bilingual (pt, en) text pair used for every user-facing message
LocalizedText = tuple[str, str]

FormValues = Mapping[str, str]
ValuePredicate = Callable[[FormValues], bool]


__all__ = ["FormValues", "LocalizedText", "ValuePredicate"]
