"""Shared type aliases for the wizard package."""

from __future__ import annotations

from core.types import FormValues, LocalizedText, ValuePredicate

LangPair = LocalizedText

# Decides whether a step is bypassed for the current form values
StepPredicate = ValuePredicate


__all__ = [
    "FormValues",
    "LangPair",
    "LocalizedText",
    "StepPredicate",
]
