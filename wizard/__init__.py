"""Onboarding wizard package: validation engine, steps and navigation."""

from __future__ import annotations

from wizard.engine import FieldState, ValidationEngine
from wizard.navigation import WizardStateMachine
from wizard.step_registry import ONBOARDING_STEPS, REVIEW_STEP_KEY, StepDefinition

__all__ = [
    "FieldState",
    "ONBOARDING_STEPS",
    "REVIEW_STEP_KEY",
    "StepDefinition",
    "ValidationEngine",
    "WizardStateMachine",
]
