"""Navigation for the onboarding wizard."""

from __future__ import annotations

from wizard.navigation.router import WizardStateMachine

__all__ = ["WizardStateMachine"]
