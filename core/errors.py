"""Custom exception types for the onboarding core."""

from __future__ import annotations

from typing import Final

from core.types import LocalizedText


class OnboardingError(Exception):
    """Base exception for onboarding related issues."""


class UnknownFieldError(OnboardingError, KeyError):
    """Raised when the validation engine is asked about a field it does not own."""

    def __init__(self, field: str) -> None:
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown form field: {self.field!r}"


class UnknownStepError(OnboardingError, KeyError):
    """Raised when a wizard step key is not part of the configured sequence."""

    def __init__(self, step: str) -> None:
        super().__init__(step)
        self.step = step

    def __str__(self) -> str:
        return f"Unknown wizard step: {self.step!r}"


SUBMISSION_FAILED_BANNER: Final[LocalizedText] = (
    "Erro ao registar. Tente novamente.",
    "Registration failed. Please try again.",
)


class SubmissionError(OnboardingError):
    """Raised when the backend rejects or cannot receive the registration payload."""

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message or SUBMISSION_FAILED_BANNER[1])
        self.status_code = status_code
        self.detail = detail
