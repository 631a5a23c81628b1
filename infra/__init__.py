"""Infrastructure helpers for the onboarding form."""
