"""Core package for onboarding validation and record resolution."""
