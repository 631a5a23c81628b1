"""Shared keys for session state and form fields."""
