"""Helpers for computing wizard step completion status."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from wizard.missing_fields import missing_fields
from wizard.step_registry import StepDefinition


@dataclass(frozen=True)
class StepStatus:
    """Completion snapshot for a single wizard step."""

    key: str
    skipped: bool
    missing: tuple[str, ...]

    @property
    def complete(self) -> bool:
        return self.skipped or not self.missing


def compute_step_status(step: StepDefinition, values: Mapping[str, str]) -> StepStatus:
    """Compute skip state and missing required fields for ``step``."""

    if step.is_skipped(values):
        return StepStatus(key=step.key, skipped=True, missing=())
    return StepStatus(
        key=step.key,
        skipped=False,
        missing=tuple(missing_fields(values, step.required_fields)),
    )


def is_step_complete(step: StepDefinition, values: Mapping[str, str]) -> bool:
    """Return ``True`` when ``step`` is skipped or all required fields are filled."""

    return compute_step_status(step, values).complete


def compute_statuses(steps: Sequence[StepDefinition], values: Mapping[str, str]) -> tuple[StepStatus, ...]:
    """Return the status of every step in order."""

    return tuple(compute_step_status(step, values) for step in steps)
