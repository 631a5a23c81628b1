from __future__ import annotations

import logging
from collections.abc import Sequence

from infra.logging import log_event
from wizard.engine import ValidationEngine
from wizard.step_registry import (
    ONBOARDING_STEPS,
    REVIEW_STEP_KEY,
    StepDefinition,
    get_step,
    validate_step_sequence,
)
from wizard.step_status import StepStatus, compute_statuses, is_step_complete

logger = logging.getLogger(__name__)


class WizardStateMachine:
    """Ordered step sequence with skip predicates and a validation gate.

    Skip predicates are evaluated against a fresh value snapshot on every
    call, so answering ``has_company`` differently immediately changes which
    steps are reachable. The machine only asks the engine for values and for
    the pass/fail outcome of ``validate_all``.
    """

    def __init__(
        self,
        engine: ValidationEngine,
        steps: Sequence[StepDefinition] = ONBOARDING_STEPS,
        *,
        review_step: str = REVIEW_STEP_KEY,
    ) -> None:
        validate_step_sequence(steps)
        self._steps: tuple[StepDefinition, ...] = tuple(steps)
        self._engine = engine
        self._review_key = get_step(review_step, self._steps).key
        self._index = 0

    @property
    def steps(self) -> tuple[StepDefinition, ...]:
        return self._steps

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_step(self) -> StepDefinition:
        return self._steps[self._index]

    @property
    def current_key(self) -> str:
        return self.current_step.key

    @property
    def is_terminal(self) -> bool:
        return self.current_key == self._review_key

    def _index_of(self, key: str) -> int:
        step = get_step(key, self._steps)
        return self._steps.index(step)

    def _values(self) -> dict[str, str]:
        return self._engine.get_values()

    def _next_index(self, start: int, values: dict[str, str]) -> int | None:
        for index in range(start + 1, len(self._steps)):
            if not self._steps[index].is_skipped(values):
                return index
        return None

    def _prev_index(self, start: int, values: dict[str, str]) -> int | None:
        for index in range(start - 1, -1, -1):
            if not self._steps[index].is_skipped(values):
                return index
        return None

    def _move(self, target: int, event: str) -> None:
        source = self.current_key
        self._index = target
        log_event("info", event=event, step=self.current_key, payload={"from": source})

    async def next(self) -> bool:
        """Advance past skipped steps once the current step validates."""

        step = self.current_step
        if self.is_terminal:
            logger.debug("Refusing to advance past the review step")
            return False
        if not await self._engine.validate_all(step.required_fields):
            invalid = [name for name in step.required_fields if not self._engine.field(name).is_valid]
            log_event("info", event="step.refused", step=step.key, payload={"invalid": invalid})
            return False
        target = self._next_index(self._index, self._values())
        if target is None:
            return False
        self._move(target, "step.next")
        return True

    def prev(self) -> bool:
        """Move back one logical step, skipping steps bypassed under current values."""

        target = self._prev_index(self._index, self._values())
        if target is None:
            return False
        self._move(target, "step.prev")
        return True

    async def go_to(self, key: str) -> bool:
        """Jump to ``key``: freely backwards, through the gate for the next step."""

        target = self._index_of(key)
        values = self._values()
        if target == self._index:
            return True
        if target < self._index:
            if self._steps[target].is_skipped(values):
                return False
            self._move(target, "step.jump")
            return True
        if target == self._next_index(self._index, values):
            return await self.next()
        return False

    def reset(self) -> None:
        """Return to the first step."""

        self._index = 0

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def active_steps(self) -> tuple[StepDefinition, ...]:
        values = self._values()
        return tuple(step for step in self._steps if not step.is_skipped(values))

    def statuses(self) -> tuple[StepStatus, ...]:
        return compute_statuses(self._steps, self._values())

    def is_step_complete(self, key: str) -> bool:
        step = self._steps[self._index_of(key)]
        return is_step_complete(step, self._values())

    def completed_steps(self) -> tuple[str, ...]:
        return tuple(status.key for status in self.statuses() if status.complete)

    def position(self) -> tuple[int, int]:
        """Return the 1-based position of the current step among active steps."""

        active = [step.key for step in self.active_steps()]
        if self.current_key in active:
            return active.index(self.current_key) + 1, len(active)
        return self._index + 1, len(active)

    def progress(self) -> float:
        """Return the share of active steps that are complete."""

        values = self._values()
        active = [step for step in self._steps if not step.is_skipped(values)]
        if not active:
            return 1.0
        done = sum(1 for step in active if is_step_complete(step, values))
        return done / len(active)


__all__ = ["WizardStateMachine"]
