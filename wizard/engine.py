"""Per-field validation state with debounced, cancellable validation.

The engine owns one :class:`FieldState` per form field and is the only
component that mutates them. State entries are immutable; every change swaps
the whole entry so ``error``, ``is_valid`` and ``is_validating`` always move
together.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

import config
from core.errors import UnknownFieldError
from core.schema import FieldFailure, RuleSchema
from core.validators import ValidationResult
from utils.i18n import translate

logger = logging.getLogger(__name__)

StateListener = Callable[[str], None]


@dataclass(frozen=True)
class FieldState:
    """Validation state of a single form field."""

    value: str = ""
    error: str | None = None
    hint: str | None = None
    is_valid: bool = False
    is_validating: bool = False
    is_touched: bool = False


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


class ValidationEngine:
    """Mediate value changes and validation for a fixed set of fields."""

    def __init__(
        self,
        initial_values: Mapping[str, object],
        schema: RuleSchema,
        *,
        debounce_ms: int | None = None,
        validate_on_change: bool | None = None,
        validate_on_blur: bool | None = None,
        lang: str | None = None,
    ) -> None:
        self._initial: dict[str, str] = {name: _as_text(value) for name, value in initial_values.items()}
        self._schema = schema
        self.debounce_ms = config.DEBOUNCE_MS if debounce_ms is None else max(0, debounce_ms)
        self.validate_on_change = config.VALIDATE_ON_CHANGE if validate_on_change is None else validate_on_change
        self.validate_on_blur = config.VALIDATE_ON_BLUR if validate_on_blur is None else validate_on_blur
        self.lang = lang or config.DEFAULT_LANG
        self._fields: dict[str, FieldState] = self._fresh_state(self._initial)
        self._pending: dict[str, asyncio.Task[None]] = {}
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def schema(self) -> RuleSchema:
        return self._schema

    @property
    def fields(self) -> Mapping[str, FieldState]:
        return MappingProxyType(dict(self._fields))

    def field(self, name: str) -> FieldState:
        return self._require(name)

    def get_values(self) -> dict[str, str]:
        """Return a snapshot of the current raw values."""

        return {name: state.value for name, state in self._fields.items()}

    @property
    def is_form_valid(self) -> bool:
        return all(state.is_valid and not state.error for state in self._fields.values())

    @property
    def is_validating(self) -> bool:
        return any(state.is_validating for state in self._fields.values())

    def has_pending(self, name: str) -> bool:
        """Return ``True`` while a deferred validation for ``name`` is scheduled."""

        task = self._pending.get(name)
        return task is not None and not task.done()

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for state changes and return an unsubscribe hook."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_value(self, name: str, value: object) -> None:
        """Store ``value`` and schedule a debounced validation for ``name``.

        A newer call for the same field cancels the previously scheduled
        validation, so only the last value inside the quiet period is checked.

        Raises:
            RuntimeError: Change validation is on and no event loop is running.
                The field state is left untouched.
        """

        state = self._require(name)
        text = _as_text(value)
        loop = asyncio.get_running_loop() if self.validate_on_change else None
        self._cancel(name)
        self._swap(name, replace(state, value=text, is_touched=True, is_validating=self.validate_on_change))
        if loop is None:
            return
        task = loop.create_task(self._validate_later(name, text, self.debounce_ms / 1000))
        self._track(name, task)

    async def blur(self, name: str) -> FieldState:
        """Validate ``name`` immediately, dropping any pending debounce."""

        state = self._require(name)
        if not state.is_touched:
            state = replace(state, is_touched=True)
            self._swap(name, state)
        if not self.validate_on_blur:
            return state
        self._cancel(name)
        self._swap(name, replace(state, is_validating=True))
        task = asyncio.get_running_loop().create_task(self._validate_later(name, state.value, 0))
        self._track(name, task)
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()
        return self._fields[name]

    async def validate_all(self, fields: Iterable[str] | None = None) -> bool:
        """Validate ``fields`` (every field by default) against the whole schema.

        Failures are computed first and then applied in a single swap: every
        field in scope is cleared to valid and only the reported fields are
        marked invalid. Fields that received new input while the schema ran
        keep their own, newer validation.
        """

        if fields is None:
            scope = tuple(self._fields)
        else:
            scope = tuple(dict.fromkeys(fields))
            for name in scope:
                self._require(name)
        for name in scope:
            self._cancel(name)
        snapshot = self.get_values()
        failures = await self._schema.validate(snapshot, scope)
        self._apply_failures(scope, failures, snapshot)
        if failures:
            logger.debug("validate_all failed for %s", sorted({failure.field for failure in failures}))
        return not failures

    def reset(self, overrides: Mapping[str, object] | None = None) -> None:
        """Reinitialise every field and cancel all pending validations."""

        self.cancel_pending()
        values = dict(self._initial)
        if overrides:
            values.update({name: _as_text(value) for name, value in overrides.items()})
        self._fields = self._fresh_state(values)
        for name in self._fields:
            self._notify(name)

    def cancel_pending(self) -> None:
        """Cancel every outstanding debounced validation."""

        for name in list(self._pending):
            self._cancel(name)

    def close(self) -> None:
        """Release the engine when the form unmounts."""

        self.cancel_pending()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _fresh_state(values: Mapping[str, str]) -> dict[str, FieldState]:
        return {name: FieldState(value=value) for name, value in values.items()}

    def _require(self, name: str) -> FieldState:
        try:
            return self._fields[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def _swap(self, name: str, state: FieldState) -> None:
        self._fields[name] = state
        self._notify(name)

    def _notify(self, name: str) -> None:
        for listener in tuple(self._listeners):
            listener(name)

    def _track(self, name: str, task: asyncio.Task[None]) -> None:
        self._pending[name] = task

        def _release(done: asyncio.Task[None]) -> None:
            if self._pending.get(name) is done:
                del self._pending[name]

        task.add_done_callback(_release)

    def _cancel(self, name: str) -> None:
        task = self._pending.pop(name, None)
        if task is None or task.done():
            return
        task.cancel()
        state = self._fields.get(name)
        if state is not None and state.is_validating:
            self._swap(name, replace(state, is_validating=False))

    async def _validate_later(self, name: str, value: str, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        values = self.get_values()
        values[name] = value
        result = await self._schema.validate_field(name, values)
        self._apply_result(name, result)

    def _apply_result(self, name: str, result: ValidationResult) -> None:
        state = self._fields[name]
        self._swap(
            name,
            replace(
                state,
                error=translate(result.error, self.lang) if result.error else None,
                hint=translate(result.hint, self.lang) if result.hint else None,
                is_valid=result.is_valid,
                is_validating=False,
            ),
        )

    def _apply_failures(
        self,
        scope: tuple[str, ...],
        failures: list[FieldFailure],
        snapshot: Mapping[str, str],
    ) -> None:
        first_failure: dict[str, FieldFailure] = {}
        for failure in failures:
            first_failure.setdefault(failure.field, failure)
        updated = dict(self._fields)
        touched: list[str] = []
        for name in scope:
            state = updated[name]
            if self.has_pending(name) or state.value != snapshot.get(name):
                continue
            failure = first_failure.get(name)
            updated[name] = replace(
                state,
                error=translate(failure.message, self.lang) if failure else None,
                hint=None,
                is_valid=failure is None,
                is_validating=False,
            )
            touched.append(name)
        self._fields = updated
        for name in touched:
            self._notify(name)


__all__ = ["FieldState", "StateListener", "ValidationEngine"]
