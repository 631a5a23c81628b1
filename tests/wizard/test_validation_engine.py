from __future__ import annotations

import asyncio

import pytest

from core.errors import UnknownFieldError
from core.schema import REGISTRATION_SCHEMA, FieldRule, RuleSchema
from core.validators import ValidationResult
from wizard.engine import FieldState, ValidationEngine

CODE_LABEL = ("Código", "Code")


def _code_result(raw: str) -> ValidationResult:
    if raw.startswith("ok"):
        return ValidationResult(is_valid=True)
    return ValidationResult(is_valid=False, error=("Código inválido", "Invalid code"))


class _CountingValidator:
    """Synchronous validator recording every value it sees."""

    def __init__(self) -> None:
        self.seen: list[str] = []

    def __call__(self, raw: str) -> ValidationResult:
        self.seen.append(raw)
        return _code_result(raw)


def _code_engine(validator, **kwargs) -> ValidationEngine:
    schema = RuleSchema({"code": FieldRule(validator, CODE_LABEL)})
    kwargs.setdefault("debounce_ms", 10)
    return ValidationEngine({"code": ""}, schema, **kwargs)


def test_fields_start_untouched_and_unvalidated() -> None:
    engine = _code_engine(_CountingValidator())
    assert engine.field("code") == FieldState()
    assert not engine.is_form_valid
    assert not engine.is_validating


def test_rapid_changes_validate_only_the_last_value() -> None:
    validator = _CountingValidator()
    engine = _code_engine(validator)

    async def scenario() -> None:
        for value in ("o", "ok", "ok-1"):
            engine.set_value("code", value)
        assert engine.field("code").is_validating
        assert engine.has_pending("code")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert validator.seen == ["ok-1"]
    state = engine.field("code")
    assert state.value == "ok-1"
    assert state.is_valid
    assert state.is_touched
    assert not state.is_validating
    assert state.error is None


def test_superseded_value_never_applies_its_result() -> None:
    engine = _code_engine(_CountingValidator())

    async def scenario() -> None:
        engine.set_value("code", "bad")
        engine.set_value("code", "ok")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert engine.field("code").is_valid
    assert engine.field("code").error is None


def test_in_flight_async_validation_is_cancelled_by_new_input() -> None:
    gate: dict[str, asyncio.Event] = {}
    finished: list[str] = []

    async def validator(raw: str) -> ValidationResult:
        if raw == "slow":
            await gate["event"].wait()
        finished.append(raw)
        return _code_result(raw)

    engine = _code_engine(validator)

    async def scenario() -> None:
        gate["event"] = asyncio.Event()
        engine.set_value("code", "slow")
        await asyncio.sleep(0.03)
        assert engine.field("code").is_validating
        engine.set_value("code", "ok")
        await asyncio.sleep(0.03)
        gate["event"].set()
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert finished == ["ok"]
    assert engine.field("code").is_valid
    assert not engine.is_validating


def test_blur_validates_immediately_and_drops_pending_debounce() -> None:
    validator = _CountingValidator()
    engine = _code_engine(validator, debounce_ms=1000)

    async def scenario() -> FieldState:
        engine.set_value("code", "bad")
        state = await engine.blur("code")
        assert not engine.has_pending("code")
        await asyncio.sleep(0.02)
        return state

    state = asyncio.run(scenario())
    assert validator.seen == ["bad"]
    assert not state.is_valid
    assert state.error == "Código inválido"
    assert not state.is_validating


def test_blur_marks_untouched_field_as_touched() -> None:
    engine = _code_engine(_CountingValidator(), validate_on_blur=False)
    state = asyncio.run(engine.blur("code"))
    assert state.is_touched
    assert not state.is_valid


def test_change_validation_can_be_disabled_outside_an_event_loop() -> None:
    validator = _CountingValidator()
    engine = _code_engine(validator, validate_on_change=False)
    engine.set_value("code", "ok")
    state = engine.field("code")
    assert state.value == "ok"
    assert state.is_touched
    assert not state.is_validating
    assert validator.seen == []


def test_change_validation_needs_a_running_loop() -> None:
    engine = _code_engine(_CountingValidator())
    with pytest.raises(RuntimeError):
        engine.set_value("code", "ok")
    assert engine.field("code") == FieldState()


def test_unknown_field_is_rejected() -> None:
    engine = _code_engine(_CountingValidator(), validate_on_change=False)
    with pytest.raises(UnknownFieldError) as excinfo:
        engine.set_value("nope", "x")
    assert excinfo.value.field == "nope"
    with pytest.raises(KeyError):
        engine.field("nope")
    with pytest.raises(UnknownFieldError):
        asyncio.run(engine.validate_all(["nope"]))


def test_errors_follow_engine_language() -> None:
    engine = _code_engine(_CountingValidator(), lang="en")
    state = asyncio.run(engine.blur("code"))
    assert state.error == "Code is required"


def test_reset_cancels_pending_validation() -> None:
    validator = _CountingValidator()
    engine = ValidationEngine(
        {"code": "initial"},
        RuleSchema({"code": FieldRule(validator, CODE_LABEL)}),
        debounce_ms=10,
    )

    async def scenario() -> None:
        engine.set_value("code", "ok")
        engine.reset()
        await asyncio.sleep(0.03)

    asyncio.run(scenario())
    assert validator.seen == []
    assert engine.field("code") == FieldState(value="initial")
    assert not engine.has_pending("code")


def test_reset_accepts_overrides() -> None:
    engine = _code_engine(_CountingValidator(), validate_on_change=False)
    engine.reset({"code": "ok-2"})
    assert engine.get_values() == {"code": "ok-2"}


def test_listeners_are_notified_until_removed() -> None:
    engine = _code_engine(_CountingValidator(), validate_on_change=False)
    changes: list[str] = []
    remove = engine.add_listener(changes.append)
    engine.set_value("code", "a")
    remove()
    engine.set_value("code", "b")
    assert changes == ["code"]


def test_scoped_validate_all_leaves_other_fields_alone(private_client_values) -> None:
    private_client_values["nif"] = "123456780"
    private_client_values["email"] = "invalido"
    engine = ValidationEngine(private_client_values, REGISTRATION_SCHEMA)

    assert asyncio.run(engine.validate_all(["nif", "phone"])) is False
    assert engine.field("nif").error == "NIF inválido (dígito de controlo incorreto)"
    assert engine.field("phone").is_valid
    email = engine.field("email")
    assert email.error is None
    assert not email.is_valid
    assert not engine.is_form_valid


def test_full_validate_all_marks_every_field(private_client_values) -> None:
    engine = ValidationEngine(private_client_values, REGISTRATION_SCHEMA)
    assert asyncio.run(engine.validate_all()) is True
    assert engine.is_form_valid
    assert all(state.is_valid and state.error is None for state in engine.fields.values())


def test_validate_all_clears_errors_once_fixed(private_client_values) -> None:
    private_client_values["confirm_password"] = "diferente"
    engine = ValidationEngine(private_client_values, REGISTRATION_SCHEMA, validate_on_change=False)

    assert asyncio.run(engine.validate_all()) is False
    assert engine.field("confirm_password").error == "As senhas não coincidem"

    engine.set_value("confirm_password", private_client_values["password"])
    assert asyncio.run(engine.validate_all()) is True
    assert engine.field("confirm_password").error is None


def test_validate_all_supersedes_pending_debounce() -> None:
    validator = _CountingValidator()
    engine = _code_engine(validator, debounce_ms=1000)

    async def scenario() -> bool:
        engine.set_value("code", "ok")
        result = await engine.validate_all()
        assert not engine.has_pending("code")
        return result

    assert asyncio.run(scenario()) is True
    assert validator.seen == ["ok"]
    assert not engine.is_validating


def test_close_cancels_everything() -> None:
    validator = _CountingValidator()
    engine = _code_engine(validator)

    async def scenario() -> None:
        engine.set_value("code", "ok")
        engine.close()
        await asyncio.sleep(0.03)

    asyncio.run(scenario())
    assert validator.seen == []
    assert not engine.field("code").is_validating
