from __future__ import annotations

import asyncio

from core.schema import (
    REGISTRATION_SCHEMA,
    CrossFieldCheck,
    FieldRule,
    RuleSchema,
    has_company,
    has_no_company,
)
from core.validators import ErrorCode, ErrorKind, ValidationResult, validate_nif


def _failures(values, fields=None):
    return asyncio.run(REGISTRATION_SCHEMA.validate(values, fields))


def test_complete_private_client_passes(private_client_values) -> None:
    assert _failures(private_client_values) == []


def test_complete_company_client_passes(company_client_values) -> None:
    assert _failures(company_client_values) == []


def test_company_fields_are_only_required_with_a_company(private_client_values) -> None:
    private_client_values["company_name"] = ""
    assert _failures(private_client_values, ["company_name", "nipc"]) == []

    private_client_values["has_company"] = "yes"
    failures = _failures(private_client_values, ["company_name", "nipc"])
    assert [failure.field for failure in failures] == ["company_name", "nipc"]
    assert all(failure.kind is ErrorKind.REQUIRED for failure in failures)
    assert failures[0].message == ("Nome da empresa é obrigatório", "Company name is required")


def test_company_fields_are_not_validated_without_a_company(private_client_values) -> None:
    private_client_values.update({"nipc": "123", "cae": "abc", "estimated_revenue": "muito"})
    assert _failures(private_client_values) == []

    private_client_values["has_company"] = "yes"
    failing = {failure.field for failure in _failures(private_client_values, ["nipc", "cae", "estimated_revenue"])}
    assert failing == {"nipc", "cae", "estimated_revenue"}


def test_optional_employee_count_may_stay_blank(company_client_values) -> None:
    company_client_values["number_employees"] = ""
    assert _failures(company_client_values, ["number_employees"]) == []


def test_password_mismatch_is_reported_on_confirmation(private_client_values) -> None:
    private_client_values["confirm_password"] = "outra_senha"
    failures = _failures(private_client_values)
    assert len(failures) == 1
    failure = failures[0]
    assert failure.field == "confirm_password"
    assert failure.kind is ErrorKind.CROSS_FIELD
    assert failure.code is ErrorCode.MISMATCH
    assert failure.message[0] == "As senhas não coincidem"


def test_format_failure_carries_reason_code(private_client_values) -> None:
    private_client_values["nif"] = "123456780"
    failures = _failures(private_client_values, ["nif"])
    assert [(f.field, f.kind, f.code) for f in failures] == [
        ("nif", ErrorKind.FORMAT, ErrorCode.INVALID_CHECKSUM)
    ]


def test_unknown_choice_is_rejected(company_client_values) -> None:
    company_client_values["vat_regime"] = "especial"
    failures = _failures(company_client_values, ["vat_regime"])
    assert [failure.field for failure in failures] == ["vat_regime"]


def test_has_company_predicates() -> None:
    assert has_company({"has_company": "yes"})
    assert not has_company({"has_company": "no"})
    assert has_no_company({"has_company": "no"})
    # An unanswered question skips nothing.
    assert not has_no_company({})


def test_schema_awaits_async_validators() -> None:
    calls: list[str] = []

    async def slow_nif(raw: str) -> ValidationResult:
        calls.append(raw)
        await asyncio.sleep(0)
        return validate_nif(raw)

    schema = RuleSchema({"nif": FieldRule(slow_nif, ("NIF", "NIF"))})
    failures = asyncio.run(schema.validate({"nif": "123456780"}))
    assert calls == ["123456780"]
    assert failures[0].code is ErrorCode.INVALID_CHECKSUM


def test_cross_field_check_runs_without_a_rule() -> None:
    def _agree(values):
        if values.get("terms") != "accepted":
            return ("Aceite os termos", "Accept the terms")
        return None

    schema = RuleSchema({}, cross_checks=(CrossFieldCheck("terms", _agree),))
    assert schema.fields == ("terms",)
    failures = asyncio.run(schema.validate({"terms": ""}))
    assert failures[0].kind is ErrorKind.CROSS_FIELD
    assert asyncio.run(schema.validate({"terms": "accepted"})) == []
