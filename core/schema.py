"""Rule-based form schema with cross-field checks.

A :class:`RuleSchema` maps canonical field names to a validator and a
requiredness rule. Validation never raises: callers get back a list of
:class:`FieldFailure` entries and decide how to surface them.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, NamedTuple

from constants.keys import FieldKeys
from core.formatting import (
    ACCOUNTING_REGIME_LABELS,
    HAS_COMPANY_LABELS,
    LEGAL_FORM_LABELS,
    REPORT_FREQUENCY_LABELS,
    VAT_REGIME_LABELS,
)
from core.validators import (
    ErrorCode,
    ErrorKind,
    FieldValidator,
    ValidationResult,
    choice_validator,
    number_validator,
    required_failure,
    text_validator,
    validate_birth_date,
    validate_business_activity,
    validate_cae,
    validate_email,
    validate_founding_date,
    validate_name,
    validate_nif,
    validate_nipc,
    validate_password,
    validate_phone,
    validate_postal_code,
    validate_username,
)
from core.types import FormValues, LocalizedText

logger = logging.getLogger(__name__)


class FieldFailure(NamedTuple):
    """A single schema failure attributed to ``field``."""

    field: str
    message: LocalizedText
    kind: ErrorKind
    code: ErrorCode | None = None


@dataclass(frozen=True)
class FieldRule:
    """Validator plus requiredness for one canonical field.

    A field with ``required_when`` is only checked while the predicate holds;
    otherwise any value it still carries is ignored.
    """

    validator: FieldValidator
    label: LocalizedText
    required: bool = True
    required_when: Callable[[FormValues], bool] | None = None

    def is_required(self, values: FormValues) -> bool:
        if self.required_when is not None:
            return bool(self.required_when(values))
        return self.required


@dataclass(frozen=True)
class CrossFieldCheck:
    """Check spanning several fields, reported on ``field`` only."""

    field: str
    check: Callable[[FormValues], LocalizedText | None]


def is_blank(value: object) -> bool:
    """Return ``True`` when ``value`` should be treated as missing."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


async def run_validator(validator: FieldValidator, value: str) -> ValidationResult:
    """Call ``validator`` and await its result when it is asynchronous."""

    result = validator(value)
    if inspect.isawaitable(result):
        result = await result
    return result


class RuleSchema:
    """Holistic schema evaluated against a snapshot of all form values."""

    def __init__(
        self,
        rules: Mapping[str, FieldRule],
        cross_checks: Sequence[CrossFieldCheck] = (),
    ) -> None:
        self._rules: Mapping[str, FieldRule] = MappingProxyType(dict(rules))
        self._cross_checks: tuple[CrossFieldCheck, ...] = tuple(cross_checks)

    @property
    def fields(self) -> tuple[str, ...]:
        ordered = list(self._rules)
        for check in self._cross_checks:
            if check.field not in self._rules:
                ordered.append(check.field)
        return tuple(ordered)

    def rule(self, field: str) -> FieldRule | None:
        return self._rules.get(field)

    def is_required(self, field: str, values: FormValues) -> bool:
        rule = self._rules.get(field)
        return rule is not None and rule.is_required(values)

    async def validate_field(self, field: str, values: FormValues) -> ValidationResult:
        """Validate ``field`` using the full ``values`` snapshot for context."""

        value = values.get(field, "")
        rule = self._rules.get(field)
        result = ValidationResult(is_valid=True)
        if rule is not None:
            if rule.required_when is not None and not rule.required_when(values):
                return result
            if is_blank(value):
                if rule.is_required(values):
                    return required_failure(rule.label)
                return result
            result = await run_validator(rule.validator, value)
            if not result.is_valid:
                return result
        for check in self._cross_checks:
            if check.field != field:
                continue
            message = check.check(values)
            if message is not None:
                return ValidationResult(
                    is_valid=False,
                    error=message,
                    kind=ErrorKind.CROSS_FIELD,
                    code=ErrorCode.MISMATCH,
                )
        return result

    async def validate(
        self,
        values: FormValues,
        fields: Iterable[str] | None = None,
    ) -> list[FieldFailure]:
        """Return every failure for ``fields`` (all schema fields by default)."""

        scope = self.fields if fields is None else tuple(dict.fromkeys(fields))
        failures: list[FieldFailure] = []
        for field in scope:
            result = await self.validate_field(field, values)
            if result.is_valid:
                continue
            message = result.error or ("Valor inválido", "Invalid value")
            failures.append(FieldFailure(field, message, result.kind or ErrorKind.FORMAT, result.code))
        logger.debug("Schema validation of %d fields produced %d failures", len(scope), len(failures))
        return failures


def has_company(values: FormValues) -> bool:
    """Return ``True`` when the client declared business activity."""

    return values.get(FieldKeys.HAS_COMPANY) == "yes"


def has_no_company(values: FormValues) -> bool:
    """Return ``True`` when the client explicitly declared no business activity."""

    return values.get(FieldKeys.HAS_COMPANY) == "no"


def _passwords_match(values: FormValues) -> LocalizedText | None:
    if values.get(FieldKeys.PASSWORD, "") != values.get(FieldKeys.CONFIRM_PASSWORD, ""):
        return ("As senhas não coincidem", "Passwords do not match")
    return None


def _company_rule(validator: FieldValidator, label: LocalizedText) -> FieldRule:
    return FieldRule(validator, label, required_when=has_company)


LEGAL_FORMS: Final[tuple[str, ...]] = tuple(LEGAL_FORM_LABELS)

REGISTRATION_RULES: Final[Mapping[str, FieldRule]] = MappingProxyType(
    {
        FieldKeys.NAME: FieldRule(validate_name, ("Nome", "Name")),
        FieldKeys.EMAIL: FieldRule(validate_email, ("Email", "Email")),
        FieldKeys.PHONE: FieldRule(validate_phone, ("Telefone", "Phone")),
        FieldKeys.NIF: FieldRule(validate_nif, ("NIF", "NIF")),
        FieldKeys.DATE_OF_BIRTH: FieldRule(validate_birth_date, ("Data de nascimento", "Date of birth")),
        FieldKeys.FISCAL_ADDRESS: FieldRule(
            text_validator(("Morada fiscal", "Fiscal address"), min_length=5, max_length=200),
            ("Morada fiscal", "Fiscal address"),
        ),
        FieldKeys.FISCAL_POSTAL_CODE: FieldRule(validate_postal_code, ("Código postal", "Postal code")),
        FieldKeys.FISCAL_CITY: FieldRule(
            text_validator(("Cidade", "City"), min_length=2, max_length=50),
            ("Cidade", "City"),
        ),
        FieldKeys.HAS_COMPANY: FieldRule(
            choice_validator(("Atividade empresarial", "Business activity"), HAS_COMPANY_LABELS),
            ("Atividade empresarial", "Business activity"),
        ),
        FieldKeys.COMPANY_NAME: _company_rule(
            text_validator(("Nome da empresa", "Company name"), min_length=2, max_length=100),
            ("Nome da empresa", "Company name"),
        ),
        FieldKeys.NIPC: _company_rule(validate_nipc, ("NIPC", "NIPC")),
        FieldKeys.CAE: _company_rule(validate_cae, ("CAE", "CAE")),
        FieldKeys.LEGAL_FORM: _company_rule(
            choice_validator(("Forma jurídica", "Legal form"), LEGAL_FORMS),
            ("Forma jurídica", "Legal form"),
        ),
        FieldKeys.FOUNDING_DATE: _company_rule(validate_founding_date, ("Data de constituição", "Founding date")),
        FieldKeys.BUSINESS_ACTIVITY: _company_rule(
            validate_business_activity,
            ("Descrição da atividade", "Business activity"),
        ),
        FieldKeys.ESTIMATED_REVENUE: _company_rule(
            number_validator(("Faturação estimada", "Estimated revenue")),
            ("Faturação estimada", "Estimated revenue"),
        ),
        FieldKeys.MONTHLY_INVOICES: _company_rule(
            number_validator(("Número de faturas", "Monthly invoices")),
            ("Número de faturas", "Monthly invoices"),
        ),
        FieldKeys.NUMBER_EMPLOYEES: FieldRule(
            number_validator(("Número de funcionários", "Number of employees")),
            ("Número de funcionários", "Number of employees"),
            required=False,
        ),
        FieldKeys.ACCOUNTING_REGIME: _company_rule(
            choice_validator(("Regime de contabilidade", "Accounting regime"), ACCOUNTING_REGIME_LABELS),
            ("Regime de contabilidade", "Accounting regime"),
        ),
        FieldKeys.VAT_REGIME: _company_rule(
            choice_validator(("Regime de IVA", "VAT regime"), VAT_REGIME_LABELS),
            ("Regime de IVA", "VAT regime"),
        ),
        FieldKeys.REPORT_FREQUENCY: _company_rule(
            choice_validator(("Frequência de relatórios", "Report frequency"), REPORT_FREQUENCY_LABELS),
            ("Frequência de relatórios", "Report frequency"),
        ),
        FieldKeys.USERNAME: FieldRule(validate_username, ("Username", "Username")),
        FieldKeys.PASSWORD: FieldRule(validate_password, ("Senha", "Password")),
        FieldKeys.CONFIRM_PASSWORD: FieldRule(
            text_validator(("Confirmação da senha", "Password confirmation")),
            ("Confirmação da senha", "Password confirmation"),
        ),
    }
)

REGISTRATION_SCHEMA: Final[RuleSchema] = RuleSchema(
    REGISTRATION_RULES,
    cross_checks=(CrossFieldCheck(FieldKeys.CONFIRM_PASSWORD, _passwords_match),),
)


__all__ = [
    "CrossFieldCheck",
    "FieldFailure",
    "FieldRule",
    "LEGAL_FORMS",
    "REGISTRATION_RULES",
    "REGISTRATION_SCHEMA",
    "RuleSchema",
    "has_company",
    "has_no_company",
    "is_blank",
    "run_validator",
]
