"""Registry for onboarding wizard steps, metadata, and canonical order."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from constants.keys import FieldKeys
from core.errors import UnknownStepError
from core.schema import has_no_company
from wizard.types import FormValues, LocalizedText, StepPredicate

REVIEW_STEP_KEY: Final[str] = "review"


@dataclass(frozen=True)
class StepDefinition:
    """Metadata and gating contract for an individual wizard step."""

    key: str
    label: LocalizedText
    description: LocalizedText
    required_fields: tuple[str, ...] = ()
    skip_when: StepPredicate | None = None

    def label_for(self, lang: str) -> str:
        """Return the localised label for the step."""

        return self.label[1] if lang.lower().startswith("en") else self.label[0]

    def is_skipped(self, values: FormValues) -> bool:
        """Evaluate the skip predicate against the current ``values``."""

        return self.skip_when is not None and bool(self.skip_when(values))


PERSONAL_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.NAME,
    FieldKeys.EMAIL,
    FieldKeys.PHONE,
    FieldKeys.NIF,
    FieldKeys.DATE_OF_BIRTH,
)
ADDRESS_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.FISCAL_ADDRESS,
    FieldKeys.FISCAL_POSTAL_CODE,
    FieldKeys.FISCAL_CITY,
    FieldKeys.HAS_COMPANY,
)
COMPANY_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.COMPANY_NAME,
    FieldKeys.NIPC,
    FieldKeys.CAE,
    FieldKeys.LEGAL_FORM,
    FieldKeys.FOUNDING_DATE,
)
BUSINESS_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.BUSINESS_ACTIVITY,
    FieldKeys.ESTIMATED_REVENUE,
    FieldKeys.MONTHLY_INVOICES,
)
REGIME_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.ACCOUNTING_REGIME,
    FieldKeys.VAT_REGIME,
    FieldKeys.REPORT_FREQUENCY,
)
CREDENTIAL_FIELDS: Final[tuple[str, ...]] = (
    FieldKeys.USERNAME,
    FieldKeys.PASSWORD,
    FieldKeys.CONFIRM_PASSWORD,
)


ONBOARDING_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(
        key="personal",
        label=("Dados Pessoais", "Personal data"),
        description=("Nome, email, telefone e identificação", "Name, email, phone and identification"),
        required_fields=PERSONAL_FIELDS,
    ),
    StepDefinition(
        key="address",
        label=("Morada Fiscal", "Fiscal address"),
        description=("Endereço para correspondência oficial", "Address for official correspondence"),
        required_fields=ADDRESS_FIELDS,
    ),
    StepDefinition(
        key="company",
        label=("Dados da Empresa", "Company data"),
        description=("Nome, NIPC, CAE e forma jurídica", "Name, NIPC, CAE and legal form"),
        required_fields=COMPANY_FIELDS,
        skip_when=has_no_company,
    ),
    StepDefinition(
        key="business",
        label=("Atividade Empresarial", "Business activity"),
        description=(
            "Descrição da atividade e dados operacionais",
            "Activity description and operational data",
        ),
        required_fields=BUSINESS_FIELDS,
        skip_when=has_no_company,
    ),
    StepDefinition(
        key="regimes",
        label=("Regimes Fiscais", "Fiscal regimes"),
        description=(
            "Contabilidade, IVA e frequência de relatórios",
            "Accounting, VAT and reporting frequency",
        ),
        required_fields=REGIME_FIELDS,
        skip_when=has_no_company,
    ),
    StepDefinition(
        key="credentials",
        label=("Credenciais", "Credentials"),
        description=("Username e password de acesso", "Username and password"),
        required_fields=CREDENTIAL_FIELDS,
    ),
    StepDefinition(
        key=REVIEW_STEP_KEY,
        label=("Revisão", "Review"),
        description=("Confirme todos os dados antes de submeter", "Check everything before submitting"),
    ),
)


def step_keys(steps: Sequence[StepDefinition] = ONBOARDING_STEPS) -> tuple[str, ...]:
    """Return wizard step keys in canonical order."""

    return tuple(step.key for step in steps)


def get_step(key: str, steps: Sequence[StepDefinition] = ONBOARDING_STEPS) -> StepDefinition:
    """Lookup step metadata by key."""

    step = next((step for step in steps if step.key == key), None)
    if step is None:
        raise UnknownStepError(key)
    return step


def resolve_active_step_keys(
    values: Mapping[str, str],
    steps: Sequence[StepDefinition] = ONBOARDING_STEPS,
) -> tuple[str, ...]:
    """Return the keys of steps that are not skipped under ``values``."""

    return tuple(step.key for step in steps if not step.is_skipped(values))


def validate_step_sequence(steps: Sequence[StepDefinition]) -> None:
    """Reject empty sequences and duplicate step keys."""

    if not steps:
        raise ValueError("A wizard needs at least one step")
    keys = step_keys(steps)
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise ValueError(f"Duplicate wizard step keys: {', '.join(duplicates)}")


__all__ = [
    "ONBOARDING_STEPS",
    "REVIEW_STEP_KEY",
    "StepDefinition",
    "get_step",
    "resolve_active_step_keys",
    "step_keys",
    "validate_step_sequence",
]
