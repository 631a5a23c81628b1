"""Build and send the registration payload for a finished onboarding form.

Submission is the only operation in the onboarding flow that can fail at the
top level. :func:`submit_registration` catches :class:`SubmissionError` once
and converts it into a form-level banner; entered values are never reset.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final

import requests
from pydantic import BaseModel, ConfigDict, Field

import config
from constants.keys import FieldKeys
from core.errors import SubmissionError
from core.schema import has_company
from core.validators import parse_number
from infra.logging import log_event
from utils.i18n import SUBMISSION_FAILED_BANNER, SUBMISSION_SUCCESS_MESSAGE, translate
from wizard.engine import ValidationEngine
from wizard.navigation.router import WizardStateMachine

logger = logging.getLogger(__name__)

PAYLOAD_TYPE: Final[str] = "new-client"
PRIVATE_BUSINESS_TYPE: Final[str] = "Particular - IRS"
DEFAULT_COMPANY_BUSINESS_TYPE: Final[str] = "Empresa"
PRIVATE_ACCOUNTING_REGIME: Final[str] = "simplificada"

INVALID_FORM_BANNER: Final[tuple[str, str]] = (
    "Corrija os campos assinalados antes de submeter.",
    "Fix the highlighted fields before submitting.",
)

Transport = Callable[[dict[str, Any]], None]


class RegistrationPayload(BaseModel):
    """Wire payload accepted by the registration endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    kind: str = Field(PAYLOAD_TYPE, alias="type")
    username: str
    password: str
    name: str
    email: str
    phone: str
    nif: str
    address: str
    postal_code: str = Field(alias="postalCode")
    city: str
    business_type: str = Field(alias="businessType")
    accounting_regime: str = Field(alias="accountingRegime")
    estimated_revenue: str = Field(alias="estimatedRevenue")
    monthly_documents: str = Field(alias="monthlyDocuments")
    observations: str

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase body sent to the backend."""

        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of a submission attempt as shown to the user."""

    success: bool
    payload: RegistrationPayload | None = None
    banner: str | None = None


def _number_text(raw: object) -> str:
    number = parse_number(raw)
    if not number:
        return "0"
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def _company_observations(values: Mapping[str, str]) -> str:
    employees = (values.get(FieldKeys.NUMBER_EMPLOYEES) or "").strip() or "0"
    return (
        f"Tem empresa - Data nascimento: {values.get(FieldKeys.DATE_OF_BIRTH, '')}, "
        f"Empresa: {values.get(FieldKeys.COMPANY_NAME, '')}, "
        f"NIPC: {values.get(FieldKeys.NIPC, '')}, "
        f"CAE: {values.get(FieldKeys.CAE, '')}, "
        f"Forma: {values.get(FieldKeys.LEGAL_FORM, '')}, "
        f"Data constituição: {values.get(FieldKeys.FOUNDING_DATE, '')}, "
        f"IVA: {values.get(FieldKeys.VAT_REGIME, '')}, "
        f"Funcionários: {employees}, "
        f"Relatórios: {values.get(FieldKeys.REPORT_FREQUENCY, '')}"
    )


def build_registration_payload(values: Mapping[str, str]) -> RegistrationPayload:
    """Map the form values onto the registration payload.

    Without a company the business fields fall back to the private client
    defaults, whatever was left in the skipped company steps.
    """

    common = {
        "username": values.get(FieldKeys.USERNAME, "").strip(),
        "password": values.get(FieldKeys.PASSWORD, ""),
        "name": values.get(FieldKeys.NAME, "").strip(),
        "email": values.get(FieldKeys.EMAIL, "").strip(),
        "phone": values.get(FieldKeys.PHONE, "").strip(),
        "nif": values.get(FieldKeys.NIF, "").strip(),
        "address": values.get(FieldKeys.FISCAL_ADDRESS, "").strip(),
        "postal_code": values.get(FieldKeys.FISCAL_POSTAL_CODE, "").strip(),
        "city": values.get(FieldKeys.FISCAL_CITY, "").strip(),
    }
    if has_company(values):
        return RegistrationPayload(
            **common,
            business_type=values.get(FieldKeys.BUSINESS_ACTIVITY, "").strip() or DEFAULT_COMPANY_BUSINESS_TYPE,
            accounting_regime=values.get(FieldKeys.ACCOUNTING_REGIME, ""),
            estimated_revenue=_number_text(values.get(FieldKeys.ESTIMATED_REVENUE)),
            monthly_documents=_number_text(values.get(FieldKeys.MONTHLY_INVOICES)),
            observations=_company_observations(values),
        )
    return RegistrationPayload(
        **common,
        business_type=PRIVATE_BUSINESS_TYPE,
        accounting_regime=PRIVATE_ACCOUNTING_REGIME,
        estimated_revenue="0",
        monthly_documents="0",
        observations=(
            f"Particular/IRS - Data nascimento: {values.get(FieldKeys.DATE_OF_BIRTH, '')}, "
            "Sem empresa registada"
        ),
    )


def _error_detail(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        text = (response.text or "").strip()
        return text or None
    if isinstance(body, Mapping):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def post_registration(
    payload: Mapping[str, Any],
    *,
    url: str | None = None,
    timeout: float | None = None,
) -> None:
    """POST ``payload`` to the registration endpoint.

    Raises:
        SubmissionError: The endpoint was unreachable or answered non-2xx.
    """

    target = url or config.REGISTER_URL
    try:
        response = requests.post(
            target,
            json=dict(payload),
            timeout=timeout or config.REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.warning("Registration request to %s failed: %s", target, exc)
        raise SubmissionError() from exc
    status = response.status_code
    if not 200 <= status < 300:
        detail = _error_detail(response)
        logger.warning("Registration rejected with status %s", status)
        raise SubmissionError(status_code=status, detail=detail)


async def submit_registration(
    wizard: WizardStateMachine,
    engine: ValidationEngine,
    *,
    transport: Transport = post_registration,
    lang: str | None = None,
) -> SubmissionOutcome:
    """Validate the whole form and send it from the review step.

    A backend failure becomes the banner of the returned outcome; the form
    stays on the review step with every value intact.
    """

    code = lang or engine.lang
    if not wizard.is_terminal:
        logger.debug("Submission requested outside the review step (%s)", wizard.current_key)
        return SubmissionOutcome(success=False)
    if not await engine.validate_all():
        invalid = sorted(name for name, state in engine.fields.items() if state.error)
        log_event("info", event="submission.invalid", step=wizard.current_key, payload={"invalid": invalid})
        return SubmissionOutcome(success=False, banner=translate(INVALID_FORM_BANNER, code))

    payload = build_registration_payload(engine.get_values())
    body = payload.to_wire()
    log_event("info", event="submission.sent", step=wizard.current_key, payload=body)
    try:
        await asyncio.to_thread(transport, body)
    except SubmissionError as exc:
        log_event(
            "warning",
            event="submission.failed",
            step=wizard.current_key,
            payload={"status": exc.status_code, "detail": exc.detail},
        )
        return SubmissionOutcome(
            success=False,
            payload=payload,
            banner=exc.detail or translate(SUBMISSION_FAILED_BANNER, code),
        )
    log_event("info", event="submission.accepted", step=wizard.current_key)
    return SubmissionOutcome(success=True, payload=payload, banner=translate(SUBMISSION_SUCCESS_MESSAGE, code))


__all__ = [
    "RegistrationPayload",
    "SubmissionOutcome",
    "Transport",
    "build_registration_payload",
    "post_registration",
    "submit_registration",
]
