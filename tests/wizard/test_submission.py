from __future__ import annotations

import asyncio
from typing import Any

import pytest
import requests

from core.errors import SubmissionError
from core.schema import REGISTRATION_SCHEMA
from wizard import submission
from wizard.engine import ValidationEngine
from wizard.navigation import WizardStateMachine
from wizard.submission import (
    build_registration_payload,
    post_registration,
    submit_registration,
)


class _StubResponse:
    def __init__(self, status_code: int, body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no json")
        return self._body


def _at_review(values: dict[str, str]) -> tuple[WizardStateMachine, ValidationEngine]:
    engine = ValidationEngine(values, REGISTRATION_SCHEMA, validate_on_change=False)
    machine = WizardStateMachine(engine)
    while not machine.is_terminal:
        assert asyncio.run(machine.next())
    return machine, engine


def test_private_client_payload_ignores_stale_company_fields(private_client_values) -> None:
    private_client_values.update(
        {
            "company_name": "Antiga Lda",
            "business_activity": "Restauração e bebidas",
            "estimated_revenue": "80000",
            "monthly_invoices": "40",
            "accounting_regime": "organizada",
        }
    )
    wire = build_registration_payload(private_client_values).to_wire()
    assert wire == {
        "type": "new-client",
        "username": "maria_silva",
        "password": "segredo1",
        "name": "Maria Silva",
        "email": "maria.silva@cliente.pt",
        "phone": "912345678",
        "nif": "123456789",
        "address": "Rua das Flores 10",
        "postalCode": "1000-001",
        "city": "Lisboa",
        "businessType": "Particular - IRS",
        "accountingRegime": "simplificada",
        "estimatedRevenue": "0",
        "monthlyDocuments": "0",
        "observations": "Particular/IRS - Data nascimento: 1990-05-17, Sem empresa registada",
    }


def test_company_payload(company_client_values) -> None:
    payload = build_registration_payload(company_client_values)
    assert payload.business_type == "Consultoria informática"
    assert payload.accounting_regime == "organizada"
    assert payload.estimated_revenue == "50000"
    assert payload.monthly_documents == "25"
    assert payload.observations == (
        "Tem empresa - Data nascimento: 1990-05-17, Empresa: Silva & Filhos, NIPC: 500000000, "
        "CAE: 62010, Forma: Unipessoal, Data constituição: 2015-03-01, IVA: normal, "
        "Funcionários: 3, Relatórios: trimestral"
    )


def test_company_without_activity_description_uses_default(company_client_values) -> None:
    company_client_values["business_activity"] = ""
    company_client_values["estimated_revenue"] = "1234,5"
    payload = build_registration_payload(company_client_values)
    assert payload.business_type == "Empresa"
    assert payload.estimated_revenue == "1234.5"


def test_post_registration_accepts_2xx(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def fake_post(url: str, json: dict[str, Any], timeout: float) -> _StubResponse:
        calls.append({"url": url, "json": json, "timeout": timeout})
        return _StubResponse(201, {"id": 7})

    monkeypatch.setattr("wizard.submission.requests.post", fake_post)
    post_registration({"username": "maria_silva"}, url="http://backend/register", timeout=2.5)
    assert calls == [{"url": "http://backend/register", "json": {"username": "maria_silva"}, "timeout": 2.5}]


def test_post_registration_rejection_carries_status_and_detail(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "wizard.submission.requests.post",
        lambda *_, **__: _StubResponse(409, {"message": "Username já existe"}),
    )
    with pytest.raises(SubmissionError) as excinfo:
        post_registration({}, url="http://backend/register")
    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == "Username já existe"


def test_post_registration_wraps_transport_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*_: Any, **__: Any) -> _StubResponse:
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("wizard.submission.requests.post", fake_post)
    with pytest.raises(SubmissionError) as excinfo:
        post_registration({}, url="http://backend/register")
    assert excinfo.value.status_code is None
    assert excinfo.value.detail is None


def test_plain_text_error_body_becomes_detail(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "wizard.submission.requests.post",
        lambda *_, **__: _StubResponse(500, None, text="Internal error"),
    )
    with pytest.raises(SubmissionError) as excinfo:
        post_registration({}, url="http://backend/register")
    assert excinfo.value.detail == "Internal error"


def test_end_to_end_private_submission(private_client_values, caplog) -> None:
    machine, engine = _at_review(private_client_values)
    sent: list[dict[str, Any]] = []

    with caplog.at_level("INFO", logger="onboarding"):
        outcome = asyncio.run(submit_registration(machine, engine, transport=sent.append))

    assert outcome.success
    assert outcome.banner == submission.translate(submission.SUBMISSION_SUCCESS_MESSAGE, "pt")
    assert len(sent) == 1
    assert sent[0]["businessType"] == "Particular - IRS"
    assert sent[0]["accountingRegime"] == "simplificada"
    assert sent[0]["estimatedRevenue"] == "0"
    assert "submission.sent" in caplog.text
    assert "[redacted]" in caplog.text
    assert "segredo1" not in caplog.text


def test_private_submission_ignores_stale_invalid_company_fields(private_client_values) -> None:
    machine, engine = _at_review(private_client_values)
    engine.set_value("nipc", "123")
    engine.set_value("estimated_revenue", "muito")
    sent: list[dict[str, Any]] = []

    outcome = asyncio.run(submit_registration(machine, engine, transport=sent.append))

    assert outcome.success
    assert len(sent) == 1
    assert sent[0]["estimatedRevenue"] == "0"
    assert "123" not in sent[0]["observations"]
    assert engine.field("nipc").error is None


def test_unreachable_backend_shows_localized_banner(private_client_values, monkeypatch, caplog) -> None:
    def fake_post(*_: Any, **__: Any) -> _StubResponse:
        raise requests.ConnectionError("HTTPConnectionPool(host='internal', port=8080): Max retries exceeded")

    monkeypatch.setattr("wizard.submission.requests.post", fake_post)
    machine, engine = _at_review(private_client_values)

    with caplog.at_level("WARNING", logger="wizard.submission"):
        outcome = asyncio.run(submit_registration(machine, engine, lang="en"))

    assert not outcome.success
    assert outcome.banner == "Registration failed. Please try again."
    assert "Max retries exceeded" in caplog.text


def test_backend_failure_becomes_banner_and_keeps_values(private_client_values) -> None:
    machine, engine = _at_review(private_client_values)
    before = engine.get_values()

    def failing_transport(_: dict[str, Any]) -> None:
        raise SubmissionError(status_code=503)

    outcome = asyncio.run(submit_registration(machine, engine, transport=failing_transport, lang="en"))
    assert not outcome.success
    assert outcome.banner == "Registration failed. Please try again."
    assert outcome.payload is not None
    assert engine.get_values() == before
    assert machine.is_terminal


def test_backend_detail_is_shown_when_available(private_client_values) -> None:
    machine, engine = _at_review(private_client_values)

    def failing_transport(_: dict[str, Any]) -> None:
        raise SubmissionError(status_code=409, detail="Username já existe")

    outcome = asyncio.run(submit_registration(machine, engine, transport=failing_transport))
    assert outcome.banner == "Username já existe"


def test_submission_only_from_review_step(private_client_values) -> None:
    engine = ValidationEngine(private_client_values, REGISTRATION_SCHEMA, validate_on_change=False)
    machine = WizardStateMachine(engine)
    sent: list[dict[str, Any]] = []
    outcome = asyncio.run(submit_registration(machine, engine, transport=sent.append))
    assert not outcome.success
    assert outcome.banner is None
    assert sent == []


def test_invalid_form_is_not_sent(private_client_values) -> None:
    machine, engine = _at_review(private_client_values)
    engine.set_value("confirm_password", "diferente")
    sent: list[dict[str, Any]] = []
    outcome = asyncio.run(submit_registration(machine, engine, transport=sent.append))
    assert not outcome.success
    assert outcome.payload is None
    assert outcome.banner == "Corrija os campos assinalados antes de submeter."
    assert sent == []
    assert engine.field("confirm_password").error == "As senhas não coincidem"
