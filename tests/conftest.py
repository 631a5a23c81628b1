from pathlib import Path
import sys
from dataclasses import dataclass

import streamlit as st

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import config


@pytest.fixture(autouse=True)
def _pin_onboarding_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep validation bounds deterministic regardless of the local ``.env``."""

    monkeypatch.setattr(config, "DEBOUNCE_MS", 300)
    monkeypatch.setattr(config, "VALIDATE_ON_CHANGE", True)
    monkeypatch.setattr(config, "VALIDATE_ON_BLUR", True)
    monkeypatch.setattr(config, "DEFAULT_LANG", "pt")
    monkeypatch.setattr(config, "USERNAME_MIN_LENGTH", 3)
    monkeypatch.setattr(config, "USERNAME_MAX_LENGTH", 50)
    monkeypatch.setattr(config, "PASSWORD_MIN_LENGTH", 6)
    monkeypatch.setattr(config, "MINIMUM_AGE", 18)
    yield


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


PRIVATE_CLIENT_VALUES: dict[str, str] = {
    "name": "Maria Silva",
    "email": "maria.silva@cliente.pt",
    "phone": "912345678",
    "nif": "123456789",
    "date_of_birth": "1990-05-17",
    "fiscal_address": "Rua das Flores 10",
    "fiscal_postal_code": "1000-001",
    "fiscal_city": "Lisboa",
    "has_company": "no",
    "company_name": "",
    "nipc": "",
    "cae": "",
    "legal_form": "Lda",
    "founding_date": "",
    "business_activity": "",
    "estimated_revenue": "",
    "monthly_invoices": "",
    "number_employees": "",
    "accounting_regime": "simplificada",
    "vat_regime": "isento_art53",
    "report_frequency": "mensal",
    "username": "maria_silva",
    "password": "segredo1",
    "confirm_password": "segredo1",
}

COMPANY_VALUES: dict[str, str] = {
    "has_company": "yes",
    "company_name": "Silva & Filhos",
    "nipc": "500000000",
    "cae": "62010",
    "legal_form": "Unipessoal",
    "founding_date": "2015-03-01",
    "business_activity": "Consultoria informática",
    "estimated_revenue": "50000",
    "monthly_invoices": "25",
    "number_employees": "3",
    "accounting_regime": "organizada",
    "vat_regime": "normal",
    "report_frequency": "trimestral",
}


@pytest.fixture
def private_client_values() -> dict[str, str]:
    """Complete, valid form values for a client without a company."""

    return dict(PRIVATE_CLIENT_VALUES)


@pytest.fixture
def company_client_values() -> dict[str, str]:
    """Complete, valid form values for a client with a registered company."""

    return {**PRIVATE_CLIENT_VALUES, **COMPANY_VALUES}
