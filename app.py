# app.py: client onboarding form (Streamlit entrypoint)
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
import sys
from typing import Final

import streamlit as st

APP_ROOT = Path(__file__).resolve().parent
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

from constants.keys import FieldKeys, StateKeys  # noqa: E402
from core.formatting import (  # noqa: E402
    ACCOUNTING_REGIME_LABELS,
    HAS_COMPANY_LABELS,
    LEGAL_FORM_LABELS,
    REPORT_FREQUENCY_LABELS,
    VAT_REGIME_LABELS,
)
from core.key_resolver import resolve_fields  # noqa: E402
from core.types import LocalizedText  # noqa: E402
from state import ensure_state, reset_state  # noqa: E402
from utils.i18n import tr, translate  # noqa: E402
from wizard.engine import ValidationEngine  # noqa: E402
from wizard.navigation.router import WizardStateMachine  # noqa: E402
from wizard.submission import build_registration_payload, submit_registration  # noqa: E402

logging.basicConfig(level=logging.INFO)

st.set_page_config(page_title="Registo de cliente", page_icon="🧾", layout="centered")

ensure_state()

FIELD_LABELS: Final[Mapping[str, LocalizedText]] = {
    FieldKeys.NAME: ("Nome completo", "Full name"),
    FieldKeys.EMAIL: ("Email", "Email"),
    FieldKeys.PHONE: ("Telefone", "Phone"),
    FieldKeys.NIF: ("NIF", "NIF"),
    FieldKeys.DATE_OF_BIRTH: ("Data de nascimento (AAAA-MM-DD)", "Date of birth (YYYY-MM-DD)"),
    FieldKeys.FISCAL_ADDRESS: ("Morada fiscal", "Fiscal address"),
    FieldKeys.FISCAL_POSTAL_CODE: ("Código postal", "Postal code"),
    FieldKeys.FISCAL_CITY: ("Cidade", "City"),
    FieldKeys.HAS_COMPANY: ("Tem empresa registada?", "Do you have a registered company?"),
    FieldKeys.COMPANY_NAME: ("Nome da empresa", "Company name"),
    FieldKeys.NIPC: ("NIPC", "NIPC"),
    FieldKeys.CAE: ("CAE", "CAE"),
    FieldKeys.LEGAL_FORM: ("Forma jurídica", "Legal form"),
    FieldKeys.FOUNDING_DATE: ("Data de constituição (AAAA-MM-DD)", "Founding date (YYYY-MM-DD)"),
    FieldKeys.BUSINESS_ACTIVITY: ("Descrição da atividade", "Business activity"),
    FieldKeys.ESTIMATED_REVENUE: ("Faturação anual estimada (€)", "Estimated yearly revenue (€)"),
    FieldKeys.MONTHLY_INVOICES: ("Faturas por mês", "Invoices per month"),
    FieldKeys.NUMBER_EMPLOYEES: ("Número de funcionários", "Number of employees"),
    FieldKeys.ACCOUNTING_REGIME: ("Regime de contabilidade", "Accounting regime"),
    FieldKeys.VAT_REGIME: ("Regime de IVA", "VAT regime"),
    FieldKeys.REPORT_FREQUENCY: ("Frequência de relatórios", "Report frequency"),
    FieldKeys.USERNAME: ("Username", "Username"),
    FieldKeys.PASSWORD: ("Senha", "Password"),
    FieldKeys.CONFIRM_PASSWORD: ("Confirmar senha", "Confirm password"),
}

CHOICE_FIELDS: Final[Mapping[str, Mapping[str, LocalizedText]]] = {
    FieldKeys.HAS_COMPANY: HAS_COMPANY_LABELS,
    FieldKeys.LEGAL_FORM: LEGAL_FORM_LABELS,
    FieldKeys.ACCOUNTING_REGIME: ACCOUNTING_REGIME_LABELS,
    FieldKeys.VAT_REGIME: VAT_REGIME_LABELS,
    FieldKeys.REPORT_FREQUENCY: REPORT_FREQUENCY_LABELS,
}

SECRET_FIELDS: Final[frozenset[str]] = frozenset({FieldKeys.PASSWORD, FieldKeys.CONFIRM_PASSWORD})

# The business step also asks for the optional employee count.
EXTRA_STEP_FIELDS: Final[Mapping[str, tuple[str, ...]]] = {
    "business": (FieldKeys.NUMBER_EMPLOYEES,),
}

REVIEW_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "email",
    "phone",
    "nif",
    "date_of_birth",
    "address",
    "postal_code",
    "city",
    "has_company",
    "company_name",
    "nipc",
    "legal_form",
    "founding_date",
    "business_type",
    "estimated_revenue",
    "monthly_documents",
    "number_employees",
    "accounting_regime",
    "vat_regime",
    "report_frequency",
)


def _engine() -> ValidationEngine:
    return st.session_state[StateKeys.ENGINE]


def _wizard() -> WizardStateMachine:
    return st.session_state[StateKeys.WIZARD]


def _widget_key(name: str) -> str:
    return f"onboarding.input.{name}"


def _on_field_change(name: str) -> None:
    engine = _engine()
    engine.set_value(name, st.session_state.get(_widget_key(name), ""))
    asyncio.run(engine.blur(name))


def _render_field(name: str) -> None:
    engine = _engine()
    lang = st.session_state[StateKeys.LANG]
    state = engine.field(name)
    label = translate(FIELD_LABELS.get(name, (name, name)), lang)
    key = _widget_key(name)
    labels = CHOICE_FIELDS.get(name)
    if labels is not None:
        options = list(labels)
        index = options.index(state.value) if state.value in options else 0
        st.selectbox(
            label,
            options,
            index=index,
            key=key,
            format_func=lambda option: translate(labels[option], lang),
            on_change=_on_field_change,
            args=(name,),
        )
    else:
        st.text_input(
            label,
            value=state.value,
            key=key,
            type="password" if name in SECRET_FIELDS else "default",
            on_change=_on_field_change,
            args=(name,),
        )
    if state.error and state.is_touched:
        st.caption(f":red[{state.error}]")
    elif state.hint and state.is_touched:
        st.caption(state.hint)


def render_sidebar() -> None:
    wizard = _wizard()
    lang = st.session_state[StateKeys.LANG]
    with st.sidebar:
        st.radio(
            tr("Idioma", "Language"),
            ("pt", "en"),
            key=StateKeys.LANG,
            horizontal=True,
        )
        position, total = wizard.position()
        st.progress(wizard.progress(), text=tr(f"Passo {position} de {total}", f"Step {position} of {total}"))
        completed = set(wizard.completed_steps())
        for step in wizard.active_steps():
            marker = "✅" if step.key in completed else "▫️"
            if step.key == wizard.current_key:
                marker = "👉"
            st.markdown(f"{marker} {step.label_for(lang)}")
        if st.button(tr("Recomeçar", "Start over")):
            reset_state()
            st.rerun()


def render_review() -> None:
    engine = _engine()
    lang = st.session_state[StateKeys.LANG]
    values = engine.get_values()
    record = build_registration_payload(values).to_wire()
    record.pop("password", None)
    record["has_company"] = values.get(FieldKeys.HAS_COMPANY) == "yes"
    if record["has_company"]:
        record["company"] = {
            name: values.get(name, "")
            for name in (
                FieldKeys.COMPANY_NAME,
                FieldKeys.NIPC,
                FieldKeys.LEGAL_FORM,
                FieldKeys.FOUNDING_DATE,
                FieldKeys.NUMBER_EMPLOYEES,
                FieldKeys.VAT_REGIME,
                FieldKeys.REPORT_FREQUENCY,
            )
        }
    record["date_of_birth"] = values.get(FieldKeys.DATE_OF_BIRTH, "")
    for field, display in resolve_fields(record, REVIEW_FIELDS, lang=lang).items():
        label = FIELD_LABELS.get(field, (field.replace("_", " ").capitalize(),) * 2)
        st.markdown(f"**{translate(label, lang)}:** {display}")


def render_navigation() -> None:
    wizard = _wizard()
    engine = _engine()
    back_col, next_col = st.columns(2)
    with back_col:
        if st.button(tr("Anterior", "Back"), disabled=wizard.current_index == 0):
            wizard.prev()
            st.rerun()
    with next_col:
        if wizard.is_terminal:
            if st.button(tr("Submeter registo", "Submit registration"), type="primary"):
                outcome = asyncio.run(submit_registration(wizard, engine))
                st.session_state[StateKeys.SUBMISSION_BANNER] = outcome.banner
                if outcome.success and outcome.payload is not None:
                    st.session_state[StateKeys.SUBMITTED_PAYLOAD] = outcome.payload.to_wire()
                st.rerun()
        elif st.button(tr("Seguinte", "Next"), type="primary"):
            asyncio.run(wizard.next())
            st.rerun()


def main() -> None:
    wizard = _wizard()
    lang = st.session_state[StateKeys.LANG]
    render_sidebar()
    step = wizard.current_step
    st.title(step.label_for(lang))
    st.caption(translate(step.description, lang))

    banner = st.session_state.get(StateKeys.SUBMISSION_BANNER)
    if banner:
        if st.session_state.get(StateKeys.SUBMITTED_PAYLOAD):
            st.success(banner)
        else:
            st.error(banner)

    if wizard.is_terminal:
        render_review()
    else:
        for name in step.required_fields + EXTRA_STEP_FIELDS.get(step.key, ()):
            _render_field(name)
    render_navigation()


main()
