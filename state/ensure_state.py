"""Helpers for initializing Streamlit session state."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

import streamlit as st

import config
from constants.keys import FORM_FIELDS, FieldKeys, StateKeys
from core.schema import REGISTRATION_SCHEMA
from wizard.engine import ValidationEngine
from wizard.navigation.router import WizardStateMachine

logger = logging.getLogger(__name__)


# Selection defaults shown pre-filled in the form; everything else starts empty.
FORM_DEFAULTS: Mapping[str, str] = MappingProxyType(
    {
        FieldKeys.HAS_COMPANY: "no",
        FieldKeys.LEGAL_FORM: "Lda",
        FieldKeys.ACCOUNTING_REGIME: "simplificada",
        FieldKeys.VAT_REGIME: "isento_art53",
        FieldKeys.REPORT_FREQUENCY: "mensal",
    }
)


def initial_form_values() -> dict[str, str]:
    """Return the starting value of every form field."""

    return {name: FORM_DEFAULTS.get(name, "") for name in FORM_FIELDS}


def build_engine(lang: str | None = None) -> ValidationEngine:
    """Create the per-session validation engine.

    Streamlit reruns the script on every widget change, so there is no event
    loop alive between keystrokes; fields are validated on blur and by the
    step gate instead of through the debounce timer.
    """

    return ValidationEngine(
        initial_form_values(),
        REGISTRATION_SCHEMA,
        validate_on_change=False,
        lang=lang,
    )


_DEFAULT_STATE_FACTORIES: Mapping[str, Callable[[], Any]] = MappingProxyType(
    {
        StateKeys.LANG: lambda: config.DEFAULT_LANG,
        StateKeys.SUBMISSION_BANNER: lambda: None,
        StateKeys.SUBMITTED_PAYLOAD: lambda: None,
    }
)


def ensure_state() -> None:
    """Initialize ``st.session_state`` with the onboarding objects.

    Engine and wizard are created once per session and reused across
    reruns.
    """

    for key, factory in _DEFAULT_STATE_FACTORIES.items():
        if key not in st.session_state:
            st.session_state[key] = factory()
    engine = st.session_state.get(StateKeys.ENGINE)
    if not isinstance(engine, ValidationEngine):
        engine = build_engine(st.session_state[StateKeys.LANG])
        st.session_state[StateKeys.ENGINE] = engine
        logger.debug("Created onboarding engine for new session")
    engine.lang = st.session_state[StateKeys.LANG]
    if not isinstance(st.session_state.get(StateKeys.WIZARD), WizardStateMachine):
        st.session_state[StateKeys.WIZARD] = WizardStateMachine(engine)


def reset_state() -> None:
    """Reset the onboarding form while preserving the language choice."""

    preserve = {StateKeys.LANG}
    engine = st.session_state.get(StateKeys.ENGINE)
    if isinstance(engine, ValidationEngine):
        engine.close()
    for key in list(st.session_state.keys()):
        if key not in preserve:
            del st.session_state[key]
    ensure_state()
