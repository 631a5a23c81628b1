"""Regression tests for :func:`state.ensure_state` and :func:`state.reset_state`."""

import streamlit as st

from constants.keys import FORM_FIELDS, StateKeys
from state import ensure_state, reset_state
from wizard.engine import ValidationEngine
from wizard.navigation import WizardStateMachine


def test_ensure_state_seeds_engine_and_wizard() -> None:
    st.session_state.clear()
    ensure_state()

    engine = st.session_state[StateKeys.ENGINE]
    assert isinstance(engine, ValidationEngine)
    assert isinstance(st.session_state[StateKeys.WIZARD], WizardStateMachine)
    assert st.session_state[StateKeys.LANG] == "pt"
    assert set(engine.get_values()) == set(FORM_FIELDS)
    assert engine.field("has_company").value == "no"
    assert engine.field("vat_regime").value == "isento_art53"
    assert engine.field("name").value == ""
    # Streamlit reruns have no live event loop between widget changes.
    assert engine.validate_on_change is False


def test_ensure_state_is_idempotent() -> None:
    st.session_state.clear()
    ensure_state()
    engine = st.session_state[StateKeys.ENGINE]
    engine.set_value("name", "Maria Silva")

    ensure_state()

    assert st.session_state[StateKeys.ENGINE] is engine
    assert engine.field("name").value == "Maria Silva"


def test_engine_follows_language_choice() -> None:
    st.session_state.clear()
    ensure_state()
    st.session_state[StateKeys.LANG] = "en"
    ensure_state()
    assert st.session_state[StateKeys.ENGINE].lang == "en"


def test_reset_state_preserves_language_only() -> None:
    st.session_state.clear()
    ensure_state()
    st.session_state[StateKeys.LANG] = "en"
    engine = st.session_state[StateKeys.ENGINE]
    engine.set_value("name", "Maria Silva")
    st.session_state[StateKeys.SUBMISSION_BANNER] = "Erro"

    reset_state()

    assert st.session_state[StateKeys.LANG] == "en"
    assert st.session_state[StateKeys.ENGINE] is not engine
    assert st.session_state[StateKeys.ENGINE].field("name").value == ""
    assert st.session_state[StateKeys.SUBMISSION_BANNER] is None
    assert st.session_state[StateKeys.WIZARD].current_key == "personal"
