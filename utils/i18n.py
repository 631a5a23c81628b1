"""Simple i18n helper utilities."""

from __future__ import annotations

from typing import Final

import streamlit as st

import config

from core.errors import SUBMISSION_FAILED_BANNER
from core.types import LocalizedText

NOT_PROVIDED: Final[LocalizedText] = ("Não informado", "Not provided")
YES_LABEL: Final[LocalizedText] = ("Sim", "Yes")
NO_LABEL: Final[LocalizedText] = ("Não", "No")

SUBMISSION_SUCCESS_MESSAGE: Final[LocalizedText] = (
    "Registo realizado com sucesso! Aguarde a aprovação para fazer login.",
    "Registration completed! Please wait for approval before logging in.",
)


def translate(pair: LocalizedText, lang: str | None) -> str:
    """Return the language-specific variant from ``pair``.

    Anything that is not English falls back to Portuguese, the form's
    primary language.
    """

    if (lang or "").lower().startswith("en"):
        return pair[1]
    return pair[0]


def tr(pt: str, en: str, lang: str | None = None) -> str:
    """Return the string matching the current language.

    Args:
        pt: Portuguese text.
        en: English text.
        lang: Optional language override (``"pt"`` or ``"en"``).

    Returns:
        The localized string for the requested language.
    """
    code = lang or st.session_state.get("lang", config.DEFAULT_LANG)
    return translate((pt, en), code)


__all__ = [
    "NOT_PROVIDED",
    "NO_LABEL",
    "SUBMISSION_FAILED_BANNER",
    "SUBMISSION_SUCCESS_MESSAGE",
    "YES_LABEL",
    "LocalizedText",
    "tr",
    "translate",
]
