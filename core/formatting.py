"""Display formatting for values shown in the admin review."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from types import MappingProxyType
from typing import Final

from core.validators import parse_iso_date, parse_number
from utils.i18n import NO_LABEL, NOT_PROVIDED, YES_LABEL, LocalizedText, translate

VAT_REGIME_LABELS: Final[Mapping[str, LocalizedText]] = MappingProxyType(
    {
        "normal": ("Normal", "Standard"),
        "isento_art53": ("Isento (Art. 53º)", "Exempt (Art. 53)"),
        "pequeno_retalhista": ("Pequeno Retalhista", "Small retailer"),
    }
)

ACCOUNTING_REGIME_LABELS: Final[Mapping[str, LocalizedText]] = MappingProxyType(
    {
        "organizada": ("Contabilidade Organizada", "Organised accounting"),
        "simplificada": ("Contabilidade Simplificada", "Simplified accounting"),
    }
)

REPORT_FREQUENCY_LABELS: Final[Mapping[str, LocalizedText]] = MappingProxyType(
    {
        "mensal": ("Mensal", "Monthly"),
        "trimestral": ("Trimestral", "Quarterly"),
    }
)

LEGAL_FORM_LABELS: Final[Mapping[str, LocalizedText]] = MappingProxyType(
    {
        "Lda": ("Sociedade por Quotas (Lda)", "Private limited company (Lda)"),
        "SA": ("Sociedade Anónima (SA)", "Public limited company (SA)"),
        "Unipessoal": ("Sociedade Unipessoal", "Single-member company"),
        "ENI": ("Empresário em Nome Individual", "Sole trader"),
        "EIRL": ("EIRL", "EIRL"),
        "Outro": ("Outro", "Other"),
    }
)

HAS_COMPANY_LABELS: Final[Mapping[str, LocalizedText]] = MappingProxyType(
    {
        "yes": YES_LABEL,
        "no": NO_LABEL,
    }
)

_BOOLEAN_TOKENS: Final[Mapping[str, bool]] = MappingProxyType(
    {
        "true": True,
        "false": False,
        "sim": True,
        "não": False,
        "nao": False,
        "yes": True,
        "no": False,
    }
)


def not_provided(lang: str | None = None) -> str:
    """Return the sentinel shown for missing values."""

    return translate(NOT_PROVIDED, lang)


def _number_text(number: float) -> str:
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def format_currency(value: object) -> str:
    """Format ``value`` as euros with ``.`` thousands and ``,`` decimals.

    ``0``, empty and unparsable values render as ``€0``.
    """

    number = parse_number(value)
    if not number:
        return "€0"
    sign = "-" if number < 0 else ""
    grouped = f"{abs(number):,.2f}"
    whole, cents = grouped.split(".")
    whole = whole.replace(",", ".")
    if cents == "00":
        return f"{sign}€{whole}"
    return f"{sign}€{whole},{cents}"


def format_count(value: object, default: str = "0") -> str:
    """Render an employee/invoice count, defaulting to ``"0"``."""

    if value is None or isinstance(value, bool):
        return default
    number = parse_number(value)
    if number is None:
        text = str(value).strip()
        return text or default
    if number == 0:
        return default
    return _number_text(number)


def format_boolean(value: object, lang: str | None = None) -> str:
    """Map boolean-like values to a localized Yes/No label."""

    if isinstance(value, bool):
        return translate(YES_LABEL if value else NO_LABEL, lang)
    token = _BOOLEAN_TOKENS.get(str(value).strip().lower())
    if token is None:
        text = str(value).strip()
        return text or not_provided(lang)
    return translate(YES_LABEL if token else NO_LABEL, lang)


def format_choice(value: object, labels: Mapping[str, LocalizedText], lang: str | None = None) -> str:
    """Map ``value`` through ``labels``; unknown values pass through unchanged."""

    text = str(value).strip()
    label = labels.get(text)
    if label is None:
        return text or not_provided(lang)
    return translate(label, lang)


def format_date(value: object, lang: str | None = None) -> str:
    """Render ISO dates as ``dd/mm/yyyy``; invalid input yields the sentinel."""

    if isinstance(value, datetime):
        parsed: date | None = value.date()
    else:
        parsed = parse_iso_date(value)
    if parsed is None:
        return not_provided(lang)
    return parsed.strftime("%d/%m/%Y")


__all__ = [
    "ACCOUNTING_REGIME_LABELS",
    "HAS_COMPANY_LABELS",
    "LEGAL_FORM_LABELS",
    "REPORT_FREQUENCY_LABELS",
    "VAT_REGIME_LABELS",
    "format_boolean",
    "format_choice",
    "format_count",
    "format_currency",
    "format_date",
    "not_provided",
]
