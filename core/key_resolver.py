"""Resolve canonical fields from loosely keyed submission records.

Submitted records reach the admin review with keys in several spellings
(``estimated_revenue``, ``estimatedRevenue``, ``estimatedrevenue``) and with
company data optionally nested under ``company``. Every known canonical field
gets an explicit candidate-key tuple, computed once at import time; lookups
only ever walk that table.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Final

from core.formatting import (
    ACCOUNTING_REGIME_LABELS,
    LEGAL_FORM_LABELS,
    REPORT_FREQUENCY_LABELS,
    VAT_REGIME_LABELS,
    format_boolean,
    format_choice,
    format_count,
    format_currency,
    format_date,
    not_provided,
)
from utils.i18n import LocalizedText

NESTED_COMPANY_KEY: Final[str] = "company"


class FieldKind(StrEnum):
    """Formatting family of a canonical field."""

    TEXT = "text"
    CURRENCY = "currency"
    COUNT = "count"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    DATE = "date"


NUMERIC_KINDS: Final[frozenset[FieldKind]] = frozenset({FieldKind.CURRENCY, FieldKind.COUNT})

FIELD_KINDS: Final[Mapping[str, FieldKind]] = MappingProxyType(
    {
        # personal and contact
        "name": FieldKind.TEXT,
        "email": FieldKind.TEXT,
        "phone": FieldKind.TEXT,
        "nif": FieldKind.TEXT,
        "date_of_birth": FieldKind.DATE,
        "marital_status": FieldKind.TEXT,
        "username": FieldKind.TEXT,
        # address
        "fiscal_address": FieldKind.TEXT,
        "fiscal_postal_code": FieldKind.TEXT,
        "fiscal_city": FieldKind.TEXT,
        "address": FieldKind.TEXT,
        "postal_code": FieldKind.TEXT,
        "city": FieldKind.TEXT,
        "country": FieldKind.TEXT,
        # company
        "has_company": FieldKind.BOOLEAN,
        "company_name": FieldKind.TEXT,
        "trade_name": FieldKind.TEXT,
        "nipc": FieldKind.TEXT,
        "cae": FieldKind.TEXT,
        "legal_form": FieldKind.CHOICE,
        "founding_date": FieldKind.DATE,
        "share_capital": FieldKind.CURRENCY,
        # business activity
        "business_type": FieldKind.TEXT,
        "business_activity": FieldKind.TEXT,
        "estimated_revenue": FieldKind.CURRENCY,
        "monthly_invoices": FieldKind.COUNT,
        "monthly_documents": FieldKind.COUNT,
        "number_employees": FieldKind.COUNT,
        # regimes and preferences
        "accounting_regime": FieldKind.CHOICE,
        "vat_regime": FieldKind.CHOICE,
        "report_frequency": FieldKind.CHOICE,
        "access_type": FieldKind.TEXT,
        "document_delivery": FieldKind.TEXT,
        "invoicing_tool": FieldKind.TEXT,
        "observations": FieldKind.TEXT,
        # current situation
        "has_activity": FieldKind.BOOLEAN,
        "has_social_security": FieldKind.BOOLEAN,
        "has_employees": FieldKind.BOOLEAN,
        "has_debts": FieldKind.BOOLEAN,
        "is_part_of_group": FieldKind.BOOLEAN,
    }
)

CHOICE_LABELS: Final[Mapping[str, Mapping[str, LocalizedText]]] = MappingProxyType(
    {
        "accounting_regime": ACCOUNTING_REGIME_LABELS,
        "vat_regime": VAT_REGIME_LABELS,
        "report_frequency": REPORT_FREQUENCY_LABELS,
        "legal_form": LEGAL_FORM_LABELS,
    }
)

# Spellings seen in production data that the generic variants do not cover.
# Extend this table explicitly when new variants show up.
EXTRA_SPELLINGS: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "nipc": ("n_ip_c",),
    }
)


def camel_to_snake(key: str) -> str:
    """``postalCode`` -> ``postal_code``."""

    return re.sub(r"([A-Z])", r"_\1", key).lower()


def strip_separators(key: str) -> str:
    """``postal_code`` -> ``postalcode``."""

    return key.replace("_", "")


def snake_to_camel(key: str) -> str:
    """``postal_code`` -> ``postalCode``."""

    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def build_candidate_keys(canonical: str, extra: Iterable[str] = ()) -> tuple[str, ...]:
    """Return the ordered, de-duplicated spelling variants for ``canonical``."""

    variants = (
        canonical,
        camel_to_snake(canonical),
        strip_separators(canonical),
        snake_to_camel(canonical),
        *extra,
    )
    return tuple(dict.fromkeys(variants))


def _build_tables() -> tuple[Mapping[str, tuple[str, ...]], Mapping[str, str]]:
    candidates: dict[str, tuple[str, ...]] = {}
    canonical_of: dict[str, str] = {}
    for canonical in FIELD_KINDS:
        extra = EXTRA_SPELLINGS.get(canonical, ())
        for spelling in (canonical, snake_to_camel(canonical)):
            candidates.setdefault(spelling, build_candidate_keys(spelling, extra))
            canonical_of.setdefault(spelling, canonical)
    return MappingProxyType(candidates), MappingProxyType(canonical_of)


CANDIDATE_KEYS, _CANONICAL_OF = _build_tables()


def candidate_keys(field: str) -> tuple[str, ...]:
    """Return the lookup order for ``field``; unknown names match exactly."""

    return CANDIDATE_KEYS.get(field, (field,))


def field_kind(field: str, raw: object = None) -> FieldKind:
    """Return the formatting family of ``field`` given its raw value."""

    canonical = _CANONICAL_OF.get(field, field)
    kind = FIELD_KINDS.get(canonical)
    if isinstance(raw, bool) and kind is not FieldKind.CHOICE:
        return FieldKind.BOOLEAN
    if kind is not None:
        return kind
    if canonical.startswith(("has_", "is_")) or re.match(r"(has|is)[A-Z]", canonical):
        return FieldKind.BOOLEAN
    return FieldKind.TEXT


def is_present(value: object, *, numeric: bool = False) -> bool:
    """Return ``True`` when ``value`` counts as provided.

    ``None`` and blank strings never count; ``0``/``"0"`` only count for
    numeric fields; booleans always count.
    """

    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return False
        return numeric or text != "0"
    if isinstance(value, (int, float)):
        return numeric or value != 0
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return len(value) > 0
    return True


def resolve_raw(record: object, field: str) -> tuple[bool, Any]:
    """Return ``(found, raw_value)`` for ``field`` in ``record``.

    The nested ``company`` mapping is searched first, then the top level.
    """

    if not isinstance(record, Mapping):
        return False, None
    keys = candidate_keys(field)
    numeric = FIELD_KINDS.get(_CANONICAL_OF.get(field, field)) in NUMERIC_KINDS
    sources: list[Mapping[Any, Any]] = []
    nested = record.get(NESTED_COMPANY_KEY)
    if isinstance(nested, Mapping):
        sources.append(nested)
    sources.append(record)
    for source in sources:
        for key in keys:
            if key not in source:
                continue
            value = source[key]
            if is_present(value, numeric=numeric):
                return True, value
    return False, None


def format_value(field: str, raw: object, *, lang: str | None = None) -> str:
    """Apply the display format of ``field`` to an already resolved ``raw`` value."""

    kind = field_kind(field, raw)
    if kind is FieldKind.CURRENCY:
        return format_currency(raw)
    if kind is FieldKind.COUNT:
        return format_count(raw)
    if kind is FieldKind.BOOLEAN:
        return format_boolean(raw, lang)
    if kind is FieldKind.DATE:
        return format_date(raw, lang)
    if kind is FieldKind.CHOICE:
        labels = CHOICE_LABELS.get(_CANONICAL_OF.get(field, field), {})
        return format_choice(raw, labels, lang)
    text = str(raw).strip()
    return text or not_provided(lang)


def resolve_field(record: object, field: str, *, lang: str | None = None) -> str:
    """Return the display string for ``field`` or the "not provided" sentinel."""

    found, raw = resolve_raw(record, field)
    if not found:
        return not_provided(lang)
    try:
        return format_value(field, raw, lang=lang)
    except (OverflowError, TypeError, ValueError):
        return not_provided(lang)


def resolve_fields(record: object, fields: Iterable[str], *, lang: str | None = None) -> dict[str, str]:
    """Resolve several ``fields`` at once, keyed by the requested name."""

    return {field: resolve_field(record, field, lang=lang) for field in fields}


__all__ = [
    "CANDIDATE_KEYS",
    "CHOICE_LABELS",
    "EXTRA_SPELLINGS",
    "FIELD_KINDS",
    "FieldKind",
    "build_candidate_keys",
    "camel_to_snake",
    "candidate_keys",
    "field_kind",
    "format_value",
    "is_present",
    "resolve_field",
    "resolve_fields",
    "resolve_raw",
    "snake_to_camel",
    "strip_separators",
]
