"""Pure field validators for the onboarding form.

Every validator takes the raw string typed by the user and returns a
:class:`ValidationResult`. Validators never raise for bad input and keep no
state, so the engine can call them on every keystroke.
"""

from __future__ import annotations

import math
import re
from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Final

from pydantic import EmailStr, ValidationError
from pydantic.type_adapter import TypeAdapter

import config
from core.types import LocalizedText


class ErrorKind(StrEnum):
    """Broad category of a field failure."""

    FORMAT = "format"
    REQUIRED = "required"
    CROSS_FIELD = "cross_field"


class ErrorCode(StrEnum):
    """Machine readable reason attached to a failed validation."""

    REQUIRED = "Required"
    INVALID_LENGTH = "InvalidLength"
    INVALID_CHECKSUM = "InvalidChecksum"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_DATE = "InvalidDate"
    OUT_OF_RANGE = "OutOfRange"
    RESERVED = "Reserved"
    MISMATCH = "Mismatch"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a single raw value."""

    is_valid: bool
    error: LocalizedText | None = None
    hint: LocalizedText | None = None
    kind: ErrorKind | None = None
    code: ErrorCode | None = None


FieldValidator = Callable[[str], "ValidationResult | Awaitable[ValidationResult]"]


def _ok(hint: LocalizedText | None = None) -> ValidationResult:
    return ValidationResult(is_valid=True, hint=hint)


def _fail(
    code: ErrorCode,
    error: LocalizedText,
    *,
    hint: LocalizedText | None = None,
    kind: ErrorKind = ErrorKind.FORMAT,
) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error, hint=hint, kind=kind, code=code)


def required_failure(label: LocalizedText) -> ValidationResult:
    """Return the failure reported for an empty required field."""

    return _fail(
        ErrorCode.REQUIRED,
        (f"{label[0]} é obrigatório", f"{label[1]} is required"),
        kind=ErrorKind.REQUIRED,
    )


_DIGITS: Final = re.compile(r"[0-9]+")
_POSTAL_CODE: Final = re.compile(r"[0-9]{4}-[0-9]{3}")
_PHONE_DIGITS: Final = re.compile(r"[2-9][0-9]{8}")
_PHONE_PREFIXES: Final[tuple[str, ...]] = ("+351", "00351")
_NAME_CHARS: Final = re.compile(r"[a-zA-ZÀ-ÿ\s]+")
_USERNAME_CHARS: Final = re.compile(r"[A-Za-z0-9_]+")
_CAE: Final = re.compile(r"[0-9]{5}")

TAX_ID_LENGTH: Final[int] = 9
NIPC_PREFIXES: Final[frozenset[str]] = frozenset({"5", "6", "8", "9"})
RESERVED_USERNAMES: Final[frozenset[str]] = frozenset(
    {"admin", "root", "user", "test", "api", "www", "mail", "ftp"}
)
EARLIEST_FOUNDING_DATE: Final[date] = date(1900, 1, 1)
MAXIMUM_AGE: Final[int] = 100
NAME_MAX_LENGTH: Final[int] = 100
EMAIL_MAX_LENGTH: Final[int] = 100

_EMAIL_ADAPTER: Final[TypeAdapter[EmailStr]] = TypeAdapter(EmailStr)


# ---------------------------------------------------------------------------
# Tax identifiers
# ---------------------------------------------------------------------------


def tax_id_check_digit(digits: str) -> int:
    """Return the modulo-11 check digit for the first eight ``digits``."""

    total = sum(int(digit) * (9 - index) for index, digit in enumerate(digits[:8]))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def _validate_tax_id(raw: str, label: str, prefixes: Collection[str] | None) -> ValidationResult:
    value = (raw or "").strip()
    if not value:
        return required_failure((label, label))
    if not _DIGITS.fullmatch(value):
        return _fail(
            ErrorCode.INVALID_FORMAT,
            (f"{label} só pode conter números", f"{label} may only contain digits"),
        )
    if len(value) != TAX_ID_LENGTH:
        missing = TAX_ID_LENGTH - len(value)
        hint = (f"Faltam {missing} dígitos", f"{missing} digits missing") if missing > 0 else None
        return _fail(
            ErrorCode.INVALID_LENGTH,
            (
                f"{label} deve ter exatamente {TAX_ID_LENGTH} dígitos",
                f"{label} must have exactly {TAX_ID_LENGTH} digits",
            ),
            hint=hint,
        )
    if prefixes is not None and value[0] not in prefixes:
        return _fail(
            ErrorCode.INVALID_FORMAT,
            (
                f"{label} deve começar por {', '.join(sorted(prefixes))}",
                f"{label} must start with {', '.join(sorted(prefixes))}",
            ),
        )
    if tax_id_check_digit(value) != int(value[8]):
        return _fail(
            ErrorCode.INVALID_CHECKSUM,
            (
                f"{label} inválido (dígito de controlo incorreto)",
                f"Invalid {label} (wrong check digit)",
            ),
        )
    return _ok((f"{label} válido", f"Valid {label}"))


def validate_nif(raw: str) -> ValidationResult:
    """Validate a Portuguese individual taxpayer number."""

    return _validate_tax_id(raw, "NIF", None)


def validate_nipc(raw: str) -> ValidationResult:
    """Validate a Portuguese company taxpayer number (NIF rules plus prefix)."""

    return _validate_tax_id(raw, "NIPC", NIPC_PREFIXES)


# ---------------------------------------------------------------------------
# Contact data
# ---------------------------------------------------------------------------


def normalize_phone(raw: str) -> str:
    """Strip separators and the Portuguese country prefix from ``raw``."""

    compact = re.sub(r"[\s\-()]", "", raw or "")
    for prefix in _PHONE_PREFIXES:
        if compact.startswith(prefix):
            return compact[len(prefix) :]
    return compact


def validate_phone(raw: str) -> ValidationResult:
    """Validate a Portuguese phone number with or without ``+351``."""

    if not (raw or "").strip():
        return required_failure(("Telefone", "Phone"))
    digits = normalize_phone(raw)
    if _DIGITS.fullmatch(digits) and len(digits) < TAX_ID_LENGTH:
        missing = TAX_ID_LENGTH - len(digits)
        return _fail(
            ErrorCode.INVALID_LENGTH,
            ("Telefone deve ter 9 dígitos", "Phone must have 9 digits"),
            hint=(f"Faltam {missing} dígitos", f"{missing} digits missing"),
        )
    if not _PHONE_DIGITS.fullmatch(digits):
        return _fail(
            ErrorCode.INVALID_FORMAT,
            (
                "Telefone inválido (ex: 912345678 ou +351 912345678)",
                "Invalid phone (e.g. 912345678 or +351 912345678)",
            ),
        )
    return _ok(("Telefone válido", "Valid phone"))


def validate_email(raw: str) -> ValidationResult:
    """Validate an email address using pydantic's ``EmailStr`` grammar."""

    candidate = (raw or "").strip()
    if not candidate:
        return required_failure(("Email", "Email"))
    if len(candidate) > EMAIL_MAX_LENGTH:
        return _fail(
            ErrorCode.INVALID_LENGTH,
            ("Email não pode exceder 100 caracteres", "Email cannot exceed 100 characters"),
        )
    try:
        _EMAIL_ADAPTER.validate_python(candidate)
    except (ValidationError, TypeError):
        return _fail(ErrorCode.INVALID_FORMAT, ("Email inválido", "Invalid email"))
    return _ok(("Email válido", "Valid email"))


def validate_postal_code(raw: str) -> ValidationResult:
    """Validate a Portuguese postal code (``NNNN-NNN``)."""

    value = (raw or "").strip()
    if not value:
        return required_failure(("Código postal", "Postal code"))
    if not _POSTAL_CODE.fullmatch(value):
        return _fail(
            ErrorCode.INVALID_FORMAT,
            ("Formato deve ser XXXX-XXX", "Format must be XXXX-XXX"),
        )
    return _ok(("Código postal válido", "Valid postal code"))


# ---------------------------------------------------------------------------
# Identity and credentials
# ---------------------------------------------------------------------------


def validate_name(raw: str) -> ValidationResult:
    """Validate a full name: letters only and at least first and last name."""

    value = (raw or "").strip()
    if not value:
        return required_failure(("Nome", "Name"))
    if len(value) > NAME_MAX_LENGTH:
        return _fail(ErrorCode.INVALID_LENGTH, ("Nome muito longo", "Name is too long"))
    if not _NAME_CHARS.fullmatch(value):
        return _fail(
            ErrorCode.INVALID_FORMAT,
            ("Nome deve conter apenas letras e espaços", "Name may only contain letters and spaces"),
        )
    if len(value.split()) < 2:
        return _fail(
            ErrorCode.INVALID_FORMAT,
            ("Indique o nome e o apelido", "Enter first and last name"),
            hint=("Falta o apelido", "Last name missing"),
        )
    return _ok(("Nome válido", "Valid name"))


def validate_username(raw: str) -> ValidationResult:
    """Check the username shape locally; availability is the backend's job."""

    value = (raw or "").strip()
    if not value:
        return required_failure(("Username", "Username"))
    if len(value) < config.USERNAME_MIN_LENGTH:
        missing = config.USERNAME_MIN_LENGTH - len(value)
        return _fail(
            ErrorCode.INVALID_LENGTH,
            (
                f"Username deve ter pelo menos {config.USERNAME_MIN_LENGTH} caracteres",
                f"Username must have at least {config.USERNAME_MIN_LENGTH} characters",
            ),
            hint=(f"Faltam {missing} caracteres", f"{missing} characters missing"),
        )
    if len(value) > config.USERNAME_MAX_LENGTH:
        return _fail(ErrorCode.INVALID_LENGTH, ("Username muito longo", "Username is too long"))
    if not _USERNAME_CHARS.fullmatch(value):
        return _fail(
            ErrorCode.INVALID_FORMAT,
            (
                "Username só pode conter letras, números e underscores",
                "Username may only contain letters, digits and underscores",
            ),
        )
    if value.lower() in RESERVED_USERNAMES:
        return _fail(
            ErrorCode.RESERVED,
            ("Username reservado, escolha outro", "Reserved username, pick another one"),
        )
    return _ok(("Username válido", "Valid username"))


def validate_password(raw: str) -> ValidationResult:
    """Require a minimum password length."""

    if not raw:
        return required_failure(("Senha", "Password"))
    if len(raw) < config.PASSWORD_MIN_LENGTH:
        return _fail(
            ErrorCode.INVALID_LENGTH,
            (
                f"Senha deve ter pelo menos {config.PASSWORD_MIN_LENGTH} caracteres",
                f"Password must have at least {config.PASSWORD_MIN_LENGTH} characters",
            ),
        )
    return _ok()


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def parse_iso_date(raw: object) -> date | None:
    """Return ``raw`` as a :class:`date` when it holds an ISO calendar date."""

    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None
    candidate = raw.strip()
    if not candidate:
        return None
    try:
        return date.fromisoformat(candidate[:10])
    except ValueError:
        return None


def _years_before(reference: date, years: int) -> date:
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return reference.replace(year=reference.year - years, day=28)


def age_on(birth_date: date, today: date) -> int:
    """Return the age in whole years at ``today``."""

    return today.year - birth_date.year - ((today.month, today.day) < (birth_date.month, birth_date.day))


def validate_birth_date(raw: str, *, today: date | None = None) -> ValidationResult:
    """Validate a date of birth: past, plausible and of legal age."""

    if not (raw or "").strip():
        return required_failure(("Data de nascimento", "Date of birth"))
    parsed = parse_iso_date(raw)
    if parsed is None:
        return _fail(ErrorCode.INVALID_DATE, ("Data inválida", "Invalid date"))
    current = today or date.today()
    if parsed >= current:
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            ("Data de nascimento não pode ser no futuro", "Date of birth cannot be in the future"),
        )
    if parsed < _years_before(current, MAXIMUM_AGE):
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            ("Data de nascimento muito antiga", "Date of birth is too far in the past"),
        )
    if age_on(parsed, current) < config.MINIMUM_AGE:
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            (
                f"Deve ter pelo menos {config.MINIMUM_AGE} anos",
                f"You must be at least {config.MINIMUM_AGE} years old",
            ),
        )
    return _ok(("Data de nascimento válida", "Valid date of birth"))


def validate_founding_date(raw: str, *, today: date | None = None) -> ValidationResult:
    """Validate a company founding date: not in the future, not before 1900."""

    if not (raw or "").strip():
        return required_failure(("Data de constituição", "Founding date"))
    parsed = parse_iso_date(raw)
    if parsed is None:
        return _fail(ErrorCode.INVALID_DATE, ("Data inválida", "Invalid date"))
    if parsed > (today or date.today()):
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            ("Data de constituição não pode ser no futuro", "Founding date cannot be in the future"),
        )
    if parsed < EARLIEST_FOUNDING_DATE:
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            ("Data de constituição muito antiga", "Founding date is too far in the past"),
        )
    return _ok(("Data de constituição válida", "Valid founding date"))


# ---------------------------------------------------------------------------
# Numbers, free text and choices
# ---------------------------------------------------------------------------


def parse_number(raw: object) -> float | None:
    """Return ``raw`` as a finite float, accepting a decimal comma."""

    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            return None
    elif isinstance(raw, str):
        candidate = raw.strip().replace(",", ".")
        if not candidate:
            return None
        try:
            number = float(candidate)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def validate_number(
    raw: str,
    *,
    minimum: float | None = 0,
    label: LocalizedText = ("Valor", "Value"),
) -> ValidationResult:
    """Validate a numeric input, optionally enforcing a lower bound."""

    if not (raw or "").strip():
        return required_failure(label)
    number = parse_number(raw)
    if number is None:
        return _fail(
            ErrorCode.INVALID_FORMAT,
            (f"{label[0]} deve ser um número válido", f"{label[1]} must be a valid number"),
        )
    if minimum is not None and number < minimum:
        bound = f"{minimum:g}"
        return _fail(
            ErrorCode.OUT_OF_RANGE,
            (f"{label[0]} deve ser maior ou igual a {bound}", f"{label[1]} must be at least {bound}"),
        )
    return _ok()


def number_validator(label: LocalizedText, *, minimum: float | None = 0) -> Callable[[str], ValidationResult]:
    """Return a numeric validator bound to ``label`` and ``minimum``."""

    def _validate(raw: str) -> ValidationResult:
        return validate_number(raw, minimum=minimum, label=label)

    return _validate


def validate_cae(raw: str) -> ValidationResult:
    """Validate a five digit economic activity code (CAE)."""

    value = (raw or "").strip()
    if not value:
        return required_failure(("CAE", "CAE"))
    if not _DIGITS.fullmatch(value):
        return _fail(ErrorCode.INVALID_FORMAT, ("CAE só pode conter números", "CAE may only contain digits"))
    if not _CAE.fullmatch(value):
        missing = 5 - len(value)
        return _fail(
            ErrorCode.INVALID_LENGTH,
            ("CAE deve ter exatamente 5 dígitos", "CAE must have exactly 5 digits"),
            hint=(f"Faltam {missing} dígitos", f"{missing} digits missing") if missing > 0 else None,
        )
    return _ok(("CAE válido", "Valid CAE"))


def text_validator(
    label: LocalizedText,
    *,
    min_length: int = 1,
    max_length: int | None = None,
) -> Callable[[str], ValidationResult]:
    """Return a validator enforcing length bounds on free text."""

    def _validate(raw: str) -> ValidationResult:
        value = (raw or "").strip()
        if not value:
            return required_failure(label)
        if len(value) < min_length:
            missing = min_length - len(value)
            return _fail(
                ErrorCode.INVALID_LENGTH,
                (
                    f"{label[0]} deve ter pelo menos {min_length} caracteres",
                    f"{label[1]} must have at least {min_length} characters",
                ),
                hint=(f"Faltam {missing} caracteres", f"{missing} characters missing"),
            )
        if max_length is not None and len(value) > max_length:
            return _fail(
                ErrorCode.INVALID_LENGTH,
                (
                    f"{label[0]} não pode exceder {max_length} caracteres",
                    f"{label[1]} cannot exceed {max_length} characters",
                ),
            )
        return _ok()

    return _validate


def choice_validator(label: LocalizedText, options: Collection[str]) -> Callable[[str], ValidationResult]:
    """Return a validator accepting only one of ``options``."""

    allowed = tuple(options)

    def _validate(raw: str) -> ValidationResult:
        value = (raw or "").strip()
        if not value:
            return required_failure(label)
        if value not in allowed:
            return _fail(
                ErrorCode.INVALID_FORMAT,
                (f"{label[0]}: opção inválida", f"{label[1]}: invalid option"),
            )
        return _ok()

    return _validate


validate_business_activity = text_validator(
    ("Descrição da atividade", "Business activity"),
    min_length=10,
    max_length=500,
)


__all__ = [
    "ErrorCode",
    "ErrorKind",
    "FieldValidator",
    "NIPC_PREFIXES",
    "RESERVED_USERNAMES",
    "ValidationResult",
    "age_on",
    "choice_validator",
    "normalize_phone",
    "number_validator",
    "parse_iso_date",
    "parse_number",
    "required_failure",
    "tax_id_check_digit",
    "text_validator",
    "validate_birth_date",
    "validate_business_activity",
    "validate_cae",
    "validate_email",
    "validate_founding_date",
    "validate_name",
    "validate_nif",
    "validate_nipc",
    "validate_number",
    "validate_password",
    "validate_phone",
    "validate_postal_code",
    "validate_username",
]
