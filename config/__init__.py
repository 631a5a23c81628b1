"""Central configuration for the client onboarding form.

Values are read from the environment (and an optional ``.env`` file) once at
import time. ``ONBOARDING_DEBOUNCE_MS`` controls the quiet period before a
changed field is validated; ``ONBOARDING_VALIDATE_ON_CHANGE`` and
``ONBOARDING_VALIDATE_ON_BLUR`` toggle the two validation triggers.
``ONBOARDING_REGISTER_URL`` points at the registration endpoint that receives
the final payload.
"""

import logging
import os
import warnings

from dotenv import load_dotenv

load_dotenv()


logger = logging.getLogger(__name__)


_TRUTHY_ENV_VALUES: tuple[str, ...] = ("1", "true", "yes", "on")
_FALSY_ENV_VALUES: tuple[str, ...] = ("0", "false", "no", "off")


def _is_truthy_flag(value: str | None, *, default: bool = False) -> bool:
    """Return ``True`` when ``value`` matches a truthy environment token."""

    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY_ENV_VALUES:
        return True
    if normalized in _FALSY_ENV_VALUES:
        return False
    return default


def _parse_positive_int_env(value: object | None, *, env_var: str, default: int) -> int:
    """Return a positive integer parsed from ``value`` or ``default``."""

    if value is None:
        return default
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return default
        try:
            parsed = int(float(candidate))
        except ValueError:
            warnings.warn(
                "%s is not a number; ignoring %s" % (candidate, env_var),
                RuntimeWarning,
            )
            return default
    elif isinstance(value, (int, float)):
        parsed = int(value)
    else:
        warnings.warn(
            "Unsupported %s value '%s'; using %s." % (env_var, value, default),
            RuntimeWarning,
        )
        return default
    if parsed <= 0:
        return default
    return parsed


def _parse_positive_float_env(value: str | None, *, env_var: str, default: float) -> float:
    """Return a positive float parsed from ``value`` or ``default``."""

    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        warnings.warn(
            "%s is not a number; ignoring %s" % (value, env_var),
            RuntimeWarning,
        )
        return default
    return parsed if parsed > 0 else default


DEBOUNCE_MS = _parse_positive_int_env(
    os.getenv("ONBOARDING_DEBOUNCE_MS"),
    env_var="ONBOARDING_DEBOUNCE_MS",
    default=300,
)
VALIDATE_ON_CHANGE = _is_truthy_flag(os.getenv("ONBOARDING_VALIDATE_ON_CHANGE"), default=True)
VALIDATE_ON_BLUR = _is_truthy_flag(os.getenv("ONBOARDING_VALIDATE_ON_BLUR"), default=True)

DEFAULT_LANG = (os.getenv("ONBOARDING_LANG") or "pt").strip().lower() or "pt"

REGISTER_URL = os.getenv("ONBOARDING_REGISTER_URL", "http://localhost:8080/api/auth/register")
REQUEST_TIMEOUT_SECONDS = _parse_positive_float_env(
    os.getenv("ONBOARDING_REQUEST_TIMEOUT"),
    env_var="ONBOARDING_REQUEST_TIMEOUT",
    default=10.0,
)

USERNAME_MIN_LENGTH = _parse_positive_int_env(
    os.getenv("ONBOARDING_USERNAME_MIN_LENGTH"),
    env_var="ONBOARDING_USERNAME_MIN_LENGTH",
    default=3,
)
USERNAME_MAX_LENGTH = _parse_positive_int_env(
    os.getenv("ONBOARDING_USERNAME_MAX_LENGTH"),
    env_var="ONBOARDING_USERNAME_MAX_LENGTH",
    default=50,
)
PASSWORD_MIN_LENGTH = _parse_positive_int_env(
    os.getenv("ONBOARDING_PASSWORD_MIN_LENGTH"),
    env_var="ONBOARDING_PASSWORD_MIN_LENGTH",
    default=6,
)
MINIMUM_AGE = _parse_positive_int_env(
    os.getenv("ONBOARDING_MINIMUM_AGE"),
    env_var="ONBOARDING_MINIMUM_AGE",
    default=18,
)

if USERNAME_MIN_LENGTH > USERNAME_MAX_LENGTH:
    logger.warning(
        "Username bounds are inverted (%s > %s); swapping them.",
        USERNAME_MIN_LENGTH,
        USERNAME_MAX_LENGTH,
    )
    USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH = USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH


__all__ = [
    "DEBOUNCE_MS",
    "DEFAULT_LANG",
    "MINIMUM_AGE",
    "PASSWORD_MIN_LENGTH",
    "REGISTER_URL",
    "REQUEST_TIMEOUT_SECONDS",
    "USERNAME_MAX_LENGTH",
    "USERNAME_MIN_LENGTH",
    "VALIDATE_ON_BLUR",
    "VALIDATE_ON_CHANGE",
]
