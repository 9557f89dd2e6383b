"""Input validation and sanitization helpers shared by the services.

All checks are pure functions on plain strings so they can be reused by
route handlers, services and scripts alike.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Literal
from urllib.parse import urlparse

EMAIL_RE: Final = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
SLUG_RE: Final = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")
UUID_RE: Final = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
VERSION_RE: Final = re.compile(r"[0-9]+\.[0-9]+(\.[0-9]+)?")

PASSWORD_MIN_LENGTH: Final = 8

UserRole = Literal["admin", "user"]
VALID_ROLES: Final[tuple[str, ...]] = ("admin", "user")

_HTML_ESCAPES: Final = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


@dataclass(frozen=True)
class PasswordValidation:
    """Outcome of a password strength check.

    ``error`` holds the message for the first failing rule, checked in the
    order length, uppercase, lowercase, digit.
    """

    valid: bool
    min_length: bool
    has_uppercase: bool
    has_lowercase: bool
    has_number: bool
    error: str | None = None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(email.strip()))


def validate_password(password: str) -> PasswordValidation:
    """Check a password against the account password policy.

    Args:
        password: Raw password as typed by the user.

    Returns:
        PasswordValidation with per-rule flags and the first error message.
    """
    min_length = len(password) >= PASSWORD_MIN_LENGTH
    has_uppercase = re.search(r"[A-Z]", password) is not None
    has_lowercase = re.search(r"[a-z]", password) is not None
    has_number = re.search(r"[0-9]", password) is not None
    valid = min_length and has_uppercase and has_lowercase and has_number

    error: str | None = None
    if not min_length:
        error = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    elif not has_uppercase:
        error = "Password must contain at least one uppercase letter"
    elif not has_lowercase:
        error = "Password must contain at least one lowercase letter"
    elif not has_number:
        error = "Password must contain at least one number"

    return PasswordValidation(
        valid=valid,
        min_length=min_length,
        has_uppercase=has_uppercase,
        has_lowercase=has_lowercase,
        has_number=has_number,
        error=error,
    )


def is_valid_slug(slug: str) -> bool:
    """Lowercase alphanumerics separated by single hyphens, e.g. ``acme-store-2``."""
    return bool(SLUG_RE.fullmatch(slug.strip()))


def sanitize_string(value: str) -> str:
    """Trim and HTML-escape a string meant for display."""
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value.strip())


def sanitize_for_db(value: str) -> str:
    return value.strip()


def is_valid_uuid(value: str) -> bool:
    return bool(UUID_RE.fullmatch(value))


def is_valid_version(version: str) -> bool:
    """Accept ``major.minor`` or ``major.minor.patch``."""
    return bool(VERSION_RE.fullmatch(version.strip()))


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_role(role: str) -> bool:
    return role in VALID_ROLES


def is_valid_name(name: str, max_length: int = 100) -> bool:
    trimmed = name.strip()
    return 0 < len(trimmed) <= max_length


def limit_length(value: str, max_length: int) -> str:
    trimmed = value.strip()
    return trimmed[:max_length]
