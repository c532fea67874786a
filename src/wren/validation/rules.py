"""Built-in validation rules.

Each validator is a callable with the signature::

    def rule(value: Any) -> str | None:
        '''Return error message, or None if valid.'''

Parameterized validators are factory functions that return a validator::

    def max_length(n: int) -> Validator:
        def check(value: Any) -> str | None:
            if len(value) > n:
                return f"Must be at most {n} characters"
            return None
        return check

Rules other than ``required`` treat ``None`` as "not provided" and pass,
so optional fields only need ``required`` when they must be present.
"""

import re
from collections.abc import Callable, Sized
from typing import Any

type Validator = Callable[[Any], str | None]


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> str | None:
    """Value must be present and non-empty."""
    if value is None:
        return "This field is required"
    if isinstance(value, str) and not value.strip():
        return "This field is required"
    if isinstance(value, Sized) and not isinstance(value, str) and len(value) == 0:
        return "This field is required"
    return None


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_length(n: int) -> Validator:
    """String or collection must have at most *n* items."""

    def check(value: Any) -> str | None:
        if value is not None and len(value) > n:
            if isinstance(value, str):
                return f"Must be at most {n} characters"
            return f"Must have at most {n} items"
        return None

    return check


def min_length(n: int) -> Validator:
    """String or collection must have at least *n* items."""

    def check(value: Any) -> str | None:
        if value is not None and len(value) < n:
            if isinstance(value, str):
                return f"Must be at least {n} characters"
            return f"Must have at least {n} items"
        return None

    return check


# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------


def min_value(n: float) -> Validator:
    """Number must be greater than or equal to *n*."""

    def check(value: Any) -> str | None:
        if value is not None and value < n:
            return f"Must be at least {n}"
        return None

    return check


def max_value(n: float) -> Validator:
    """Number must be less than or equal to *n*."""

    def check(value: Any) -> str | None:
        if value is not None and value > n:
            return f"Must be at most {n}"
        return None

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Structure only, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(value: Any) -> str | None:
    """Value must be a valid email address (basic format check)."""
    if value is None:
        return None
    if not isinstance(value, str) or not _EMAIL_RE.match(value):
        return "Must be a valid email address"
    return None


# http(s) scheme plus a host
_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)


def url(value: Any) -> str | None:
    """Value must be a valid URL (http/https)."""
    if value is None:
        return None
    if not isinstance(value, str) or not _URL_RE.match(value):
        return "Must be a valid URL"
    return None


def matches(pattern: str, message: str | None = None) -> Validator:
    """Value must match the given regex pattern."""
    compiled = re.compile(pattern)

    def check(value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str) or not compiled.match(value):
            return message or f"Must match pattern: {pattern}"
        return None

    return check


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: Any) -> Validator:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)

    def check(value: Any) -> str | None:
        if value is not None and value not in allowed:
            options = ", ".join(sorted(str(c) for c in allowed))
            return f"Must be one of: {options}"
        return None

    return check
