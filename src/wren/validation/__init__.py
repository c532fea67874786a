"""Request validation: rules attached to dataclass fields.

Rules live in field metadata, so the constraints travel with the type::

    from dataclasses import dataclass, field
    from wren.validation import constraints, email, max_length, required

    @dataclass(frozen=True, slots=True)
    class SignupReq:
        name: str = field(default="", metadata=constraints(required, max_length(64)))
        email: str = field(default="", metadata=constraints(required, email))

The handler adapter runs ``validate_dataclass`` on every decoded request
and answers 422 when it fails.  Nested dataclasses and lists of
dataclasses are checked recursively.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any

from wren.validation.result import ValidationResult
from wren.validation.rules import (
    Validator,
    email,
    matches,
    max_length,
    max_value,
    min_length,
    min_value,
    one_of,
    required,
    url,
)

__all__ = [
    "ValidationResult",
    "Validator",
    "constraints",
    "email",
    "matches",
    "max_length",
    "max_value",
    "min_length",
    "min_value",
    "one_of",
    "required",
    "url",
    "validate_dataclass",
]

RULES_KEY = "wren.validators"


def constraints(*validators: Validator, **metadata: Any) -> dict[str, Any]:
    """Field metadata carrying *validators*.

    Extra keyword arguments are merged in, so wire renames compose::

        field(default="", metadata=constraints(required, json="Name"))
    """
    return {**metadata, RULES_KEY: tuple(validators)}


def validate_dataclass(obj: Any) -> ValidationResult:
    """Validate a dataclass instance against the rules on its fields.

    Non-dataclass values have no rules and always pass.
    """
    errors: dict[str, list[str]] = {}
    _collect(obj, "", errors)
    return ValidationResult(errors=errors)


def _run(validators: tuple[Validator, ...], value: Any) -> list[str]:
    messages: list[str] = []
    for validator in validators:
        error = validator(value)
        if error is not None:
            messages.append(error)
            # No point running max_length on a missing value
            if validator is required:
                break
    return messages


def _is_instance(obj: Any) -> bool:
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)


def _collect(obj: Any, prefix: str, errors: dict[str, list[str]]) -> None:
    if _is_instance(obj):
        for f in dataclasses.fields(obj):
            name = f"{prefix}.{f.name}" if prefix else f.name
            value = getattr(obj, f.name)
            messages = _run(f.metadata.get(RULES_KEY, ()), value)
            if messages:
                errors[name] = messages
            _collect(value, name, errors)
    elif isinstance(obj, (list, tuple)):
        for i, item in enumerate(obj):
            _collect(item, f"{prefix}[{i}]", errors)
    elif isinstance(obj, Mapping):
        for key, item in obj.items():
            _collect(item, f"{prefix}.{key}" if prefix else str(key), errors)
