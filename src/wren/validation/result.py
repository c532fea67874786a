"""Validation result: immutable container for the outcome of a check."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating a value against its field rules.

    The result is falsy when invalid, so you can write::

        result = validate_dataclass(payload)
        if not result:
            raise ValidationError(result.errors)

    ``errors`` maps field paths to lists of messages::

        {"title": ["This field is required"],
         "items[0].sku": ["Must be at most 12 characters"]}
    """

    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid
