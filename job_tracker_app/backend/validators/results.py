"""
Tagged results returned by the validators.

Business logic never touches raw form data: it receives either a
ValidationSuccess carrying the normalized record or a ValidationFailure
carrying one message per offending field.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from pydantic import ValidationError


@dataclass(frozen=True)
class ValidationSuccess:
    data: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ValidationFailure:
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Union[ValidationSuccess, ValidationFailure]


def failure_from_error(exc: ValidationError) -> ValidationFailure:
    """Keep only the first message reported for each field."""
    field_errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        if not loc:
            continue
        key = str(loc[0])
        if key not in field_errors:
            field_errors[key] = error["msg"]
    return ValidationFailure(field_errors=field_errors)
