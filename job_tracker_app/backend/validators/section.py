"""
Validation schema for creating or renaming a section.

Per-user name uniqueness is not checked here; the database's unique index
reports conflicts and the section actions translate them into a field error.
"""
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .results import ValidationResult, ValidationSuccess, failure_from_error

SECTION_NAME_MAX_LENGTH = 100


class SectionNameInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        name = v.strip() if isinstance(v, str) else ""
        if not name:
            raise PydanticCustomError("required", "Section name is required")
        if len(name) > SECTION_NAME_MAX_LENGTH:
            raise PydanticCustomError(
                "too_long",
                f"Section name must be {SECTION_NAME_MAX_LENGTH} characters or fewer",
            )
        return name


def validate_section_name(raw: Mapping[str, Any]) -> ValidationResult:
    try:
        section = SectionNameInput.model_validate({"name": raw.get("name")})
    except ValidationError as exc:
        return failure_from_error(exc)
    return ValidationSuccess(data=section.model_dump())
