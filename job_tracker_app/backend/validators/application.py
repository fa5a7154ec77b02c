"""
Validation schema for job application records.

The same schema is used by the create and update paths, by the HTML forms and
by the JSON API, so the browser and the server never disagree about what is
valid. Field constraints:

- company_name: required, 1-200 chars, trimmed
- position_title: required, 1-200 chars, trimmed
- job_posting_url: optional, max 2000 chars, absolute URL when present
- location: optional, max 200 chars, trimmed
- work_type: optional, one of WORK_TYPES
- salary_range_min / salary_range_max: optional whole dollars, 0..SALARY_MAX,
  max >= min
- status: one of APPLICATION_STATUSES, "applied" when omitted
- date_applied: required YYYY-MM-DD, not after today
- section_id: optional UUID
"""
import math
import re
import uuid
from datetime import date
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from ..constants import APPLICATION_FIELDS, APPLICATION_STATUSES, DEFAULT_STATUS, WORK_TYPES
from .results import ValidationFailure, ValidationResult, ValidationSuccess, failure_from_error

NAME_MAX_LENGTH = 200
URL_MAX_LENGTH = 2000
LOCATION_MAX_LENGTH = 200
# Salaries are stored in a 32-bit INTEGER column
SALARY_MAX = 2_147_483_647

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def _clean_string(value: Any) -> Optional[str]:
    """Trim a raw value; empty strings become None."""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


def parse_number(value: Any) -> Optional[int]:
    """
    Parse a salary from its string representation.

    Fractional amounts are rounded half up to whole dollars. Unparsable or
    non-finite values normalize to None instead of failing, so a garbled
    optional number is treated as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return int(math.floor(number + 0.5))


def is_valid_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not _URL_SCHEME.match(parts.scheme):
        return False
    if not parts.netloc or " " in value:
        return False
    try:
        # Raises on malformed ports like "http://host:abc"
        parts.port
    except ValueError:
        return False
    return True


def _salary(value: Any, label: str) -> Optional[int]:
    amount = parse_number(value)
    if amount is None:
        return None
    if amount < 0:
        raise PydanticCustomError("negative", f"{label} salary must be 0 or greater")
    if amount > SALARY_MAX:
        raise PydanticCustomError("too_large", f"{label} salary is too large")
    return amount


def _required_text(value: Any, label: str) -> str:
    text = _clean_string(value)
    if text is None:
        raise PydanticCustomError("required", f"{label} is required")
    if len(text) > NAME_MAX_LENGTH:
        raise PydanticCustomError(
            "too_long", f"{label} must be {NAME_MAX_LENGTH} characters or fewer"
        )
    return text


def _today(info: ValidationInfo) -> date:
    context = info.context or {}
    return context.get("today") or date.today()


class ApplicationInput(BaseModel):
    """Normalized application record. Every optional field is present, possibly None."""

    model_config = ConfigDict(extra="ignore")

    company_name: str
    position_title: str
    job_posting_url: Optional[str] = None
    location: Optional[str] = None
    work_type: Optional[str] = None
    salary_range_min: Optional[int] = None
    salary_range_max: Optional[int] = None
    status: str = DEFAULT_STATUS
    date_applied: date
    section_id: Optional[str] = None

    @field_validator("company_name", mode="before")
    @classmethod
    def check_company_name(cls, v):
        return _required_text(v, "Company name")

    @field_validator("position_title", mode="before")
    @classmethod
    def check_position_title(cls, v):
        return _required_text(v, "Position title")

    @field_validator("job_posting_url", mode="before")
    @classmethod
    def check_job_posting_url(cls, v):
        if v is not None and len(str(v)) > URL_MAX_LENGTH:
            raise PydanticCustomError(
                "too_long", f"URL must be {URL_MAX_LENGTH} characters or fewer"
            )
        url = _clean_string(v)
        if url is not None and not is_valid_url(url):
            raise PydanticCustomError("invalid_url", "Please enter a valid URL")
        return url

    @field_validator("location", mode="before")
    @classmethod
    def check_location(cls, v):
        location = _clean_string(v)
        if location is not None and len(location) > LOCATION_MAX_LENGTH:
            raise PydanticCustomError(
                "too_long", f"Location must be {LOCATION_MAX_LENGTH} characters or fewer"
            )
        return location

    @field_validator("work_type", mode="before")
    @classmethod
    def check_work_type(cls, v):
        work_type = _clean_string(v)
        if work_type is not None and work_type not in WORK_TYPES:
            raise PydanticCustomError("invalid_choice", "Please select a valid work type")
        return work_type

    @field_validator("salary_range_min", mode="before")
    @classmethod
    def check_salary_min(cls, v):
        return _salary(v, "Minimum")

    @field_validator("salary_range_max", mode="before")
    @classmethod
    def check_salary_max(cls, v):
        return _salary(v, "Maximum")

    @field_validator("salary_range_max")
    @classmethod
    def check_salary_range(cls, v, info: ValidationInfo):
        # The cross-field error always lands on the maximum
        minimum = info.data.get("salary_range_min")
        if v is not None and minimum is not None and v < minimum:
            raise PydanticCustomError(
                "salary_range", "Maximum must be greater than or equal to minimum"
            )
        return v

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v):
        status = v.strip() if isinstance(v, str) else v
        if status not in APPLICATION_STATUSES:
            raise PydanticCustomError("invalid_choice", "Please select a valid status")
        return status

    @field_validator("date_applied", mode="before")
    @classmethod
    def check_date_applied(cls, v, info: ValidationInfo):
        if isinstance(v, date):
            applied = v
        else:
            text = _clean_string(v)
            if text is None:
                raise PydanticCustomError("required", "Date applied is required")
            if not _ISO_DATE.match(text):
                raise PydanticCustomError(
                    "invalid_date", "Date applied must be a valid date (YYYY-MM-DD)"
                )
            try:
                applied = date.fromisoformat(text)
            except ValueError:
                raise PydanticCustomError(
                    "invalid_date", "Date applied must be a valid date (YYYY-MM-DD)"
                )
        if applied > _today(info):
            raise PydanticCustomError("future_date", "Date applied cannot be in the future")
        return applied

    @field_validator("section_id", mode="before")
    @classmethod
    def check_section_id(cls, v):
        section_id = _clean_string(v)
        if section_id is None:
            return None
        try:
            return str(uuid.UUID(section_id))
        except ValueError:
            raise PydanticCustomError("invalid_section", "Please select a valid section")


def _collect_fields(raw: Mapping[str, Any]) -> dict:
    fields = {key: raw.get(key) for key in APPLICATION_FIELDS}
    # Only an omitted status takes the default; an empty one is invalid
    if fields["status"] is None:
        del fields["status"]
    return fields


def validate_application(raw: Mapping[str, Any], today: Optional[date] = None) -> ValidationResult:
    """
    Parse raw form input into a normalized application record.

    Args:
        raw: Field name -> raw value (strings or None), e.g. submitted form data
        today: Reference date for the "not in the future" rule; defaults to the
            current date at the moment of validation

    Returns:
        ValidationSuccess with every field populated, or ValidationFailure with
        the first error message per field
    """
    try:
        record = ApplicationInput.model_validate(
            _collect_fields(raw), context={"today": today or date.today()}
        )
    except ValidationError as exc:
        return failure_from_error(exc)
    return ValidationSuccess(data=record.model_dump())


def validate_status(value: Any) -> ValidationResult:
    """Standalone check used by single-field status updates."""
    status = value.strip() if isinstance(value, str) else value
    if status not in APPLICATION_STATUSES:
        return ValidationFailure(field_errors={"status": "Invalid status value."})
    return ValidationSuccess(data={"status": status})
