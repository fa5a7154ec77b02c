from .application import validate_application, validate_status
from .results import ValidationFailure, ValidationResult, ValidationSuccess
from .section import validate_section_name

__all__ = [
    "validate_application",
    "validate_status",
    "validate_section_name",
    "ValidationFailure",
    "ValidationResult",
    "ValidationSuccess",
]
