"""
Queries and mutations for user-defined sections.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.db import application as application_model
from ..models.db import section as section_model
from ..models.db import user as user_model
from ..validators import ValidationFailure, validate_section_name
from .results import (
    CONFLICT,
    FIX_ERRORS_MESSAGE,
    NOT_FOUND,
    ActionError,
    ActionResult,
    ActionSuccess,
    is_unique_violation,
    unauthorized,
    validation_error,
)

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "A section with this name already exists"
CREATE_FAILED_MESSAGE = "Failed to create section. Please try again."
RENAME_FAILED_MESSAGE = "Failed to rename section. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete section. Please try again."
NOT_FOUND_MESSAGE = "Section not found."

Section = section_model.Section


@dataclass
class SectionWithCount:
    id: str
    name: str
    application_count: int
    created_at: Any = None
    updated_at: Any = None


def _duplicate_name() -> ActionError:
    return ActionError(error=FIX_ERRORS_MESSAGE, field_errors={"name": DUPLICATE_NAME_MESSAGE}, kind=CONFLICT)


def get_section_by_id(db: Session, section_id: str, user_id: str) -> Optional[Section]:
    return db.query(Section).filter(
        Section.id == section_id,
        Section.user_id == user_id
    ).first()


def get_sections_for_user(db: Session, user_id: str) -> List[Section]:
    return db.query(Section).filter(Section.user_id == user_id).order_by(func.lower(Section.name)).all()


def get_sections_with_counts(db: Session, user_id: str) -> List[SectionWithCount]:
    """Owner's sections ordered by name, each with the number of applications filed under it."""
    Application = application_model.Application
    rows = db.query(Section, func.count(Application.id)).outerjoin(
        Application, Application.section_id == Section.id
    ).filter(
        Section.user_id == user_id
    ).group_by(Section.id).order_by(func.lower(Section.name)).all()

    return [
        SectionWithCount(
            id=section.id,
            name=section.name,
            application_count=count,
            created_at=section.created_at,
            updated_at=section.updated_at,
        )
        for section, count in rows
    ]


def create_section(db: Session, user: Optional[user_model.User], raw: Mapping[str, Any]) -> ActionResult:
    if user is None:
        return unauthorized("create a section")

    parsed = validate_section_name(raw)
    if isinstance(parsed, ValidationFailure):
        return validation_error(parsed.field_errors)

    try:
        db_section = Section(user_id=user.id, name=parsed.data["name"])
        db.add(db_section)
        db.commit()
        db.refresh(db_section)
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            logger.info("Duplicate section name for user %s", user.id)
            return _duplicate_name()
        logger.error("Failed to create section for user %s: %s", user.id, exc)
        return ActionError(error=CREATE_FAILED_MESSAGE)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to create section for user %s: %s", user.id, exc)
        return ActionError(error=CREATE_FAILED_MESSAGE)

    logger.info("Created section %s for user %s", db_section.id, user.id)
    return ActionSuccess({"success": True, "id": db_section.id, "name": db_section.name})


def rename_section(
    db: Session,
    user: Optional[user_model.User],
    section_id: str,
    raw: Mapping[str, Any],
) -> ActionResult:
    if user is None:
        return unauthorized("rename a section")

    parsed = validate_section_name(raw)
    if isinstance(parsed, ValidationFailure):
        return validation_error(parsed.field_errors)

    try:
        db_section = get_section_by_id(db, section_id, user.id)
        if db_section is None:
            return ActionError(error=NOT_FOUND_MESSAGE, kind=NOT_FOUND)
        db_section.name = parsed.data["name"]
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            logger.info("Duplicate section name for user %s", user.id)
            return _duplicate_name()
        logger.error("Failed to rename section %s: %s", section_id, exc)
        return ActionError(error=RENAME_FAILED_MESSAGE)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to rename section %s: %s", section_id, exc)
        return ActionError(error=RENAME_FAILED_MESSAGE)

    logger.info("Renamed section %s", section_id)
    return ActionSuccess({"success": True, "id": section_id, "name": parsed.data["name"]})


def delete_section(db: Session, user: Optional[user_model.User], section_id: str) -> ActionResult:
    """
    Delete a section. Its applications are kept and become unsectioned.
    """
    if user is None:
        return unauthorized("delete a section")

    try:
        db_section = get_section_by_id(db, section_id, user.id)
        if db_section is None:
            return ActionError(error=NOT_FOUND_MESSAGE, kind=NOT_FOUND)
        detached = db.query(application_model.Application).filter(
            application_model.Application.section_id == section_id,
            application_model.Application.user_id == user.id
        ).update({application_model.Application.section_id: None}, synchronize_session="fetch")
        db.delete(db_section)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete section %s: %s", section_id, exc)
        return ActionError(error=DELETE_FAILED_MESSAGE)

    logger.info("Deleted section %s, %s application(s) moved to Unsectioned", section_id, detached)
    return ActionSuccess({"success": True, "id": section_id})
