"""
Queries and mutations for job applications.

Every query is scoped to the owner's user id, so one user can never read or
change another user's rows. Mutations check the session first, validate
second, and only then touch the database. The status update is the exception:
it validates the new status before checking the session.
"""
import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..constants import Routes
from ..models.db import application as application_model
from ..models.db import section as section_model
from ..models.db import user as user_model
from ..validators import ValidationFailure, validate_application, validate_status
from .results import (
    NOT_FOUND,
    VALIDATION,
    ActionError,
    ActionResult,
    ActionSuccess,
    Redirect,
    unauthorized,
    validation_error,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Something went wrong. Your changes were not saved. Please try again."
DELETE_FAILED_MESSAGE = "Something went wrong. The application could not be deleted. Please try again."
STATUS_FAILED_MESSAGE = "Something went wrong. The status could not be updated. Please try again."
NOT_FOUND_MESSAGE = "Application not found."

Application = application_model.Application


def get_application_by_id(db: Session, application_id: str, user_id: str) -> Optional[Application]:
    return db.query(Application).options(joinedload(Application.section)).filter(
        Application.id == application_id,
        Application.user_id == user_id
    ).first()


def get_applications_for_user(db: Session, user_id: str, skip: int = 0, limit: Optional[int] = None):
    """Owner's applications with their section joined, newest date applied first."""
    query = db.query(Application).options(joinedload(Application.section)).filter(
        Application.user_id == user_id
    ).order_by(Application.date_applied.desc(), Application.created_at.desc())
    if skip:
        query = query.offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def _check_section_owner(db: Session, data: dict, user_id: str) -> Optional[ActionError]:
    section_id = data.get("section_id")
    if section_id is None:
        return None
    owned = db.query(section_model.Section.id).filter(
        section_model.Section.id == section_id,
        section_model.Section.user_id == user_id
    ).first()
    if owned is None:
        return validation_error({"section_id": "Please select a valid section"})
    return None


def create_application(db: Session, user: Optional[user_model.User], raw: Mapping[str, Any]) -> ActionResult:
    """
    Create an application for the signed-in user.

    Redirects to the new record's detail page on success.
    """
    if user is None:
        return unauthorized("create an application")

    parsed = validate_application(raw)
    if isinstance(parsed, ValidationFailure):
        return validation_error(parsed.field_errors)

    try:
        section_error = _check_section_owner(db, parsed.data, user.id)
        if section_error:
            return section_error
        db_application = Application(**parsed.data, user_id=user.id)
        db.add(db_application)
        db.commit()
        db.refresh(db_application)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to create application for user %s: %s", user.id, exc)
        return ActionError(error=SAVE_FAILED_MESSAGE)

    logger.info("Created application %s for user %s", db_application.id, user.id)
    return Redirect(Routes.application_detail(db_application.id), record_id=db_application.id)


def update_application(
    db: Session,
    user: Optional[user_model.User],
    application_id: str,
    raw: Mapping[str, Any],
) -> ActionResult:
    """
    Replace an application's fields with a validated payload.

    The rules are exactly those of create_application. Redirects to the
    detail page with the "updated" banner on success.
    """
    if user is None:
        return unauthorized("update an application")

    parsed = validate_application(raw)
    if isinstance(parsed, ValidationFailure):
        return validation_error(parsed.field_errors)

    try:
        db_application = get_application_by_id(db, application_id, user.id)
        if db_application is None:
            return ActionError(error=NOT_FOUND_MESSAGE, kind=NOT_FOUND)
        section_error = _check_section_owner(db, parsed.data, user.id)
        if section_error:
            return section_error
        for key, value in parsed.data.items():
            setattr(db_application, key, value)
        db.commit()
        db.refresh(db_application)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update application %s: %s", application_id, exc)
        return ActionError(error=SAVE_FAILED_MESSAGE)

    logger.info("Updated application %s", application_id)
    return Redirect(Routes.application_detail(application_id) + "?updated=1", record_id=application_id)


def delete_application(db: Session, user: Optional[user_model.User], application_id: str) -> ActionResult:
    if user is None:
        return unauthorized("delete an application")

    try:
        db_application = get_application_by_id(db, application_id, user.id)
        if db_application is None:
            return ActionError(error=NOT_FOUND_MESSAGE, kind=NOT_FOUND)
        db.delete(db_application)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete application %s: %s", application_id, exc)
        return ActionError(error=DELETE_FAILED_MESSAGE)

    logger.info("Deleted application %s", application_id)
    return Redirect(Routes.APPLICATIONS)


def update_application_status(
    db: Session,
    user: Optional[user_model.User],
    application_id: str,
    status: Any,
) -> ActionResult:
    """
    Change only the status column. Any status may follow any other.

    Returns a small success payload instead of redirecting, so an open detail
    view can keep its state.
    """
    parsed = validate_status(status)
    if isinstance(parsed, ValidationFailure):
        return ActionError(error=parsed.field_errors["status"], field_errors=parsed.field_errors,
                           kind=VALIDATION)

    if user is None:
        return unauthorized("update the status")

    try:
        db_application = get_application_by_id(db, application_id, user.id)
        if db_application is None:
            return ActionError(error=NOT_FOUND_MESSAGE, kind=NOT_FOUND)
        db_application.status = parsed.data["status"]
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update status of application %s: %s", application_id, exc)
        return ActionError(error=STATUS_FAILED_MESSAGE)

    logger.info("Application %s moved to %s", application_id, parsed.data["status"])
    return ActionSuccess({"success": True, "status": parsed.data["status"]})
