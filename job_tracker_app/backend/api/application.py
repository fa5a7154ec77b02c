from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from .. import schemas
from ..models.db import user as user_model
from ..models.db.database import get_db
from ..services import application_tracker as application_service
from ..services.results import ActionError, Redirect
from ..utils.api_helpers import check_resource_exists, error_response
from ..views.grouping import ViewMode, project
from .auth import get_current_active_user, get_optional_user

router = APIRouter()


def _saved_application(db: Session, result: Redirect, user_id: str):
    """Re-read a record after a mutation redirected to it, with its section joined."""
    db_application = application_service.get_application_by_id(db, result.record_id, user_id)
    check_resource_exists(db_application, "Application")
    return db_application


@router.post("/", response_model=schemas.Application, status_code=status.HTTP_201_CREATED,
             responses={422: {"model": schemas.ActionErrorResponse}, 401: {"model": schemas.ActionErrorResponse}})
def create_application(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Create a new job application entry for the current user.

    The body is the raw field mapping; validation errors come back as the
    `{error, fieldErrors}` envelope with status 422.
    """
    result = application_service.create_application(db, current_user, payload)
    if isinstance(result, ActionError):
        return error_response(result)
    return _saved_application(db, result, current_user.id)


@router.get("/", response_model=List[schemas.Application])
def read_applications(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Retrieve all job applications for the current user, newest first.
    """
    return application_service.get_applications_for_user(
        db, user_id=current_user.id, skip=skip, limit=limit
    )


@router.get("/grouped", response_model=schemas.GroupedApplications)
def read_grouped_applications(
    view: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    The application list projected for a view mode.

    `all` returns a single group holding the flat list; `by-section` returns
    one group per section plus a trailing "Unsectioned" group when needed.
    """
    mode = ViewMode.parse(view)
    applications = [
        schemas.Application.model_validate(application)
        for application in application_service.get_applications_for_user(db, user_id=current_user.id)
    ]
    projected = project(applications, mode)
    if projected.groups is None:
        groups = [schemas.ApplicationGroup(name="All", count=len(applications), applications=applications)]
    else:
        groups = [
            schemas.ApplicationGroup(
                name=group.name,
                count=group.count,
                is_unsectioned=group.is_unsectioned,
                applications=group.applications,
            )
            for group in projected.groups
        ]
    return schemas.GroupedApplications(view=mode.value, groups=groups)


@router.get("/{application_id}", response_model=schemas.Application)
def read_application(
    application_id: str,
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Retrieve a specific job application by its ID.
    """
    db_application = application_service.get_application_by_id(
        db, application_id=application_id, user_id=current_user.id
    )
    check_resource_exists(db_application, "Application")
    return db_application


@router.put("/{application_id}", response_model=schemas.Application,
            responses={404: {"model": schemas.ActionErrorResponse}, 422: {"model": schemas.ActionErrorResponse}})
def update_application(
    application_id: str,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Replace a job application's details. Same rules as create.
    """
    result = application_service.update_application(db, current_user, application_id, payload)
    if isinstance(result, ActionError):
        return error_response(result)
    return _saved_application(db, result, current_user.id)


@router.delete("/{application_id}", response_model=schemas.ActionSuccessResponse,
               responses={404: {"model": schemas.ActionErrorResponse}})
def delete_application(
    application_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Delete a job application.
    """
    result = application_service.delete_application(db, current_user, application_id)
    if isinstance(result, ActionError):
        return error_response(result)
    return {"success": True}


@router.patch("/{application_id}/status",
              responses={404: {"model": schemas.ActionErrorResponse}, 422: {"model": schemas.ActionErrorResponse}})
def update_application_status(
    application_id: str,
    update: schemas.StatusUpdate,
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Move an application to another pipeline status. Any status may follow any other.
    """
    result = application_service.update_application_status(db, current_user, application_id, update.status)
    if isinstance(result, ActionError):
        return error_response(result)
    return result.payload
