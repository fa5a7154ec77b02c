from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas
from ..models.db import user as user_model
from ..models.db.database import get_db
from ..services import section_service
from ..services.results import ActionError
from ..utils.api_helpers import error_response
from .auth import get_current_active_user, get_optional_user

router = APIRouter()


@router.get("/", response_model=List[schemas.SectionWithCount])
def read_sections(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    The current user's sections in name order, each with its application count.
    """
    return section_service.get_sections_with_counts(db, user_id=current_user.id)


@router.post("/", status_code=status.HTTP_201_CREATED,
             responses={409: {"model": schemas.ActionErrorResponse}, 422: {"model": schemas.ActionErrorResponse}})
def create_section(
    body: schemas.SectionName,
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    result = section_service.create_section(db, current_user, {"name": body.name})
    if isinstance(result, ActionError):
        return error_response(result)
    return result.payload


@router.patch("/{section_id}",
              responses={404: {"model": schemas.ActionErrorResponse}, 409: {"model": schemas.ActionErrorResponse}})
def rename_section(
    section_id: str,
    body: schemas.SectionName,
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Rename a section. A name already used by another of the user's sections,
    compared case-insensitively, is rejected with 409.
    """
    result = section_service.rename_section(db, current_user, section_id, {"name": body.name})
    if isinstance(result, ActionError):
        return error_response(result)
    return result.payload


@router.delete("/{section_id}", responses={404: {"model": schemas.ActionErrorResponse}})
def delete_section(
    section_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[user_model.User] = Depends(get_optional_user)
):
    """
    Delete a section. Its applications are kept and become unsectioned.
    """
    result = section_service.delete_section(db, current_user, section_id)
    if isinstance(result, ActionError):
        return error_response(result)
    return result.payload
