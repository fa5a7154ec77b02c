"""
Account sign-up and sign-in.
"""
import logging
import re
from typing import Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.db import crud
from ..models.db import user as user_model
from ..security import get_password_hash, verify_password
from .results import CONFLICT, UNAUTHORIZED, VALIDATION, ActionError

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6
INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password"
EMAIL_TAKEN_MESSAGE = "Email already registered"
SIGNUP_FAILED_MESSAGE = "Something went wrong. Your account was not created. Please try again."

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def register_user(db: Session, email: str, password: str) -> Union[user_model.User, ActionError]:
    email = crud.normalize_email(email)
    if not _EMAIL.match(email):
        return ActionError(error="Please enter a valid email address.",
                           field_errors={"email": "Please enter a valid email address."}, kind=VALIDATION)
    if len(password or "") < PASSWORD_MIN_LENGTH:
        message = f"Password should be at least {PASSWORD_MIN_LENGTH} characters."
        return ActionError(error=message, field_errors={"password": message}, kind=VALIDATION)

    if crud.get_user_by_email(db, email=email):
        return ActionError(error=EMAIL_TAKEN_MESSAGE, kind=CONFLICT)

    try:
        user = crud.create_user(db, email=email, hashed_password=get_password_hash(password))
    except IntegrityError:
        db.rollback()
        return ActionError(error=EMAIL_TAKEN_MESSAGE, kind=CONFLICT)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to create account: %s", exc)
        return ActionError(error=SIGNUP_FAILED_MESSAGE)

    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Union[user_model.User, ActionError]:
    user = crud.get_user_by_email(db, email=email or "")
    if not user or not verify_password(password or "", user.hashed_password):
        logger.warning("Failed sign-in attempt for %s", crud.normalize_email(email))
        return ActionError(error=INVALID_CREDENTIALS_MESSAGE, kind=UNAUTHORIZED)
    if not user.is_active:
        return ActionError(error="Inactive user", kind=UNAUTHORIZED)
    return user
