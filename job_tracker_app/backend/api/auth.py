import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials, OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from .. import schemas
from ..config.settings import get_settings
from ..constants import Routes
from ..models.db import crud
from ..models.db import user as user_model
from ..models.db.database import get_db
from ..security import create_access_token, decode_access_token
from ..services import auth_service
from ..services.results import CONFLICT, VALIDATION, ActionError

logger = logging.getLogger(__name__)

router = APIRouter()

# Bearer tokens for API clients; browsers carry the same token in a cookie
oauth2_scheme = HTTPBearer(scheme_name="Bearer", auto_error=False)


class LoginRequired(Exception):
    """Raised by page dependencies when no one is signed in."""


class AlreadyAuthenticated(Exception):
    """Raised when a signed-in user opens the login or signup page."""


def set_session_cookie(response: Response, user: user_model.User) -> str:
    settings = get_settings()
    token = create_access_token(data={"sub": user.id})
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return token


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
) -> Optional[user_model.User]:
    """
    Resolve the signed-in user from the bearer token or the session cookie.
    Returns None instead of failing so actions can report "not logged in" themselves.
    """
    token = credentials.credentials if credentials else request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    user = crud.get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(user: Optional[user_model.User] = Depends(get_optional_user)):
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(current_user: schemas.User = Depends(get_current_user)):
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


def require_page_user(user: Optional[user_model.User] = Depends(get_optional_user)) -> user_model.User:
    if user is None:
        raise LoginRequired()
    return user


def require_anonymous(user: Optional[user_model.User] = Depends(get_optional_user)) -> None:
    if user is not None:
        raise AlreadyAuthenticated()


@router.post("/register", response_model=schemas.User)
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    result = auth_service.register_user(db, email=user.email, password=user.password)
    if isinstance(result, ActionError):
        code = status.HTTP_400_BAD_REQUEST
        if result.kind not in (CONFLICT, VALIDATION):
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        raise HTTPException(status_code=code, detail=result.error)
    return result


@router.post("/login", response_model=schemas.Token)
def login(db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()):
    result = auth_service.authenticate_user(db, email=form_data.username, password=form_data.password)
    if isinstance(result, ActionError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error,
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": result.id})
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True, "redirect": Routes.LOGIN}


@router.get("/me", response_model=schemas.User)
def read_current_user(current_user: schemas.User = Depends(get_current_active_user)):
    return current_user
