"""
Server-rendered pages and their form actions.

Every mutation posts a regular HTML form. Whole-page mutations answer with a
303 redirect to the canonical view; failed submissions re-render the page with
the action's error envelope so the user keeps what they typed.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ..config.settings import get_settings
from ..constants import (
    APPLICATION_FIELDS,
    APPLICATION_STATUSES,
    DEFAULT_STATUS,
    STATUS_COLORS,
    STATUS_LABELS,
    WORK_TYPE_LABELS,
    WORK_TYPES,
    Routes,
)
from ..models.db import user as user_model
from ..models.db.database import get_db
from ..services import application_tracker, auth_service, section_service
from ..services.results import UNAUTHORIZED, ActionError
from ..utils.api_helpers import check_resource_exists, get_form_data, status_code_for
from ..utils.formatting import format_date, format_salary
from ..views import InlineRename, ListSurface, OptimisticValue, SurfaceState, ViewMode, project
from .auth import (
    LoginRequired,
    clear_session_cookie,
    get_optional_user,
    require_anonymous,
    require_page_user,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["format_date"] = format_date
templates.env.filters["status_label"] = lambda value: STATUS_LABELS.get(value, value)
templates.env.filters["status_color"] = lambda value: STATUS_COLORS.get(value, "gray")
templates.env.filters["work_type_label"] = lambda value: WORK_TYPE_LABELS.get(value, "") if value else ""
templates.env.globals.update(
    routes=Routes,
    statuses=APPLICATION_STATUSES,
    status_labels=STATUS_LABELS,
    work_types=WORK_TYPES,
    work_type_labels=WORK_TYPE_LABELS,
    format_salary=format_salary,
)


def _render(request: Request, name: str, context: Dict[str, Any], status_code: int = status.HTTP_200_OK):
    context.setdefault("app_name", get_settings().app_name)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _list_url(view: ViewMode, **params: str) -> str:
    query = {"view": view.value} if view is not ViewMode.ALL else {}
    query.update({key: value for key, value in params.items() if value})
    return Routes.APPLICATIONS + ("?" + urlencode(query) if query else "")


def _local_path(url: Optional[str], fallback: str) -> str:
    """Only follow redirects that stay on this site."""
    if url and url.startswith("/") and not url.startswith("//"):
        return url
    return fallback


def _raise_if_unauthorized(result: ActionError) -> None:
    if result.kind == UNAUTHORIZED:
        raise LoginRequired()


def _form_values(application) -> Dict[str, str]:
    """Stringify a stored application for pre-filling the edit form."""
    values = {}
    for key in APPLICATION_FIELDS:
        value = getattr(application, key)
        values[key] = "" if value is None else str(value)
    return values


def _blank_form_values() -> Dict[str, str]:
    values = {key: "" for key in APPLICATION_FIELDS}
    values["status"] = DEFAULT_STATUS
    values["date_applied"] = date.today().isoformat()
    return values


# ---------------------------------------------------------------------------
# Authentication pages
# ---------------------------------------------------------------------------
@router.get("/")
def home():
    return _redirect(Routes.APPLICATIONS)


@router.get("/login", dependencies=[Depends(require_anonymous)])
def login_page(request: Request):
    return _render(request, "login.html", {"email": "", "error": None})


@router.post("/login", dependencies=[Depends(require_anonymous)])
def login_submit(
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
):
    email = form.get("email", "")
    result = auth_service.authenticate_user(db, email=email, password=form.get("password", ""))
    if isinstance(result, ActionError):
        return _render(request, "login.html", {"email": email, "error": result.error},
                       status_code=status_code_for(result))
    logger.info("User %s signed in", result.id)
    response = _redirect(Routes.APPLICATIONS)
    set_session_cookie(response, result)
    return response


@router.get("/signup", dependencies=[Depends(require_anonymous)])
def signup_page(request: Request):
    return _render(request, "signup.html", {"email": "", "error": None, "field_errors": {}})


@router.post("/signup", dependencies=[Depends(require_anonymous)])
def signup_submit(
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
):
    email = form.get("email", "")
    result = auth_service.register_user(db, email=email, password=form.get("password", ""))
    if isinstance(result, ActionError):
        context = {"email": email, "error": result.error, "field_errors": result.field_errors or {}}
        return _render(request, "signup.html", context, status_code=status_code_for(result))
    response = _redirect(Routes.APPLICATIONS)
    set_session_cookie(response, result)
    return response


@router.post(Routes.LOGOUT)
def logout_submit():
    response = _redirect(Routes.LOGIN)
    clear_session_cookie(response)
    return response


# ---------------------------------------------------------------------------
# Application list
# ---------------------------------------------------------------------------
@router.get(Routes.APPLICATIONS)
def applications_page(
    request: Request,
    db: Session = Depends(get_db),
    user: user_model.User = Depends(require_page_user),
):
    """
    The application list in flat or by-section view.

    Query parameters drive the overlays: `drawer=create`, `edit=<id>`,
    `detail=<id>`, `closed=<id>` and `delete=<id>`. `focus=<control id>`
    marks the control that should get keyboard focus after an overlay closed.
    """
    settings = get_settings()
    params = request.query_params
    mode = ViewMode.parse(params.get("view"))

    applications = application_tracker.get_applications_for_user(db, user_id=user.id)
    by_id = {application.id: application for application in applications}
    surface = ListSurface.from_query(params, by_id.get, close_delay=settings.detail_close_delay_ms / 1000)

    drawer_values = None
    if surface.state is SurfaceState.DRAWER_OPEN:
        if surface.drawer_record_id:
            drawer_values = _form_values(by_id[surface.drawer_record_id])
        else:
            drawer_values = _blank_form_values()

    context = {
        "user": user,
        "view": project(applications, mode),
        "mode": mode,
        "toggle_url": _list_url(mode.toggled()),
        "surface": surface,
        "values": drawer_values or {},
        "drawer_close_url": _list_url(mode, focus=surface.drawer_opener),
        "close_url": _list_url(mode),
        "close_delay_ms": settings.detail_close_delay_ms,
        "list_url": lambda **kwargs: _list_url(mode, **kwargs),
        "focus": params.get("focus"),
        "sections": section_service.get_sections_for_user(db, user_id=user.id),
        "field_errors": {},
        "error": None,
    }
    return _render(request, "applications/list.html", context)


# ---------------------------------------------------------------------------
# Create / edit forms
# ---------------------------------------------------------------------------
def _render_form(request, db, user, values, application=None, error=None, field_errors=None,
                 status_code=status.HTTP_200_OK):
    context = {
        "user": user,
        "application": application,
        "values": values,
        "sections": section_service.get_sections_for_user(db, user_id=user.id),
        "error": error,
        "field_errors": field_errors or {},
    }
    return _render(request, "applications/form.html", context, status_code=status_code)


@router.get(Routes.APPLICATION_NEW)
def new_application_page(
    request: Request,
    db: Session = Depends(get_db),
    user: user_model.User = Depends(require_page_user),
):
    return _render_form(request, db, user, _blank_form_values())


@router.post(Routes.APPLICATION_NEW)
def create_application_submit(
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    result = application_tracker.create_application(db, user, form)
    if isinstance(result, ActionError):
        _raise_if_unauthorized(result)
        return _render_form(request, db, user, form, error=result.error, field_errors=result.field_errors,
                            status_code=status_code_for(result))
    return _redirect(result.url)


@router.get("/applications/{application_id}/edit")
def edit_application_page(
    application_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: user_model.User = Depends(require_page_user),
):
    application = application_tracker.get_application_by_id(db, application_id, user.id)
    check_resource_exists(application, "Application")
    return _render_form(request, db, user, _form_values(application), application=application)


@router.post("/applications/{application_id}/edit")
def update_application_submit(
    application_id: str,
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    result = application_tracker.update_application(db, user, application_id, form)
    if isinstance(result, ActionError):
        _raise_if_unauthorized(result)
        application = application_tracker.get_application_by_id(db, application_id, user.id)
        check_resource_exists(application, "Application")
        return _render_form(request, db, user, form, application=application, error=result.error,
                            field_errors=result.field_errors, status_code=status_code_for(result))
    return _redirect(result.url)


# ---------------------------------------------------------------------------
# Detail, status and delete
# ---------------------------------------------------------------------------
def _render_detail(request, user, application, status_value=None, status_error=None, delete_error=None,
                   confirm_delete=False, status_code=status.HTTP_200_OK):
    context = {
        "user": user,
        "application": application,
        "status_value": status_value or application.status,
        "status_error": status_error,
        "updated": request.query_params.get("updated") == "1",
        "confirm_delete": confirm_delete or delete_error is not None,
        "delete_error": delete_error,
    }
    return _render(request, "applications/detail.html", context, status_code=status_code)


@router.get("/applications/{application_id}")
def application_detail_page(
    application_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: user_model.User = Depends(require_page_user),
):
    application = application_tracker.get_application_by_id(db, application_id, user.id)
    check_resource_exists(application, "Application")
    return _render_detail(request, user, application, confirm_delete=request.query_params.get("delete") == "1")


@router.post("/applications/{application_id}/status")
def application_status_submit(
    application_id: str,
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    """
    Change the status from the detail view.

    The chosen status is shown right away and reverted to the stored one if
    the update fails.
    """
    if user is None:
        raise LoginRequired()
    application = application_tracker.get_application_by_id(db, application_id, user.id)
    check_resource_exists(application, "Application")

    status_value = OptimisticValue(application.status)
    committed = status_value.apply(
        form.get("status"),
        lambda value: application_tracker.update_application_status(db, user, application_id, value),
    )
    if not committed:
        return _render_detail(request, user, application, status_value=status_value.displayed,
                              status_error=status_value.error.error,
                              status_code=status_code_for(status_value.error))
    return _redirect(_local_path(form.get("next"), Routes.application_detail(application_id)))


@router.post("/applications/{application_id}/delete")
def application_delete_submit(
    application_id: str,
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    """
    Two-step delete. Without `confirm=yes` the confirmation is revealed and
    nothing is deleted.
    """
    if user is None:
        raise LoginRequired()
    application = application_tracker.get_application_by_id(db, application_id, user.id)
    check_resource_exists(application, "Application")

    if form.get("confirm") != "yes":
        return _redirect(Routes.application_detail(application_id) + "?delete=1")

    surface = ListSurface()
    surface.request_delete(application_id)
    result = surface.confirm_delete(lambda record_id: application_tracker.delete_application(db, user, record_id))
    if isinstance(result, ActionError):
        return _render_detail(request, user, application, delete_error=surface.delete_error,
                              status_code=status_code_for(result))
    return _redirect(result.url)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------
def _render_sections(request, db, user, create_name="", create_error=None, rename=None, rename_id=None,
                     delete_id=None, banner=None, status_code=status.HTTP_200_OK):
    context = {
        "user": user,
        "sections": section_service.get_sections_with_counts(db, user_id=user.id),
        "create_name": create_name,
        "create_error": create_error,
        "rename": rename,
        "rename_id": rename_id,
        "delete_id": delete_id,
        "banner": banner,
    }
    return _render(request, "sections.html", context, status_code=status_code)


@router.get(Routes.SECTIONS)
def sections_page(
    request: Request,
    db: Session = Depends(get_db),
    user: user_model.User = Depends(require_page_user),
):
    params = request.query_params
    rename = None
    rename_id = params.get("rename")
    if rename_id:
        section = section_service.get_section_by_id(db, rename_id, user.id)
        if section is not None:
            rename = InlineRename(section.name)
            rename.start()
        else:
            rename_id = None
    return _render_sections(request, db, user, rename=rename, rename_id=rename_id, delete_id=params.get("delete"))


@router.post(Routes.SECTIONS)
def create_section_submit(
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    result = section_service.create_section(db, user, form)
    if isinstance(result, ActionError):
        _raise_if_unauthorized(result)
        field_error = (result.field_errors or {}).get("name")
        return _render_sections(request, db, user, create_name=form.get("name", ""),
                                create_error=field_error or result.error,
                                status_code=status_code_for(result))
    return _redirect(Routes.SECTIONS)


@router.post("/sections/{section_id}/rename")
def rename_section_submit(
    section_id: str,
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    """
    Inline rename. On failure the input re-opens holding the server's message,
    and the section keeps its previous name.
    """
    if user is None:
        raise LoginRequired()
    section = section_service.get_section_by_id(db, section_id, user.id)
    check_resource_exists(section, "Section")

    rename = InlineRename(section.name)
    rename.start()
    try:
        committed = rename.apply(
            form.get("name"),
            lambda name: section_service.rename_section(db, user, section_id, {"name": name}),
        )
    except ValueError:
        return _render_sections(request, db, user, rename=rename, rename_id=section_id,
                                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    if not committed:
        return _render_sections(request, db, user, rename=rename, rename_id=section_id,
                                status_code=status_code_for(rename.error))
    return _redirect(Routes.SECTIONS)


@router.post("/sections/{section_id}/delete")
def delete_section_submit(
    section_id: str,
    request: Request,
    form: Dict[str, str] = Depends(get_form_data),
    db: Session = Depends(get_db),
    user: Optional[user_model.User] = Depends(get_optional_user),
):
    if user is None:
        raise LoginRequired()
    if form.get("confirm") != "yes":
        return _redirect(Routes.SECTIONS + "?" + urlencode({"delete": section_id}))
    result = section_service.delete_section(db, user, section_id)
    if isinstance(result, ActionError):
        return _render_sections(request, db, user, delete_id=section_id, banner=result.error,
                                status_code=status_code_for(result))
    return _redirect(Routes.SECTIONS)
