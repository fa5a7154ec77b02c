"""
Common API utilities shared by the JSON API and the HTML page routes.
"""
import logging
from typing import Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..services import results

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    results.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    results.CONFLICT: status.HTTP_409_CONFLICT,
    results.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    results.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    results.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(error: results.ActionError) -> int:
    """
    Map an action error to an HTTP status code.

    Args:
        error: The failed action result

    Returns:
        HTTP status code; unknown kinds are treated as server errors
    """
    return _STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(error: results.ActionError) -> JSONResponse:
    """Render the `{error, fieldErrors?}` envelope with a matching status code."""
    code = status_code_for(error)
    if code >= 500:
        logger.warning("Action failed: %s", error.error)
    return JSONResponse(status_code=code, content=error.to_dict())


async def get_form_data(request: Request) -> Dict[str, str]:
    """
    Dependency returning submitted form fields as plain strings.

    File uploads are not part of any form in this application and are dropped.
    """
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def check_resource_exists(resource: Optional[object], resource_type: str) -> None:
    """
    Raise a 404 if the resource lookup came back empty.

    Args:
        resource: The resource to check
        resource_type: Type of resource for error message

    Raises:
        HTTPException: If resource is None
    """
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} not found"
        )
