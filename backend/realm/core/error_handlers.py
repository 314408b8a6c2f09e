"""
Translate RealmError kinds into HTTP responses
"""
from http import HTTPStatus

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from realm.core.errors import FormError, RealmError, to_realm_error
from realm.core.logging_config import LoggingConfig
from realm.core.mode import RenderMode, detect_mode
from realm.core.request_config import RequestConfigError

logger = LoggingConfig.get_logger(__name__)

ERROR_TEMPLATE = "error.html"


def _html_error(request: Request, exc: RealmError) -> HTMLResponse:
    realm = request.app.state.realm
    template = realm.html.env.get_template(ERROR_TEMPLATE)
    content = template.render(
        status_code=exc.status_code,
        title=HTTPStatus(exc.status_code).phrase,
        message=exc.public_message(),
        errors=exc.errors if isinstance(exc, FormError) else None,
    )
    return HTMLResponse(content=content, status_code=exc.status_code)


def error_response(request: Request, exc: RealmError) -> Response:
    """Response for `exc` in the representation the request asked for"""
    if detect_mode(request) is RenderMode.HTML and getattr(request.app.state, "realm", None):
        return _html_error(request, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def realm_error_handler(request: Request, exc: Exception) -> Response:
    error = to_realm_error(exc)
    extra = {
        "error_type": type(error).__name__,
        "status_code": error.status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if error.internal:
        logger.error(
            f"Internal error: {error}",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra=extra,
        )
    else:
        logger.info(f"Client error: {error}", extra=extra)
    return error_response(request, error)


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers for the taxonomy and the collaborator errors it converts"""
    for exc_class in (RealmError, RequestConfigError, ValidationError, SQLAlchemyError, httpx.HTTPError):
        app.add_exception_handler(exc_class, realm_error_handler)
    # Anything else is reported opaquely; Starlette re-raises it after responding
    app.add_exception_handler(Exception, realm_error_handler)
