"""
Error taxonomy for page rendering and its translation rules

Every failure that reaches the HTTP edge is one of the RealmError kinds
below. User-facing kinds (PageNotFound, InputError, FormError) carry text
that is safe to show; internal kinds are logged in full and answered with
an opaque message.
"""
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from realm.core.request_config import RequestConfigError

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class RealmError(Exception):
    """Base class for all errors surfaced by the rendering layer"""

    status_code: int = 500
    internal: bool = True
    kind: str = "realm_error"

    def public_message(self) -> str:
        """Text that may be shown to an untrusted client"""
        if self.internal:
            return INTERNAL_ERROR_MESSAGE
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing JSON payload"""
        return {"detail": self.public_message(), "type": self.kind}


class PageNotFound(RealmError):
    status_code = 404
    internal = False
    kind = "page_not_found"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"404 Page Not Found: {message}")

    def public_message(self) -> str:
        return self.message


class InputError(RealmError):
    """Malformed request-derived configuration"""

    status_code = 400
    internal = False
    kind = "input_error"

    def __init__(self, error: RequestConfigError):
        self.error = error
        super().__init__(f"Input Error: {error}")

    def public_message(self) -> str:
        return str(self.error)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.error.name
        return payload


class FormError(RealmError):
    """Field-level validation failures, one message per field"""

    status_code = 422
    internal = False
    kind = "form_error"

    def __init__(self, errors: Optional[Dict[str, str]] = None):
        self.errors: Dict[str, str] = dict(errors or {})
        super().__init__(f"Form Error: {self.errors!r}")

    def add(self, field: str, message: str) -> "FormError":
        self.errors[field] = message
        self.args = (f"Form Error: {self.errors!r}",)
        return self

    def public_message(self) -> str:
        return "Form validation failed"

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": dict(self.errors), "type": self.kind}


class CustomError(RealmError):
    kind = "custom_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Internal Server Error: {message}")


class TransportError(RealmError):
    """Failure building or sending an outbound HTTP message"""

    kind = "transport_error"

    def __init__(self, error: Exception):
        self.error = error
        super().__init__(f"HTTP Error: {error}")


class EnvVarError(RealmError):
    """A required environment variable is not set"""

    kind = "env_var_error"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Env Var Error: {name} is not set")


class PersistenceError(RealmError):
    """Failure reported by the storage layer"""

    kind = "persistence_error"

    def __init__(self, error: Exception):
        self.error = error
        super().__init__(f"Persistence Error: {error}")


class RenderError(RealmError):
    """Serialization or template failure while producing a page body"""

    kind = "render_error"

    def __init__(self, error: Exception, mode: Optional[str] = None):
        self.error = error
        self.mode = mode
        super().__init__(f"Render Error ({mode or 'unknown'} mode): {error}")


def form_error(key: str, message: str):
    """Raise a FormError for a single field"""
    raise FormError({key: message})


def or_404(error: BaseException) -> PageNotFound:
    """Rewrite a lookup failure as PageNotFound, keeping its text"""
    if isinstance(error, PageNotFound):
        return error
    not_found = PageNotFound(str(error))
    not_found.__cause__ = error
    return not_found


@contextmanager
def not_found_on_error() -> Iterator[None]:
    """Treat any exception raised inside the block as a missing resource"""
    try:
        yield
    except Exception as exc:
        raise or_404(exc) from exc


def _validation_errors(error: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "__root__"
        errors.setdefault(field, item.get("msg", "invalid value"))
    return errors


@contextmanager
def form_errors_on_invalid() -> Iterator[None]:
    """
    Report pydantic validation of request-derived input as a FormError.

    Validation failures outside such a block are internal errors.
    """
    try:
        yield
    except ValidationError as exc:
        raise FormError(_validation_errors(exc)) from exc


def to_realm_error(exc: BaseException) -> RealmError:
    """Map a collaborator exception onto the taxonomy"""
    if isinstance(exc, RealmError):
        return exc
    if isinstance(exc, RequestConfigError):
        converted: RealmError = InputError(exc)
    elif isinstance(exc, SQLAlchemyError):
        converted = PersistenceError(exc)
    elif isinstance(exc, httpx.HTTPError):
        converted = TransportError(exc)
    else:
        converted = CustomError(str(exc) or type(exc).__name__)
    converted.__cause__ = exc
    return converted


def require_env(name: str) -> str:
    """Return the value of an environment variable or raise EnvVarError"""
    value = os.environ.get(name)
    if value is None:
        raise EnvVarError(name)
    return value
