"""
Typed access to request-derived configuration (query string and JSON body)
"""
import json
from typing import Any, Callable, Dict, Mapping, Optional

from starlette.requests import Request

_MISSING = object()
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class RequestConfigError(Exception):
    """A request value is missing or cannot be converted"""

    MISSING = "missing"
    INVALID = "invalid"
    BODY = "body"

    def __init__(self, kind: str, name: Optional[str], message: str):
        self.kind = kind
        self.name = name
        self.message = message
        super().__init__(message)


class RequestConfig:
    """
    Values supplied by the caller of a page.

    Query parameters are merged with the top-level keys of a JSON object
    body; body values win on conflict.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    @classmethod
    async def from_request(cls, request: Request) -> "RequestConfig":
        values: Dict[str, Any] = dict(request.query_params)
        content_type = request.headers.get("content-type", "")
        if content_type.split(";")[0].strip() == "application/json":
            raw = await request.body()
            if raw:
                try:
                    body = json.loads(raw)
                except ValueError as e:
                    raise RequestConfigError(
                        RequestConfigError.BODY, None, f"Request body is not valid JSON: {e}"
                    ) from e
                if not isinstance(body, dict):
                    raise RequestConfigError(
                        RequestConfigError.BODY, None, "Request body must be a JSON object"
                    )
                values.update(body)
        return cls(values)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def _convert(self, name: str, value: Any, type_: Callable[[Any], Any]) -> Any:
        if type_ is bool:
            return self._to_bool(name, value)
        try:
            return type_(value)
        except (TypeError, ValueError) as e:
            raise RequestConfigError(
                RequestConfigError.INVALID, name, f"Invalid value for '{name}': {value!r}"
            ) from e

    def _to_bool(self, name: str, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise RequestConfigError(
            RequestConfigError.INVALID, name, f"Invalid value for '{name}': {value!r}"
        )

    def required(self, name: str, type_: Callable[[Any], Any] = str) -> Any:
        value = self._values.get(name, _MISSING)
        if value is _MISSING or value is None:
            raise RequestConfigError(
                RequestConfigError.MISSING, name, f"Missing required parameter '{name}'"
            )
        return self._convert(name, value, type_)

    def optional(self, name: str, default: Any = None, type_: Callable[[Any], Any] = str) -> Any:
        value = self._values.get(name, _MISSING)
        if value is _MISSING or value is None:
            return default
        return self._convert(name, value, type_)

    def flag(self, name: str) -> bool:
        """Boolean switch; absent means False, a bare `?name` means True"""
        value = self._values.get(name, _MISSING)
        if value is _MISSING:
            return False
        if value == "":
            return True
        return self._to_bool(name, value)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)
