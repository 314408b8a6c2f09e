"""
Render mode negotiation
"""
from enum import Enum
from typing import Any, Optional

MODE_QUERY_PARAM = "realm_mode"
MODE_HEADER = "x-realm-mode"
LAYOUT_MEDIA_TYPE = "application/vnd.realm.layout+json"


class RenderMode(str, Enum):
    """Representation a page is served in"""
    API = "api"
    HTML = "html"
    Layout = "layout"


_ALIASES = {
    "api": RenderMode.API,
    "json": RenderMode.API,
    "html": RenderMode.HTML,
    "layout": RenderMode.Layout,
}


def _from_signal(value: Optional[str]) -> Optional[RenderMode]:
    if not value:
        return None
    return _ALIASES.get(value.strip().lower())


def _from_accept(accept: Optional[str]) -> Optional[RenderMode]:
    if not accept:
        return None
    media_types = {part.split(";")[0].strip().lower() for part in accept.split(",")}
    if LAYOUT_MEDIA_TYPE in media_types:
        return RenderMode.Layout
    if "application/json" in media_types and "text/html" not in media_types:
        return RenderMode.API
    return None


def detect_mode(request: Any) -> RenderMode:
    """
    Classify a request into a render mode.

    Checked in order: the `realm_mode` query parameter, the `X-Realm-Mode`
    header, then the `Accept` header. Anything unrecognised falls through
    to HTML.
    """
    return (
        _from_signal(request.query_params.get(MODE_QUERY_PARAM))
        or _from_signal(request.headers.get(MODE_HEADER))
        or _from_accept(request.headers.get("accept"))
        or RenderMode.HTML
    )
