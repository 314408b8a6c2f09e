"""
Page rendering protocol

A page is anything with a stable `realm_id()` and a JSON-compatible
`realm_config()`. The same page is served as a JSON payload (API mode), a
`{id, config}` widget descriptor (Layout mode) or a full HTML document built
around that descriptor (HTML mode).
"""
import json
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from starlette.responses import Response

from realm.core.errors import RealmError, RenderError
from realm.core.logging_config import LoggingConfig
from realm.core.metrics import page_render_duration_seconds, page_renders_total
from realm.core.mode import RenderMode, detect_mode

if TYPE_CHECKING:
    from realm.core.html import HtmlRenderer

logger = LoggingConfig.get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"
HTML_MEDIA_TYPE = "text/html"

_UNSET: Any = object()
_RECOMPUTED_HEADERS = (b"content-type", b"content-length")


def dump_json(value: Any) -> str:
    """Compact, order-preserving JSON encoding used for every page body"""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


class WidgetSpec(BaseModel):
    """Embeddable form of a page"""
    id: str
    config: Any = None

    def to_json(self) -> str:
        return dump_json({"id": self.id, "config": self.config})


class Page(ABC):
    """Base class for pages served through the render-mode protocol"""

    @abstractmethod
    def realm_id(self) -> str:
        """Stable identifier of the widget rendering this page"""

    def realm_config(self) -> Any:
        """Current page state as JSON-compatible data"""
        try:
            return jsonable_encoder(self)
        except Exception as e:
            raise RenderError(e) from e

    def realm_json(self) -> Any:
        """Payload served in API mode"""
        return self.realm_config()

    def widget_spec(self, config: Any = _UNSET) -> WidgetSpec:
        if config is _UNSET:
            config = self.realm_config()
        return WidgetSpec(id=self.realm_id(), config=config)

    def _body_for(self, mode: RenderMode, html: Optional["HtmlRenderer"]) -> Any:
        if mode is RenderMode.API:
            payload = self.realm_json()
            return self._guard(mode, lambda: dump_json(payload))

        spec = self.widget_spec()
        if mode is RenderMode.Layout:
            return self._guard(mode, spec.to_json)

        if html is None:
            raise RenderError(RuntimeError("no HTML renderer configured"), mode.value)
        return self._guard(mode, lambda: html.render(spec))

    def _guard(self, mode: RenderMode, produce) -> Any:
        try:
            return produce()
        except RealmError:
            raise
        except Exception as e:
            raise RenderError(e, mode.value) from e

    def page_with_response(
        self,
        request: Any,
        html: Optional["HtmlRenderer"],
        response: Response,
    ) -> Response:
        """
        Render this page in the mode the request asks for.

        Status and headers of `response` are kept; body and content type
        are replaced.
        """
        mode = detect_mode(request)
        realm_id = self.realm_id()
        start_time = time.perf_counter()
        try:
            body = self._body_for(mode, html)
        except Exception as e:
            page_renders_total.labels(realm_id=realm_id, mode=mode.value, status="failed").inc()
            logger.debug(
                "Page render failed",
                extra={"realm_id": realm_id, "mode": mode.value, "error_type": type(e).__name__},
            )
            if isinstance(e, RenderError) and e.mode is None:
                raise RenderError(e.error, mode.value) from e.error
            raise
        finally:
            page_render_duration_seconds.labels(mode=mode.value).observe(
                time.perf_counter() - start_time
            )

        page_renders_total.labels(realm_id=realm_id, mode=mode.value, status="success").inc()

        media_type = HTML_MEDIA_TYPE if mode is RenderMode.HTML else JSON_MEDIA_TYPE
        rendered = Response(content=body, status_code=response.status_code, media_type=media_type)
        rendered.raw_headers.extend(
            (name, value) for name, value in response.raw_headers
            if name.lower() not in _RECOMPUTED_HEADERS
        )
        return rendered

    def page(self, request: Any, html: Optional["HtmlRenderer"]) -> Response:
        return self.page_with_response(request, html, Response(status_code=200))
