"""
HTML rendering capability used by pages in HTML mode
"""
from typing import Any, Dict, List, Optional, Protocol, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from realm.core.assets import AssetRegistry
from realm.core.config import Settings
from realm.core.page import WidgetSpec, dump_json

DEFAULT_TEMPLATE = "page.html"


class HtmlRenderer(Protocol):
    """Anything that turns a widget spec into a full HTML document"""

    def render(self, spec: WidgetSpec) -> Union[str, bytes]:
        ...


class JinjaHtmlRenderer:
    """
    Renders the HTML shell around a widget spec.

    The script tags come from the asset manifest: the bundle named after the
    widget id, or the default bundle when the manifest has none for it.
    """

    def __init__(
        self,
        settings: Settings,
        assets: AssetRegistry,
        template_name: str = DEFAULT_TEMPLATE,
        title: Optional[str] = None,
        env: Optional[Environment] = None,
    ):
        self.settings = settings
        self.assets = assets
        self.template_name = template_name
        self.title = title
        self.env = env or Environment(
            loader=FileSystemLoader(settings.template_dirs),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def with_title(self, title: str) -> "JinjaHtmlRenderer":
        """Same renderer with a page-specific title"""
        return JinjaHtmlRenderer(
            self.settings, self.assets, self.template_name, title=title, env=self.env
        )

    def scripts_for(self, spec: WidgetSpec) -> List[str]:
        manifest = self.assets.get()
        bundle = spec.id if spec.id in manifest.dependencies else self.settings.assets_default_bundle
        return manifest.urls_for(bundle, self.settings.static_url)

    def context_for(self, spec: WidgetSpec) -> Dict[str, Any]:
        settings = self.settings
        manifest = self.assets.get()
        title = self.title or spec.id
        return {
            "spec": spec,
            "spec_json": spec.to_json().replace("<", "\\u003c"),
            "title": f"{settings.site_title_prefix}{title}{settings.site_title_postfix}",
            "site_icon": settings.site_icon_url,
            "site_context": dump_json(settings.site_context).replace("<", "\\u003c"),
            "css": settings.css_list,
            "head_extra": settings.head_extra,
            "body_extra": settings.body_extra,
            "asset_version": manifest.latest_version,
            "scripts": self.scripts_for(spec),
        }

    def render(self, spec: WidgetSpec) -> str:
        template = self.env.get_template(self.template_name)
        return template.render(**self.context_for(spec))
