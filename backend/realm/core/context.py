"""
Per-process rendering context shared by request handlers
"""
from dataclasses import dataclass

from fastapi import Request

from realm.core.assets import AssetRegistry
from realm.core.config import Settings
from realm.core.html import JinjaHtmlRenderer
from realm.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


@dataclass(frozen=True)
class RealmContext:
    """Settings, asset registry and HTML renderer for one application"""
    settings: Settings
    assets: AssetRegistry
    html: JinjaHtmlRenderer

    @classmethod
    def create(cls, settings: Settings) -> "RealmContext":
        """
        Build the context and resolve assets.

        Raises DependencyError when the static tree is unusable; callers
        treat that as fatal.
        """
        assets = AssetRegistry(settings.static_path, verify_files=settings.assets_verify_files)
        assets.reload()
        return cls(settings=settings, assets=assets, html=JinjaHtmlRenderer(settings, assets))


def get_realm_context(request: Request) -> RealmContext:
    """FastAPI dependency returning the application's RealmContext"""
    return request.app.state.realm
