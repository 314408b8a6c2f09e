"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from project root
# config.py is at: backend/realm/core/config.py
# Project root is: backend/realm/core/../../../
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
_project_root = _backend_dir.parent
ENV_FILE = _project_root / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)

# Templates shipped with the package
PACKAGE_TEMPLATES_DIR = _current_file.parent.parent / "templates"


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Realm"
    app_env: str = Field(default="development", description="Application environment")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:8000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"realm.core": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/realm.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or 'W0'..'W6' (weekly)"
    )
    log_file_retention: int = Field(
        default=30,
        ge=1,
        description="Number of rotated log files to keep"
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (passwords, tokens) - NOT RECOMMENDED"
    )

    # Static assets
    static_dir: str = Field(default="static", description="Static root holding latest.txt and deps/")
    static_url: str = Field(default="/static", description="URL prefix the static root is served under")
    assets_verify_files: bool = Field(
        default=True,
        description="Require every file listed in deps.json to exist in the version directory"
    )
    assets_default_bundle: str = Field(
        default="main",
        description="Bundle used for HTML pages whose id has no bundle of its own"
    )

    # Site (HTML shell)
    site_icon: str = Field(default="", description="Favicon URL (defaults to <static_url>/favicon.ico)")
    site_title_prefix: str = Field(default="", description="Prepended to every page title")
    site_title_postfix: str = Field(default="", description="Appended to every page title")
    site_context: str = Field(default="", description="Opaque context string exposed to the client")
    css: str = Field(default="", description="Stylesheet URLs (comma-separated)")
    head_extra: str = Field(default="", description="Raw markup appended to <head>")
    body_extra: str = Field(default="", description="Raw markup appended to <body>")
    templates_dir: Optional[str] = Field(
        default=None,
        description="Directory searched for templates before the packaged ones"
    )

    @property
    def static_path(self) -> Path:
        """Static root as a path"""
        return Path(self.static_dir)

    @property
    def site_icon_url(self) -> str:
        """Favicon URL with the static default applied"""
        return self.site_icon or f"{self.static_url.rstrip('/')}/favicon.ico"

    @property
    def template_dirs(self) -> List[str]:
        """Template search path, user directory first"""
        dirs = []
        if self.templates_dir:
            dirs.append(self.templates_dir)
        dirs.append(str(PACKAGE_TEMPLATES_DIR))
        return dirs

    @property
    def css_list(self) -> List[str]:
        """Parse stylesheet URLs from comma-separated string"""
        return [item.strip() for item in self.css.split(",") if item.strip()]

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
