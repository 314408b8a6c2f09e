"""
Versioned static-asset dependency resolution

Layout of the static root:

    latest.txt                   active version string
    deps/<version>/deps.json     {"bundle": ["file.js", ...], ...}
    deps/<version>/<files>       compiled assets
"""
import json
import threading
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from realm.core.logging_config import LoggingConfig
from realm.core.metrics import asset_reloads_total, asset_version_info

logger = LoggingConfig.get_logger(__name__)

LATEST_FILE = "latest.txt"
DEPS_DIR = "deps"
DEPS_FILE = "deps.json"


class DependencyError(Exception):
    """Asset dependency resolution failed"""

    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    IO_ERROR = "io_error"

    kind = "dependency_error"

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class DependencyNotFound(DependencyError):
    kind = DependencyError.NOT_FOUND


class DependencyParseError(DependencyError):
    kind = DependencyError.PARSE_ERROR


class DependencyIOError(DependencyError):
    kind = DependencyError.IO_ERROR


class AssetManifest(BaseModel):
    """Immutable snapshot of the active asset version and its bundles"""

    model_config = ConfigDict(frozen=True)

    latest_version: str
    dependencies: Mapping[str, Tuple[str, ...]]

    @field_validator("dependencies")
    @classmethod
    def _freeze_dependencies(cls, value: Mapping[str, Tuple[str, ...]]) -> Mapping[str, Tuple[str, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("dependencies")
    def _dump_dependencies(self, value: Mapping[str, Tuple[str, ...]]) -> Dict[str, Tuple[str, ...]]:
        return dict(value)

    def files_for(self, bundle: str) -> Tuple[str, ...]:
        return self.dependencies.get(bundle, ())

    def urls_for(self, bundle: str, static_url: str = "/static") -> List[str]:
        """Public URLs of a bundle's files for the active version"""
        prefix = f"{static_url.rstrip('/')}/{DEPS_DIR}/{self.latest_version}"
        return [f"{prefix}/{name.lstrip('/')}" for name in self.files_for(bundle)]


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as e:
        raise DependencyNotFound(f"File not found: {path}", path) from e
    except UnicodeDecodeError as e:
        raise DependencyParseError(f"{path} is not valid UTF-8: {e}", path) from e
    except OSError as e:
        raise DependencyIOError(f"Could not read {path}: {e}", path) from e


def _parse_dependencies(raw: str, path: Path) -> Dict[str, Tuple[str, ...]]:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise DependencyParseError(f"Invalid JSON in {path}: {e}", path) from e

    if not isinstance(data, dict):
        raise DependencyParseError(f"{path} must contain a JSON object", path)

    dependencies: Dict[str, Tuple[str, ...]] = {}
    for bundle, files in data.items():
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise DependencyParseError(
                f"Bundle '{bundle}' in {path} must map to a list of file paths", path
            )
        for name in files:
            if ".." in PurePosixPath(name).parts:
                raise DependencyParseError(
                    f"Bundle '{bundle}' in {path} lists a file outside its version directory: {name}",
                    path,
                )
        dependencies[bundle] = tuple(files)
    return dependencies


def _verify_files(version_dir: Path, dependencies: Dict[str, Tuple[str, ...]]) -> None:
    for bundle, files in dependencies.items():
        for name in files:
            candidate = version_dir / name.lstrip("/")
            if not candidate.is_file():
                raise DependencyNotFound(
                    f"Bundle '{bundle}' lists missing file: {name}", candidate
                )


def resolve_assets(static_root: Union[str, Path], verify_files: bool = True) -> AssetManifest:
    """
    Read the active version and its manifest beneath `static_root`.

    Raises DependencyNotFound when latest.txt, deps.json or (with
    `verify_files`) a listed file is missing, DependencyParseError on a
    malformed manifest and DependencyIOError when the version directory
    cannot be enumerated.
    """
    root = Path(static_root)
    latest_version = _read_text(root / LATEST_FILE)

    version_dir = root / DEPS_DIR / latest_version
    deps_path = version_dir / DEPS_FILE
    dependencies = _parse_dependencies(_read_text(deps_path), deps_path)

    try:
        entries = sorted(entry.name for entry in version_dir.iterdir())
    except OSError as e:
        raise DependencyIOError(f"Could not list {version_dir}: {e}", version_dir) from e

    if verify_files:
        _verify_files(version_dir, dependencies)

    logger.debug(
        "Resolved asset manifest",
        extra={
            "asset_version": latest_version,
            "bundles": sorted(dependencies),
            "entries": len(entries),
        },
    )
    return AssetManifest(latest_version=latest_version, dependencies=dependencies)


class AssetRegistry:
    """
    Holds the process-wide manifest.

    Readers call get() without locking. reload() resolves a new manifest
    and swaps the reference; on failure the previous one stays current.
    """

    def __init__(self, static_root: Union[str, Path], verify_files: bool = True,
                 manifest: Optional[AssetManifest] = None):
        self.static_root = Path(static_root)
        self.verify_files = verify_files
        self._manifest = manifest
        self._reload_lock = threading.Lock()

    @classmethod
    def from_manifest(cls, manifest: AssetManifest) -> "AssetRegistry":
        """Registry around an already resolved manifest (no filesystem access)"""
        return cls(static_root=".", verify_files=False, manifest=manifest)

    def get(self) -> AssetManifest:
        manifest = self._manifest
        if manifest is None:
            raise RuntimeError("Asset manifest has not been resolved")
        return manifest

    @property
    def loaded(self) -> bool:
        return self._manifest is not None

    def reload(self) -> AssetManifest:
        with self._reload_lock:
            previous = self._manifest
            try:
                manifest = resolve_assets(self.static_root, verify_files=self.verify_files)
            except DependencyError as e:
                asset_reloads_total.labels(status="failed", kind=e.kind).inc()
                logger.error(
                    "Asset resolution failed",
                    extra={"static_root": str(self.static_root), "error": str(e), "kind": e.kind},
                )
                raise
            self._manifest = manifest

        asset_reloads_total.labels(status="success", kind="none").inc()
        asset_version_info.info({"version": manifest.latest_version})
        if previous is None or previous.latest_version != manifest.latest_version:
            logger.info(
                "Asset version active",
                extra={
                    "asset_version": manifest.latest_version,
                    "previous_version": previous.latest_version if previous else None,
                },
            )
        return manifest
