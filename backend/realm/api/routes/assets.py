"""
API routes for the static asset manifest
"""
from typing import Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from realm.core.assets import AssetManifest, DependencyError
from realm.core.context import RealmContext, get_realm_context
from realm.core.errors import CustomError
from realm.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(prefix="/api/assets", tags=["assets"])


class AssetManifestResponse(BaseModel):
    """Response model for the active asset manifest"""
    latest_version: str
    dependencies: Dict[str, List[str]]

    @classmethod
    def from_manifest(cls, manifest: AssetManifest) -> "AssetManifestResponse":
        return cls(
            latest_version=manifest.latest_version,
            dependencies={name: list(files) for name, files in manifest.dependencies.items()},
        )


@router.get("", response_model=AssetManifestResponse)
async def get_assets(realm: RealmContext = Depends(get_realm_context)):
    """Return the asset manifest currently in use"""
    return AssetManifestResponse.from_manifest(realm.assets.get())


@router.post("/reload", response_model=AssetManifestResponse)
async def reload_assets(realm: RealmContext = Depends(get_realm_context)):
    """Re-resolve the static tree and switch to the result"""
    try:
        manifest = realm.assets.reload()
    except DependencyError as e:
        raise CustomError(f"Asset reload failed ({e.kind}): {e}") from e
    logger.info("Asset manifest reloaded", extra={"asset_version": manifest.latest_version})
    return AssetManifestResponse.from_manifest(manifest)
