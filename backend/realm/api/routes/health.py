"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from realm.core.context import RealmContext, get_realm_context

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check(realm: RealmContext = Depends(get_realm_context)):
    """
    Health check including the active asset version

    Returns:
        dict: Detailed health status
    """
    settings = realm.settings
    assets = {"status": "healthy"}
    if realm.assets.loaded:
        manifest = realm.assets.get()
        assets["version"] = manifest.latest_version
        assets["bundles"] = sorted(manifest.dependencies)
    else:
        assets = {"status": "unhealthy", "message": "Asset manifest not resolved"}

    return {
        "status": assets["status"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "environment": settings.app_env,
        "components": {"assets": assets},
    }
