from __future__ import annotations

from fastapi import APIRouter, Depends

from employee_directory.core.config import settings
from employee_directory.core.dependencies import get_identity
from employee_directory.models.auth import Identity
from employee_directory.services.directory_store import directory_sessions
from employee_directory.services.employee_client import employee_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if employee_client.initialized:
            ok = await employee_client.check_connection()
            services["employee_api"] = "ok" if ok else "error"
        else:
            services["employee_api"] = "not_configured"
    except Exception:
        services["employee_api"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
        "sessions": len(directory_sessions),
    }


@router.get("/session")
async def health_session(identity: Identity = Depends(get_identity)):  # noqa: B008
    return {"status": "ok", "identity": identity.model_dump(exclude={"token"})}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
