from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from employee_directory.core.auth import identity_from_token
from employee_directory.core.config import settings
from employee_directory.core.permissions import Capability, PermissionCheck, can, has_privilege
from employee_directory.models.auth import Identity

logger = logging.getLogger(__name__)


async def get_identity(authorization: str | None = Header(None)) -> Identity:
    # a missing token is not rejected here; the employee service refuses it
    token = ""
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
    return identity_from_token(token, settings)


def get_permission_check() -> PermissionCheck:
    return has_privilege


def require_capability(capability: Capability):
    async def _check_capability(
        identity: Identity = Depends(get_identity),  # noqa: B008
        check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
    ) -> Identity:
        if not can(capability, identity, check):
            logger.info("Denied %s for employee %s", capability.value, identity.employee_tag)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {capability.value}",
            )
        return identity

    return _check_capability
