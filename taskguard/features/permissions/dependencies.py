"""
Route guards for RBAC.

Usage:
    @router.get("/audit-logs")
    async def list_audit_logs(
        principal: rbac.Principal = Depends(require_permission("read:audit-log"))
    ):
        ...

A denied check is written to the audit log and answered with 403.

require_role is kept for routes reserved to a named role; the bundled routes
guard by permission string only.
"""
from typing import Any, Dict
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.core.database.engine import get_db
from taskguard.features.audit_logs.dependencies import (
    ACCESS_DENIED_ACTION,
    audit_principal_action,
    utc_timestamp,
)
from taskguard.features.users.dependencies import get_current_principal
from taskguard.utils import get_logger


log = get_logger(__name__)


async def _log_denied_access(
    db: AsyncSession,
    principal: rbac.Principal,
    request: Request,
    reason: rbac.ReasonCode,
    resource_type: str,
    metadata: Dict[str, Any],
) -> None:
    await audit_principal_action(
        db,
        principal,
        request,
        action=ACCESS_DENIED_ACTION,
        resource_type=resource_type or "unknown",
        outcome="failure",
        details={
            **metadata,
            "reason": reason.value,
            "requestMethod": request.method,
            "timestamp": utc_timestamp(),
        },
    )


def require_permission(permission: str):
    """
    FastAPI dependency requiring a permission string, e.g. "create:task" or
    "read:task:own,any". Returns the Principal when the role satisfies it.
    """
    descriptor = rbac.parse_permission_string(permission)

    async def permission_dependency(
        request: Request,
        db: AsyncSession = Depends(get_db),
        principal: rbac.Principal = Depends(get_current_principal)
    ) -> rbac.Principal:
        if not rbac.check_permission_by_string(principal.role, permission):
            log.warning(f"User {principal.id} ({principal.role.name}) missing permission {permission!r}")
            await _log_denied_access(
                db,
                principal,
                request,
                reason=rbac.ReasonCode.MISSING_PERMISSION,
                resource_type=descriptor.entity,
                metadata={"requiredPermission": permission},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required permission: {permission}"
            )
        return principal

    return permission_dependency


def require_role(role_name: str, permission: str | None = None):
    """
    FastAPI dependency requiring a role by name, checked before the optional
    permission string.
    """
    entity = rbac.parse_permission_string(permission).entity if permission else ""

    async def role_dependency(
        request: Request,
        db: AsyncSession = Depends(get_db),
        principal: rbac.Principal = Depends(get_current_principal)
    ) -> rbac.Principal:
        if principal.role.name != role_name:
            log.warning(f"User {principal.id} ({principal.role.name}) missing role {role_name!r}")
            await _log_denied_access(
                db,
                principal,
                request,
                reason=rbac.ReasonCode.MISSING_ROLE,
                resource_type=entity,
                metadata={"requiredRole": role_name},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required role: {role_name}"
            )

        if permission and not rbac.check_permission_by_string(principal.role, permission):
            await _log_denied_access(
                db,
                principal,
                request,
                reason=rbac.ReasonCode.MISSING_PERMISSION,
                resource_type=entity,
                metadata={"requiredPermission": permission},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required permission: {permission}"
            )
        return principal

    return role_dependency
