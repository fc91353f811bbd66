"""
Audit logging helpers.

The authorization engine only returns decisions; everything that turns a
decision into a persisted record lives here.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.features.audit_logs.models import AuditLog
from taskguard.utils import get_logger


log = get_logger(__name__)

ACCESS_DENIED_ACTION = "organization_access_denied"


async def create_audit_log(
    db: AsyncSession,
    user_id: Optional[str],
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    outcome: str = "success",
    actor_email: Optional[str] = None,
    route: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> AuditLog:
    """
    Create and commit an audit log entry.

    Committed immediately so that a denial is recorded even when the request
    goes on to fail and its session is rolled back.
    """
    audit_log = AuditLog(
        user_id=user_id,
        actor_email=actor_email,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        organization_id=organization_id,
        outcome=outcome,
        route=route,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    log.info(
        f"Audit: user={user_id} action={action} resource={resource_type}:{resource_id} "
        f"org={organization_id} outcome={outcome}"
    )

    return audit_log


async def audit_principal_action(
    db: AsyncSession,
    principal: rbac.Principal,
    request: Optional[Request],
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    outcome: str = "success",
    organization_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """create_audit_log with actor and request context filled in from the principal."""
    return await create_audit_log(
        db=db,
        user_id=principal.id,
        actor_email=principal.email,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        organization_id=organization_id or principal.organization.id,
        outcome=outcome,
        route=resolve_route_path(request) if request is not None else None,
        details=details,
        ip_address=request.client.host if request is not None and request.client else None,
        user_agent=request.headers.get("user-agent") if request is not None else None,
    )


def resolve_route_path(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None and getattr(route, "path", None):
        return route.path
    return request.url.path or "unknown"


def summarize_principal(principal: rbac.Principal) -> Dict[str, Any]:
    """Organizational reach of a principal, for denial metadata."""
    return {
        "organizationId": principal.organization.id,
        "subOrganizationCount": len(principal.sub_organizations),
        "subOrganizationIds": [org.id for org in principal.sub_organizations],
    }


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
