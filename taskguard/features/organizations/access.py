"""
Organization access enforcement for request handlers.

Runs the scope resolver and, on denial, records an audit entry before raising
403. The resolver itself stays a pure decision.
"""
from typing import Optional
from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.features.audit_logs.dependencies import (
    ACCESS_DENIED_ACTION,
    audit_principal_action,
    summarize_principal,
    utc_timestamp,
)
from taskguard.utils import get_logger


log = get_logger(__name__)


async def validate_organization_access(
    db: AsyncSession,
    principal: rbac.Principal,
    organization_id: Optional[str],
    entity: str,
    action: str,
    request: Optional[Request] = None,
) -> str:
    """
    Resolve the target organization for a request and enforce reach.

    Args:
        db: Database session, used only to record denials
        principal: Caller
        organization_id: Requested organization; the home organization when None
        entity: Entity being acted on (e.g. "task", "audit-log")
        action: Action being attempted

    Returns:
        The validated organization id

    Raises:
        HTTPException: 403 if the organization is out of reach
    """
    target_org_id = organization_id or principal.organization.id

    result = rbac.check_organization_permission(principal, target_org_id, entity, action)
    if result.has_access:
        return target_org_id

    reason = rbac.denial_reason(result)
    log.warning(f"User {principal.id} denied {action}:{entity} in organization {target_org_id}: {reason}")

    await audit_principal_action(
        db,
        principal,
        request,
        action=ACCESS_DENIED_ACTION,
        resource_type="organization",
        resource_id=target_org_id,
        outcome="failure",
        # the caller's own organization, not the one that was denied
        organization_id=principal.organization.id,
        details={
            "deniedOrganizationId": target_org_id,
            "attemptedAction": action,
            "entity": entity,
            "denialReason": reason,
            "userPermissions": summarize_principal(principal),
            "timestamp": utc_timestamp(),
        },
    )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=result.error_message)
