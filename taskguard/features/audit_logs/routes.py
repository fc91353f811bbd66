"""
Audit log routes.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.core.database.engine import get_db
from taskguard.features.audit_logs.models import AuditLog
from taskguard.features.audit_logs.schemas import AuditLogListResponse, AuditLogResponse
from taskguard.features.organizations.access import validate_organization_access
from taskguard.features.permissions.dependencies import require_permission


router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("read:audit-log"))],
    organization_id: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    outcome: Optional[str] = None,
):
    """
    List audit logs of one organization, newest first.

    Defaults to the caller's home organization; a sub-organization needs
    read:audit-log:any.
    """
    target_org_id = await validate_organization_access(
        db, principal, organization_id, "audit-log", rbac.Action.READ.value, request
    )

    stmt = select(AuditLog).where(AuditLog.organization_id == target_org_id)
    if user_id:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if outcome:
        stmt = stmt.where(AuditLog.outcome == outcome)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    logs = result.scalars().all()

    pages = (total + limit - 1) // limit
    page = (skip // limit) + 1

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        page_size=limit,
        pages=pages
    )
