"""
Permission API routes.

Read-only views of roles plus a permission check endpoint that exposes the
decision engine to clients (e.g. to hide buttons the user cannot use).
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.core.database.engine import get_db
from taskguard.features.permissions.models import Role
from taskguard.features.permissions.schemas import (
    MyPermissionsResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionDescriptorResponse,
    RoleWithPermissions,
)
from taskguard.features.users.dependencies import get_current_principal
from taskguard.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/roles", response_model=List[RoleWithPermissions])
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(get_current_principal)]
):
    """List roles and the permission strings each grants."""
    result = await db.execute(select(Role).order_by(Role.name))
    roles = []
    for db_role in result.scalars().all():
        role = rbac.Role.model_validate(db_role, from_attributes=True)
        roles.append(
            RoleWithPermissions(
                id=role.id,
                name=role.name,
                description=role.description,
                permissions=rbac.list_permission_strings(role),
            )
        )
    return roles


@router.get("/me", response_model=MyPermissionsResponse)
async def get_my_permissions(
    principal: Annotated[rbac.Principal, Depends(get_current_principal)]
):
    """Permission strings the caller holds and the organizations they can reach."""
    return MyPermissionsResponse(
        role=principal.role.name,
        permissions=rbac.list_permission_strings(principal.role),
        organization_id=principal.organization.id,
        sub_organization_ids=[org.id for org in principal.sub_organizations],
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    principal: Annotated[rbac.Principal, Depends(get_current_principal)]
):
    """
    Check whether the caller holds a permission string.

    With organization_id, the organization must also be within reach for the
    permission's entity and action.
    """
    descriptor = rbac.parse_permission_string(check_request.permission)
    descriptor_response = PermissionDescriptorResponse(
        action=descriptor.action,
        entity=descriptor.entity,
        access=list(descriptor.access) if descriptor.access else None,
    )

    if not rbac.check_permission_by_string(principal.role, check_request.permission):
        log.debug(f"Permission check for user {principal.id}: {check_request.permission!r} not held")
        return PermissionCheckResponse(
            has_permission=False,
            permission=descriptor_response,
            organization_id=check_request.organization_id,
            reason=rbac.ReasonCode.MISSING_PERMISSION.value,
            error_message=f"Required permission: {check_request.permission}",
        )

    if check_request.organization_id:
        result = rbac.check_organization_permission(
            principal, check_request.organization_id, descriptor.entity, descriptor.action
        )
        if not result.has_access:
            return PermissionCheckResponse(
                has_permission=False,
                permission=descriptor_response,
                organization_id=check_request.organization_id,
                reason=rbac.denial_reason(result),
                error_message=result.error_message,
            )

    return PermissionCheckResponse(
        has_permission=True,
        permission=descriptor_response,
        organization_id=check_request.organization_id,
    )
