"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from taskguard.core import rbac
from taskguard.features.organizations.schemas import OrganizationPublic
from taskguard.features.users.dependencies import get_current_principal
from taskguard.features.users.schemas import CurrentUserResponse, RoleSummary


router = APIRouter(tags=["users"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_profile(
    principal: Annotated[rbac.Principal, Depends(get_current_principal)]
):
    """Current user with role grants and reachable organizations."""
    return CurrentUserResponse(
        id=principal.id,
        email=principal.email,
        name=principal.name,
        role=RoleSummary(
            id=principal.role.id,
            name=principal.role.name,
            permissions=rbac.list_permission_strings(principal.role),
        ),
        organization=OrganizationPublic(id=principal.organization.id, name=principal.organization.name),
        sub_organizations=[
            OrganizationPublic(id=org.id, name=org.name) for org in principal.sub_organizations
        ],
    )
