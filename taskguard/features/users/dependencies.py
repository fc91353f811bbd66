"""
FastAPI dependencies for authentication and the request Principal.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.core.database.engine import get_db
from taskguard.features.organizations.models import Organization
from taskguard.features.users.auth import verify_jwt_token
from taskguard.features.users.models import User
from taskguard.utils import get_logger


log = get_logger(__name__)
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Get the current authenticated user from the bearer token.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    payload = verify_jwt_token(credentials.credentials)
    user_id = payload.get("sub")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


async def load_principal(db: AsyncSession, user: User) -> rbac.Principal:
    """
    Build the immutable Principal for one request.

    Sub-organizations are the direct children of the user's home organization.
    Grandchildren are deliberately not included.
    """
    if user.role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User has no role assigned",
        )

    result = await db.execute(
        select(Organization)
        .where(Organization.parent_id == user.organization_id)
        .where(Organization.is_active == True)  # noqa: E712
        .order_by(Organization.name)
    )
    children = result.scalars().all()

    return rbac.Principal(
        id=user.id,
        email=user.email,
        name=user.name,
        role=rbac.Role.model_validate(user.role, from_attributes=True),
        organization=rbac.OrganizationRef.model_validate(user.organization, from_attributes=True),
        sub_organizations=tuple(
            rbac.OrganizationRef.model_validate(org, from_attributes=True) for org in children
        ),
    )


async def get_current_principal(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> rbac.Principal:
    """
    Principal snapshot for the authenticated user.

    Usage:
        @router.get("/tasks")
        async def list_tasks(principal: rbac.Principal = Depends(get_current_principal)):
            ...
    """
    principal = await load_principal(db, user)
    log.debug(
        f"Principal {principal.id} role={principal.role.name} org={principal.organization.id} "
        f"sub_orgs={len(principal.sub_organizations)}"
    )
    return principal


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
