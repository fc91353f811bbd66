"""
Pydantic schemas for user-related responses.
"""
from pydantic import BaseModel, ConfigDict

from taskguard.features.organizations.schemas import OrganizationPublic


class RoleSummary(BaseModel):
    id: str
    name: str
    permissions: list[str] = []


class CurrentUserResponse(BaseModel):
    """The caller as the authorization engine sees them."""
    id: str
    email: str
    name: str
    role: RoleSummary
    organization: OrganizationPublic
    sub_organizations: list[OrganizationPublic] = []

    model_config = ConfigDict(from_attributes=True)
