"""
Pydantic schemas for roles and permission checks.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class RoleWithPermissions(BaseModel):
    """A role and the permission strings it grants."""
    id: str
    name: str
    description: Optional[str] = None
    permissions: List[str] = []


class PermissionCheckRequest(BaseModel):
    """Evaluate a permission string for the caller, optionally inside an organization."""
    permission: str = Field(..., min_length=3, description="e.g. 'update:task:own,any'")
    organization_id: Optional[str] = Field(None, description="Organization to check reach against")

    @field_validator("permission")
    @classmethod
    def has_action_and_entity(cls, v: str) -> str:
        if v.count(":") < 1:
            raise ValueError("Permission must look like action:entity[:access]")
        return v


class PermissionDescriptorResponse(BaseModel):
    action: str
    entity: str
    access: Optional[List[str]] = None


class PermissionCheckResponse(BaseModel):
    """Decision for a permission check."""
    has_permission: bool
    permission: PermissionDescriptorResponse
    organization_id: Optional[str] = None
    reason: Optional[str] = None
    error_message: Optional[str] = None


class MyPermissionsResponse(BaseModel):
    """The caller's role, its permission strings and the organizations in reach."""
    role: str
    permissions: List[str] = []
    organization_id: str
    sub_organization_ids: List[str] = []
