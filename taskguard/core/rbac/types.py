"""
Value types for the authorization engine.

Everything here is immutable. Callers build a Principal and a Role once per
request and pass them into the evaluators; nothing in the engine mutates them.
"""
import enum
from typing import Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class Action(str, enum.Enum):
    """CRUD verbs a permission can grant."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Access(str, enum.Enum):
    """Scope of a grant: the principal's own resources, or anything reachable."""
    OWN = "own"
    ANY = "any"


class TaskType(str, enum.Enum):
    PERSONAL = "personal"
    WORK = "work"


class ReasonCode(str, enum.Enum):
    """Machine-readable denial reasons handed to audit logging."""
    INSUFFICIENT_SUB_ORG_PERMISSIONS = "insufficient_sub_org_permissions"
    ORGANIZATION_NOT_ACCESSIBLE = "organization_not_accessible"
    ACCESS_DENIED = "access_denied"
    MISSING_PERMISSION = "missing_permission"
    MISSING_ROLE = "missing_role"


OWNER_ROLE = "owner"


def split_access(access_part: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-joined access list, trimming tokens and dropping empty ones. Order and duplicates are kept."""
    if not access_part:
        return ()
    return tuple(token.strip() for token in access_part.split(",") if token.strip())


class PermissionDescriptor(BaseModel):
    """
    Parsed form of a permission string.

    `access` is None when the string carries no scope qualifier, meaning any
    scope is acceptable. Action and entity are kept as plain strings so that
    unknown values pass through and simply never match a grant.
    """
    model_config = ConfigDict(frozen=True)

    action: str
    entity: str
    access: Optional[Tuple[str, ...]] = None


class RolePermission(BaseModel):
    """
    A single grant held by a role.

    Storage keeps access as comma-joined text ("own,any"); it is split here,
    once, when the role is loaded.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    action: str
    entity: str
    access: Tuple[str, ...] = ()

    @field_validator("access", mode="before")
    @classmethod
    def split_access_text(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            return split_access(v)
        return tuple(v)


class Role(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = ""
    name: str
    description: Optional[str] = None
    # None means the collection was never loaded
    permissions: Optional[Tuple[RolePermission, ...]] = None


class OrganizationRef(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    name: str = ""


class Principal(BaseModel):
    """
    The authenticated actor a decision is made for.

    The organization tree is flattened to two tiers: the home organization and
    its direct children. Deeper descendants are not reachable.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: str = ""
    name: str = ""
    role: Role
    organization: OrganizationRef
    sub_organizations: Tuple[OrganizationRef, ...] = ()

    @property
    def sub_organization_ids(self) -> frozenset[str]:
        return frozenset(org.id for org in self.sub_organizations)

    @property
    def reachable_organization_ids(self) -> frozenset[str]:
        """Home organization plus every direct sub-organization."""
        return self.sub_organization_ids | {self.organization.id}


class Resource(Protocol):
    """Anything the resource combinator can scope: a task row, a DTO, a stub."""
    owner_id: Optional[str]
    organization_id: Optional[str]
    type: str


class OrganizationPermissionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_access: bool
    reason: Optional[ReasonCode] = None
    error_message: str = ""


class TaskAccessDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_access: bool
    access_level: Optional[Access] = None
    reason: Optional[ReasonCode] = None

    def __bool__(self) -> bool:
        return self.has_access
