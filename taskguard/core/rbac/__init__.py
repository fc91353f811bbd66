"""
Authorization decision engine.

Pure functions over immutable inputs: permission string grammar, role
permission evaluation, two-tier organization scoping and resource-level
access decisions. Nothing here raises for a denial; decisions are values.
"""
from taskguard.core.rbac.access import can_user_access_task
from taskguard.core.rbac.evaluator import (
    check_permission,
    check_permission_by_string,
    has_any_permission,
    is_owner_role,
    list_permission_strings,
    role_grants,
)
from taskguard.core.rbac.grammar import format_permission, parse_permission_string
from taskguard.core.rbac.organization import check_organization_permission, denial_reason
from taskguard.core.rbac.types import (
    OWNER_ROLE,
    Access,
    Action,
    OrganizationPermissionResult,
    OrganizationRef,
    PermissionDescriptor,
    Principal,
    ReasonCode,
    Resource,
    Role,
    RolePermission,
    TaskAccessDecision,
    TaskType,
    split_access,
)

__all__ = [
    "OWNER_ROLE",
    "Access",
    "Action",
    "OrganizationPermissionResult",
    "OrganizationRef",
    "PermissionDescriptor",
    "Principal",
    "ReasonCode",
    "Resource",
    "Role",
    "RolePermission",
    "TaskAccessDecision",
    "TaskType",
    "can_user_access_task",
    "check_organization_permission",
    "check_permission",
    "check_permission_by_string",
    "denial_reason",
    "format_permission",
    "has_any_permission",
    "is_owner_role",
    "list_permission_strings",
    "parse_permission_string",
    "role_grants",
    "split_access",
]
