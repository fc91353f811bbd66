"""
Role permission evaluation.

Two entry points:
- check_permission: structured requirement, one access token, no parsing.
- check_permission_by_string: permission string as written on a route or in
  a service, with the owner-role bypass.

has_any_permission is library surface for guards that accept one of several
permission strings; the bundled routes only need single-string checks.
"""
from typing import Iterable

from taskguard.core.rbac.grammar import format_permission, parse_permission_string
from taskguard.core.rbac.types import OWNER_ROLE, Role
from taskguard.utils import get_logger


log = get_logger(__name__)


def is_owner_role(role: Role) -> bool:
    return role.name == OWNER_ROLE


def check_permission(role: Role, entity: str, action: str, access: str) -> bool:
    """
    Check whether a role holds a grant for entity/action covering one access token.

    A role whose permission collection was never loaded is a data problem, not
    a denial; it is logged and evaluated as False.
    """
    if role.permissions is None:
        log.error(f"No permissions found for role {role.name!r} (id={role.id})")
        return False

    return any(
        permission.entity == entity
        and permission.action == action
        and access in permission.access
        for permission in role.permissions
    )


def check_permission_by_string(role: Role, permission_string: str) -> bool:
    """
    Check a permission string against a role.

    Without an access qualifier, a matching entity/action grant is enough.
    With one, at least one requested token must appear in the grant's access.
    """
    descriptor = parse_permission_string(permission_string)

    if is_owner_role(role):
        return True

    if role.permissions is None:
        log.error(f"No permissions found for role {role.name!r} (id={role.id})")
        return False

    for permission in role.permissions:
        if permission.entity != descriptor.entity or permission.action != descriptor.action:
            continue
        if not descriptor.access:
            return True
        if any(token in permission.access for token in descriptor.access):
            return True

    log.debug(f"Role {role.name!r} lacks {permission_string!r}")
    return False


def role_grants(role: Role, entity: str, action: str, access: str) -> bool:
    """check_permission with the owner-role sentinel in front of it."""
    return is_owner_role(role) or check_permission(role, entity, action, access)


def has_any_permission(role: Role, permission_strings: Iterable[str]) -> bool:
    return any(check_permission_by_string(role, p) for p in permission_strings)


def list_permission_strings(role: Role) -> list[str]:
    """Every grant the role holds, rendered as permission strings."""
    if not role.permissions:
        return []
    return [format_permission(permission) for permission in role.permissions]
