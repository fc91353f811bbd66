"""
Permission string grammar.

    action:entity
    action:entity:access
    action:entity:access,access

Parsing never fails. Unknown actions or entities are carried through and are
rejected later by simply not matching any grant.
"""
from typing import Union

from taskguard.core.rbac.types import PermissionDescriptor, RolePermission, split_access


def parse_permission_string(permission: str) -> PermissionDescriptor:
    """
    Parse a permission string into a PermissionDescriptor.

    Fields past the third colon are ignored. A missing or empty access part
    yields access=None ("no scope required"), never an empty tuple.
    """
    fields = permission.split(":")
    action = fields[0]
    entity = fields[1] if len(fields) > 1 else ""
    access = split_access(fields[2] if len(fields) > 2 else None)
    return PermissionDescriptor(action=action, entity=entity, access=access or None)


def format_permission(permission: Union[PermissionDescriptor, RolePermission]) -> str:
    """Render a descriptor or a stored grant back into its string form."""
    head = f"{permission.action}:{permission.entity}"
    if not permission.access:
        return head
    return f"{head}:{','.join(permission.access)}"
