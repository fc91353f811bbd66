"""
Default permissions and roles.

Each permission is (action, entity, access, description). Role grants are
written as permission strings and resolved against DEFAULT_PERMISSIONS.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.features.permissions.models import Permission, Role
from taskguard.utils import get_logger


log = get_logger(__name__)


DEFAULT_PERMISSIONS = [
    # Task permissions
    ("create", "task", "own", "Create tasks within own scope"),
    ("create", "task", "any", "Create tasks for any user/organization"),
    ("read", "task", "own", "Read own tasks"),
    ("read", "task", "any", "Read all tasks in organization"),
    ("update", "task", "own", "Update own tasks"),
    ("update", "task", "any", "Update any task in organization"),
    ("delete", "task", "own", "Delete own tasks"),
    ("delete", "task", "any", "Delete any task in organization"),

    # User permissions
    ("create", "user", "any", "Create new users"),
    ("read", "user", "own", "Read own user profile"),
    ("read", "user", "any", "Read all user profiles"),
    ("update", "user", "own", "Update own user profile"),
    ("update", "user", "any", "Update any user profile"),
    ("delete", "user", "any", "Delete user accounts"),

    # Audit logs
    ("read", "audit-log", "any", "Read audit logs"),
]


DEFAULT_ROLES = {
    "owner": {
        "description": "Full system access and ownership",
        "permissions": [
            "create:task:any", "read:task:any", "update:task:any", "delete:task:any",
            "create:user:any", "read:user:any", "update:user:any", "delete:user:any",
            "read:audit-log:any",
        ],
    },
    "admin": {
        "description": "Administrative access with management capabilities",
        "permissions": [
            "create:task:any", "read:task:any", "update:task:any", "delete:task:any",
            "create:user:any", "read:user:any", "update:user:any",
            "read:audit-log:any",
        ],
    },
    "viewer": {
        "description": "Read access to organization tasks, manages own personal tasks",
        "permissions": [
            "read:task:any",
            "read:user:own", "update:user:own",
            "create:task:own", "update:task:own", "delete:task:own",
        ],
    },
}


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    """Create any missing default permissions. Keyed by permission string."""
    result = await db.execute(select(Permission))
    existing = {f"{p.action}:{p.entity}:{p.access}": p for p in result.scalars().all()}

    for action, entity, access, description in DEFAULT_PERMISSIONS:
        key = f"{action}:{entity}:{access}"
        if key in existing:
            continue
        permission = Permission(action=action, entity=entity, access=access, description=description)
        db.add(permission)
        existing[key] = permission
        log.info(f"Created permission: {key}")

    await db.flush()
    return existing


async def seed_roles(db: AsyncSession) -> dict[str, Role]:
    """
    Create default roles with their grants. Existing roles keep their
    permissions; only missing roles are created.
    """
    permissions = await seed_permissions(db)

    result = await db.execute(select(Role))
    roles = {role.name: role for role in result.scalars().all()}

    for name, definition in DEFAULT_ROLES.items():
        if name in roles:
            continue
        grants = []
        for permission_string in definition["permissions"]:
            descriptor = rbac.parse_permission_string(permission_string)
            for access in descriptor.access or ():
                grants.append(permissions[f"{descriptor.action}:{descriptor.entity}:{access}"])
        role = Role(name=name, description=definition["description"], permissions=grants)
        db.add(role)
        roles[name] = role
        log.info(f"Created role: {name} with {len(grants)} permissions")

    await db.commit()
    return roles
