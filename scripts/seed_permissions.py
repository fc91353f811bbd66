"""
Seed script to populate default permissions, roles and a demo organization tree.

Creates:
- Default task/user/audit-log permissions
- owner, admin and viewer roles
- "Acme" with two child organizations, and one user per role in "Acme"

Usage:
    python -m scripts.seed_permissions
"""
import asyncio
from sqlalchemy import select

from taskguard.core.database.engine import AsyncSessionLocal, init_db
from taskguard.features.organizations.models import Organization
from taskguard.features.permissions.defaults import seed_roles
from taskguard.features.users.models import User
from taskguard.utils import get_logger


log = get_logger(__name__)


DEMO_ORGANIZATION = "Acme"
DEMO_SUB_ORGANIZATIONS = ["Acme Labs", "Acme Support"]
DEMO_USERS = [
    ("owner@acme.test", "Olivia Owner", "owner"),
    ("admin@acme.test", "Adam Admin", "admin"),
    ("viewer@acme.test", "Vera Viewer", "viewer"),
]


async def seed_organizations(db) -> Organization:
    result = await db.execute(select(Organization).where(Organization.name == DEMO_ORGANIZATION))
    parent = result.scalar_one_or_none()
    if parent is None:
        parent = Organization(name=DEMO_ORGANIZATION)
        db.add(parent)
        await db.flush()
        log.info(f"Created organization: {parent.name}")

    result = await db.execute(select(Organization.name).where(Organization.parent_id == parent.id))
    existing_children = set(result.scalars().all())
    for name in DEMO_SUB_ORGANIZATIONS:
        if name not in existing_children:
            db.add(Organization(name=name, parent_id=parent.id))
            log.info(f"Created sub-organization: {name}")

    await db.commit()
    return parent


async def seed_users(db, organization: Organization, roles) -> None:
    for email, name, role_name in DEMO_USERS:
        result = await db.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            continue
        db.add(User(email=email, name=name, role_id=roles[role_name].id, organization_id=organization.id))
        log.info(f"Created user: {email} ({role_name})")
    await db.commit()


async def main():
    log.info("Initializing database...")
    await init_db()

    async with AsyncSessionLocal() as db:
        roles = await seed_roles(db)
        organization = await seed_organizations(db)
        await seed_users(db, organization, roles)

    log.info("Seeding completed")


if __name__ == "__main__":
    asyncio.run(main())
