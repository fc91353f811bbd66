"""Fixtures for the authorization engine: roles and principals as plain values."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from taskguard.core.rbac import OrganizationRef, Principal, Role, RolePermission


GRANTS = [
    RolePermission(action="create", entity="task", access="own"),
    RolePermission(action="read", entity="task", access="own,any"),
    RolePermission(action="update", entity="user", access="any"),
    RolePermission(action="delete", entity="audit-log", access="any"),
]


@dataclass(frozen=True)
class StubTask:
    owner_id: str | None
    organization_id: str | None
    type: str = "personal"


@pytest.fixture()
def admin_role() -> Role:
    return Role(id="role-admin", name="admin", description="Administrator role", permissions=GRANTS)


@pytest.fixture()
def viewer_role() -> Role:
    return Role(id="role-viewer", name="viewer", description="Viewer role", permissions=GRANTS[:2])


@pytest.fixture()
def empty_role() -> Role:
    return Role(id="role-empty", name="empty", permissions=[])


@pytest.fixture()
def owner_role() -> Role:
    return Role(id="role-owner", name="owner", permissions=[])


def _principal(role: Role, sub_org_ids: tuple[str, ...] = ("sub-org-123", "sub-org-456")) -> Principal:
    return Principal(
        id="user-123",
        email="test@example.com",
        name="Test User",
        role=role,
        organization=OrganizationRef(id="org-123", name="Main Organization"),
        sub_organizations=[OrganizationRef(id=org_id, name=org_id) for org_id in sub_org_ids],
    )


@pytest.fixture()
def principal(admin_role: Role) -> Principal:
    return _principal(admin_role)


@pytest.fixture()
def make_principal():
    """Build a principal in org-123 with the given role and sub-organizations."""
    return _principal


@pytest.fixture()
def make_task():
    """Build a resource stub exposing owner_id, organization_id and type."""
    return StubTask
