"""Tests for the audit log endpoint and the denial entries route guards write."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from taskguard.core.database.engine import AsyncSessionLocal
from taskguard.features.audit_logs.dependencies import create_audit_log
from taskguard.features.audit_logs.models import AuditLog


async def add_entries(seeded: SimpleNamespace, organization_id: str, count: int) -> None:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with AsyncSessionLocal() as db:
        for i in range(count):
            db.add(AuditLog(
                user_id=seeded.admin,
                action=f"action-{i}",
                resource_type="task",
                organization_id=organization_id,
                created_at=base + timedelta(minutes=i),
            ))
        await db.commit()


@pytest.mark.asyncio
async def test_viewer_cannot_read_audit_logs(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers
) -> None:
    response = await async_client.get("/audit-logs", headers=auth_headers(seeded.viewer))

    assert response.status_code == 403
    assert response.json()["detail"] == "Required permission: read:audit-log"

    admin_view = await async_client.get(
        "/audit-logs",
        params={"action": "organization_access_denied", "user_id": seeded.viewer},
        headers=auth_headers(seeded.admin),
    )
    items = admin_view.json()["items"]
    assert len(items) == 1
    assert items[0]["outcome"] == "failure"
    assert items[0]["resource_type"] == "audit-log"
    assert items[0]["details"]["reason"] == "missing_permission"
    assert items[0]["details"]["requiredPermission"] == "read:audit-log"
    assert items[0]["details"]["requestMethod"] == "GET"


@pytest.mark.asyncio
async def test_newest_first_with_pagination(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers
) -> None:
    await add_entries(seeded, seeded.acme, 5)

    response = await async_client.get(
        "/audit-logs", params={"limit": 2, "skip": 2}, headers=auth_headers(seeded.admin)
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 5
    assert payload["pages"] == 3
    assert payload["page"] == 2
    assert [item["action"] for item in payload["items"]] == ["action-2", "action-1"]


@pytest.mark.asyncio
async def test_sub_organization_logs(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers
) -> None:
    await add_entries(seeded, seeded.acme, 2)
    await add_entries(seeded, seeded.labs, 1)

    response = await async_client.get(
        "/audit-logs", params={"organization_id": seeded.labs}, headers=auth_headers(seeded.admin)
    )

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert response.json()["items"][0]["organization_id"] == seeded.labs


@pytest.mark.asyncio
@pytest.mark.parametrize("organization", ["labs_east", "other"])
async def test_unreachable_organization_logs(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers, organization: str
) -> None:
    target = getattr(seeded, organization)

    response = await async_client.get(
        "/audit-logs", params={"organization_id": target}, headers=auth_headers(seeded.owner)
    )

    assert response.status_code == 403
    assert response.json()["detail"] == f"Organization {target} is not accessible to user"


@pytest.mark.asyncio
async def test_create_audit_log_commits(db_session, seeded: SimpleNamespace) -> None:
    entry = await create_audit_log(
        db_session,
        user_id=seeded.viewer,
        action="update",
        resource_type="task",
        resource_id="task-1",
        organization_id=seeded.acme,
        outcome="failure",
        details={"reason": "access_denied"},
    )
    await db_session.rollback()

    async with AsyncSessionLocal() as other:
        stored = await other.get(AuditLog, entry.id)

    assert stored is not None
    assert stored.outcome == "failure"
    assert stored.details == {"reason": "access_denied"}
