"""Tests for the task endpoints."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from taskguard.core.database.engine import AsyncSessionLocal
from taskguard.features.audit_logs.models import AuditLog
from taskguard.features.tasks.models import Task


async def insert_task(owner_id: str, organization_id: str, type: str = "work", title: str = "Existing task") -> str:
    async with AsyncSessionLocal() as db:
        task = Task(title=title, content="", type=type, priority="medium", status="todo",
                    owner_id=owner_id, organization_id=organization_id)
        db.add(task)
        await db.commit()
        return task.id


async def audit_entries(**filters) -> list[AuditLog]:
    async with AsyncSessionLocal() as db:
        stmt = select(AuditLog)
        for key, value in filters.items():
            stmt = stmt.where(getattr(AuditLog, key) == value)
        result = await db.execute(stmt)
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_viewer_creates_personal_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    response = await async_client.post(
        "/tasks",
        json={"title": "Buy milk", "type": "personal", "priority": "low"},
        headers=auth_headers(seeded.viewer),
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["owner_id"] == seeded.viewer
    assert payload["organization_id"] == seeded.acme
    assert payload["status"] == "todo"

    entries = await audit_entries(action="create", resource_id=payload["id"])
    assert [entry.outcome for entry in entries] == ["success"]


@pytest.mark.asyncio
async def test_viewer_cannot_create_work_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    response = await async_client.post(
        "/tasks",
        json={"title": "Quarterly report", "type": "work"},
        headers=auth_headers(seeded.viewer),
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Only administrators and owners can create work tasks"

    entries = await audit_entries(action="create", user_id=seeded.viewer)
    assert len(entries) == 1
    assert entries[0].outcome == "failure"
    assert entries[0].details["reason"] == "missing_permission"


@pytest.mark.asyncio
async def test_admin_creates_work_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    response = await async_client.post(
        "/tasks",
        json={"title": "Quarterly report", "type": "work", "priority": "high"},
        headers=auth_headers(seeded.admin),
    )

    assert response.status_code == 201
    assert response.json()["type"] == "work"


@pytest.mark.asyncio
async def test_invalid_payload_is_rejected(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    response = await async_client.post(
        "/tasks",
        json={"title": "x", "type": "chore"},
        headers=auth_headers(seeded.admin),
    )

    assert response.status_code == 400
    assert set(response.json()) == {"title", "type"}


@pytest.mark.asyncio
async def test_viewer_edits_own_personal_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    task_id = await insert_task(seeded.viewer, seeded.acme, type="personal")

    response = await async_client.patch(
        f"/tasks/{task_id}", json={"title": "Renamed", "priority": "high"}, headers=auth_headers(seeded.viewer)
    )

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"

    entries = await audit_entries(action="update", resource_id=task_id)
    assert entries[0].details["accessLevel"] == "own"


@pytest.mark.asyncio
async def test_viewer_cannot_edit_someone_elses_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    task_id = await insert_task(seeded.admin, seeded.acme)

    response = await async_client.patch(
        f"/tasks/{task_id}", json={"status": "done"}, headers=auth_headers(seeded.viewer)
    )

    assert response.status_code == 403
    entries = await audit_entries(action="update", resource_id=task_id)
    assert [entry.outcome for entry in entries] == ["failure"]


@pytest.mark.asyncio
async def test_owner_of_work_task_changes_status_only(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    task_id = await insert_task(seeded.viewer, seeded.acme, type="work")
    headers = auth_headers(seeded.viewer)

    status_response = await async_client.patch(f"/tasks/{task_id}", json={"status": "in-progress"}, headers=headers)
    title_response = await async_client.patch(f"/tasks/{task_id}", json={"title": "Hijacked"}, headers=headers)

    assert status_response.status_code == 200
    assert status_response.json()["status"] == "in-progress"
    assert title_response.status_code == 403


@pytest.mark.asyncio
async def test_viewer_cannot_promote_task_to_work(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    task_id = await insert_task(seeded.viewer, seeded.acme, type="personal")

    response = await async_client.patch(f"/tasks/{task_id}", json={"type": "work"}, headers=auth_headers(seeded.viewer))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_edits_work_task_in_sub_organization(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    task_id = await insert_task(seeded.labs_viewer, seeded.labs, type="work")

    response = await async_client.patch(
        f"/tasks/{task_id}", json={"content": "Reviewed by admin"}, headers=auth_headers(seeded.admin)
    )

    assert response.status_code == 200
    entries = await audit_entries(action="update", resource_id=task_id, outcome="success")
    assert entries[0].details["accessLevel"] == "any"


@pytest.mark.asyncio
@pytest.mark.parametrize("organization", ["labs_east", "other"])
async def test_admin_cannot_reach_outside_two_tiers(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers, organization: str
) -> None:
    task_id = await insert_task(seeded.labs_viewer, getattr(seeded, organization), type="work")

    response = await async_client.patch(f"/tasks/{task_id}", json={"status": "done"}, headers=auth_headers(seeded.admin))

    assert response.status_code == 403
    entries = await audit_entries(action="update", resource_id=task_id)
    assert entries[0].details["reason"] == "organization_not_accessible"


@pytest.mark.asyncio
async def test_update_missing_task(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    response = await async_client.patch("/tasks/does-not-exist", json={"status": "done"}, headers=auth_headers(seeded.admin))

    assert response.status_code == 404
    entries = await audit_entries(action="update", resource_id="does-not-exist")
    assert entries[0].outcome == "failure"


@pytest.mark.asyncio
async def test_delete_rules(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    own_task = await insert_task(seeded.viewer, seeded.acme, type="personal")
    other_task = await insert_task(seeded.viewer2, seeded.acme, type="work")
    headers = auth_headers(seeded.viewer)

    assert (await async_client.delete(f"/tasks/{own_task}", headers=headers)).status_code == 204
    assert (await async_client.delete(f"/tasks/{other_task}", headers=headers)).status_code == 403
    assert (await async_client.delete(f"/tasks/{other_task}", headers=auth_headers(seeded.admin))).status_code == 204
    assert (await async_client.delete(f"/tasks/{own_task}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_shows_work_tasks_and_own_personal_tasks(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    work = await insert_task(seeded.admin, seeded.acme, type="work")
    mine = await insert_task(seeded.viewer, seeded.acme, type="personal")
    theirs = await insert_task(seeded.viewer2, seeded.acme, type="personal")
    sub_org_work = await insert_task(seeded.labs_viewer, seeded.labs, type="work")
    grandchild_work = await insert_task(seeded.labs_viewer, seeded.labs_east, type="work")
    unrelated = await insert_task(seeded.admin, seeded.other, type="work")

    response = await async_client.get("/tasks", headers=auth_headers(seeded.viewer))

    assert response.status_code == 200
    ids = {task["id"] for task in response.json()}
    assert ids == {work, mine, sub_org_work}
    assert not ids & {theirs, grandchild_work, unrelated}


@pytest.mark.asyncio
async def test_list_single_organization(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    await insert_task(seeded.admin, seeded.acme, type="work")
    sub_org_work = await insert_task(seeded.labs_viewer, seeded.labs, type="work")

    response = await async_client.get(
        "/tasks", params={"organization_id": seeded.labs}, headers=auth_headers(seeded.viewer)
    )

    assert response.status_code == 200
    assert [task["id"] for task in response.json()] == [sub_org_work]


@pytest.mark.asyncio
async def test_list_unrelated_organization_is_denied_and_audited(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers
) -> None:
    response = await async_client.get(
        "/tasks", params={"organization_id": seeded.other}, headers=auth_headers(seeded.viewer)
    )

    assert response.status_code == 403
    assert response.json()["detail"] == f"Organization {seeded.other} is not accessible to user"

    entries = await audit_entries(action="organization_access_denied", user_id=seeded.viewer)
    assert len(entries) == 1
    details = entries[0].details
    assert entries[0].organization_id == seeded.acme
    assert details["deniedOrganizationId"] == seeded.other
    assert details["denialReason"] == "organization_not_accessible"
    assert details["userPermissions"]["subOrganizationCount"] == 2
    assert set(details["userPermissions"]["subOrganizationIds"]) == {seeded.labs, seeded.support}


@pytest.mark.asyncio
async def test_get_task_hides_other_users_personal_tasks(async_client: AsyncClient, seeded: SimpleNamespace, auth_headers) -> None:
    theirs = await insert_task(seeded.viewer2, seeded.acme, type="personal")
    work = await insert_task(seeded.viewer2, seeded.acme, type="work")
    headers = auth_headers(seeded.viewer)

    assert (await async_client.get(f"/tasks/{theirs}", headers=headers)).status_code == 403
    assert (await async_client.get(f"/tasks/{work}", headers=headers)).status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "content", "status", "type", "priority"])
async def test_update_rejects_null_fields(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers, field: str
) -> None:
    task_id = await insert_task(seeded.viewer, seeded.acme, type="personal")

    response = await async_client.patch(f"/tasks/{task_id}", json={field: None}, headers=auth_headers(seeded.viewer))

    assert response.status_code == 400
    assert field in response.json()

    unchanged = await async_client.get(f"/tasks/{task_id}", headers=auth_headers(seeded.viewer))
    assert unchanged.json()["title"] == "Existing task"


@pytest.mark.asyncio
async def test_admin_cannot_modify_someone_elses_personal_task(
    async_client: AsyncClient, seeded: SimpleNamespace, auth_headers
) -> None:
    task_id = await insert_task(seeded.viewer, seeded.acme, type="personal")
    headers = auth_headers(seeded.admin)

    view = await async_client.get(f"/tasks/{task_id}", headers=headers)
    edit = await async_client.patch(f"/tasks/{task_id}", json={"title": "Rewritten"}, headers=headers)
    removal = await async_client.delete(f"/tasks/{task_id}", headers=headers)

    assert view.status_code == 403
    assert edit.status_code == 403
    assert removal.status_code == 403

    entries = await audit_entries(resource_id=task_id, user_id=seeded.admin)
    assert {entry.action for entry in entries} == {"update", "delete"}
    assert all(entry.outcome == "failure" for entry in entries)
    assert all(entry.details["reason"] == "access_denied" for entry in entries)

    still_there = await async_client.get(f"/tasks/{task_id}", headers=auth_headers(seeded.viewer))
    assert still_there.json()["title"] == "Existing task"
