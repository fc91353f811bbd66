"""
Task routes.

Every mutation is decided by the authorization engine and recorded in the
audit log, whether it succeeds or not.
"""
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskguard.core import rbac
from taskguard.core.database.engine import get_db
from taskguard.features.audit_logs.dependencies import audit_principal_action
from taskguard.features.organizations.access import validate_organization_access
from taskguard.features.permissions.dependencies import require_permission
from taskguard.features.tasks.models import Task
from taskguard.features.tasks.rules import can_create_task, can_view_task, check_task_change
from taskguard.features.tasks.schemas import TaskCreate, TaskResponse, TaskUpdate
from taskguard.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def _get_task_or_404(
    db: AsyncSession,
    principal: rbac.Principal,
    request: Request,
    task_id: str,
    action: str,
    details: Dict[str, Any],
) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        await audit_principal_action(
            db, principal, request,
            action=action, resource_type="task", resource_id=task_id,
            outcome="failure", details={**details, "reason": "not_found"},
        )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def _deny(
    db: AsyncSession,
    principal: rbac.Principal,
    request: Request,
    action: str,
    task_id: Optional[str],
    details: Dict[str, Any],
    reason: str,
    message: str,
) -> None:
    await audit_principal_action(
        db, principal, request,
        action=action, resource_type="task", resource_id=task_id,
        outcome="failure", details={**details, "reason": reason},
    )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("read:task"))],
    organization_id: Optional[str] = None,
):
    """
    List visible tasks: every work task plus the caller's own personal tasks.

    Scoped to organization_id when given, otherwise to the home organization
    and each sub-organization the caller can read tasks in.
    """
    if organization_id:
        org_ids = [
            await validate_organization_access(
                db, principal, organization_id, "task", rbac.Action.READ.value, request
            )
        ]
    else:
        org_ids = [principal.organization.id] + [
            org.id
            for org in principal.sub_organizations
            if rbac.check_organization_permission(principal, org.id, "task", rbac.Action.READ.value).has_access
        ]

    result = await db.execute(
        select(Task)
        .where(Task.organization_id.in_(org_ids))
        .where(or_(Task.type == rbac.TaskType.WORK.value, Task.owner_id == principal.id))
        .order_by(Task.created_at.desc(), Task.id)
    )
    return result.scalars().all()


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("read:task"))],
):
    """Get a single task."""
    task = await _get_task_or_404(db, principal, request, task_id, "read", {"taskId": task_id})

    decision = rbac.can_user_access_task(principal, task, "read:task:own,any")
    if not decision.has_access or not can_view_task(principal, task):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to view this task"
        )
    return task


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("create:task"))],
):
    """
    Create a task owned by the caller in their home organization.

    Personal tasks: anyone with a create:task grant.
    Work tasks: only roles holding create:task:any.
    """
    details = task_in.model_dump(mode="json")

    if not can_create_task(principal.role, task_in.type):
        log.warning(f"User {principal.id} ({principal.role.name}) is not authorized to create work tasks")
        await _deny(
            db, principal, request, "create", None, details,
            reason=rbac.ReasonCode.MISSING_PERMISSION.value,
            message="Only administrators and owners can create work tasks",
        )

    task = Task(
        **details,
        status="todo",
        owner_id=principal.id,
        organization_id=principal.organization.id,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)

    await audit_principal_action(
        db, principal, request,
        action="create", resource_type="task", resource_id=task.id, details=details,
    )
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("update:task"))],
):
    """Update a task the caller owns, or any task in reach with update:task:any."""
    changes = task_update.model_dump(mode="json", exclude_unset=True)
    task = await _get_task_or_404(db, principal, request, task_id, "update", changes)

    decision = rbac.can_user_access_task(principal, task, "update:task:own,any")
    if decision.has_access and not can_view_task(principal, task):
        decision = rbac.TaskAccessDecision(has_access=False, reason=rbac.ReasonCode.ACCESS_DENIED)
    if not decision.has_access:
        log.warning(f"User {principal.id} attempted to update task {task_id} without permission")
        await _deny(
            db, principal, request, "update", task_id, changes,
            reason=decision.reason.value if decision.reason else rbac.ReasonCode.ACCESS_DENIED.value,
            message="You do not have permission to update this task",
        )

    message = check_task_change(principal.role, decision, task, changes)
    if message:
        log.warning(f"User {principal.id} ({principal.role.name}) rejected change on task {task_id}: {message}")
        await _deny(
            db, principal, request, "update", task_id, changes,
            reason=rbac.ReasonCode.MISSING_PERMISSION.value,
            message=message,
        )

    for key, value in changes.items():
        setattr(task, key, value)
    await db.commit()
    await db.refresh(task)

    await audit_principal_action(
        db, principal, request,
        action="update", resource_type="task", resource_id=task_id,
        details={**changes, "accessLevel": decision.access_level.value if decision.access_level else None},
    )
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[rbac.Principal, Depends(require_permission("delete:task"))],
):
    """Delete a task the caller owns, or any task in reach with delete:task:any."""
    details = {"taskId": task_id}
    task = await _get_task_or_404(db, principal, request, task_id, "delete", details)

    decision = rbac.can_user_access_task(principal, task, "delete:task:own,any")
    if decision.has_access and not can_view_task(principal, task):
        decision = rbac.TaskAccessDecision(has_access=False, reason=rbac.ReasonCode.ACCESS_DENIED)
    if not decision.has_access:
        log.warning(f"User {principal.id} attempted to delete task {task_id} without permission")
        await _deny(
            db, principal, request, "delete", task_id, details,
            reason=decision.reason.value if decision.reason else rbac.ReasonCode.ACCESS_DENIED.value,
            message="You do not have permission to delete this task",
        )

    await db.delete(task)
    await db.commit()

    await audit_principal_action(
        db, principal, request,
        action="delete", resource_type="task", resource_id=task_id, details=details,
    )
