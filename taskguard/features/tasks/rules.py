"""
Task-type rules layered on top of the access decision.

The combinator answers "may this principal touch this task, and at what
level". These rules answer "may they make this particular change".
"""
from typing import Any, Mapping, Optional

from taskguard.core import rbac
from taskguard.core.rbac import Access, TaskType


# Fields a work task only lets any-level editors change
SUBSTANTIVE_FIELDS = frozenset({"title", "content", "priority", "type"})


def _value(v: Any) -> Any:
    return getattr(v, "value", v)


def can_create_task(role: rbac.Role, task_type: str) -> bool:
    """
    Personal tasks need any create:task grant. Work tasks need create:task:any
    outright; a new task has no owner to fall back on.
    """
    if _value(task_type) == TaskType.WORK.value:
        return rbac.role_grants(role, "task", rbac.Action.CREATE.value, Access.ANY.value)
    return rbac.check_permission_by_string(role, "create:task")


def is_privileged_editor(role: rbac.Role, decision: rbac.TaskAccessDecision) -> bool:
    return decision.access_level == Access.ANY or rbac.role_grants(
        role, "task", rbac.Action.UPDATE.value, Access.ANY.value
    )


def check_task_change(
    role: rbac.Role,
    decision: rbac.TaskAccessDecision,
    task: rbac.Resource,
    changes: Mapping[str, Any],
) -> Optional[str]:
    """
    Validate an update against the task-type rules.

    Returns None when the change is allowed, otherwise the denial message.
    Assumes `decision` already granted access to the task.
    """
    new_type = _value(changes.get("type"))
    if new_type == TaskType.WORK.value and task.type != TaskType.WORK.value:
        if not rbac.role_grants(role, "task", rbac.Action.UPDATE.value, Access.ANY.value):
            return "Only administrators and owners can create work tasks"

    if task.type == TaskType.WORK.value and SUBSTANTIVE_FIELDS.intersection(changes):
        if not is_privileged_editor(role, decision):
            return "Only the status of a work task can be changed without organization-wide update access"

    return None


def can_view_task(principal: rbac.Principal, task: rbac.Resource) -> bool:
    """Work tasks are shared; personal tasks are visible to their owner only."""
    return task.type == TaskType.WORK.value or task.owner_id == principal.id
