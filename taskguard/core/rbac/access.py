"""
Resource-level access: role permission + ownership + organizational reach.
"""
from taskguard.core.rbac.evaluator import check_permission_by_string, role_grants
from taskguard.core.rbac.grammar import parse_permission_string
from taskguard.core.rbac.types import (
    Access,
    Principal,
    ReasonCode,
    Resource,
    TaskAccessDecision,
)
from taskguard.utils import get_logger


log = get_logger(__name__)


def can_user_access_task(
    principal: Principal,
    resource: Resource,
    required_permission: str,
) -> TaskAccessDecision:
    """
    Decide whether `principal` may perform `required_permission` on a resource.

    Order of evaluation:
    1. Role gate via check_permission_by_string. Nothing else is looked at on failure.
    2. No access qualifier on the requirement: granted, unscoped.
    3. `own` requested and the principal owns the resource: granted at `own`.
    4. `any` requested and held by the role: granted at `any` if the resource
       lives in the principal's home organization or a direct sub-organization.

    The returned access_level is what business rules downstream should key on
    (for example, only `any` may edit the substance of a work task).
    """
    if not check_permission_by_string(principal.role, required_permission):
        log.debug(f"User {principal.id} denied {required_permission!r}: role gate")
        return TaskAccessDecision(has_access=False, reason=ReasonCode.MISSING_PERMISSION)

    descriptor = parse_permission_string(required_permission)
    if not descriptor.access:
        return TaskAccessDecision(has_access=True)

    if Access.OWN.value in descriptor.access and resource.owner_id == principal.id:
        return TaskAccessDecision(has_access=True, access_level=Access.OWN)

    if Access.ANY.value in descriptor.access and role_grants(
        principal.role, descriptor.entity, descriptor.action, Access.ANY.value
    ):
        if resource.organization_id in principal.reachable_organization_ids:
            return TaskAccessDecision(has_access=True, access_level=Access.ANY)

        log.debug(
            f"User {principal.id} denied {required_permission!r}: "
            f"organization {resource.organization_id} not reachable"
        )
        return TaskAccessDecision(has_access=False, reason=ReasonCode.ORGANIZATION_NOT_ACCESSIBLE)

    log.debug(f"User {principal.id} denied {required_permission!r}: not owner, no any-level grant")
    return TaskAccessDecision(has_access=False, reason=ReasonCode.ACCESS_DENIED)
