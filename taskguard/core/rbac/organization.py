"""
Organization scope resolution.

Works purely on the claims carried by the Principal: the home organization and
its direct children. It never walks a persisted tree and never recurses past
one level.
"""
from typing import Optional

from taskguard.core.rbac.evaluator import check_permission
from taskguard.core.rbac.types import (
    Access,
    OrganizationPermissionResult,
    Principal,
    ReasonCode,
)
from taskguard.utils import get_logger


log = get_logger(__name__)


def check_organization_permission(
    principal: Principal,
    target_organization_id: str,
    entity: str,
    action: str,
) -> OrganizationPermissionResult:
    """
    Decide whether `principal` may act on `entity` inside an organization.

    - Home organization: always reachable. Role checks happen elsewhere.
    - Direct sub-organization: reachable only with an `any` grant for entity/action.
    - Anything else: not reachable.
    """
    if target_organization_id == principal.organization.id:
        return OrganizationPermissionResult(has_access=True)

    if target_organization_id in principal.sub_organization_ids:
        if check_permission(principal.role, entity, action, Access.ANY.value):
            return OrganizationPermissionResult(has_access=True)

        log.debug(
            f"User {principal.id} lacks {action}:{entity}:any in sub-organization {target_organization_id}"
        )
        return OrganizationPermissionResult(
            has_access=False,
            reason=ReasonCode.INSUFFICIENT_SUB_ORG_PERMISSIONS,
            error_message=f"Insufficient permissions to {action} in sub-organization",
        )

    log.debug(f"Organization {target_organization_id} is outside the reach of user {principal.id}")
    return OrganizationPermissionResult(
        has_access=False,
        reason=ReasonCode.ORGANIZATION_NOT_ACCESSIBLE,
        error_message=f"Organization {target_organization_id} is not accessible to user",
    )


def denial_reason(result: OrganizationPermissionResult, default: Optional[ReasonCode] = None) -> str:
    """Reason code to record for a denial, falling back to `access_denied`."""
    reason = result.reason or default or ReasonCode.ACCESS_DENIED
    return reason.value
