"""
Tenant lifecycle transition table.

The table is the single source of truth for which status changes are
allowed. Each operation names its allowed source states, its target state
and the event type recorded when it succeeds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from src.domain.entities.enums import TenantLifecycleEventType, TenantStatus


class LifecycleOperation(str, Enum):
    complete_provisioning = "complete_provisioning"
    fail_provisioning = "fail_provisioning"
    activate = "activate"
    suspend = "suspend"
    resume = "resume"
    cancel = "cancel"
    expire_grace_period = "expire_grace_period"
    soft_delete = "soft_delete"
    hard_delete = "hard_delete"


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[TenantStatus]
    target: TenantStatus
    event_type: TenantLifecycleEventType


TRANSITIONS: Dict[LifecycleOperation, Transition] = {
    LifecycleOperation.complete_provisioning: Transition(
        frozenset({TenantStatus.provisioning}),
        TenantStatus.active,
        TenantLifecycleEventType.provisioning_completed,
    ),
    LifecycleOperation.fail_provisioning: Transition(
        frozenset({TenantStatus.provisioning}),
        TenantStatus.provisioning_failed,
        TenantLifecycleEventType.provisioning_failed,
    ),
    LifecycleOperation.activate: Transition(
        frozenset({TenantStatus.suspended}),
        TenantStatus.active,
        TenantLifecycleEventType.activated,
    ),
    LifecycleOperation.suspend: Transition(
        frozenset({TenantStatus.active}),
        TenantStatus.suspended,
        TenantLifecycleEventType.suspended,
    ),
    LifecycleOperation.resume: Transition(
        frozenset({TenantStatus.suspended}),
        TenantStatus.active,
        TenantLifecycleEventType.resumed,
    ),
    LifecycleOperation.cancel: Transition(
        frozenset({TenantStatus.active, TenantStatus.suspended}),
        TenantStatus.cancelled,
        TenantLifecycleEventType.cancelled,
    ),
    LifecycleOperation.expire_grace_period: Transition(
        frozenset({TenantStatus.suspended}),
        TenantStatus.cancelled,
        TenantLifecycleEventType.grace_period_expired,
    ),
    LifecycleOperation.soft_delete: Transition(
        frozenset({TenantStatus.cancelled}),
        TenantStatus.pending_deletion,
        TenantLifecycleEventType.marked_for_deletion,
    ),
    LifecycleOperation.hard_delete: Transition(
        frozenset({TenantStatus.pending_deletion}),
        TenantStatus.deleted,
        TenantLifecycleEventType.deleted,
    ),
}


def find_transition(
    operation: LifecycleOperation, current: TenantStatus
) -> Optional[Transition]:
    """Return the transition for operation if allowed from current, else None"""
    transition = TRANSITIONS[operation]
    if current in transition.sources:
        return transition
    return None


def allowed_targets(current: TenantStatus) -> FrozenSet[TenantStatus]:
    return frozenset(t.target for t in TRANSITIONS.values() if current in t.sources)
