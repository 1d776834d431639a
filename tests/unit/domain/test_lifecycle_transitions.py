"""
Unit tests for the tenant lifecycle transition table
"""

from collections import deque

import pytest

from src.domain.entities import TenantLifecycleEventType, TenantStatus
from src.domain.lifecycle import TRANSITIONS, LifecycleOperation, allowed_targets, find_transition


@pytest.mark.parametrize(
    "operation,source,target,event_type",
    [
        (LifecycleOperation.complete_provisioning, TenantStatus.provisioning, TenantStatus.active, TenantLifecycleEventType.provisioning_completed),
        (LifecycleOperation.fail_provisioning, TenantStatus.provisioning, TenantStatus.provisioning_failed, TenantLifecycleEventType.provisioning_failed),
        (LifecycleOperation.suspend, TenantStatus.active, TenantStatus.suspended, TenantLifecycleEventType.suspended),
        (LifecycleOperation.resume, TenantStatus.suspended, TenantStatus.active, TenantLifecycleEventType.resumed),
        (LifecycleOperation.activate, TenantStatus.suspended, TenantStatus.active, TenantLifecycleEventType.activated),
        (LifecycleOperation.cancel, TenantStatus.active, TenantStatus.cancelled, TenantLifecycleEventType.cancelled),
        (LifecycleOperation.cancel, TenantStatus.suspended, TenantStatus.cancelled, TenantLifecycleEventType.cancelled),
        (LifecycleOperation.expire_grace_period, TenantStatus.suspended, TenantStatus.cancelled, TenantLifecycleEventType.grace_period_expired),
        (LifecycleOperation.soft_delete, TenantStatus.cancelled, TenantStatus.pending_deletion, TenantLifecycleEventType.marked_for_deletion),
        (LifecycleOperation.hard_delete, TenantStatus.pending_deletion, TenantStatus.deleted, TenantLifecycleEventType.deleted),
    ],
)
def test_allowed_transitions(operation, source, target, event_type):
    transition = find_transition(operation, source)

    assert transition is not None
    assert transition.target == target
    assert transition.event_type == event_type


@pytest.mark.parametrize(
    "operation,source",
    [
        (LifecycleOperation.resume, TenantStatus.active),
        (LifecycleOperation.suspend, TenantStatus.suspended),
        (LifecycleOperation.suspend, TenantStatus.provisioning),
        (LifecycleOperation.hard_delete, TenantStatus.active),
        (LifecycleOperation.hard_delete, TenantStatus.cancelled),
        (LifecycleOperation.soft_delete, TenantStatus.active),
        (LifecycleOperation.complete_provisioning, TenantStatus.provisioning_failed),
        (LifecycleOperation.activate, TenantStatus.cancelled),
    ],
)
def test_rejected_transitions(operation, source):
    assert find_transition(operation, source) is None


def test_deleted_and_failed_are_terminal():
    assert allowed_targets(TenantStatus.deleted) == frozenset()
    assert allowed_targets(TenantStatus.provisioning_failed) == frozenset()


def test_every_status_is_reachable_from_provisioning():
    seen = {TenantStatus.provisioning}
    queue = deque([TenantStatus.provisioning])
    while queue:
        current = queue.popleft()
        for target in allowed_targets(current):
            if target not in seen:
                seen.add(target)
                queue.append(target)

    assert seen == set(TenantStatus)


def test_every_operation_records_a_distinct_event_type():
    event_types = [t.event_type for t in TRANSITIONS.values()]

    assert len(event_types) == len(set(event_types))
