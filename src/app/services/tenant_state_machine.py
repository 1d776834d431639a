"""
Tenant Lifecycle State Machine

The only component allowed to change Tenant.status. Runs inside the
caller's open unit of work and never commits: the caller commits the
status change and its lifecycle event together.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.context import TenantContext
from src.domain.entities import Tenant, TenantLifecycleEvent, TenantStatus
from src.domain.errors import ConcurrencyConflictError
from src.domain.lifecycle import LifecycleOperation, find_transition
from src.domain.metadata import normalize_metadata

logger = logging.getLogger(__name__)


@dataclass
class TransitionOutcome:
    tenant: Tenant
    previous_status: TenantStatus
    event: Optional[TenantLifecycleEvent]
    changed: bool = True
    purged: Optional[Dict[str, int]] = None


class TenantStateMachine:
    def __init__(
        self,
        uow: UnitOfWork,
        grace_period_days: int = 30,
        retention_days: int = 90,
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.grace_period_days = grace_period_days
        self.retention_days = retention_days
        self.clock = clock

    async def transition(
        self,
        tenant: Tenant,
        operation: LifecycleOperation,
        reason: Optional[str] = None,
        triggered_by: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        extra_changes: Optional[Dict[str, Any]] = None,
        grace_period_days: Optional[int] = None,
        retention_days: Optional[int] = None,
        schedule_deletion: bool = True,
    ) -> Result[TransitionOutcome]:
        """
        Apply one lifecycle operation to tenant.

        Business Logic:
        1. Look the operation up in the transition table for the current status
        2. Compute the milestone fields the operation owns
        3. Version-checked update of the tenant row
        4. Hard delete purges tenant-scoped data and usage rows
        5. Append exactly one lifecycle event

        Errors:
            - INVALID_STATE_TRANSITION: operation not allowed from current status
            - CONCURRENCY_CONFLICT: tenant changed since it was read
        """
        previous = tenant.status

        if operation == LifecycleOperation.hard_delete and previous == TenantStatus.deleted:
            return Return.ok(TransitionOutcome(tenant, previous, None, changed=False))

        transition = find_transition(operation, previous)
        if transition is None:
            return Return.err(
                Error(
                    "INVALID_STATE_TRANSITION",
                    f"Cannot {operation.value} tenant in status {previous.value}",
                    reason=previous.value,
                )
            )

        now = self.clock()
        changes = self._milestones(
            tenant, operation, now, reason, grace_period_days, retention_days, schedule_deletion
        )
        changes["status"] = transition.target
        if extra_changes:
            changes.update(extra_changes)

        try:
            tenant = await self.uow.tenants.compare_and_set(tenant, tenant.version, changes)
        except ConcurrencyConflictError as exc:
            logger.warning(f"Concurrent {operation.value} on tenant {tenant.id}: {exc}")
            return Return.err(
                Error(
                    "CONCURRENCY_CONFLICT",
                    "Tenant was modified concurrently, retry the operation",
                    reason=operation.value,
                )
            )

        purged = None
        if operation == LifecycleOperation.hard_delete:
            purged = await self.uow.tenant_data.purge_tenant(
                TenantContext.elevated_for(tenant.id, source="lifecycle"), tenant.id
            )
            purged["usage_rows"] = await self.uow.usage_metrics.delete_for_tenant(tenant.id)

        event_metadata = dict(metadata or {})
        if operation == LifecycleOperation.suspend:
            event_metadata["grace_period_ends_at"] = tenant.grace_period_ends_at
        if tenant.scheduled_deletion_at and operation in (
            LifecycleOperation.cancel,
            LifecycleOperation.expire_grace_period,
            LifecycleOperation.soft_delete,
        ):
            event_metadata["scheduled_deletion_at"] = tenant.scheduled_deletion_at
        if purged:
            event_metadata.update({f"purged_{name}": count for name, count in purged.items()})

        event = await self.uow.lifecycle_events.append(
            TenantLifecycleEvent(
                tenant_id=tenant.id,
                event_type=transition.event_type,
                previous_status=previous,
                new_status=transition.target,
                reason=reason,
                triggered_by=triggered_by,
                event_metadata=normalize_metadata(event_metadata),
                occurred_at=now,
            )
        )

        logger.info(
            f"Tenant {tenant.id} {previous.value} -> {transition.target.value} "
            f"({transition.event_type.value}) by {triggered_by or 'system'}"
        )
        return Return.ok(TransitionOutcome(tenant, previous, event, purged=purged))

    def _milestones(
        self,
        tenant: Tenant,
        operation: LifecycleOperation,
        now: datetime,
        reason: Optional[str],
        grace_period_days: Optional[int],
        retention_days: Optional[int],
        schedule_deletion: bool,
    ) -> Dict[str, Any]:
        days = self.retention_days if retention_days is None else retention_days
        retention_end = now + timedelta(days=days)

        if operation == LifecycleOperation.complete_provisioning:
            return {"provisioned_at": now, "activated_at": now, "failure_reason": None}
        if operation == LifecycleOperation.fail_provisioning:
            return {"failure_reason": reason}
        if operation == LifecycleOperation.suspend:
            days = self.grace_period_days if grace_period_days is None else grace_period_days
            return {
                "suspended_at": now,
                "grace_period_ends_at": now + timedelta(days=days),
                "is_subscription_active": False,
            }
        if operation in (LifecycleOperation.resume, LifecycleOperation.activate):
            changes = {
                "suspended_at": None,
                "grace_period_ends_at": None,
                "scheduled_deletion_at": None,
            }
            if operation == LifecycleOperation.activate:
                changes.update(activated_at=now, is_subscription_active=True)
            return changes
        if operation == LifecycleOperation.cancel:
            return {
                "cancelled_at": now,
                "is_subscription_active": False,
                "scheduled_deletion_at": retention_end if schedule_deletion else None,
            }
        if operation == LifecycleOperation.expire_grace_period:
            return {
                "cancelled_at": now,
                "is_subscription_active": False,
                "scheduled_deletion_at": retention_end,
            }
        if operation == LifecycleOperation.soft_delete:
            return {"scheduled_deletion_at": tenant.scheduled_deletion_at or retention_end}
        if operation == LifecycleOperation.hard_delete:
            return {"deleted_at": now}
        return {}
