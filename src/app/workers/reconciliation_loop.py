"""
Reconciliation Loop

Periodic sweep over tenants that enforces time-based lifecycle rules:
overage alerts, grace period expiry and scheduled deletion. One tenant's
failure never stops the sweep.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.app.services.tenant_cache import ITenantCache
from src.app.services.tenant_state_machine import TenantStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageMetricsTracker
from src.app.use_cases.usage import USAGE_SUMMARY_CACHE_KEY
from src.domain.clock import Clock, utc_now
from src.domain.entities import Alert, AlertSeverity, AlertType, Tenant, TenantStatus
from src.domain.lifecycle import LifecycleOperation
from src.domain.metadata import normalize_metadata

from .periodic_worker import PeriodicWorker, UnitOfWorkScope

logger = logging.getLogger(__name__)

RECONCILED_STATUSES = (
    TenantStatus.active,
    TenantStatus.suspended,
    TenantStatus.cancelled,
    TenantStatus.pending_deletion,
)
TRIGGERED_BY = "reconciliation"


class ReconciliationReport(BaseModel):
    started_at: datetime
    finished_at: Optional[datetime] = None
    tenants_checked: int = 0
    alerts_raised: int = 0
    grace_periods_expired: int = 0
    tenants_deleted: int = 0
    failures: int = 0
    failed_tenants: List[str] = Field(default_factory=list)
    stopped_early: bool = False


class ReconciliationLoop(PeriodicWorker):
    name = "reconciliation"

    def __init__(
        self,
        uow_scope: UnitOfWorkScope,
        interval_seconds: float = 300,
        grace_period_days: int = 30,
        retention_days: int = 90,
        default_plan_name: str = "Free",
        tenant_timeout_seconds: float = 30,
        clock: Clock = utc_now,
        cache: ITenantCache = None,
    ):
        super().__init__(interval_seconds)
        self.uow_scope = uow_scope
        self.grace_period_days = grace_period_days
        self.retention_days = retention_days
        self.default_plan_name = default_plan_name
        self.tenant_timeout_seconds = tenant_timeout_seconds
        self.clock = clock
        self.cache = cache

    async def run_once(self, stop_event: Optional[asyncio.Event] = None) -> ReconciliationReport:
        report = ReconciliationReport(started_at=self.clock())

        async with self.uow_scope() as uow:
            async with uow:
                tenants = await uow.tenants.list_by_status(RECONCILED_STATUSES)
                tenant_ids = [tenant.id for tenant in tenants]

        for tenant_id in tenant_ids:
            # Only checked between tenants; a tenant in progress always finishes
            if stop_event is not None and stop_event.is_set():
                report.stopped_early = True
                break
            report.tenants_checked += 1
            try:
                await asyncio.wait_for(
                    self.reconcile_tenant(tenant_id, report), self.tenant_timeout_seconds
                )
            except Exception:
                logger.exception(f"Reconciliation failed for tenant {tenant_id}")
                report.failures += 1
                report.failed_tenants.append(str(tenant_id))

        report.finished_at = self.clock()
        logger.info(
            f"Reconciliation: {report.tenants_checked} tenants, {report.alerts_raised} alerts, "
            f"{report.grace_periods_expired} expired, {report.tenants_deleted} deleted, "
            f"{report.failures} failures"
        )
        return report

    async def reconcile_tenant(self, tenant_id: UUID, report: ReconciliationReport) -> None:
        async with self.uow_scope() as uow:
            async with uow:
                tenant = await uow.tenants.get_by_id(tenant_id)
                if tenant is None:
                    return
                machine = TenantStateMachine(
                    uow,
                    grace_period_days=self.grace_period_days,
                    retention_days=self.retention_days,
                    clock=self.clock,
                )
                now = self.clock()

                if tenant.status in (TenantStatus.active, TenantStatus.suspended):
                    report.alerts_raised += await self._raise_overage_alerts(uow, tenant)
                    await uow.commit()

                if (
                    tenant.status == TenantStatus.suspended
                    and tenant.grace_period_ends_at is not None
                    and now > tenant.grace_period_ends_at
                ):
                    tenant = await self._apply(
                        uow, machine, tenant, LifecycleOperation.expire_grace_period,
                        "Grace period expired",
                    )
                    report.grace_periods_expired += 1

                if (
                    tenant.status in (TenantStatus.cancelled, TenantStatus.pending_deletion)
                    and tenant.scheduled_deletion_at is not None
                    and tenant.scheduled_deletion_at <= now
                ):
                    if tenant.status == TenantStatus.cancelled:
                        tenant = await self._apply(
                            uow, machine, tenant, LifecycleOperation.soft_delete,
                            "Scheduled deletion reached",
                        )
                    await self._apply(
                        uow, machine, tenant, LifecycleOperation.hard_delete,
                        "Scheduled deletion reached",
                    )
                    report.tenants_deleted += 1
                    if self.cache is not None:
                        await self.cache.remove(tenant_id, USAGE_SUMMARY_CACHE_KEY)

    async def _apply(
        self,
        uow: UnitOfWork,
        machine: TenantStateMachine,
        tenant: Tenant,
        operation: LifecycleOperation,
        reason: str,
    ) -> Tenant:
        result = await machine.transition(tenant, operation, reason=reason, triggered_by=TRIGGERED_BY)
        if result.is_err():
            raise RuntimeError(f"{operation.value} failed: {result.error.code} {result.error.message}")
        await uow.commit()
        return result.value.tenant

    async def _raise_overage_alerts(self, uow: UnitOfWork, tenant: Tenant) -> int:
        tracker = UsageMetricsTracker(uow, self.default_plan_name, self.clock)
        raised = 0
        for usage in await tracker.evaluate_limits(tenant.id):
            if not usage.exceeded:
                continue
            resource = usage.resource.value
            if await uow.alerts.get_active(tenant.id, AlertType.overage, resource):
                continue
            severity = (
                AlertSeverity.high if usage.usage > usage.limit * 1.5 else AlertSeverity.medium
            )
            await uow.alerts.create(
                Alert(
                    tenant_id=tenant.id,
                    alert_type=AlertType.overage,
                    resource=resource,
                    severity=severity,
                    message=f"Tenant '{tenant.name}' reached its {resource} limit "
                    f"({usage.usage}/{usage.limit})",
                    alert_metadata=normalize_metadata(
                        {"limit": usage.limit, "usage": usage.usage, "overage": usage.usage - usage.limit}
                    ),
                )
            )
            logger.warning(f"Overage alert for tenant {tenant.id}: {resource} {usage.usage}/{usage.limit}")
            raised += 1
        return raised
