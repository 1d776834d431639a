"""
Concurrency tests against the database

Each writer runs in its own session, the way concurrent requests do.
"""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update

from src.adapter.repositories.tenant_repository import TenantRepository
from src.app.services.tenant_state_machine import TenantStateMachine
from src.app.services.usage_metrics_tracker import UsageMetricsTracker, period_bounds
from src.app.use_cases.lifecycle import SwitchPlanUseCase
from src.domain.entities import Tenant, TenantStatus, TenantUsageMetrics
from src.domain.errors import ConcurrencyConflictError
from src.domain.lifecycle import LifecycleOperation


async def _create_tenant(uow_scope, status=TenantStatus.active) -> Tenant:
    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.create(
                Tenant(
                    name="Acme Corp",
                    normalized_name="acme corp",
                    admin_email="owner@acme.com",
                    status=status,
                )
            )
            await uow.commit()
    return tenant


@pytest.mark.asyncio
async def test_concurrent_increments_are_not_lost(uow_scope):
    tenant = await _create_tenant(uow_scope)
    moment = datetime(2026, 3, 15, 12, 0, 0)
    period_start, _ = period_bounds(moment)

    async with uow_scope() as uow:
        async with uow:
            await UsageMetricsTracker(uow, clock=lambda: moment).current_metrics(tenant.id)
            await uow.commit()

    async def one_increment():
        async with uow_scope() as uow:
            async with uow:
                await uow.usage_metrics.increment(tenant.id, period_start, {"employee_count": 1})
                await uow.commit()

    await asyncio.gather(*(one_increment() for _ in range(100)))

    async with uow_scope() as uow:
        async with uow:
            metrics = await uow.usage_metrics.get_for_period(tenant.id, period_start)
            assert metrics.employee_count == 100


@pytest.mark.asyncio
async def test_period_row_created_once(uow_scope):
    tenant = await _create_tenant(uow_scope)
    moment = datetime(2026, 3, 15, 12, 0, 0)

    async def open_period():
        async with uow_scope() as uow:
            async with uow:
                metrics = await UsageMetricsTracker(uow, clock=lambda: moment).current_metrics(
                    tenant.id
                )
                await uow.commit()
                return metrics.id

    ids = await asyncio.gather(*(open_period() for _ in range(5)))

    assert len(set(ids)) == 1


@pytest.mark.asyncio
async def test_stale_version_loses_transition(uow_scope):
    tenant = await _create_tenant(uow_scope)

    async with uow_scope() as first, uow_scope() as second:
        async with first:
            stale = await first.tenants.get_by_id(tenant.id)
            assert stale.version == 1

            async with second:
                fresh = await second.tenants.get_by_id(tenant.id)
                result = await TenantStateMachine(second).transition(
                    fresh, LifecycleOperation.suspend, reason="payment failed"
                )
                assert result.is_ok()
                await second.commit()

            with pytest.raises(ConcurrencyConflictError):
                await first.tenants.compare_and_set(
                    stale, 1, {"status": TenantStatus.cancelled}
                )

    async with uow_scope() as uow:
        async with uow:
            current = await uow.tenants.get_by_id(tenant.id)
            assert current.status == TenantStatus.suspended
            assert current.version == 2


@pytest.mark.asyncio
async def test_state_machine_reports_conflict_for_stale_snapshot(uow_scope):
    tenant = await _create_tenant(uow_scope)

    async with uow_scope() as uow:
        async with uow:
            # Someone else bumps the version behind this session's back
            await uow.session.execute(
                update(Tenant).where(Tenant.id == tenant.id).values(version=5)
            )
            await uow.commit()

    async with uow_scope() as uow:
        async with uow:
            result = await TenantStateMachine(uow).transition(
                tenant, LifecycleOperation.suspend, reason="stale"
            )
            assert result.is_err()
            assert result.error.code == "CONCURRENCY_CONFLICT"


@pytest.mark.asyncio
async def test_plan_switch_on_stale_snapshot_creates_no_subscription(
    uow_scope, seeded_plans, monkeypatch
):
    tenant = await _create_tenant(uow_scope)

    async with uow_scope() as uow:
        async with uow:
            pro_id = (await uow.plans.get_by_name("Pro")).id
            await uow.session.execute(
                update(Tenant).where(Tenant.id == tenant.id).values(version=5)
            )
            await uow.commit()

    # Serve the version-1 snapshot, as a request that read before the bump would
    with monkeypatch.context() as patch:
        patch.setattr(TenantRepository, "get_by_id", AsyncMock(return_value=tenant))
        async with uow_scope() as uow:
            result = await SwitchPlanUseCase(uow).execute(tenant.id, pro_id)

    assert result.is_err()
    assert result.error.code == "CONCURRENCY_CONFLICT"

    async with uow_scope() as uow:
        async with uow:
            assert await uow.subscriptions.get_active_by_tenant(tenant.id) is None
            current = await uow.tenants.get_by_id(tenant.id)
            assert current.version == 5
