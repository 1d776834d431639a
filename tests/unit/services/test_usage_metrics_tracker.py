"""
Unit tests for UsageMetricsTracker limit checks and period handling
"""

from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.usage_metrics_tracker import UsageMetricsTracker, period_bounds
from src.domain.entities import SubscriptionPlan, TenantUsageMetrics, UsageResource


def free_plan(**limits) -> SubscriptionPlan:
    values = dict(max_employees=10, max_users=3, max_storage_bytes=1000, api_limit_per_day=100)
    values.update(limits)
    return SubscriptionPlan(name="Free", **values)


def metrics_row(tenant_id, clock, **counters) -> TenantUsageMetrics:
    start, end = period_bounds(clock())
    return TenantUsageMetrics(tenant_id=tenant_id, period_start=start, period_end=end, **counters)


@pytest.fixture
def tracker_uow(mock_uow):
    mock_uow.subscriptions.get_active_by_tenant = AsyncMock(return_value=None)
    mock_uow.plans.get_by_name = AsyncMock(return_value=free_plan())
    return mock_uow


def test_period_bounds_is_calendar_month():
    assert period_bounds(datetime(2026, 3, 15, 12, 30)) == (
        datetime(2026, 3, 1),
        datetime(2026, 4, 1),
    )
    assert period_bounds(datetime(2026, 12, 31, 23, 59)) == (
        datetime(2026, 12, 1),
        datetime(2027, 1, 1),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("employees,allowed", [(9, True), (10, False), (11, False)])
async def test_employee_limit(tracker_uow, clock, employees, allowed):
    tenant_id = "t-1"
    tracker_uow.usage_metrics.get_for_period = AsyncMock(
        return_value=metrics_row(tenant_id, clock, employee_count=employees)
    )

    tracker = UsageMetricsTracker(tracker_uow, clock=clock)

    assert await tracker.check_employee_limit(tenant_id) is allowed


@pytest.mark.asyncio
async def test_missing_limit_means_unlimited(tracker_uow, clock):
    tracker_uow.plans.get_by_name = AsyncMock(return_value=free_plan(max_users=None))
    tracker_uow.usage_metrics.get_for_period = AsyncMock(
        return_value=metrics_row("t-1", clock, user_count=10_000)
    )

    assert await UsageMetricsTracker(tracker_uow, clock=clock).check_user_limit("t-1") is True


@pytest.mark.asyncio
async def test_no_plan_denies(tracker_uow, clock):
    tracker_uow.plans.get_by_name = AsyncMock(return_value=None)

    assert await UsageMetricsTracker(tracker_uow, clock=clock).check_storage_limit("t-1") is False


@pytest.mark.asyncio
async def test_active_subscription_plan_wins_over_default(tracker_uow, clock):
    pro = SubscriptionPlan(name="Pro", max_employees=250)
    subscription = MagicMock()
    subscription.plan_id = pro.id
    tracker_uow.subscriptions.get_active_by_tenant = AsyncMock(return_value=subscription)
    tracker_uow.plans.get_by_id = AsyncMock(return_value=pro)
    tracker_uow.usage_metrics.get_for_period = AsyncMock(
        return_value=metrics_row("t-1", clock, employee_count=100)
    )

    tracker = UsageMetricsTracker(tracker_uow, clock=clock)

    assert (await tracker.get_effective_plan("t-1")).name == "Pro"
    assert await tracker.check_employee_limit("t-1") is True


@pytest.mark.asyncio
async def test_api_rate_limit_only_counts_today(tracker_uow, clock):
    yesterday = date(2026, 3, 14)
    tracker_uow.usage_metrics.get_for_period = AsyncMock(
        return_value=metrics_row(
            "t-1", clock, api_request_count_today=500, last_api_request_date=yesterday
        )
    )

    assert await UsageMetricsTracker(tracker_uow, clock=clock).check_api_rate_limit("t-1") is True


@pytest.mark.asyncio
async def test_evaluate_limits_flags_exceeded_and_warning(tracker_uow, clock):
    tracker_uow.usage_metrics.get_for_period = AsyncMock(
        return_value=metrics_row(
            "t-1", clock, employee_count=10, user_count=2, storage_bytes_used=950
        )
    )

    report = {
        usage.resource: usage
        for usage in await UsageMetricsTracker(tracker_uow, clock=clock).evaluate_limits("t-1")
    }

    assert report[UsageResource.employees].exceeded is True
    assert report[UsageResource.employees].warning is False
    assert report[UsageResource.users].exceeded is False
    assert report[UsageResource.storage].warning is True
    assert report[UsageResource.api_requests].usage == 0


@pytest.mark.asyncio
async def test_new_period_carries_levels_forward(tracker_uow, clock):
    previous = TenantUsageMetrics(
        tenant_id="t-1",
        period_start=datetime(2026, 2, 1),
        period_end=datetime(2026, 3, 1),
        employee_count=7,
        user_count=2,
        department_count=4,
        storage_bytes_used=123,
        api_request_count=900,
    )
    tracker_uow.usage_metrics.get_for_period = AsyncMock(return_value=None)
    tracker_uow.usage_metrics.get_latest_before = AsyncMock(return_value=previous)
    tracker_uow.usage_metrics.create_if_absent = AsyncMock(side_effect=lambda row: row)

    row = await UsageMetricsTracker(tracker_uow, clock=clock).current_metrics("t-1")

    assert row.period_start == datetime(2026, 3, 1)
    assert row.period_end == datetime(2026, 4, 1)
    assert row.employee_count == 7
    assert row.department_count == 4
    assert row.storage_bytes_used == 123
    # Flow counters restart every period
    assert row.api_request_count == 0


@pytest.mark.asyncio
async def test_increments_target_current_period(tracker_uow, clock):
    tracker_uow.usage_metrics.get_for_period = AsyncMock(return_value=metrics_row("t-1", clock))
    tracker_uow.usage_metrics.increment = AsyncMock()
    tracker_uow.usage_metrics.record_api_requests = AsyncMock()

    tracker = UsageMetricsTracker(tracker_uow, clock=clock)
    await tracker.increment_employee_count("t-1", 2)
    await tracker.increment_api_requests("t-1", 5)

    tracker_uow.usage_metrics.increment.assert_awaited_once_with(
        "t-1", datetime(2026, 3, 1), {"employee_count": 2}
    )
    tracker_uow.usage_metrics.record_api_requests.assert_awaited_once_with(
        "t-1", datetime(2026, 3, 1), date(2026, 3, 15), 5
    )
