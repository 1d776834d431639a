from uuid import UUID

import pytest
from httpx import AsyncClient

from src.app.use_cases.provisioning.provisioning_steps import DEFAULT_DEPARTMENTS


def _limit(body, resource):
    return next(item for item in body["limits"] if item["resource"] == resource)


@pytest.mark.asyncio
async def test_summary_after_provisioning(client: AsyncClient, active_tenant, tenant_headers):
    tenant_id = await active_tenant("Acme Corp")

    response = await client.get("/usage/summary", headers=tenant_headers(tenant_id))

    assert response.status_code == 200
    data = response.json()
    assert data["tenant_id"] == tenant_id
    assert data["plan_name"] == "Free"
    assert data["user_count"] == 1
    assert data["department_count"] == len(DEFAULT_DEPARTMENTS)
    assert data["feature_usage"] == {}


@pytest.mark.asyncio
async def test_summary_is_cached_until_next_increment(
    client: AsyncClient, active_tenant, tenant_headers, tenant_cache
):
    tenant_id = await active_tenant("Acme Corp")
    headers = tenant_headers(tenant_id)

    first = await client.get("/usage/summary", headers=headers)
    assert first.json()["employee_count"] == 0

    assert await tenant_cache.get(UUID(tenant_id), "usage:summary") is not None

    response = await client.post(
        "/usage/increments", json={"counter": "employees", "delta": 4}, headers=headers
    )
    assert response.status_code == 200
    assert response.json() == {"tenant_id": tenant_id, "recorded": "employees", "delta": 4}

    assert await tenant_cache.get(UUID(tenant_id), "usage:summary") is None
    second = await client.get("/usage/summary", headers=headers)
    assert second.json()["employee_count"] == 4


@pytest.mark.asyncio
async def test_feature_and_api_request_increments(
    client: AsyncClient, active_tenant, tenant_headers
):
    tenant_id = await active_tenant("Acme Corp")
    headers = tenant_headers(tenant_id)

    for body in (
        {"feature_key": "payroll_runs"},
        {"feature_key": "payroll_runs", "delta": 2},
        {"counter": "api_requests", "delta": 5},
    ):
        response = await client.post("/usage/increments", json=body, headers=headers)
        assert response.status_code == 200, response.text

    data = (await client.get("/usage/summary", headers=headers)).json()
    assert data["feature_usage"] == {"payroll_runs": 3}
    assert data["api_request_count"] == 5
    assert data["api_requests_today"] == 5


@pytest.mark.asyncio
async def test_increment_requires_exactly_one_target(
    client: AsyncClient, active_tenant, tenant_headers
):
    tenant_id = await active_tenant("Acme Corp")

    response = await client.post(
        "/usage/increments",
        json={"counter": "users", "feature_key": "exports"},
        headers=tenant_headers(tenant_id),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_limits_report_exceeded_users(client: AsyncClient, active_tenant, tenant_headers):
    tenant_id = await active_tenant("Acme Corp")
    headers = tenant_headers(tenant_id)

    # Free plan allows 3 users; provisioning created the admin
    await client.post("/usage/increments", json={"counter": "users", "delta": 2}, headers=headers)

    response = await client.get("/usage/limits", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["plan_name"] == "Free"
    users = _limit(body, "users")
    assert users == {"resource": "users", "usage": 3, "limit": 3, "exceeded": True, "warning": False}
    assert _limit(body, "employees")["exceeded"] is False


@pytest.mark.asyncio
async def test_increment_rejected_for_suspended_tenant(
    client: AsyncClient, active_tenant, tenant_headers, superadmin_headers
):
    tenant_id = await active_tenant("Acme Corp")
    await client.post(f"/admin/tenants/{tenant_id}/suspend", headers=superadmin_headers)

    response = await client.post(
        "/usage/increments", json={"counter": "employees"}, headers=tenant_headers(tenant_id)
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE_TRANSITION"


@pytest.mark.asyncio
async def test_usage_of_unknown_tenant(client: AsyncClient, tenant_headers):
    response = await client.get(
        "/usage/summary", headers=tenant_headers("00000000-0000-4000-8000-000000000001")
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TENANT_NOT_FOUND"


@pytest.mark.asyncio
async def test_plan_switch_refreshes_cached_summary(
    client: AsyncClient, active_tenant, tenant_headers, superadmin_headers, tenant_cache, uow_scope
):
    tenant_id = await active_tenant("Acme Corp")
    headers = tenant_headers(tenant_id)
    async with uow_scope() as uow:
        async with uow:
            pro_id = str((await uow.plans.get_by_name("Pro")).id)

    first = await client.get("/usage/summary", headers=headers)
    assert first.json()["plan_name"] == "Free"

    response = await client.put(
        f"/admin/tenants/{tenant_id}/plan", json={"plan_id": pro_id}, headers=superadmin_headers
    )
    assert response.status_code == 200

    assert await tenant_cache.get(UUID(tenant_id), "usage:summary") is None
    second = await client.get("/usage/summary", headers=headers)
    assert second.json()["plan_name"] == "Pro"


@pytest.mark.asyncio
async def test_hard_delete_drops_cached_summary(
    client: AsyncClient, active_tenant, tenant_headers, superadmin_headers, tenant_cache
):
    tenant_id = await active_tenant("Acme Corp")

    await client.get("/usage/summary", headers=tenant_headers(tenant_id))
    assert await tenant_cache.get(UUID(tenant_id), "usage:summary") is not None

    base = f"/admin/tenants/{tenant_id}"
    await client.post(f"{base}/cancel", headers=superadmin_headers)
    await client.post(f"{base}/soft-delete", headers=superadmin_headers)
    response = await client.post(f"{base}/hard-delete", headers=superadmin_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "deleted"
    assert await tenant_cache.get(UUID(tenant_id), "usage:summary") is None
