from datetime import datetime, timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from src.domain.context import TenantContext
from src.domain.entities import Department


async def _post(client, path, headers, body=None):
    return await client.post(path, json=body, headers=headers)


async def _event_types(client, tenant_id, headers):
    response = await client.get(f"/admin/tenants/{tenant_id}/events", headers=headers)
    assert response.status_code == 200
    return [event["event_type"] for event in response.json()["events"]]


@pytest.mark.asyncio
async def test_full_lifecycle_through_admin_api(
    client: AsyncClient, active_tenant, superadmin_headers, email_service
):
    tenant_id = await active_tenant("Acme Corp")
    base = f"/admin/tenants/{tenant_id}"

    suspended = await _post(client, f"{base}/suspend", superadmin_headers, {"reason": "payment failed"})
    assert suspended.status_code == 200
    body = suspended.json()
    assert body["status"] == "suspended"
    assert body["previous_status"] == "active"
    assert body["event_type"] == "suspended"
    suspended_at = datetime.fromisoformat(body["suspended_at"])
    grace_ends = datetime.fromisoformat(body["grace_period_ends_at"])
    assert (grace_ends - suspended_at).days == 30
    assert len(email_service.suspension_notices) == 1

    resumed = await _post(client, f"{base}/resume", superadmin_headers)
    assert resumed.json()["status"] == "active"
    assert resumed.json()["grace_period_ends_at"] is None

    cancelled = await _post(client, f"{base}/cancel", superadmin_headers, {"reason": "churned"})
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["scheduled_deletion_at"] is not None

    pending = await _post(client, f"{base}/soft-delete", superadmin_headers)
    assert pending.json()["status"] == "pending_deletion"

    deleted = await _post(client, f"{base}/hard-delete", superadmin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["status"] == "deleted"
    assert deleted.json()["changed"] is True
    assert deleted.json()["purged"]["departments"] > 0

    types = await _event_types(client, tenant_id, superadmin_headers)
    for expected in ("created", "suspended", "resumed", "cancelled", "marked_for_deletion", "deleted"):
        assert types.count(expected) == 1


@pytest.mark.asyncio
async def test_actor_recorded_on_events(client: AsyncClient, active_tenant, superadmin_headers):
    tenant_id = await active_tenant("Acme Corp")

    await _post(client, f"/admin/tenants/{tenant_id}/suspend", superadmin_headers)

    response = await client.get(f"/admin/tenants/{tenant_id}/events", headers=superadmin_headers)
    suspension = next(e for e in response.json()["events"] if e["event_type"] == "suspended")
    assert suspension["triggered_by"] == "superadmin:root"
    assert suspension["previous_status"] == "active"
    assert suspension["new_status"] == "suspended"
    assert "grace_period_ends_at" in suspension["metadata"]


@pytest.mark.asyncio
async def test_invalid_transition_is_conflict(client: AsyncClient, active_tenant, superadmin_headers):
    tenant_id = await active_tenant("Acme Corp")

    response = await _post(client, f"/admin/tenants/{tenant_id}/resume", superadmin_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE_TRANSITION"
    types = await _event_types(client, tenant_id, superadmin_headers)
    assert "resumed" not in types


@pytest.mark.asyncio
async def test_lifecycle_routes_require_superadmin(
    client: AsyncClient, active_tenant, tenant_headers
):
    tenant_id = await active_tenant("Acme Corp")

    response = await _post(
        client, f"/admin/tenants/{tenant_id}/suspend", tenant_headers(tenant_id, role="admin")
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_lifecycle_routes_require_token(client: AsyncClient, active_tenant):
    tenant_id = await active_tenant("Acme Corp")

    response = await client.post(f"/admin/tenants/{tenant_id}/suspend")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_suspension_info(client: AsyncClient, active_tenant, superadmin_headers):
    tenant_id = await active_tenant("Acme Corp")
    info_path = f"/admin/tenants/{tenant_id}/suspension"

    before = (await client.get(info_path, headers=superadmin_headers)).json()
    assert before["is_suspended"] is False
    assert before["can_reactivate"] is False

    await _post(
        client, f"/admin/tenants/{tenant_id}/suspend", superadmin_headers, {"reason": "card expired"}
    )

    after = (await client.get(info_path, headers=superadmin_headers)).json()
    assert after["status"] == "suspended"
    assert after["is_suspended"] is True
    assert after["reason"] == "card expired"
    assert after["can_reactivate"] is True


@pytest.mark.asyncio
async def test_switch_plan_upgrade_and_unchanged(
    client: AsyncClient, active_tenant, superadmin_headers, seeded_plans, uow_scope
):
    tenant_id = await active_tenant("Acme Corp")
    async with uow_scope() as uow:
        async with uow:
            pro_id = str((await uow.plans.get_by_name("Pro")).id)

    response = await client.put(
        f"/admin/tenants/{tenant_id}/plan", json={"plan_id": pro_id}, headers=superadmin_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["previous_plan"] == "Free"
    assert body["new_plan"] == "Pro"
    assert body["change"] == "upgraded"

    again = await client.put(
        f"/admin/tenants/{tenant_id}/plan", json={"plan_id": pro_id}, headers=superadmin_headers
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "PLAN_UNCHANGED"

    unknown = await client.put(
        f"/admin/tenants/{tenant_id}/plan",
        json={"plan_id": "00000000-0000-4000-8000-000000000001"},
        headers=superadmin_headers,
    )
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_list_tenants_filter_and_sort(
    client: AsyncClient, active_tenant, signup_tenant, superadmin_headers
):
    await active_tenant("Bravo")
    await active_tenant("Alpha")
    await signup_tenant("Charlie")

    by_name = await client.get(
        "/admin/tenants",
        params={"sort_by": "name", "direction": "asc"},
        headers=superadmin_headers,
    )
    assert by_name.status_code == 200
    assert [t["name"] for t in by_name.json()["items"]] == ["Alpha", "Bravo", "Charlie"]
    assert by_name.json()["total"] == 3

    active = await client.get(
        "/admin/tenants", params={"status": "active"}, headers=superadmin_headers
    )
    assert {t["name"] for t in active.json()["items"]} == {"Alpha", "Bravo"}

    paged = await client.get(
        "/admin/tenants",
        params={"sort_by": "name", "direction": "asc", "page": 2, "page_size": 2},
        headers=superadmin_headers,
    )
    assert [t["name"] for t in paged.json()["items"]] == ["Charlie"]


@pytest.mark.asyncio
async def test_list_tenants_rejects_unknown_sort_column(client: AsyncClient, superadmin_headers):
    response = await client.get(
        "/admin/tenants", params={"sort_by": "admin_email"}, headers=superadmin_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_hard_delete_keeps_tombstone_and_is_idempotent(
    client: AsyncClient, active_tenant, superadmin_headers, uow_scope
):
    tenant_id = await active_tenant("Acme Corp")
    base = f"/admin/tenants/{tenant_id}"
    await _post(client, f"{base}/cancel", superadmin_headers)
    await _post(client, f"{base}/soft-delete", superadmin_headers)

    first = await _post(client, f"{base}/hard-delete", superadmin_headers)
    second = await _post(client, f"{base}/hard-delete", superadmin_headers)

    assert first.json()["changed"] is True
    assert second.status_code == 200
    assert second.json()["changed"] is False
    assert second.json()["version"] == first.json()["version"]

    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.get_by_id(UUID(tenant_id))
            assert tenant is not None
            assert tenant.status.value == "deleted"
            departments = await uow.tenant_data.list(
                TenantContext.for_tenant(UUID(tenant_id)), Department
            )
            assert departments == []
            events = await uow.lifecycle_events.list_by_tenant(UUID(tenant_id))
            assert [e.event_type.value for e in events].count("deleted") == 1


@pytest.mark.asyncio
async def test_unknown_tenant_is_not_found(client: AsyncClient, superadmin_headers):
    response = await _post(
        client, "/admin/tenants/00000000-0000-4000-8000-000000000001/suspend", superadmin_headers
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TENANT_NOT_FOUND"


@pytest.mark.asyncio
async def test_cancel_with_custom_retention(client: AsyncClient, active_tenant, superadmin_headers):
    tenant_id = await active_tenant("Acme Corp")

    response = await _post(
        client, f"/admin/tenants/{tenant_id}/cancel", superadmin_headers, {"retention_days": 30}
    )

    assert response.status_code == 200
    body = response.json()
    cancelled_at = datetime.fromisoformat(body["cancelled_at"])
    deletion_at = datetime.fromisoformat(body["scheduled_deletion_at"])
    assert deletion_at - cancelled_at == timedelta(days=30)


@pytest.mark.asyncio
async def test_cancel_rejects_negative_retention(
    client: AsyncClient, active_tenant, superadmin_headers
):
    tenant_id = await active_tenant("Acme Corp")

    response = await _post(
        client, f"/admin/tenants/{tenant_id}/cancel", superadmin_headers, {"retention_days": -1}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_switch_plan_bumps_tenant_version(
    client: AsyncClient, active_tenant, superadmin_headers, seeded_plans, uow_scope
):
    tenant_id = await active_tenant("Acme Corp")
    async with uow_scope() as uow:
        async with uow:
            pro_id = str((await uow.plans.get_by_name("Pro")).id)
            before = (await uow.tenants.get_by_id(UUID(tenant_id))).version

    response = await client.put(
        f"/admin/tenants/{tenant_id}/plan", json={"plan_id": pro_id}, headers=superadmin_headers
    )
    assert response.status_code == 200

    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.get_by_id(UUID(tenant_id))
            assert tenant.version == before + 1
            active = await uow.subscriptions.get_active_by_tenant(UUID(tenant_id))
            assert str(active.plan_id) == pro_id
