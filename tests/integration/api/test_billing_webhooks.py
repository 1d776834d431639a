from uuid import UUID

import pytest
from httpx import AsyncClient

from config import ApplicationConfig
from src.domain.entities import TenantStatus

API_KEY_HEADERS = {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


def _stripe_event(event_type: str, tenant_id: str) -> dict:
    return {
        "event_type": event_type,
        "provider": "stripe",
        "payload": {"data": {"object": {"metadata": {"tenant_id": tenant_id}}}},
    }


async def _status(uow_scope, tenant_id: str) -> TenantStatus:
    async with uow_scope() as uow:
        async with uow:
            return (await uow.tenants.get_by_id(UUID(tenant_id))).status


@pytest.mark.asyncio
async def test_payment_failed_suspends_active_tenant(
    client: AsyncClient, active_tenant, uow_scope, email_service
):
    tenant_id = await active_tenant("Acme Corp")

    response = await client.post(
        "/webhooks/billing",
        json=_stripe_event("invoice.payment_failed", tenant_id),
        headers=API_KEY_HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["processed"] is True
    assert body["action"] == "suspend"
    assert body["tenant_id"] == tenant_id
    assert await _status(uow_scope, tenant_id) == TenantStatus.suspended
    assert len(email_service.suspension_notices) == 1

    recovered = await client.post(
        "/webhooks/billing",
        json=_stripe_event("invoice.payment_succeeded", tenant_id),
        headers=API_KEY_HEADERS,
    )
    assert recovered.json()["processed"] is True
    assert await _status(uow_scope, tenant_id) == TenantStatus.active


@pytest.mark.asyncio
async def test_failed_event_is_acknowledged_and_replayable(
    client: AsyncClient, signup_tenant, superadmin_headers, uow_scope
):
    tenant_id = await signup_tenant("Acme Corp")

    # A provisioning tenant cannot be suspended yet
    response = await client.post(
        "/webhooks/billing",
        json=_stripe_event("invoice.payment_failed", tenant_id),
        headers=API_KEY_HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["processed"] is False
    assert body["error"].startswith("INVALID_STATE_TRANSITION")
    event_id = body["event_id"]

    async with uow_scope() as uow:
        async with uow:
            event = await uow.webhook_events.get_by_id(UUID(event_id))
            assert event.processed is False
            assert event.attempts == 1
            assert event.tenant_id == UUID(tenant_id)

    provisioned = await client.post(
        f"/admin/tenants/{tenant_id}/provision", headers=superadmin_headers
    )
    assert provisioned.status_code == 200

    replay = await client.post(f"/admin/webhooks/{event_id}/replay", headers=superadmin_headers)
    assert replay.status_code == 200
    assert replay.json()["processed"] is True
    assert await _status(uow_scope, tenant_id) == TenantStatus.suspended

    again = await client.post(f"/admin/webhooks/{event_id}/replay", headers=superadmin_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "WEBHOOK_ALREADY_PROCESSED"

    async with uow_scope() as uow:
        async with uow:
            event = await uow.webhook_events.get_by_id(UUID(event_id))
            assert event.processed is True
            assert event.attempts == 2
            assert event.error is None


@pytest.mark.asyncio
async def test_tenant_resolved_by_customer_id(client: AsyncClient, active_tenant, uow_scope):
    tenant_id = await active_tenant("Acme Corp")
    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.get_by_id(UUID(tenant_id))
            await uow.tenants.compare_and_set(
                tenant, tenant.version, {"stripe_customer_id": "cus_123"}
            )
            await uow.commit()

    response = await client.post(
        "/webhooks/billing",
        json={
            "event_type": "customer.subscription.deleted",
            "provider": "stripe",
            "payload": {"data": {"object": {"customer": "cus_123"}}},
        },
        headers=API_KEY_HEADERS,
    )

    assert response.json()["processed"] is True
    assert response.json()["action"] == "cancel"
    assert await _status(uow_scope, tenant_id) == TenantStatus.cancelled


@pytest.mark.asyncio
async def test_unknown_tenant_is_recorded_as_error(client: AsyncClient):
    response = await client.post(
        "/webhooks/billing",
        json=_stripe_event("invoice.payment_failed", "00000000-0000-4000-8000-000000000001"),
        headers=API_KEY_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["processed"] is False
    assert response.json()["error"].startswith("TENANT_NOT_FOUND")


@pytest.mark.asyncio
async def test_unmapped_event_type_is_ignored(client: AsyncClient, active_tenant, uow_scope):
    tenant_id = await active_tenant("Acme Corp")

    response = await client.post(
        "/webhooks/billing",
        json=_stripe_event("customer.updated", tenant_id),
        headers=API_KEY_HEADERS,
    )

    assert response.json()["processed"] is True
    assert response.json()["action"] is None
    assert await _status(uow_scope, tenant_id) == TenantStatus.active


@pytest.mark.asyncio
async def test_webhook_requires_api_key(client: AsyncClient):
    missing = await client.post("/webhooks/billing", json={"event_type": "invoice.payment_failed"})
    wrong = await client.post(
        "/webhooks/billing",
        json={"event_type": "invoice.payment_failed"},
        headers={"X-Admin-API-Key": "nope"},
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401


@pytest.mark.asyncio
async def test_replay_unknown_event(client: AsyncClient, superadmin_headers):
    response = await client.post(
        "/admin/webhooks/00000000-0000-4000-8000-000000000001/replay", headers=superadmin_headers
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "WEBHOOK_EVENT_NOT_FOUND"
