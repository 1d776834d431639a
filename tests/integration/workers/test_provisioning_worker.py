import asyncio
from types import SimpleNamespace
from uuid import UUID

import pytest

from src.app.workers.provisioning_worker import ProvisioningWorker
from src.app.workers.runner import build_workers, start_workers, stop_workers
from src.domain.entities import TenantStatus


@pytest.mark.asyncio
async def test_worker_provisions_pending_tenants(signup_tenant, uow_scope, email_service):
    first = await signup_tenant("Acme Corp")
    second = await signup_tenant("Globex")

    worker = ProvisioningWorker(uow_scope, email_service, batch_size=5)
    provisioned = await worker.run_once()

    assert provisioned == 2
    assert len(email_service.invites) == 2
    async with uow_scope() as uow:
        async with uow:
            for tenant_id in (first, second):
                tenant = await uow.tenants.get_by_id(UUID(tenant_id))
                assert tenant.status == TenantStatus.active

    # Nothing left in provisioning
    assert await worker.run_once() == 0


@pytest.mark.asyncio
async def test_worker_respects_batch_size(signup_tenant, uow_scope, email_service):
    await signup_tenant("Acme Corp")
    await signup_tenant("Globex")

    worker = ProvisioningWorker(uow_scope, email_service, batch_size=1)

    assert await worker.run_once() == 1
    assert await worker.run_once() == 1


@pytest.mark.asyncio
async def test_failed_provisioning_is_not_retried(signup_tenant, uow_scope, email_service):
    tenant_id = await signup_tenant("Acme Corp")
    email_service.fail_invites = True

    worker = ProvisioningWorker(uow_scope, email_service)

    assert await worker.run_once() == 0
    assert await worker.run_once() == 0
    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.get_by_id(UUID(tenant_id))
            assert tenant.status == TenantStatus.provisioning_failed
            assert tenant.failure_reason.startswith("send_invite_email")


@pytest.mark.asyncio
async def test_workers_start_and_stop(signup_tenant, uow_scope, email_service):
    tenant_id = await signup_tenant("Acme Corp")
    config = SimpleNamespace(
        PROVISIONING_INTERVAL_SECONDS=0.05,
        PROVISIONING_BATCH_SIZE=5,
        PROVISIONING_TIMEOUT_SECONDS=30,
        DEFAULT_PLAN_NAME="Free",
        RECONCILIATION_INTERVAL_SECONDS=0.05,
        DEFAULT_GRACE_PERIOD_DAYS=30,
        DEFAULT_RETENTION_DAYS=90,
        TENANT_OPERATION_TIMEOUT_SECONDS=30,
    )
    stop_event = asyncio.Event()

    tasks = start_workers(build_workers(config, uow_scope, email_service), stop_event)
    for _ in range(100):
        await asyncio.sleep(0.05)
        if email_service.invites:
            break
    await stop_workers(tasks, stop_event, timeout=10)

    assert all(task.done() for task in tasks)
    async with uow_scope() as uow:
        async with uow:
            tenant = await uow.tenants.get_by_id(UUID(tenant_id))
            assert tenant.status == TenantStatus.active
