"""
Use Case: Provision Tenant

Runs the ordered, checkpointed provisioning steps for a tenant in
status provisioning, then completes it. Safe to call repeatedly: completed
steps are skipped, and a finished tenant returns its recorded result.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.email_service import IEmailService
from src.app.services.tenant_state_machine import TenantStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import Tenant, TenantLifecycleEvent, TenantLifecycleEventType, TenantStatus
from src.domain.errors import ConcurrencyConflictError
from src.domain.lifecycle import LifecycleOperation
from src.domain.metadata import normalize_metadata

from .dtos import ProvisioningResponse, ProvisionTenantCommand
from .provisioning_steps import PROVISIONING_STEPS, StepContext

logger = logging.getLogger(__name__)


class ProvisionTenantUseCase:
    """
    Provisioning orchestrator.

    Business Logic:
    1. Reject a mismatching idempotency token
    2. Tenant past provisioning: return its recorded outcome (replayed)
    3. First run: record a provisioning_started event
    4. For each step not yet checkpointed: run it and checkpoint it in one
       transaction (version-checked)
    5. A step failure moves the tenant to provisioning_failed; earlier steps
       are kept
    6. All steps done: complete_provisioning stores the result with the
       status change
    7. The whole run is bounded by timeout_seconds; a timeout leaves the
       tenant in provisioning so the run can be resumed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_service: IEmailService,
        default_plan_name: str = "Free",
        timeout_seconds: float = 60,
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.email_service = email_service
        self.default_plan_name = default_plan_name
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    async def execute(
        self, tenant_id: UUID, command: Optional[ProvisionTenantCommand] = None
    ) -> Result[ProvisioningResponse]:
        command = command or ProvisionTenantCommand()
        try:
            return await asyncio.wait_for(self._run(tenant_id, command), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Provisioning of tenant {tenant_id} timed out after {self.timeout_seconds}s; "
                f"it stays in provisioning and will be resumed"
            )
            return Return.err(
                Error("PROVISIONING_TIMEOUT", "Provisioning did not finish in time, retry later")
            )

    async def _run(
        self, tenant_id: UUID, command: ProvisionTenantCommand
    ) -> Result[ProvisioningResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            if (
                command.idempotency_token
                and tenant.idempotency_token
                and command.idempotency_token != tenant.idempotency_token
            ):
                return Return.err(
                    Error(
                        "IDEMPOTENCY_TOKEN_MISMATCH",
                        "Idempotency token does not match this tenant",
                    )
                )

            if tenant.status != TenantStatus.provisioning:
                return self._recorded_outcome(tenant)

            if not tenant.provisioning_steps:
                await self.uow.lifecycle_events.append(
                    TenantLifecycleEvent(
                        tenant_id=tenant.id,
                        event_type=TenantLifecycleEventType.provisioning_started,
                        previous_status=tenant.status,
                        new_status=tenant.status,
                        triggered_by=command.triggered_by,
                        occurred_at=self.clock(),
                    )
                )
                await self.uow.commit()
                logger.info(f"Provisioning started for tenant {tenant.id}")

        for step in PROVISIONING_STEPS:
            failure = None
            async with self.uow:
                tenant = await self.uow.tenants.get_by_id(tenant_id)
                if tenant.status != TenantStatus.provisioning:
                    # Finished by a concurrent run
                    return self._recorded_outcome(tenant)
                if step.name in (tenant.provisioning_steps or []):
                    continue

                ctx = StepContext(
                    uow=self.uow,
                    tenant=tenant,
                    command=command,
                    email_service=self.email_service,
                    default_plan_name=self.default_plan_name,
                    clock=self.clock,
                )
                try:
                    step_result = await step.run(ctx)
                except Exception as exc:
                    logger.exception(f"Provisioning step {step.name} failed for tenant {tenant_id}")
                    failure = exc

                if failure is None:
                    checkpoint = {
                        "provisioning_steps": list(tenant.provisioning_steps or []) + [step.name],
                        "provisioning_result": {
                            **(tenant.provisioning_result or {}),
                            **normalize_metadata(step_result),
                        },
                    }
                    try:
                        await self.uow.tenants.compare_and_set(tenant, tenant.version, checkpoint)
                    except ConcurrencyConflictError:
                        return Return.err(
                            Error(
                                "CONCURRENCY_CONFLICT",
                                "Tenant is being provisioned concurrently, retry the operation",
                                reason=step.name,
                            )
                        )
                    await self.uow.commit()
                    logger.info(f"Provisioning step {step.name} done for tenant {tenant_id}")

            if failure is not None:
                return await self._fail(tenant_id, step.name, failure, command)

        return await self._complete(tenant_id, command)

    async def _fail(
        self, tenant_id: UUID, step_name: str, failure: Exception, command: ProvisionTenantCommand
    ) -> Result[ProvisioningResponse]:
        reason = f"{step_name}: {failure}"
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            result = await TenantStateMachine(self.uow, clock=self.clock).transition(
                tenant,
                LifecycleOperation.fail_provisioning,
                reason=reason,
                triggered_by=command.triggered_by,
                metadata={"step": step_name},
            )
            if result.is_err():
                return Return.err(result.error)
            await self.uow.commit()

        return Return.err(
            Error("PROVISIONING_STEP_FAILED", f"Provisioning failed at {reason}", reason=step_name)
        )

    async def _complete(
        self, tenant_id: UUID, command: ProvisionTenantCommand
    ) -> Result[ProvisioningResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            final_result = {
                **(tenant.provisioning_result or {}),
                "completed_at": self.clock().isoformat(),
            }
            result = await TenantStateMachine(self.uow, clock=self.clock).transition(
                tenant,
                LifecycleOperation.complete_provisioning,
                triggered_by=command.triggered_by,
                metadata={"steps": len(PROVISIONING_STEPS)},
                extra_changes={"provisioning_result": final_result},
            )
            if result.is_err():
                return Return.err(result.error)
            await self.uow.commit()

        tenant = result.value.tenant
        logger.info(f"Tenant {tenant_id} provisioned")
        return Return.ok(
            ProvisioningResponse(
                tenant_id=str(tenant.id),
                status=tenant.status.value,
                steps_completed=list(tenant.provisioning_steps or []),
                replayed=False,
                result=tenant.provisioning_result or {},
            )
        )

    def _recorded_outcome(self, tenant: Tenant) -> Result[ProvisioningResponse]:
        if tenant.status == TenantStatus.provisioning_failed:
            step = (tenant.failure_reason or "").split(":", 1)[0] or None
            return Return.err(
                Error(
                    "PROVISIONING_STEP_FAILED",
                    f"Provisioning failed at {tenant.failure_reason}",
                    reason=step,
                )
            )
        if tenant.provisioning_result is None:
            return Return.err(
                Error(
                    "INVALID_STATE_TRANSITION",
                    f"Tenant in status {tenant.status.value} was never provisioned",
                    reason=tenant.status.value,
                )
            )
        return Return.ok(
            ProvisioningResponse(
                tenant_id=str(tenant.id),
                status=tenant.status.value,
                steps_completed=list(tenant.provisioning_steps or []),
                replayed=True,
                result=tenant.provisioning_result,
            )
        )
