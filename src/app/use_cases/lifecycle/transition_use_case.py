"""
Shared flow for use cases that apply one lifecycle operation.

Subclasses pick the operation and may add work inside the transaction
(after_transition) or after commit (after_commit).
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.tenant_cache import ITenantCache
from src.app.services.tenant_state_machine import TenantStateMachine, TransitionOutcome
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.lifecycle import LifecycleOperation

from .dtos import LifecycleCommand, TenantLifecycleResponse

logger = logging.getLogger(__name__)


class TenantTransitionUseCase:
    """
    Apply one lifecycle operation to a tenant.

    Business Logic:
    1. Load the tenant (TENANT_NOT_FOUND if absent)
    2. Run the state machine (status change + lifecycle event)
    3. Subclass hook inside the same transaction
    4. Commit
    5. Subclass hook after commit (side effects that must not roll back)
    """

    operation: LifecycleOperation

    def __init__(
        self,
        uow: UnitOfWork,
        grace_period_days: int = 30,
        retention_days: int = 90,
        clock: Clock = utc_now,
        cache: ITenantCache = None,
    ):
        self.uow = uow
        self.grace_period_days = grace_period_days
        self.retention_days = retention_days
        self.clock = clock
        self.cache = cache

    def state_machine(self) -> TenantStateMachine:
        return TenantStateMachine(
            self.uow,
            grace_period_days=self.grace_period_days,
            retention_days=self.retention_days,
            clock=self.clock,
        )

    async def execute(
        self, tenant_id: UUID, command: LifecycleCommand = None
    ) -> Result[TenantLifecycleResponse]:
        command = command or LifecycleCommand()

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            result = await self.state_machine().transition(
                tenant,
                self.operation,
                reason=command.reason,
                triggered_by=command.triggered_by,
                grace_period_days=command.grace_period_days,
                retention_days=command.retention_days,
                schedule_deletion=command.schedule_deletion,
            )
            if result.is_err():
                return Return.err(result.error)

            outcome = result.value
            if outcome.changed:
                await self.after_transition(outcome, command)
            await self.uow.commit()

        if outcome.changed:
            await self.after_commit(outcome, command)
        return Return.ok(TenantLifecycleResponse.from_outcome(outcome))

    async def after_transition(self, outcome: TransitionOutcome, command: LifecycleCommand) -> None:
        pass

    async def after_commit(self, outcome: TransitionOutcome, command: LifecycleCommand) -> None:
        pass
