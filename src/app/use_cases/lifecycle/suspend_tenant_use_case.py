"""
Use Case: Suspend Tenant

Suspends an active tenant (non-payment or administrative action) and
starts its grace period.
"""

import logging
from typing import Optional

from src.app.services.email_service import IEmailService
from src.app.services.tenant_state_machine import TransitionOutcome
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import Alert, AlertSeverity, AlertType
from src.domain.lifecycle import LifecycleOperation
from src.domain.metadata import normalize_metadata

from .dtos import LifecycleCommand
from .transition_use_case import TenantTransitionUseCase

logger = logging.getLogger(__name__)


class SuspendTenantUseCase(TenantTransitionUseCase):
    """
    Suspend a tenant.

    Business Logic:
    1. Transition active -> suspended, grace period ends now + grace days
    2. Raise a critical suspension alert unless one is already active
    3. Commit
    4. Notify the tenant admin (best effort, never fails the suspension)
    """

    operation = LifecycleOperation.suspend

    def __init__(
        self,
        uow: UnitOfWork,
        email_service: Optional[IEmailService] = None,
        grace_period_days: int = 30,
        retention_days: int = 90,
        clock: Clock = utc_now,
    ):
        super().__init__(uow, grace_period_days, retention_days, clock)
        self.email_service = email_service

    async def after_transition(self, outcome: TransitionOutcome, command: LifecycleCommand) -> None:
        tenant = outcome.tenant
        existing = await self.uow.alerts.get_active(tenant.id, AlertType.suspension)
        if existing:
            return
        await self.uow.alerts.create(
            Alert(
                tenant_id=tenant.id,
                alert_type=AlertType.suspension,
                severity=AlertSeverity.critical,
                message=f"Tenant '{tenant.name}' suspended: {command.reason or 'no reason given'}",
                alert_metadata=normalize_metadata(
                    {
                        "suspended_at": tenant.suspended_at,
                        "grace_period_ends_at": tenant.grace_period_ends_at,
                    }
                ),
            )
        )

    async def after_commit(self, outcome: TransitionOutcome, command: LifecycleCommand) -> None:
        if self.email_service is None:
            return
        tenant = outcome.tenant
        days = command.grace_period_days
        if days is None:
            days = self.grace_period_days
        try:
            await self.email_service.send_suspension_notice(
                tenant.admin_email, tenant.name, command.reason or "Suspended", days
            )
        except Exception as exc:
            logger.warning(f"Suspension notice for tenant {tenant.id} not sent: {exc}")
