"""
Use Case: Signup Tenant

Registers a tenant in status provisioning. Provisioning itself runs
separately (admin call or provisioning worker).
"""

import logging

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import Tenant, TenantLifecycleEvent, TenantLifecycleEventType, TenantStatus
from src.domain.metadata import normalize_metadata

from .dtos import SignupTenantCommand, SignupTenantResponse

logger = logging.getLogger(__name__)


class SignupTenantUseCase:
    """
    Command/Response Pattern:
    - Input: SignupTenantCommand
    - Output: Result[SignupTenantResponse]

    Business Logic:
    1. Known idempotency token: return the tenant it created (replayed),
       or IDEMPOTENCY_TOKEN_MISMATCH if the name differs
    2. Reject a duplicate name (case-insensitive) or domain
    3. Validate the requested plan
    4. Create the tenant in status provisioning with a created event
    5. Commit; a concurrent signup with the same token resolves to a replay
    """

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(self, command: SignupTenantCommand) -> Result[SignupTenantResponse]:
        name = command.name.strip()
        normalized_name = name.lower()
        domain = command.domain.strip().lower() if command.domain else None

        async with self.uow:
            if command.idempotency_token:
                replay = await self._replay(command.idempotency_token, normalized_name)
                if replay is not None:
                    return replay

            if await self.uow.tenants.get_by_name(name):
                return Return.err(
                    Error("TENANT_ALREADY_EXISTS", "A tenant with this name already exists", reason="name")
                )
            if domain and await self.uow.tenants.get_by_domain(domain):
                return Return.err(
                    Error("TENANT_ALREADY_EXISTS", "A tenant with this domain already exists", reason="domain")
                )
            if command.plan_id and not await self.uow.plans.get_by_id(command.plan_id):
                return Return.err(Error("PLAN_NOT_FOUND", "Subscription plan not found"))

            now = self.clock()
            try:
                tenant = await self.uow.tenants.create(
                    Tenant(
                        name=name,
                        normalized_name=normalized_name,
                        domain=domain,
                        status=TenantStatus.provisioning,
                        admin_email=str(command.admin_email).lower(),
                        admin_first_name=command.admin_first_name,
                        admin_last_name=command.admin_last_name,
                        idempotency_token=command.idempotency_token,
                        requested_plan_id=command.plan_id,
                        start_trial=command.start_trial,
                        created_at=now,
                        updated_at=now,
                    )
                )
                await self.uow.lifecycle_events.append(
                    TenantLifecycleEvent(
                        tenant_id=tenant.id,
                        event_type=TenantLifecycleEventType.created,
                        previous_status=TenantStatus.provisioning,
                        new_status=TenantStatus.provisioning,
                        reason="Tenant signup",
                        triggered_by=str(command.admin_email),
                        event_metadata=normalize_metadata(
                            {"name": name, "domain": domain, "plan_id": command.plan_id}
                        ),
                        occurred_at=now,
                    )
                )
                await self.uow.commit()
            except IntegrityError:
                logger.warning(f"Concurrent signup for tenant '{name}'")
                await self.uow.rollback()
                if command.idempotency_token:
                    replay = await self._replay(command.idempotency_token, normalized_name)
                    if replay is not None:
                        return replay
                return Return.err(
                    Error("TENANT_ALREADY_EXISTS", "A tenant with this name already exists")
                )

            logger.info(f"Tenant {tenant.id} ('{name}') signed up")
            return Return.ok(
                SignupTenantResponse(
                    tenant_id=str(tenant.id), name=tenant.name, status=tenant.status.value
                )
            )

    async def _replay(self, token: str, normalized_name: str):
        existing = await self.uow.tenants.get_by_idempotency_token(token)
        if existing is None:
            return None
        if existing.normalized_name != normalized_name:
            return Return.err(
                Error(
                    "IDEMPOTENCY_TOKEN_MISMATCH",
                    "Idempotency token was already used for a different tenant",
                )
            )
        return Return.ok(
            SignupTenantResponse(
                tenant_id=str(existing.id),
                name=existing.name,
                status=existing.status.value,
                replayed=True,
            )
        )
