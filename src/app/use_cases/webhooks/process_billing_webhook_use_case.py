"""
Use Case: Process Billing Webhook

Records every billing event before acting on it, drives the tenant
lifecycle from it, and always acknowledges. Failures stay on the stored
event (processed=False, error set) for replay.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from libs.result import Result, Return
from src.app.services.email_service import IEmailService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.clock import Clock, utc_now
from src.domain.entities import BillingProvider, Tenant, TenantStatus, WebhookEvent
from src.app.use_cases.lifecycle import (
    ActivateTenantUseCase,
    CancelTenantUseCase,
    LifecycleCommand,
    SuspendTenantUseCase,
)

from .dtos import BillingWebhookCommand, WebhookAckResponse

logger = logging.getLogger(__name__)


class WebhookAction(str, Enum):
    activate = "activate"
    suspend = "suspend"
    cancel = "cancel"


WEBHOOK_ACTIONS: Dict[str, WebhookAction] = {
    # Stripe
    "invoice.payment_succeeded": WebhookAction.activate,
    "customer.subscription.created": WebhookAction.activate,
    "invoice.payment_failed": WebhookAction.suspend,
    "customer.subscription.deleted": WebhookAction.cancel,
    # Paddle
    "subscription_payment_succeeded": WebhookAction.activate,
    "subscription_created": WebhookAction.activate,
    "subscription_payment_failed": WebhookAction.suspend,
    "subscription_cancelled": WebhookAction.cancel,
}

# Statuses in which the action has nothing left to do
ALREADY_DONE = {
    WebhookAction.activate: {TenantStatus.active},
    WebhookAction.suspend: {TenantStatus.suspended},
    WebhookAction.cancel: {
        TenantStatus.cancelled,
        TenantStatus.pending_deletion,
        TenantStatus.deleted,
    },
}


def _dig(payload: Dict[str, Any], *path: str) -> Optional[Any]:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _parse_uuid(value: Any) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class ProcessBillingWebhookUseCase:
    """
    Business Logic:
    1. Store the event (committed before any processing)
    2. Resolve the tenant from metadata.tenant_id, tenant_id or customer id
    3. Map the event type to activate / suspend / cancel; others are ignored
    4. Skip the action when the tenant is already in its target state
    5. Store the outcome on the event; never fail the acknowledgement
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_service: Optional[IEmailService] = None,
        grace_period_days: int = 30,
        retention_days: int = 90,
        clock: Clock = utc_now,
    ):
        self.uow = uow
        self.email_service = email_service
        self.grace_period_days = grace_period_days
        self.retention_days = retention_days
        self.clock = clock

    async def execute(self, command: BillingWebhookCommand) -> Result[WebhookAckResponse]:
        async with self.uow:
            event = await self.uow.webhook_events.create(
                WebhookEvent(
                    event_type=command.event_type,
                    provider=command.provider,
                    payload=command.payload,
                    signature=command.signature,
                    created_at=self.clock(),
                )
            )
            await self.uow.commit()
            event_id = event.id

        logger.info(f"Billing webhook {command.event_type} recorded as {event_id}")
        return Return.ok(await self.process_recorded(event_id))

    async def process_recorded(self, event_id: UUID) -> WebhookAckResponse:
        action, tenant_id, error = None, None, None
        try:
            action, tenant_id, error = await self._dispatch(event_id)
        except Exception as exc:
            logger.exception(f"Billing webhook {event_id} failed")
            error = f"EXTERNAL_PROVIDER_ERROR: {exc}"

        async with self.uow:
            event = await self.uow.webhook_events.get_by_id(event_id)
            event.attempts += 1
            event.tenant_id = tenant_id or event.tenant_id
            event.processed = error is None
            event.error = error[:2000] if error else None
            event.processed_at = self.clock() if error is None else None
            await self.uow.webhook_events.update(event)
            await self.uow.commit()

        if error:
            logger.warning(f"Billing webhook {event_id} not processed: {error}")
        return WebhookAckResponse(
            event_id=str(event_id),
            processed=error is None,
            action=action.value if action else None,
            tenant_id=str(tenant_id) if tenant_id else None,
            error=error,
        )

    async def _dispatch(
        self, event_id: UUID
    ) -> Tuple[Optional[WebhookAction], Optional[UUID], Optional[str]]:
        async with self.uow:
            event = await self.uow.webhook_events.get_by_id(event_id)
            event_type, provider = event.event_type, event.provider
            action = WEBHOOK_ACTIONS.get(event_type)
            if action is None:
                logger.info(f"Ignoring billing webhook type {event_type}")
                return None, None, None

            tenant = await self._resolve_tenant(event)
            if tenant is None:
                return action, None, "TENANT_NOT_FOUND: no tenant matches this event"
            tenant_id, status = tenant.id, tenant.status

        if status in ALREADY_DONE[action]:
            logger.info(f"Tenant {tenant_id} already {status.value}; {action.value} skipped")
            return action, tenant_id, None

        command = LifecycleCommand(
            reason=f"Billing event {event_type}",
            triggered_by=f"billing:{provider.value}",
        )
        if action == WebhookAction.activate:
            use_case = ActivateTenantUseCase(
                self.uow, self.grace_period_days, self.retention_days, self.clock
            )
        elif action == WebhookAction.suspend:
            use_case = SuspendTenantUseCase(
                self.uow, self.email_service, self.grace_period_days, self.retention_days, self.clock
            )
        else:
            use_case = CancelTenantUseCase(
                self.uow, self.grace_period_days, self.retention_days, self.clock
            )

        result = await use_case.execute(tenant_id, command)
        if result.is_err():
            return action, tenant_id, f"{result.error.code}: {result.error.message}"
        return action, tenant_id, None

    async def _resolve_tenant(self, event: WebhookEvent) -> Optional[Tenant]:
        payload = event.payload or {}
        for candidate in (
            _dig(payload, "data", "object", "metadata", "tenant_id"),
            _dig(payload, "metadata", "tenant_id"),
            payload.get("tenant_id"),
        ):
            tenant_id = _parse_uuid(candidate) if candidate else None
            if tenant_id:
                tenant = await self.uow.tenants.get_by_id(tenant_id)
                if tenant:
                    return tenant

        customer_id = _dig(payload, "data", "object", "customer") or payload.get("customer_id")
        if customer_id:
            provider = event.provider
            if provider == BillingProvider.manual:
                provider = BillingProvider.stripe
            return await self.uow.tenants.get_by_customer_id(provider, str(customer_id))
        return None
