"""
Billing webhook endpoints

The relay in front of this service verifies provider signatures and
authenticates here with the admin API key.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.email_service import IEmailService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.webhooks import (
    BillingWebhookCommand,
    ProcessBillingWebhookUseCase,
    ReplayWebhookEventUseCase,
    WebhookAckResponse,
)
from src.depends import get_email_service, get_unit_of_work, require_superadmin
from src.domain.context import TenantContext

router = APIRouter(tags=["Webhooks"])


def _processor(uow: UnitOfWork, email_service: IEmailService) -> ProcessBillingWebhookUseCase:
    return ProcessBillingWebhookUseCase(
        uow,
        email_service,
        grace_period_days=ApplicationConfig.DEFAULT_GRACE_PERIOD_DAYS,
        retention_days=ApplicationConfig.DEFAULT_RETENTION_DAYS,
    )


@router.post(
    "/webhooks/billing",
    status_code=status.HTTP_200_OK,
    response_model=WebhookAckResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def receive_billing_webhook(
    command: BillingWebhookCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: IEmailService = Depends(get_email_service),
):
    """
    Billing Webhook

    The event is stored before it is processed. Processing failures are
    recorded on the event and still acknowledged with 200.

    Requires: X-Admin-API-Key header
    """
    result = await _processor(uow, email_service).execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/admin/webhooks/{event_id}/replay", response_model=WebhookAckResponse)
async def replay_webhook_event(
    event_id: UUID,
    context: TenantContext = Depends(require_superadmin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_service: IEmailService = Depends(get_email_service),
):
    """
    Reprocess a stored webhook event that has not been processed yet

    Raises:
        - 404 Not Found: WEBHOOK_EVENT_NOT_FOUND
        - 409 Conflict: WEBHOOK_ALREADY_PROCESSED
    """
    result = await ReplayWebhookEventUseCase(_processor(uow, email_service)).execute(event_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
