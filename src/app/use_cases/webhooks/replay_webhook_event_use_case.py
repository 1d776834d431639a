"""
Use Case: Replay Webhook Event

Reprocesses a stored billing event that failed earlier.
"""

from uuid import UUID

from libs.result import Error, Result, Return

from .dtos import WebhookAckResponse
from .process_billing_webhook_use_case import ProcessBillingWebhookUseCase


class ReplayWebhookEventUseCase:
    def __init__(self, processor: ProcessBillingWebhookUseCase):
        self.processor = processor
        self.uow = processor.uow

    async def execute(self, event_id: UUID) -> Result[WebhookAckResponse]:
        async with self.uow:
            event = await self.uow.webhook_events.get_by_id(event_id)
            if not event:
                return Return.err(Error("WEBHOOK_EVENT_NOT_FOUND", "Webhook event not found"))
            if event.processed:
                return Return.err(
                    Error("WEBHOOK_ALREADY_PROCESSED", "Webhook event was already processed")
                )

        return Return.ok(await self.processor.process_recorded(event_id))
