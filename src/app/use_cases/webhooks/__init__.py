"""Billing webhook use cases."""

from .dtos import BillingWebhookCommand, WebhookAckResponse
from .process_billing_webhook_use_case import (
    WEBHOOK_ACTIONS,
    ProcessBillingWebhookUseCase,
    WebhookAction,
)
from .replay_webhook_event_use_case import ReplayWebhookEventUseCase

__all__ = [
    "BillingWebhookCommand",
    "WebhookAckResponse",
    "WEBHOOK_ACTIONS",
    "WebhookAction",
    "ProcessBillingWebhookUseCase",
    "ReplayWebhookEventUseCase",
]
