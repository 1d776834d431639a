"""
Use Cases: Resume, Activate, Cancel, Soft Delete and Hard Delete Tenant

Each applies a single lifecycle operation; hard delete also drops the
cached usage summary of the purged tenant.
"""

from src.app.services.tenant_state_machine import TransitionOutcome
from src.app.use_cases.usage import USAGE_SUMMARY_CACHE_KEY
from src.domain.lifecycle import LifecycleOperation

from .dtos import LifecycleCommand
from .transition_use_case import TenantTransitionUseCase


class ResumeTenantUseCase(TenantTransitionUseCase):
    """Suspended -> active by an administrator; clears the grace period"""

    operation = LifecycleOperation.resume


class ActivateTenantUseCase(TenantTransitionUseCase):
    """Suspended -> active after billing confirms payment"""

    operation = LifecycleOperation.activate


class CancelTenantUseCase(TenantTransitionUseCase):
    """
    Active or suspended -> cancelled.

    With schedule_deletion (default) the tenant is queued for deletion after
    the retention period; otherwise it stays cancelled until soft deleted.
    """

    operation = LifecycleOperation.cancel


class SoftDeleteTenantUseCase(TenantTransitionUseCase):
    """Cancelled -> pending_deletion, keeping any earlier deletion date"""

    operation = LifecycleOperation.soft_delete


class HardDeleteTenantUseCase(TenantTransitionUseCase):
    """
    Pending_deletion -> deleted.

    Purges tenant-scoped data and usage rows; the tenant row and its
    lifecycle events remain. Repeating it on a deleted tenant is a no-op.
    """

    operation = LifecycleOperation.hard_delete

    async def after_commit(self, outcome: TransitionOutcome, command: LifecycleCommand) -> None:
        if self.cache is not None:
            await self.cache.remove(outcome.tenant.id, USAGE_SUMMARY_CACHE_KEY)
