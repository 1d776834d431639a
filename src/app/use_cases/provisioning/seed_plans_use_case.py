"""
Use Case: Seed Subscription Plans

Creates the default plans if they are missing. Safe to run on every start.
"""

import logging

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SubscriptionPlan

from .dtos import SeedPlansResponse

logger = logging.getLogger(__name__)

GB = 1024 ** 3

DEFAULT_PLANS = (
    dict(
        name="Free",
        description="For small teams getting started",
        monthly_price=0.0,
        max_employees=10,
        max_users=3,
        max_storage_bytes=1 * GB,
        api_limit_per_day=1_000,
        display_order=1,
    ),
    dict(
        name="Basic",
        description="Growing teams",
        monthly_price=29.0,
        max_employees=50,
        max_users=10,
        max_storage_bytes=10 * GB,
        api_limit_per_day=10_000,
        trial_days=14,
        display_order=2,
    ),
    dict(
        name="Pro",
        description="Established companies",
        monthly_price=99.0,
        max_employees=250,
        max_users=50,
        max_storage_bytes=100 * GB,
        api_limit_per_day=100_000,
        trial_days=14,
        display_order=3,
    ),
    dict(
        name="Enterprise",
        description="Unlimited headcount",
        monthly_price=499.0,
        max_employees=None,
        max_users=None,
        max_storage_bytes=None,
        api_limit_per_day=1_000_000,
        trial_days=30,
        display_order=4,
    ),
)


class SeedPlansUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[SeedPlansResponse]:
        created, existing = [], []
        async with self.uow:
            for plan in DEFAULT_PLANS:
                if await self.uow.plans.get_by_name(plan["name"]):
                    existing.append(plan["name"])
                    continue
                await self.uow.plans.create(SubscriptionPlan(**plan))
                created.append(plan["name"])
            await self.uow.commit()

        if created:
            logger.info(f"Seeded subscription plans: {', '.join(created)}")
        return Return.ok(SeedPlansResponse(created=created, existing=existing))
