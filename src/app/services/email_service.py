from abc import ABC, abstractmethod


class IEmailService(ABC):
    """Outbound email port; delivery is handled outside this service"""

    @abstractmethod
    async def send_admin_invite(
        self, to_email: str, first_name: str, tenant_name: str, setup_token: str
    ) -> None:
        pass

    @abstractmethod
    async def send_suspension_notice(
        self, to_email: str, tenant_name: str, reason: str, grace_period_days: int
    ) -> None:
        pass
