import logging

from src.app.services.email_service import IEmailService

logger = logging.getLogger(__name__)


class LoggingEmailService(IEmailService):
    """Writes outbound emails to the log instead of delivering them"""

    async def send_admin_invite(
        self, to_email: str, first_name: str, tenant_name: str, setup_token: str
    ) -> None:
        logger.info(
            f"Admin invite for tenant '{tenant_name}' sent to {to_email} "
            f"(token ending {setup_token[-4:]})"
        )

    async def send_suspension_notice(
        self, to_email: str, tenant_name: str, reason: str, grace_period_days: int
    ) -> None:
        logger.info(
            f"Suspension notice for tenant '{tenant_name}' sent to {to_email}: "
            f"{reason} (grace period {grace_period_days} days)"
        )
