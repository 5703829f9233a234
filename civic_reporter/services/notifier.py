"""Email notifications to issue reporters."""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

import structlog

from civic_reporter.config import Settings, settings

logger = structlog.get_logger()

STATUS_SUBJECT = "Update on your reported issue"
REMOVED_SUBJECT = "Your post has been deleted"
FLAGGED_SUBJECT = "Your post has been updated"


class Notifier:
    """
    Sends plain-text mail over SMTP.

    Delivery problems are logged and reported through the return value,
    never raised, so a mail outage cannot fail the request that
    triggered the message.
    """

    def __init__(self, config: Settings):
        self.config = config

    async def send(self, to: Optional[str], subject: str, body: str) -> bool:
        """
        Send one message.

        Returns:
            True if the SMTP server accepted the message
        """
        if not to:
            return False
        if not self.config.smtp_host:
            logger.info("notification_skipped", reason="smtp_not_configured", subject=subject)
            return False

        message = EmailMessage()
        message["From"] = self.config.mail_sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "notification_failed",
                subject=subject,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False

        logger.info("notification_sent", subject=subject)
        return True

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout,
        ) as server:
            if self.config.smtp_use_tls:
                server.starttls()
            if self.config.smtp_user:
                server.login(self.config.smtp_user, self.config.smtp_password)
            server.send_message(message)

    async def notify_status_change(self, to: Optional[str], title: str, status: str) -> bool:
        """Tell the reporter a solver changed the status."""
        body = f'Hello,\n\nYour reported issue "{title}" has been updated to: {status}.'
        return await self.send(to, STATUS_SUBJECT, body)

    async def notify_removed(self, to: Optional[str], title: str) -> bool:
        """Tell the reporter an admin deleted the issue."""
        body = f'Your reported issue "{title}" was removed by admin and marked as spam.'
        return await self.send(to, REMOVED_SUBJECT, body)

    async def notify_flagged(self, to: Optional[str], title: str) -> bool:
        """Tell the reporter an admin edited the issue."""
        body = f'Your reported issue "{title}" was updated by admin and flagged as spam.'
        return await self.send(to, FLAGGED_SUBJECT, body)


notifier = Notifier(settings)


def get_notifier() -> Notifier:
    """Get notifier dependency."""
    return notifier
