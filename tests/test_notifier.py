"""Tests for reporter email notifications."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from civic_reporter.config import Settings
from civic_reporter.services.notifier import Notifier


@pytest.fixture
def smtp_settings() -> Settings:
    """Settings pointing at a fake mail server."""
    return Settings(
        smtp_host="mail.example.com",
        smtp_port=2525,
        smtp_user="mailer",
        smtp_password="mailer-password",
        mail_from="civic@example.com",
    )


class TestNotifier:
    """Tests for the SMTP notifier."""

    @pytest.mark.asyncio
    async def test_send_delivers_message(self, smtp_settings: Settings):
        """Test a message goes through STARTTLS, login and send."""
        with patch("civic_reporter.services.notifier.smtplib.SMTP") as smtp_class:
            server = smtp_class.return_value.__enter__.return_value

            sent = await Notifier(smtp_settings).notify_status_change(
                "citizen@example.com", "Broken streetlight", "Resolved"
            )

        assert sent is True
        smtp_class.assert_called_once_with("mail.example.com", 2525, timeout=smtp_settings.smtp_timeout)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mailer-password")

        message = server.send_message.call_args.args[0]
        assert message["To"] == "citizen@example.com"
        assert message["From"] == "civic@example.com"
        assert message["Subject"] == "Update on your reported issue"
        assert 'Your reported issue "Broken streetlight" has been updated to: Resolved.' in message.get_content()

    @pytest.mark.asyncio
    async def test_delivery_failure_is_not_raised(self, smtp_settings: Settings):
        """Test SMTP errors are reported through the return value."""
        with patch(
            "civic_reporter.services.notifier.smtplib.SMTP",
            side_effect=smtplib.SMTPConnectError(421, b"unavailable"),
        ):
            sent = await Notifier(smtp_settings).notify_removed("citizen@example.com", "Graffiti")

        assert sent is False

    @pytest.mark.asyncio
    async def test_connection_refused_is_not_raised(self, smtp_settings: Settings):
        """Test socket errors are reported through the return value."""
        with patch(
            "civic_reporter.services.notifier.smtplib.SMTP",
            side_effect=ConnectionRefusedError(),
        ):
            sent = await Notifier(smtp_settings).notify_flagged("citizen@example.com", "Graffiti")

        assert sent is False

    @pytest.mark.asyncio
    async def test_skipped_without_smtp_host(self):
        """Test nothing is sent when mail is not configured."""
        with patch("civic_reporter.services.notifier.smtplib.SMTP") as smtp_class:
            sent = await Notifier(Settings(smtp_host="")).notify_removed("citizen@example.com", "Graffiti")

        assert sent is False
        smtp_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_skipped_without_recipient(self, smtp_settings: Settings):
        """Test a missing reporter email sends nothing."""
        with patch("civic_reporter.services.notifier.smtplib.SMTP") as smtp_class:
            sent = await Notifier(smtp_settings).notify_removed(None, "Graffiti")

        assert sent is False
        smtp_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_tls_or_login_when_disabled(self):
        """Test plain SMTP without credentials."""
        config = Settings(
            smtp_host="localhost", smtp_use_tls=False, smtp_user="", mail_from="civic@example.com"
        )
        with patch("civic_reporter.services.notifier.smtplib.SMTP") as smtp_class:
            server = smtp_class.return_value.__enter__.return_value
            await Notifier(config).notify_flagged("citizen@example.com", "Graffiti")

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()
