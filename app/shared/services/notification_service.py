# app/shared/services/notification_service.py
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache
from typing import Optional

from app.config.settings import settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Arrival emails for recipients. Sending never raises."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        mailroom_name: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.mailroom_name = mailroom_name or settings.mailroom_name
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.smtp_user)

    def build_arrival_message(self, recipient, tracking_code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f'"{self.mailroom_name}" <{self.smtp_user}>'
        message["To"] = recipient.email
        message["Subject"] = f"Package Arrival Notification - {self.mailroom_name}"
        message.set_content(
            f"Dear {recipient.name},\n\n"
            f"You have a package waiting for pickup at the {self.mailroom_name}.\n\n"
            f"Tracking Code: {tracking_code}\n"
            f"Mailbox: #{recipient.mailbox}\n\n"
            "Please bring your student ID to pick up your package during mailroom hours.\n"
        )
        message.add_alternative(
            f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
              <h2 style="color: #00A3E0;">Package Ready for Pickup</h2>
              <p>Dear {recipient.name},</p>
              <p>You have a package waiting for pickup at the {self.mailroom_name}.</p>
              <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
                <p><strong>Tracking Code:</strong> {tracking_code}</p>
                <p><strong>Mailbox:</strong> #{recipient.mailbox}</p>
                <p><strong>Location:</strong> {self.mailroom_name}</p>
              </div>
              <p>Please bring your student ID to pick up your package during mailroom hours.</p>
            </div>
            """,
            subtype="html",
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.smtp_pass:
                smtp.login(self.smtp_user, self.smtp_pass)
            smtp.send_message(message)

    async def notify_package_arrival(self, recipient, tracking_code: str) -> bool:
        """Email the recipient that a package arrived. Returns True when sent."""
        if not recipient.email:
            logger.warning(f"Recipient {recipient.l_number} has no email, skipping notification")
            return False

        if not self.is_configured():
            logger.info(
                f"[DEMO] Email notification would be sent to {recipient.email} "
                f"for tracking code {tracking_code}"
            )
            return False

        try:
            message = self.build_arrival_message(recipient, tracking_code)
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"⚠️ Error sending notification to {recipient.email}: {e}")
            return False

        logger.info(f"📧 Email notification sent to {recipient.email}")
        return True


@lru_cache()
def get_notification_service() -> NotificationService:
    return NotificationService(
        smtp_user=settings.smtp_user,
        smtp_pass=settings.smtp_pass,
    )
