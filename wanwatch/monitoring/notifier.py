"""Email notification sent when an outage is resolved."""

from __future__ import annotations

import logging
from datetime import datetime
from email.message import EmailMessage

import aiosmtplib

from wanwatch.config import Settings

logger = logging.getLogger(__name__)

SUBJECT = "WanWatch - Connection Restored"


def format_duration(duration_sec: int) -> str:
    """Render a duration as ``"{h}h {m}m"`` or ``"{m}m {s}s"``."""
    minutes = duration_sec // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m {duration_sec % 60}s"


class EmailRecoveryNotifier:
    """Send a "connection restored" email through SMTP."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return bool(self.settings.smtp_host and self.settings.email_to)

    def build_message(
        self, start_time: datetime, end_time: datetime, duration_sec: int
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = SUBJECT
        sender = self.settings.email_from or self.settings.smtp_user or "wanwatch@localhost"
        message["From"] = sender
        message["To"] = self.settings.email_to
        duration = format_duration(duration_sec)
        dashboard_url = f"{self.settings.app_url.rstrip('/')}/dashboard"

        message.set_content(
            "\n".join(
                [
                    "Your internet connection has been restored.",
                    f"Outage Start: {start_time:%Y-%m-%d %H:%M:%S} UTC",
                    f"Restored At: {end_time:%Y-%m-%d %H:%M:%S} UTC",
                    f"Duration: {duration}",
                    f"Dashboard: {dashboard_url}",
                ]
            )
        )
        message.add_alternative(
            f"""\
<h2>Internet Connection Restored</h2>
<p>Your internet connection has been restored.</p>
<ul>
  <li><strong>Outage Start:</strong> {start_time:%Y-%m-%d %H:%M:%S} UTC</li>
  <li><strong>Restored At:</strong> {end_time:%Y-%m-%d %H:%M:%S} UTC</li>
  <li><strong>Duration:</strong> {duration}</li>
</ul>
<p><a href="{dashboard_url}">View Dashboard</a></p>
<hr style="margin-top: 20px; border: none; border-top: 1px solid #ddd;">
<p style="color: #666; font-size: 12px;">Sent by WanWatch</p>
""",
            subtype="html",
        )
        return message

    async def notify(self, start_time: datetime, end_time: datetime, duration_sec: int) -> bool:
        """Send the email; return whether it was delivered. Never raises."""
        if not self.configured:
            logger.debug("Email not configured, skipping notification")
            return False

        try:
            message = self.build_message(start_time, end_time, duration_sec)
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_user,
                password=self.settings.smtp_pass,
                use_tls=self.settings.smtp_secure,
            )
        except Exception as e:
            logger.error(
                "Failed to send recovery email",
                extra={"to": self.settings.email_to, "error": str(e)[:500]},
            )
            return False

        logger.info(
            "Sent recovery email",
            extra={"to": self.settings.email_to, "duration_sec": duration_sec},
        )
        return True
