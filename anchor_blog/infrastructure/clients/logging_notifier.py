from __future__ import annotations

from datetime import datetime
import logging

from anchor_blog.application.ports.notification_port import NotificationPort


logger = logging.getLogger(__name__)


class LoggingNotifier(NotificationPort):
    """Development delivery channel: writes the link to the application log."""

    def send_link(
        self,
        *,
        recipient: str,
        subject: str,
        link: str,
        expires_at: datetime,
    ) -> None:
        logger.info(
            "logging_notifier: %s recipient=%s link=%s expires_at=%s",
            subject,
            recipient,
            link,
            expires_at.isoformat(),
        )
