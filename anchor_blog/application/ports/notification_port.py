from __future__ import annotations

from datetime import datetime
from typing import Protocol


class NotificationPort(Protocol):
    def send_link(
        self,
        *,
        recipient: str,
        subject: str,
        link: str,
        expires_at: datetime,
    ) -> None:
        """Raises NotificationDeliveryError when the message cannot be handed off."""
        ...
