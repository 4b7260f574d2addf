from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import structlog

from ..core.enums import NotificationType

log = structlog.get_logger(__name__)


class NotificationSender(Protocol):
    """Delivery capability, constructed once at startup and injected."""

    def send(
        self,
        *,
        user_id: int,
        event_type: NotificationType,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class LoggingNotificationSender(NotificationSender):
    """Writes notifications to the log only; used when no inbox store is configured."""

    def send(
        self,
        *,
        user_id: int,
        event_type: NotificationType,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        log.info(
            "notification.sent",
            user_id=user_id,
            event_type=event_type.value,
            title=title,
            message=message,
            metadata=metadata or {},
        )
