"""In-app notification dispatcher."""

from __future__ import annotations

import logging
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import Notification
from models.notification import NOTIFICATION_TYPES
from repositories import AbstractRepository

logger = logging.getLogger(__name__)

CANCELLATION_SUFFIX = " Please contact support if you have any questions."


class NotificationError(Exception):
    """Raised when a notification cannot be recorded."""


def compose_message(message: str, contact_phone: Optional[str] = None) -> str:
    """Decorate a message the way every notification is presented."""

    lowered = message.lower()
    if "cancelled" in lowered or "canceled" in lowered:
        message += CANCELLATION_SUFFIX
    if contact_phone:
        message += f" Contact: {contact_phone}"
    return message


class NotificationDispatcher:
    """Records notifications for users through the repository."""

    def __init__(self, repository: AbstractRepository):
        self.repository = repository

    def send(
        self,
        user_id: int,
        message: str,
        type: str = "SYSTEM",
        contact_details: Optional[dict] = None,
    ) -> Notification:
        """Record a notification and commit it."""

        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise NotificationError("Invalid user id.")
        if type not in NOTIFICATION_TYPES:
            raise NotificationError(f"Unknown notification type: {type}.")

        details = contact_details or {}
        notification = Notification(
            user_id=user_id,
            message=compose_message(message, details.get("contact_phone")),
            type=type,
            email=details.get("email"),
            contact_phone=details.get("contact_phone"),
            admin_only=bool(details.get("admin_only", False)),
        )
        try:
            self.repository.add(notification)
            self.repository.commit()
        except SQLAlchemyError as exc:
            self.repository.rollback()
            raise NotificationError("Failed to send notification.") from exc

        logger.info("Notification %s sent to user %s", notification.id, user_id)
        return notification

    def try_send(
        self,
        user_id: int,
        message: str,
        type: str = "SYSTEM",
        contact_details: Optional[dict] = None,
    ) -> Optional[Notification]:
        """Best-effort variant of :meth:`send` that logs failures."""

        try:
            return self.send(user_id, message, type, contact_details)
        except NotificationError:
            logger.warning("Notification to user %s was not recorded", user_id, exc_info=True)
            return None


def get_notifier() -> NotificationDispatcher:
    return current_app.extensions["notifier"]
