"""Utility functions for dispatching notifications.

This module centralizes notification creation so callers only need to
go through :class:`NotificationService` instead of writing inbox rows
themselves. Delivery is an inbox row per recipient plus a log line.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from common.enums import MessageType
from notifications.models import Announcement, Notification

logger = logging.getLogger(__name__)


def dispatch_notification(user: Any, message: str, **context: Any) -> None:
    """Log that ``message`` was queued for ``user``."""

    logger.info("Dispatching notification to %s: %s", user, message)


def _member_users():
    from users.models import User

    return User.objects.members().filter(is_active=True)


class NotificationService:

    @staticmethod
    def notify(recipient, message, actor=None, message_type=MessageType.DIRECT, announcement=None):
        notification = Notification.objects.create(
            recipient=recipient,
            actor=actor,
            message=message,
            message_type=message_type,
            announcement=announcement,
        )
        dispatch_notification(recipient, message, notification_id=notification.id)
        return notification

    @staticmethod
    def notify_members(message, actor=None, message_type=MessageType.CYCLE, announcement=None):
        """Write one inbox notification per member. Returns the number written."""
        recipients = list(_member_users())
        if actor is not None:
            recipients = [user for user in recipients if user.pk != actor.pk]
        Notification.objects.bulk_create([
            Notification(
                recipient=user,
                actor=actor,
                message=message,
                message_type=message_type,
                announcement=announcement,
            )
            for user in recipients
        ])
        for user in recipients:
            dispatch_notification(user, message)
        return len(recipients)

    @staticmethod
    @transaction.atomic
    def send_announcement(admin, content, title=''):
        from savings.exceptions import ValidationError

        content = (content or '').strip()
        if not content:
            raise ValidationError("Announcement content is required")
        if not _member_users().exclude(pk=admin.pk).exists():
            raise ValidationError("No members to notify")

        announcement = Announcement.objects.create(admin=admin, title=title or '', content=content)
        count = NotificationService.notify_members(
            content,
            actor=admin,
            message_type=MessageType.ANNOUNCEMENT,
            announcement=announcement,
        )
        announcement.recipient_count = count
        announcement.save(update_fields=['recipient_count', 'updated_at'])
        logger.info("Announcement %s sent to %s members", announcement.id, count)
        return announcement
