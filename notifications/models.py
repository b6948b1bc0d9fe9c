from django.conf import settings
from django.db import models

from common.enums import MessageType
from core.models import BaseModel


class Announcement(BaseModel):
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        related_name='announcements',
        on_delete=models.SET_NULL,
    )
    title = models.CharField(max_length=200, blank=True)
    content = models.TextField()
    sent_to_all = models.BooleanField(default=True)
    recipient_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.title or self.content[:50]


class Notification(BaseModel):
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name='actor_notifications',
        on_delete=models.SET_NULL,
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='notifications',
        on_delete=models.CASCADE,
    )
    message = models.TextField()
    message_type = models.CharField(max_length=20, choices=MessageType.choices, default=MessageType.DIRECT)
    announcement = models.ForeignKey(
        Announcement,
        null=True,
        blank=True,
        related_name='notifications',
        on_delete=models.CASCADE,
    )
    is_read = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient'], name='notif_recipient_idx'),
            models.Index(fields=['is_read'], name='notif_is_read_idx'),
            models.Index(fields=['created_at'], name='notif_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.actor} -> {self.recipient}: {self.message[:40]}"
