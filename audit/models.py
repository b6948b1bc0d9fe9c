from django.conf import settings
from django.db import models

from core.models import BaseModel


class AuditLog(BaseModel):
    """Append-only record of an admin action."""
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name='audit_logs',
        on_delete=models.SET_NULL,
    )
    action = models.CharField(max_length=100)
    entity_type = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=64, blank=True)
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['action'], name='audit_action_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.admin} {self.action} {self.entity_type}:{self.entity_id}"
