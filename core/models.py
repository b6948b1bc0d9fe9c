import uuid

from django.db import models


class BaseModel(models.Model):
    """Abstract base carrying a public uuid and audit timestamps."""
    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
