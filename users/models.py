# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import ChamaUserManager


class User(AbstractUser):
    email = models.EmailField(unique=True, null=True, blank=True)
    phone = models.CharField(max_length=15, unique=True, null=True, blank=True)
    is_verified = models.BooleanField(default=False)

    class Role(models.TextChoices):
        ADMIN = 'Admin'
        MEMBER = 'Member'

    role = models.CharField(max_length=30, choices=Role.choices, default=Role.MEMBER)

    objects = ChamaUserManager()

    REQUIRED_FIELDS = []
    USERNAME_FIELD = 'username'

    def get_display_name(self):
        profile = getattr(self, 'member_profile', None)
        if profile and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username
