# users/managers.py
from django.contrib.auth.models import UserManager


class ChamaUserManager(UserManager):
    def admins(self):
        return self.get_queryset().filter(role='Admin')

    def members(self):
        """Users in member scope: everyone who is not a group admin."""
        return self.get_queryset().filter(role='Member', is_superuser=False)

    def create_admin(self, username, password=None, **extra_fields):
        extra_fields.setdefault('role', 'Admin')
        extra_fields.setdefault('is_staff', True)
        return self.create_user(username, password=password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'Admin')
        return super().create_superuser(username, email=email, password=password, **extra_fields)
