# users/signals.py

from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import User


@receiver(post_save, sender=User)
def create_member_profile(sender, instance, created, **kwargs):
    """Every user gets a balance record; member scope is decided by role."""
    if created:
        from savings.models import MemberProfile

        MemberProfile.objects.get_or_create(
            user=instance,
            defaults={
                'full_name': instance.get_full_name() or instance.username,
                'phone_number': instance.phone or '',
            },
        )
