"""Create the profile row when a user signs up"""
import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile_for_new_user(sender, instance, created, raw=False, **kwargs):
    if not created or raw:
        return
    Profile.objects.get_or_create(
        user=instance,
        defaults={
            'first_name': instance.first_name or None,
            'last_name': instance.last_name or None,
        },
    )
    logger.info(f"Created profile for user {instance.id}")
