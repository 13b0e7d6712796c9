"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_trips_cache, invalidate_unread_cache

logger = logging.getLogger(__name__)


# Trip listing invalidation
@receiver([post_save, post_delete])
def invalidate_trips_list_cache(sender, instance, **kwargs):
    """Invalidate the public trips list when a trip changes"""
    if sender.__name__ != 'Trip':
        return
    try:
        from backend.trips.models import Trip
        if isinstance(instance, Trip):
            invalidate_trips_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_trips_list_cache signal: {e}")


# Unread counters: a new message affects both participants
@receiver(post_save)
def invalidate_unread_on_message(sender, instance, created, **kwargs):
    """Invalidate both participants' unread counts when a chat message is inserted"""
    if sender.__name__ != 'ChatMessage' or not created:
        return
    try:
        from backend.chat.models import ChatMessage
        from backend.chat.utils import chat_participant_ids
        if isinstance(instance, ChatMessage):
            invalidate_unread_cache(*chat_participant_ids(instance.chat))
    except Exception as e:
        logger.warning(f"Error in invalidate_unread_on_message signal: {e}")


# Unread counters: a read marker only affects its owner
@receiver(post_save)
def invalidate_unread_on_read(sender, instance, **kwargs):
    """Invalidate the reader's unread counts when their read marker moves"""
    if sender.__name__ != 'ChatReadStatus':
        return
    try:
        from backend.chat.models import ChatReadStatus
        if isinstance(instance, ChatReadStatus):
            invalidate_unread_cache(instance.user_id)
    except Exception as e:
        logger.warning(f"Error in invalidate_unread_on_read signal: {e}")
