"""
Change-feed handlers for chat tables.

A new message notifies the other participant once per chat. Unread-count
cache invalidation for messages and read markers lives in
backend.core.cache_signals.
"""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import ChatMessage
from .utils import chat_participant_ids, notify_unread_chat

logger = logging.getLogger(__name__)


@receiver(post_save, sender=ChatMessage)
def notify_recipient_of_new_message(sender, instance, created, raw=False, **kwargs):
    if not created or raw:
        return
    chat = instance.chat
    sender_id, traveler_id = chat_participant_ids(chat)
    recipient = chat.request.trip.user if instance.sender_id == sender_id else chat.request.sender
    if recipient.id == instance.sender_id:
        return
    notification = notify_unread_chat(chat, recipient, instance.sender)
    if notification:
        logger.info(f"Notified user {recipient.id} of new message in chat {chat.id}")
