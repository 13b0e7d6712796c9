"""Chat participants, unread counting and read markers"""
import logging

from django.db.models import F, OuterRef, Q, Subquery
from django.utils import timezone
from django.utils.translation import gettext as _

from backend.core.cache_utils import get_cached_unread, cache_unread
from backend.notifications.utils import create_notification
from .models import Chat, ChatMessage, ChatReadStatus

logger = logging.getLogger(__name__)


def chat_participant_ids(chat):
    """(sender_id, traveler_id) of the chat's request"""
    request = chat.request
    return request.sender_id, request.trip.user_id


def is_chat_participant(chat, user):
    return user.id in chat_participant_ids(chat)


def other_participant_id(chat, user_id):
    sender_id, traveler_id = chat_participant_ids(chat)
    return traveler_id if user_id == sender_id else sender_id


def chat_link(request_id):
    return f"/chat/{request_id}"


def first_name_of(user):
    profile = getattr(user, 'profile', None)
    if profile and profile.first_name:
        return profile.first_name
    return user.first_name or None


def unread_messages(user, chat=None):
    """
    Messages in the user's chats that were sent by someone else after the
    user's last_read_at (every such message when the chat was never read).
    """
    last_read = ChatReadStatus.objects.filter(chat=OuterRef('chat'), user=user).values('last_read_at')[:1]
    queryset = ChatMessage.objects.filter(
        Q(chat__request__sender=user) | Q(chat__request__trip__user=user)
    ).exclude(sender=user)
    if chat is not None:
        queryset = queryset.filter(chat=chat)
    return queryset.annotate(last_read_at=Subquery(last_read)).filter(
        Q(last_read_at__isnull=True) | Q(created_at__gt=F('last_read_at'))
    )


def get_unread_count(user):
    cached, cache_key = get_cached_unread(user.id, 'count')
    if cached is not None:
        return cached
    count = unread_messages(user).count()
    cache_unread(cache_key, count)
    return count


def get_unread_counts_by_tab(user):
    """
    Unread counts split by the user's role in each chat: 'sent' for chats of
    requests the user sent, 'received' for chats on the user's trips.
    """
    cached, cache_key = get_cached_unread(user.id, 'by_tab')
    if cached is not None:
        return cached
    queryset = unread_messages(user)
    counts = {
        'sent': queryset.filter(chat__request__sender=user).count(),
        'received': queryset.filter(chat__request__trip__user=user).exclude(chat__request__sender=user).count(),
    }
    cache_unread(cache_key, counts)
    return counts


def get_read_status(chat, user):
    return ChatReadStatus.objects.filter(chat=chat, user=user).values_list('last_read_at', flat=True).first()


def mark_chat_read(chat, user):
    """Upsert the user's read marker for the chat to now"""
    read_status, _created = ChatReadStatus.objects.update_or_create(
        chat=chat,
        user=user,
        defaults={'last_read_at': timezone.now()},
    )
    return read_status


def new_message_notification_text(sender):
    name = first_name_of(sender) or _('User')
    return _('New message from %(name)s') % {'name': name}


def notify_unread_chat(chat, recipient, from_user):
    """One notification per chat and recipient, linking to the chat page"""
    return create_notification(
        recipient,
        new_message_notification_text(from_user),
        link=chat_link(chat.request_id),
        unique=True,
    )


def sync_unread_chat_notifications(users=None):
    """
    Make sure every participant with unread messages in a chat has a
    notification for that chat. Returns the number of notifications created.
    """
    created = 0
    chats = Chat.objects.select_related('request', 'request__sender', 'request__trip__user')
    for chat in chats:
        sender = chat.request.sender
        traveler = chat.request.trip.user
        for participant, other in ((sender, traveler), (traveler, sender)):
            if users is not None and participant not in users:
                continue
            if not unread_messages(participant, chat=chat).exists():
                continue
            if notify_unread_chat(chat, participant, other):
                created += 1
    logger.info(f"Chat notification sync created {created} notifications")
    return created


def get_or_create_chat(delivery_request):
    chat, created = Chat.objects.get_or_create(request=delivery_request)
    if created:
        logger.info(f"Opened chat {chat.id} for request {delivery_request.id}")
    return chat
