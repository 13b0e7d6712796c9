import logging

from .models import Notification

logger = logging.getLogger(__name__)


def create_notification(user, message, link=None, unique=False):
    """
    Insert a notification for user.

    With unique=True nothing is inserted when the user already has a
    notification for the same link; returns None in that case.
    """
    if unique and link and Notification.objects.filter(user=user, link=link).exists():
        return None
    notification = Notification.objects.create(user=user, message=message, link=link)
    logger.debug(f"Notification {notification.id} created for user {notification.user_id}")
    return notification
