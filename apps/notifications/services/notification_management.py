"""Notification management service - create and read-state changes."""

import logging
from uuid import UUID

from django.db.models import QuerySet

from apps.accounts.models import User
from apps.notifications.models import Notification
from .exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


def create_notification(
    *,
    user_id: UUID,
    type: str,
    message: str,
    link: str = ''
) -> Notification:
    """
    Record a notification for a user.

    Fire-and-forget from the caller's point of view: there is no delivery
    tracking beyond the ``read`` flag set from the inbox.

    Args:
        user_id: Recipient
        type: Type tag, e.g. ``po-draft``
        message: Text shown in the inbox
        link: Optional deep link into the back office

    Returns:
        Created Notification instance
    """
    notification = Notification.objects.create(
        user_id=user_id,
        type=type,
        message=message,
        link=link or '',
    )
    logger.debug("Notification %s (%s) created for user %s", notification.id, type, user_id)
    return notification


def list_notifications(*, user: User, unread_only: bool = False) -> QuerySet:
    """Notifications for a user, newest first."""
    queryset = Notification.objects.filter(user=user)
    if unread_only:
        queryset = queryset.filter(read=False)
    return queryset.order_by('-created_at')


def mark_notification_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If it doesn't exist or isn't the user's
    """
    try:
        notification = Notification.objects.get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read', 'updated_at'])

    return notification


def mark_all_read(*, user: User) -> int:
    """Mark every unread notification of the user as read; returns the count."""
    return Notification.objects.filter(user=user, read=False).update(read=True)
