"""
Notifications app services layer.

Other apps emit notifications through ``create_notification``; the
remaining functions back the admin notification inbox.
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)

from .notification_management import (
    create_notification,
    list_notifications,
    mark_notification_read,
    mark_all_read,
)


__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',

    # Notification management
    'create_notification',
    'list_notifications',
    'mark_notification_read',
    'mark_all_read',
]
