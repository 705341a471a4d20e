"""Domain-specific exceptions for notifications app."""


class NotificationsServiceError(Exception):
    """Base exception for all notification service errors."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification does not exist or belongs to someone else."""
    pass
