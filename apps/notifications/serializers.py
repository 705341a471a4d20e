from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Notification as shown in the admin inbox."""

    class Meta:
        model = Notification
        fields = [
            'id',
            'type',
            'message',
            'link',
            'read',
            'created_at',
        ]
        read_only_fields = fields


class NotificationFilterSerializer(serializers.Serializer):
    """Validate query parameters for the inbox."""

    unread = serializers.BooleanField(required=False, default=False)
