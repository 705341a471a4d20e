from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import NotificationSerializer, NotificationFilterSerializer
from .services import (
    list_notifications,
    mark_notification_read,
    mark_all_read,
    NotificationNotFoundError,
)


class MarkAllReadResponseSerializer(serializers.Serializer):
    updated = serializers.IntegerField()


@extend_schema(
    parameters=[
        OpenApiParameter('unread', OpenApiTypes.BOOL, description='Only unread notifications'),
    ],
    responses={200: NotificationSerializer(many=True)},
    description="List the current user's notifications, newest first.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """List own notifications - thin HTTP handler."""
    query_serializer = NotificationFilterSerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    notifications = list_notifications(
        user=request.user,
        unread_only=query_serializer.validated_data['unread']
    )
    return Response({
        'notifications': NotificationSerializer(notifications, many=True).data
    })


@extend_schema(
    request=None,
    responses={200: NotificationSerializer},
    description="Mark a notification as read.",
    tags=['notifications'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_read(request, notification_id):
    """Mark one notification as read - thin HTTP handler."""
    try:
        notification = mark_notification_read(
            notification_id=notification_id,
            user=request.user
        )
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    responses={200: MarkAllReadResponseSerializer},
    description="Mark all of the current user's notifications as read.",
    tags=['notifications'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_read_all(request):
    """Mark all notifications as read - thin HTTP handler."""
    updated = mark_all_read(user=request.user)
    return Response({'updated': updated})
