import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestNotificationEndpoints:
    """Tests for /api/notifications/"""

    def test_list_own_notifications(self, authenticated_client, notification, other_notification):
        url = reverse('notifications:notification-list')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [n['id'] for n in response.data['notifications']] == [str(notification.id)]
        assert response.data['notifications'][0]['type'] == 'po-draft'

    def test_list_unread_filter(self, authenticated_client, notification):
        url = reverse('notifications:notification-read', kwargs={'notification_id': notification.id})
        authenticated_client.patch(url)

        response = authenticated_client.get(reverse('notifications:notification-list'), {'unread': 'true'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['notifications'] == []

    def test_mark_read(self, authenticated_client, notification):
        url = reverse('notifications:notification-read', kwargs={'notification_id': notification.id})
        response = authenticated_client.patch(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['read'] is True

    def test_mark_read_not_found(self, authenticated_client):
        url = reverse('notifications:notification-read', kwargs={'notification_id': uuid4()})
        response = authenticated_client.patch(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_all_read(self, authenticated_client, notification):
        url = reverse('notifications:notification-read-all')
        response = authenticated_client.patch(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'updated': 1}

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('notifications:notification-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
