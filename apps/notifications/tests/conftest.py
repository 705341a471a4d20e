import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """Return API client authenticated as admin_user."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def notification(admin_user):
    return create_notification(
        user_id=admin_user.id,
        type=NotificationType.PO_DRAFT,
        message='Auto-draft PO created for low stock: Monstera',
        link='/admin/purchase-orders/123',
    )


@pytest.fixture
def other_notification(other_user):
    return create_notification(
        user_id=other_user.id,
        type=NotificationType.PO_APPROVED,
        message='Purchase order PO-20250314-1234 approved and sent to supplier',
    )
