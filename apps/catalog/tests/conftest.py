import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.catalog.models import Product, Supplier


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_client(api_client, db):
    """Return API client authenticated as a store admin."""
    admin = User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )
    refresh = RefreshToken.for_user(admin)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def customer_client(api_client, db):
    """Return API client authenticated as a storefront customer."""
    customer = User.objects.create_user(email='customer@example.com', password='TestPass123!')
    refresh = RefreshToken.for_user(customer)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name='Green Leaf Nursery')


@pytest.fixture
def products(supplier):
    """
    A mix of stock levels:
    - Monstera: 2 of 5 (low)
    - Pothos: 5 of 5 (low, at threshold)
    - Snake Plant: 40 of 5 (fine)
    - Calathea: 7, store default threshold (low when default is 10)
    - Cutting: 0 of 3, no supplier (low)
    """
    data = [
        ('Monstera', 2, 5, supplier),
        ('Pothos', 5, 5, supplier),
        ('Snake Plant', 40, 5, supplier),
        ('Calathea', 7, None, supplier),
        ('Cutting', 0, 3, None),
    ]
    return {
        name: Product.objects.create(
            name=name,
            price=Decimal('10.00'),
            stock_quantity=stock,
            low_stock_threshold=threshold,
            supplier=product_supplier,
        )
        for name, stock, threshold, product_supplier in data
    }
