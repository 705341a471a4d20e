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
def plant_manager(db):
    """Create and return a plant manager (purchasing staff)."""
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        name='Plant Manager',
        role=UserRole.PLANT_MANAGER,
    )


@pytest.fixture
def other_admin(db):
    """Create and return a second purchasing admin."""
    return User.objects.create_user(
        email='otheradmin@example.com',
        password='TestPass123!',
        name='Other Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def accountant(db):
    """Create and return an accountant (not purchasing staff)."""
    return User.objects.create_user(
        email='accountant@example.com',
        password='TestPass123!',
        name='Accountant',
        role=UserRole.ACCOUNTANT,
    )


@pytest.fixture
def manager_client(api_client, plant_manager):
    """Return API client authenticated as plant manager."""
    refresh = RefreshToken.for_user(plant_manager)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def accountant_client(api_client, accountant):
    """Return API client authenticated as accountant."""
    refresh = RefreshToken.for_user(accountant)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def supplier(db):
    """Create and return a supplier."""
    return Supplier.objects.create(
        name='Green Leaf Nursery',
        contact_name='Thandi',
        email='orders@greenleaf.example.com',
    )


@pytest.fixture
def other_supplier(db):
    """Create and return a second supplier."""
    return Supplier.objects.create(name='Fern & Co')


@pytest.fixture
def low_stock_product(supplier):
    """Monstera with 2 in stock against a threshold of 5."""
    return Product.objects.create(
        name='Monstera Deliciosa',
        price=Decimal('25.00'),
        stock_quantity=2,
        low_stock_threshold=5,
        supplier=supplier,
    )


@pytest.fixture
def stocked_product(supplier):
    """Product comfortably above its threshold."""
    return Product.objects.create(
        name='Snake Plant',
        price=Decimal('18.50'),
        stock_quantity=40,
        low_stock_threshold=5,
        supplier=supplier,
    )


@pytest.fixture
def orphan_product(db):
    """Low-stock product without a supplier."""
    return Product.objects.create(
        name='Mystery Cutting',
        price=Decimal('4.00'),
        stock_quantity=0,
        low_stock_threshold=3,
    )


@pytest.fixture
def draft_order(plant_manager, supplier, low_stock_product):
    """DRAFT order from plant manager containing the low-stock product."""
    from apps.purchasing.services import create_purchase_order
    return create_purchase_order(
        admin_id=plant_manager.id,
        supplier_id=supplier.id,
        items=[{
            'product_id': low_stock_product.id,
            'name': low_stock_product.name,
            'quantity': 4,
            'price': low_stock_product.price,
        }],
    )
