import pytest
import itertools
from datetime import date, timedelta
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.accounting.models import (
    BankTransaction,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    TransactionType,
)

ACCOUNT = '62001234567'
BASE_DATE = date(2025, 3, 14)


def _authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def accountant(db):
    """Create and return an accountant."""
    return User.objects.create_user(
        email='accountant@example.com',
        password='TestPass123!',
        name='Accountant',
        role=UserRole.ACCOUNTANT,
    )


@pytest.fixture
def financial_manager(db):
    """Create and return a financial manager (can approve expenses)."""
    return User.objects.create_user(
        email='finance@example.com',
        password='TestPass123!',
        name='Financial Manager',
        role=UserRole.FINANCIAL_MANAGER,
    )


@pytest.fixture
def plant_manager(db):
    """Create and return a plant manager (no accounting access)."""
    return User.objects.create_user(
        email='plants@example.com',
        password='TestPass123!',
        name='Plant Manager',
        role=UserRole.PLANT_MANAGER,
    )


@pytest.fixture
def accountant_client(api_client, accountant):
    """Return API client authenticated as accountant."""
    return _authenticate(api_client, accountant)


@pytest.fixture
def finance_client(api_client, financial_manager):
    """Return API client authenticated as financial manager."""
    return _authenticate(api_client, financial_manager)


@pytest.fixture
def plant_manager_client(api_client, plant_manager):
    """Return API client authenticated as plant manager."""
    return _authenticate(api_client, plant_manager)


@pytest.fixture
def category(db):
    """Create and return an expense category."""
    return ExpenseCategory.objects.create(name='Stock purchases')


@pytest.fixture
def make_expense(accountant, category):
    """
    Factory for expenses. Defaults to an APPROVED expense of 150.00
    dated BASE_DATE.
    """
    def _make(amount='150.00', expense_date=BASE_DATE, status=ExpenseStatus.APPROVED, **kwargs):
        return Expense.objects.create(
            description=kwargs.pop('description', 'Nursery invoice'),
            amount=Decimal(amount),
            expense_date=expense_date,
            category=category,
            status=status,
            created_by=accountant,
            **kwargs
        )
    return _make


@pytest.fixture
def make_transaction(db):
    """Factory for unreconciled debit transactions on ACCOUNT."""
    references = itertools.count(1)

    def _make(amount='150.00', transaction_date=BASE_DATE, account_number=ACCOUNT, **kwargs):
        return BankTransaction.objects.create(
            account_number=account_number,
            transaction_date=transaction_date,
            description=kwargs.pop('description', 'EFT GREEN LEAF NURSERY'),
            amount=Decimal(amount),
            type=kwargs.pop('type', TransactionType.DEBIT),
            bank_reference=kwargs.pop('bank_reference', f'REF{next(references):06d}'),
            balance=kwargs.pop('balance', Decimal('10000.00')),
            **kwargs
        )
    return _make


@pytest.fixture
def expense(make_expense):
    """APPROVED expense of 150.00 on BASE_DATE."""
    return make_expense()


@pytest.fixture
def bank_transaction(make_transaction):
    """Unreconciled 150.00 debit on BASE_DATE + 2 days."""
    return make_transaction(transaction_date=BASE_DATE + timedelta(days=2))
