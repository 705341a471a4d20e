"""
Management command to create sample data for local development.

Usage:
    python manage.py seed_store
    python manage.py seed_store --clear

This creates:
- One user per back-office role
- 3 suppliers and 8 products (some below their reorder level)
- Expense categories and approved expenses
- Bank transactions, most of which auto-reconcile against the expenses
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from decimal import Decimal
from datetime import timedelta

from apps.accounts.models import User, UserRole
from apps.accounting.models import BankTransaction, Expense, ExpenseCategory, ExpenseStatus, TransactionType
from apps.accounting.services import calculate_vat
from apps.catalog.models import Product, Supplier
from apps.notifications.models import Notification
from apps.purchasing.models import PurchaseOrder

ACCOUNT_NUMBER = '62001234567'


class Command(BaseCommand):
    help = 'Create sample data for the back office'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        self.create_catalog()
        self.create_accounting(users)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts (password: password123):')
        for user in users.values():
            self.stdout.write(f'  {user.email} ({user.get_role_display()})')

    def clear_data(self):
        """Clear all data from the database."""
        Notification.objects.all().delete()
        PurchaseOrder.objects.all().delete()
        BankTransaction.objects.all().delete()
        Expense.objects.all().delete()
        ExpenseCategory.objects.all().delete()
        Product.objects.all().delete()
        Supplier.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        """Create one user per back-office role."""
        self.stdout.write('  Creating users...')

        users_data = [
            ('superadmin@example.com', 'Sipho Super', UserRole.SUPER_ADMIN),
            ('admin@example.com', 'Anna Admin', UserRole.ADMIN),
            ('plants@example.com', 'Pieter Plants', UserRole.PLANT_MANAGER),
            ('accountant@example.com', 'Aisha Accounts', UserRole.ACCOUNTANT),
            ('finance@example.com', 'Frank Finance', UserRole.FINANCIAL_MANAGER),
        ]

        users = {}
        for email, name, role in users_data:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={
                    'name': name,
                    'role': role,
                    'is_staff': role == UserRole.SUPER_ADMIN,
                }
            )
            user.set_password('password123')
            user.save()
            users[role] = user

        return users

    def create_catalog(self):
        """Create suppliers and products."""
        self.stdout.write('  Creating suppliers and products...')

        suppliers = {}
        for name, contact, email in [
            ('Green Leaf Nursery', 'Thandi Mokoena', 'orders@greenleaf.example.com'),
            ('Fern & Co', 'Johan Botha', 'sales@fernco.example.com'),
            ('Pot World', 'Lerato Dlamini', 'hello@potworld.example.com'),
        ]:
            supplier, _ = Supplier.objects.get_or_create(
                name=name,
                defaults={'contact_name': contact, 'email': email}
            )
            suppliers[name] = supplier

        # (name, price, stock, threshold, supplier)
        products_data = [
            ('Monstera Deliciosa', '249.00', 2, 5, 'Green Leaf Nursery'),
            ('Fiddle Leaf Fig', '399.00', 12, 4, 'Green Leaf Nursery'),
            ('Snake Plant', '149.00', 30, None, 'Green Leaf Nursery'),
            ('Boston Fern', '119.00', 3, 6, 'Fern & Co'),
            ('Maidenhair Fern', '129.00', 8, None, 'Fern & Co'),
            ('Terracotta Pot 12cm', '45.00', 60, 20, 'Pot World'),
            ('Glazed Pot 20cm', '189.00', 4, 5, 'Pot World'),
            ('Mystery Cutting', '35.00', 1, 3, None),
        ]

        for name, price, stock, threshold, supplier_name in products_data:
            Product.objects.get_or_create(
                name=name,
                defaults={
                    'price': Decimal(price),
                    'stock_quantity': stock,
                    'low_stock_threshold': threshold,
                    'supplier': suppliers.get(supplier_name),
                }
            )

    def create_accounting(self, users):
        """Create categories, approved expenses and a matching bank feed."""
        self.stdout.write('  Creating expenses and bank transactions...')

        categories = {}
        for name in ['Stock purchases', 'Packaging', 'Rent', 'Utilities']:
            category, _ = ExpenseCategory.objects.get_or_create(name=name)
            categories[name] = category

        today = timezone.localdate()
        # (description, amount, days ago, category, bank lag in days or None)
        expenses_data = [
            ('Green Leaf Nursery invoice GL-1042', '3450.00', 20, 'Stock purchases', 2),
            ('Fern & Co invoice 889', '1275.50', 15, 'Stock purchases', 3),
            ('Shop rent', '12500.00', 10, 'Rent', 0),
            ('Electricity', '1830.25', 8, 'Utilities', 1),
            ('Pot World invoice PW-77', '2210.00', 5, 'Packaging', None),
        ]

        balance = Decimal('50000.00')
        for index, (description, amount, days_ago, category, lag) in enumerate(expenses_data, start=1):
            amount = Decimal(amount)
            expense_date = today - timedelta(days=days_ago)

            Expense.objects.get_or_create(
                description=description,
                defaults={
                    'amount': amount,
                    'vat_rate': Decimal('15'),
                    'vat_amount': calculate_vat(amount, Decimal('15')),
                    'expense_date': expense_date,
                    'category': categories[category],
                    'status': ExpenseStatus.APPROVED,
                    'created_by': users[UserRole.ACCOUNTANT],
                    'approved_by': users[UserRole.FINANCIAL_MANAGER],
                    'approved_at': timezone.now(),
                }
            )

            if lag is None:
                continue

            balance -= amount
            BankTransaction.objects.get_or_create(
                bank_reference=f'SEED-{index:04d}',
                defaults={
                    'account_number': ACCOUNT_NUMBER,
                    'transaction_date': expense_date + timedelta(days=lag),
                    'description': f'EFT {description.upper()}',
                    'amount': amount,
                    'type': TransactionType.DEBIT,
                    'balance': balance,
                }
            )

        # A card fee with no expense behind it stays unreconciled
        BankTransaction.objects.get_or_create(
            bank_reference='SEED-FEE-0001',
            defaults={
                'account_number': ACCOUNT_NUMBER,
                'transaction_date': today - timedelta(days=1),
                'description': 'MONTHLY CARD FEE',
                'amount': Decimal('69.00'),
                'type': TransactionType.DEBIT,
                'category': 'Bank charges',
                'balance': balance - Decimal('69.00'),
            }
        )
