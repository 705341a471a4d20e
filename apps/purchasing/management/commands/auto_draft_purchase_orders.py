"""
Management command to draft purchase orders for low-stock products.

Runs the same replenishment pass as ``POST /api/purchasing/purchase-orders/auto-draft/``
so it can be scheduled (cron, systemd timer) for a given admin.

Usage:
    python manage.py auto_draft_purchase_orders --admin manager@example.com
    python manage.py auto_draft_purchase_orders --admin manager@example.com --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from apps.accounts.models import User
from apps.catalog.services import effective_threshold, get_low_stock_products
from apps.purchasing.services import (
    auto_draft_purchase_orders,
    has_open_draft,
    suggested_reorder_quantity,
    PurchasingServiceError,
)


class Command(BaseCommand):
    help = 'Draft one purchase order per low-stock product for the given admin'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin',
            required=True,
            help='Email of the admin the drafts are created for',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be drafted without making changes',
        )

    def handle(self, *args, **options):
        try:
            admin = User.objects.get(email=options['admin'])
        except User.DoesNotExist:
            raise CommandError(f"No user with email {options['admin']}")

        if options['dry_run']:
            self._preview(admin)
            return

        try:
            result = auto_draft_purchase_orders(admin_id=admin.id)
        except PurchasingServiceError as e:
            raise CommandError(str(e))

        if result.created == 0:
            self.stdout.write(
                self.style.SUCCESS('No low-stock products need a new draft. All good!')
            )
            return

        for order in result.purchase_orders:
            self.stdout.write(f'  - {order.order_number} | {order.supplier.name} | {order.total}')

        self.stdout.write(
            self.style.SUCCESS(f'\nCreated {result.created} draft purchase order(s).')
        )

    def _preview(self, admin):
        products = [
            product for product in get_low_stock_products()
            if not has_open_draft(
                admin_id=admin.id,
                supplier_id=product.supplier_id,
                product_id=product.id,
            )
        ]

        if not products:
            self.stdout.write(
                self.style.SUCCESS('No low-stock products need a new draft. All good!')
            )
            return

        self.stdout.write(f'\nWould draft {len(products)} purchase order(s):\n')
        for product in products:
            quantity = suggested_reorder_quantity(
                product.stock_quantity,
                effective_threshold(product)
            )
            self.stdout.write(
                f'  - {product.name} | {quantity} units | Supplier: {product.supplier.name}'
            )

        self.stdout.write(
            self.style.WARNING('\n--dry-run mode: No changes made.')
        )
