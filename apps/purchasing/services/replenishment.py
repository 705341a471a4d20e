"""
Replenishment service - drafts purchase orders for low-stock products.

One run scans the catalog, and for every product at or below its reorder
threshold that has a supplier, drafts a single-item purchase order for the
requesting admin, unless that admin already has a DRAFT order for the same
supplier containing the product.

The whole run is one transaction. Each product row is locked before the
duplicate check, so concurrent runs for the same admin serialize per
product instead of racing past the check.
"""

import logging
from typing import NamedTuple
from uuid import UUID

from django.db import transaction

from apps.catalog.models import Product
from apps.catalog.services import effective_threshold, get_low_stock_products, is_low_stock
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification
from apps.purchasing.models import PurchaseOrder, PurchaseOrderStatus

from .purchase_orders import create_order_with_items, get_admin, purchase_order_link

logger = logging.getLogger(__name__)


class AutoDraftResult(NamedTuple):
    created: int
    purchase_orders: list


def suggested_reorder_quantity(stock_quantity: int, threshold: int) -> int:
    """
    Units to order to bring stock one above the threshold (at least 1).

    >>> suggested_reorder_quantity(2, 5)
    4
    >>> suggested_reorder_quantity(5, 5)
    1
    """
    return max(1, threshold - stock_quantity + 1)


def has_open_draft(*, admin_id: UUID, supplier_id: UUID, product_id: UUID) -> bool:
    """True if the admin has a DRAFT order for this supplier that already includes the product."""
    return PurchaseOrder.objects.filter(
        status=PurchaseOrderStatus.DRAFT,
        admin_id=admin_id,
        supplier_id=supplier_id,
        items__product_id=product_id,
    ).exists()


@transaction.atomic
def auto_draft_purchase_orders(*, admin_id: UUID) -> AutoDraftResult:
    """
    Draft one purchase order per low-stock product.

    For each product with stock <= reorder threshold and a supplier:
    1. Lock the product row and re-check it is still low on stock
    2. Skip it if a DRAFT order for (admin, supplier) already contains it
    3. Order ``max(1, threshold - stock + 1)`` units at the current price
    4. Create the DRAFT order with ``total = price * quantity``
    5. Notify the admin (``po-draft``) with a link to the order

    Products without a supplier are skipped silently.

    Args:
        admin_id: Admin the drafts are created for

    Returns:
        AutoDraftResult with the number of orders created and the orders

    Raises:
        MissingParameterError: If admin_id is empty
        AdminNotFoundError: If the admin doesn't exist
    """
    admin = get_admin(admin_id)

    candidate_ids = list(get_low_stock_products().values_list('id', flat=True))

    created = []
    for product_id in candidate_ids:
        product = (
            Product.objects
            .select_for_update()
            .get(id=product_id)
        )

        # Stock may have moved since the scan
        if product.supplier_id is None or not is_low_stock(product):
            continue

        if has_open_draft(
            admin_id=admin.id,
            supplier_id=product.supplier_id,
            product_id=product.id,
        ):
            logger.debug("Draft already open for %s, skipping", product.name)
            continue

        quantity = suggested_reorder_quantity(
            product.stock_quantity,
            effective_threshold(product)
        )

        order = create_order_with_items(
            admin_id=admin.id,
            supplier_id=product.supplier_id,
            items=[{
                'product_id': product.id,
                'name': product.name,
                'quantity': quantity,
                'price': product.price,
            }],
        )

        create_notification(
            user_id=admin.id,
            type=NotificationType.PO_DRAFT,
            message=f"Auto-draft PO created for low stock: {product.name}",
            link=purchase_order_link(order),
        )

        logger.info(
            "Auto-drafted %s: %d x %s for %s",
            order.order_number, quantity, product.name, admin.email
        )
        created.append(order)

    logger.info("Auto-draft run for %s created %d purchase order(s)", admin.email, len(created))
    return AutoDraftResult(created=len(created), purchase_orders=created)
