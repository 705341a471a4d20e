"""
Purchase order service.

Handles manual drafting, approval and draft housekeeping. Order numbers
are human readable (``PO-YYYYMMDD-NNNN``) with a random suffix; the
``order_number`` column is unique and creation retries on a collision.
"""

import logging
import secrets
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.catalog.models import Supplier
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification
from apps.purchasing.models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus

from .exceptions import (
    AdminNotFoundError,
    InvalidOrderItemsError,
    InvalidStateTransitionError,
    MissingParameterError,
    OrderNumberCollisionError,
    PurchaseOrderNotFoundError,
    SupplierNotFoundError,
)

logger = logging.getLogger(__name__)


def generate_order_number(today: Optional[date] = None) -> str:
    """
    Build an order number like ``PO-20250314-4821``.

    The suffix is a random integer in [1000, 9999].
    """
    today = today or timezone.localdate()
    suffix = 1000 + secrets.randbelow(9000)
    return f"PO-{today:%Y%m%d}-{suffix}"


def purchase_order_link(order: PurchaseOrder) -> str:
    """Deep link to the order in the admin UI."""
    return f"/admin/purchase-orders/{order.id}"


def calculate_total(items: list[dict]) -> Decimal:
    """Sum of ``price * quantity`` over the items."""
    return sum(
        (Decimal(str(item['price'])) * item['quantity'] for item in items),
        Decimal('0.00')
    )


def get_admin(admin_id) -> User:
    """
    Resolve the admin a purchasing action is performed for.

    Raises:
        MissingParameterError: If admin_id is empty
        AdminNotFoundError: If no such user exists
    """
    if not admin_id:
        raise MissingParameterError("Missing adminId")
    try:
        return User.objects.get(id=admin_id)
    except (User.DoesNotExist, ValidationError):
        raise AdminNotFoundError(f"Admin with ID {admin_id} not found")


def _validate_items(items: list[dict]) -> None:
    if not items:
        raise InvalidOrderItemsError("A purchase order needs at least one item")

    for index, item in enumerate(items):
        missing = {'name', 'quantity', 'price'} - set(item)
        if missing:
            raise InvalidOrderItemsError(
                f"Item {index} is missing {', '.join(sorted(missing))}"
            )
        if item['quantity'] < 1:
            raise InvalidOrderItemsError(f"Item {index} quantity must be at least 1")
        if Decimal(str(item['price'])) < 0:
            raise InvalidOrderItemsError(f"Item {index} price cannot be negative")


def create_order_with_items(
    *,
    admin_id: UUID,
    supplier_id: UUID,
    items: list[dict],
    notes: str = '',
    max_retries: int = 5
) -> PurchaseOrder:
    """
    Insert a DRAFT order and its items, retrying on order number collisions.

    ``total`` is computed here, once, from the items. Must be called inside
    an outer transaction; each attempt runs in its own savepoint.

    Args:
        admin_id: Owning admin
        supplier_id: Supplier the order goes to
        items: Ordered list of ``{product_id, name, quantity, price}``
        notes: Free text
        max_retries: Attempts at finding an unused order number

    Returns:
        Created PurchaseOrder

    Raises:
        OrderNumberCollisionError: If every generated number was taken
    """
    total = calculate_total(items)

    for attempt in range(max_retries):
        order_number = generate_order_number()

        try:
            with transaction.atomic():
                order = PurchaseOrder.objects.create(
                    order_number=order_number,
                    status=PurchaseOrderStatus.DRAFT,
                    admin_id=admin_id,
                    supplier_id=supplier_id,
                    total=total,
                    notes=notes,
                )
                PurchaseOrderItem.objects.bulk_create([
                    PurchaseOrderItem(
                        purchase_order=order,
                        position=position,
                        product_id=item.get('product_id'),
                        name=item['name'],
                        quantity=item['quantity'],
                        price=Decimal(str(item['price'])),
                    )
                    for position, item in enumerate(items)
                ])
                return order

        except IntegrityError:
            logger.warning("Order number %s already taken (attempt %d)", order_number, attempt + 1)
            continue

    raise OrderNumberCollisionError(
        f"Failed to generate unique order number after {max_retries} attempts"
    )


@transaction.atomic
def create_purchase_order(
    *,
    admin_id: UUID,
    supplier_id: UUID,
    items: list[dict],
    notes: str = ''
) -> PurchaseOrder:
    """
    Draft a purchase order by hand.

    This operation:
    1. Validates the admin, the supplier and the items
    2. Creates the DRAFT order with its total fixed from the items
    3. Notifies the admin that a draft awaits approval

    Args:
        admin_id: Admin who owns the draft
        supplier_id: Supplier the order goes to
        items: Non-empty ordered list of ``{product_id, name, quantity, price}``
        notes: Optional free text

    Returns:
        Created PurchaseOrder

    Raises:
        MissingParameterError: If admin_id is empty
        AdminNotFoundError: If the admin doesn't exist
        SupplierNotFoundError: If the supplier doesn't exist
        InvalidOrderItemsError: If items are empty or malformed
    """
    admin = get_admin(admin_id)

    try:
        supplier = Supplier.objects.get(id=supplier_id)
    except Supplier.DoesNotExist:
        raise SupplierNotFoundError(f"Supplier with ID {supplier_id} not found")

    _validate_items(items)

    order = create_order_with_items(
        admin_id=admin.id,
        supplier_id=supplier.id,
        items=items,
        notes=notes,
    )

    create_notification(
        user_id=admin.id,
        type=NotificationType.PO_DRAFT,
        message=f"Purchase order draft created for supplier {supplier.name}",
        link=purchase_order_link(order),
    )

    logger.info("Draft purchase order %s created for supplier %s", order.order_number, supplier.name)
    return order


def get_purchase_order(*, purchase_order_id: UUID) -> PurchaseOrder:
    """
    Get a purchase order with supplier and items loaded.

    Raises:
        PurchaseOrderNotFoundError: If it doesn't exist
    """
    try:
        return (
            PurchaseOrder.objects
            .select_related('supplier', 'admin')
            .prefetch_related('items')
            .get(id=purchase_order_id)
        )
    except PurchaseOrder.DoesNotExist:
        raise PurchaseOrderNotFoundError(f"Purchase order with ID {purchase_order_id} not found")


def list_purchase_orders(
    *,
    admin_id: Optional[UUID] = None,
    status: Optional[str] = None
) -> QuerySet:
    """Purchase orders, newest first, optionally for one admin and/or status."""
    queryset = (
        PurchaseOrder.objects
        .select_related('supplier', 'admin')
        .prefetch_related('items')
    )
    if admin_id:
        queryset = queryset.filter(admin_id=admin_id)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def _lock_purchase_order(purchase_order_id: UUID) -> PurchaseOrder:
    try:
        return (
            PurchaseOrder.objects
            .select_for_update()
            .get(id=purchase_order_id)
        )
    except (PurchaseOrder.DoesNotExist, ValidationError):
        raise PurchaseOrderNotFoundError(f"Purchase order with ID {purchase_order_id} not found")


@transaction.atomic
def approve_purchase_order(*, purchase_order_id: UUID, admin_id: UUID) -> PurchaseOrder:
    """
    Approve a DRAFT purchase order.

    Approval is a one-way status change; no stock or supplier side effects
    happen here. Uses select_for_update so two approvals cannot both pass
    the DRAFT check.

    Args:
        purchase_order_id: Order to approve
        admin_id: Admin approving (receives the ``po-approved`` notification)

    Returns:
        Approved PurchaseOrder

    Raises:
        MissingParameterError: If admin_id is empty
        AdminNotFoundError: If the admin doesn't exist
        PurchaseOrderNotFoundError: If the order doesn't exist
        InvalidStateTransitionError: If the order is not a DRAFT
    """
    admin = get_admin(admin_id)
    order = _lock_purchase_order(purchase_order_id)

    if order.status != PurchaseOrderStatus.DRAFT:
        raise InvalidStateTransitionError(
            f"Purchase order {order.order_number} is {order.status}, only DRAFT orders can be approved"
        )

    order.status = PurchaseOrderStatus.APPROVED
    order.approved_at = timezone.now()
    order.save(update_fields=['status', 'approved_at', 'updated_at'])

    create_notification(
        user_id=admin.id,
        type=NotificationType.PO_APPROVED,
        message=f"Purchase order {order.order_number} approved and sent to supplier",
        link=purchase_order_link(order),
    )

    logger.info("Purchase order %s approved by %s", order.order_number, admin.email)
    return get_purchase_order(purchase_order_id=order.id)


@transaction.atomic
def change_supplier(*, purchase_order_id: UUID, supplier_id: UUID) -> PurchaseOrder:
    """
    Re-assign a DRAFT purchase order to another supplier.

    Raises:
        PurchaseOrderNotFoundError: If the order doesn't exist
        SupplierNotFoundError: If the supplier doesn't exist
        InvalidStateTransitionError: If the order is no longer a DRAFT
    """
    order = _lock_purchase_order(purchase_order_id)

    if not Supplier.objects.filter(id=supplier_id).exists():
        raise SupplierNotFoundError(f"Supplier with ID {supplier_id} not found")

    if order.status != PurchaseOrderStatus.DRAFT:
        raise InvalidStateTransitionError("Only DRAFT purchase orders can change supplier")

    order.supplier_id = supplier_id
    order.save(update_fields=['supplier', 'updated_at'])

    return get_purchase_order(purchase_order_id=order.id)


@transaction.atomic
def delete_draft_purchase_orders(*, admin_id: UUID, purchase_order_ids: list[UUID]) -> int:
    """
    Delete the admin's DRAFT orders among ``purchase_order_ids``.

    Orders that are approved or owned by someone else are left alone.

    Returns:
        Number of purchase orders deleted

    Raises:
        MissingParameterError: If admin_id or the id list is empty
    """
    if not admin_id or not purchase_order_ids:
        raise MissingParameterError("Missing adminId or poIds")

    _, deleted = PurchaseOrder.objects.filter(
        id__in=purchase_order_ids,
        status=PurchaseOrderStatus.DRAFT,
        admin_id=admin_id,
    ).delete()

    count = deleted.get(PurchaseOrder._meta.label, 0)
    logger.info("Deleted %d draft purchase order(s) for admin %s", count, admin_id)
    return count


@transaction.atomic
def update_draft_quantity(
    *,
    purchase_order_id: UUID,
    quantity: int,
    item_id: Optional[UUID] = None
) -> PurchaseOrder:
    """
    Change the quantity of one line of a DRAFT order and re-total it.

    Auto-drafted orders carry a single line, so the first line (by
    position) is updated unless ``item_id`` picks another one.

    Args:
        purchase_order_id: Order to edit
        quantity: New quantity, at least 1
        item_id: Line to edit; the first line when omitted

    Returns:
        Updated PurchaseOrder with ``total`` recomputed from all its items

    Raises:
        InvalidOrderItemsError: If quantity is below 1, the order has no
            items or item_id is not one of its lines
        PurchaseOrderNotFoundError: If the order doesn't exist
        InvalidStateTransitionError: If the order is no longer a DRAFT
    """
    if quantity is None or quantity < 1:
        raise InvalidOrderItemsError("Quantity must be at least 1")

    order = _lock_purchase_order(purchase_order_id)

    if order.status != PurchaseOrderStatus.DRAFT:
        raise InvalidStateTransitionError("Only DRAFT purchase orders can change quantity")

    items = order.items.all()
    item = items.filter(id=item_id).first() if item_id else items.first()
    if item is None:
        raise InvalidOrderItemsError(
            "Item not found on purchase order" if item_id else "No items in purchase order"
        )

    item.quantity = quantity
    item.save(update_fields=['quantity'])

    order.total = calculate_total(order.items.values('price', 'quantity'))
    order.save(update_fields=['total', 'updated_at'])

    logger.info(
        "Purchase order %s line %s set to %d, total %s",
        order.order_number, item.name, quantity, order.total
    )
    return get_purchase_order(purchase_order_id=order.id)
