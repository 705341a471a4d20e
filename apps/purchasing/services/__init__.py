"""
Purchasing app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and row locks.
"""

from .exceptions import (
    PurchasingServiceError,
    MissingParameterError,
    InvalidOrderItemsError,
    PurchaseOrderNotFoundError,
    SupplierNotFoundError,
    AdminNotFoundError,
    InvalidStateTransitionError,
    OrderNumberCollisionError,
)

from .purchase_orders import (
    generate_order_number,
    calculate_total,
    create_purchase_order,
    get_purchase_order,
    list_purchase_orders,
    approve_purchase_order,
    change_supplier,
    delete_draft_purchase_orders,
    update_draft_quantity,
)

from .replenishment import (
    AutoDraftResult,
    suggested_reorder_quantity,
    has_open_draft,
    auto_draft_purchase_orders,
)


__all__ = [
    # Exceptions
    'PurchasingServiceError',
    'MissingParameterError',
    'InvalidOrderItemsError',
    'PurchaseOrderNotFoundError',
    'SupplierNotFoundError',
    'AdminNotFoundError',
    'InvalidStateTransitionError',
    'OrderNumberCollisionError',

    # Purchase orders
    'generate_order_number',
    'calculate_total',
    'create_purchase_order',
    'get_purchase_order',
    'list_purchase_orders',
    'approve_purchase_order',
    'change_supplier',
    'delete_draft_purchase_orders',
    'update_draft_quantity',

    # Replenishment
    'AutoDraftResult',
    'suggested_reorder_quantity',
    'has_open_draft',
    'auto_draft_purchase_orders',
]
