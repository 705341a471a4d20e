"""
Domain-specific exceptions for purchasing app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Exception Hierarchy:
    PurchasingServiceError (base)
    ├── MissingParameterError
    ├── InvalidOrderItemsError
    ├── PurchaseOrderNotFoundError
    ├── SupplierNotFoundError
    ├── AdminNotFoundError
    ├── InvalidStateTransitionError
    └── OrderNumberCollisionError
"""


class PurchasingServiceError(Exception):
    """Base exception for all purchasing service errors."""
    pass


class MissingParameterError(PurchasingServiceError):
    """Raised when a required input (e.g. the admin id) is absent."""
    pass


class InvalidOrderItemsError(PurchasingServiceError):
    """Raised when a purchase order has no items or a malformed item."""
    pass


class PurchaseOrderNotFoundError(PurchasingServiceError):
    """Raised when a purchase order does not exist."""
    pass


class SupplierNotFoundError(PurchasingServiceError):
    """Raised when the referenced supplier does not exist."""
    pass


class AdminNotFoundError(PurchasingServiceError):
    """Raised when the admin a draft is created for does not exist."""
    pass


class InvalidStateTransitionError(PurchasingServiceError):
    """
    Raised when a purchase order is not in the status an action requires.

    Only DRAFT orders can be approved, re-assigned or deleted.
    """
    pass


class OrderNumberCollisionError(PurchasingServiceError):
    """Raised when no unused order number could be generated."""
    pass
