"""
Catalog app services layer.

Read-side helpers over products and suppliers. Stock itself is changed
by order fulfilment and imports, never by these services.
"""

from .exceptions import (
    CatalogServiceError,
    ProductNotFoundError,
    SupplierNotFoundError,
)

from .stock import (
    effective_threshold,
    is_low_stock,
    get_low_stock_products,
)


__all__ = [
    # Exceptions
    'CatalogServiceError',
    'ProductNotFoundError',
    'SupplierNotFoundError',

    # Stock
    'effective_threshold',
    'is_low_stock',
    'get_low_stock_products',
]
