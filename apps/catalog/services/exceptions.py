"""
Domain-specific exceptions for catalog app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class CatalogServiceError(Exception):
    """Base exception for all catalog service errors."""
    pass


class ProductNotFoundError(CatalogServiceError):
    """Raised when a product does not exist."""
    pass


class SupplierNotFoundError(CatalogServiceError):
    """Raised when a supplier does not exist."""
    pass
