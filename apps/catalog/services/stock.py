"""Stock level service - low-stock detection against reorder thresholds."""

from django.conf import settings
from django.db.models import F, QuerySet, Value
from django.db.models.functions import Coalesce

from apps.catalog.models import Product


def effective_threshold(product: Product) -> int:
    """Return the product's own reorder threshold, or the store-wide default."""
    if product.low_stock_threshold is None:
        return settings.LOW_STOCK_THRESHOLD
    return product.low_stock_threshold


def is_low_stock(product: Product) -> bool:
    """True when stock has fallen to or below the reorder threshold."""
    return product.stock_quantity <= effective_threshold(product)


def get_low_stock_products(*, require_supplier: bool = True) -> QuerySet:
    """
    Products at or below their reorder threshold.

    The threshold is resolved in the database so the whole catalog is
    filtered in one query:
    1. Annotate ``reorder_level`` = own threshold or LOW_STOCK_THRESHOLD
    2. Keep products with ``stock_quantity <= reorder_level``
    3. Optionally drop products without a supplier (they cannot be drafted)

    Args:
        require_supplier: Exclude supplier-less products (default True)

    Returns:
        QuerySet of Product with ``reorder_level`` annotated, ordered by name
    """
    queryset = (
        Product.objects
        .select_related('supplier')
        .annotate(
            reorder_level=Coalesce(
                'low_stock_threshold',
                Value(settings.LOW_STOCK_THRESHOLD)
            )
        )
        .filter(stock_quantity__lte=F('reorder_level'))
    )

    if require_supplier:
        queryset = queryset.filter(supplier__isnull=False)

    return queryset.order_by('name', 'id')
