from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsPurchasingStaff
from .models import Product, Supplier
from .serializers import ProductSerializer, SupplierSerializer
from .services import get_low_stock_products


class CatalogPagination(PageNumberPagination):
    """Custom pagination for catalog listings."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only product listing for purchasing staff.

    list: All products with stock levels
    retrieve: A single product
    low_stock: Products at or below their reorder threshold
    """

    queryset = Product.objects.select_related('supplier')
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, IsPurchasingStaff]
    pagination_class = CatalogPagination

    @extend_schema(
        responses={200: ProductSerializer(many=True)},
        description="Products at or below their reorder threshold, including supplier-less ones.",
        tags=['catalog'],
    )
    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        """
        List low-stock products.

        GET /api/catalog/products/low-stock/
        """
        products = get_low_stock_products(require_supplier=False)
        page = self.paginate_queryset(products)

        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(products, many=True)
        return Response(serializer.data)


class SupplierViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only supplier listing for purchasing staff."""

    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer
    permission_classes = [IsAuthenticated, IsPurchasingStaff]
    pagination_class = CatalogPagination
