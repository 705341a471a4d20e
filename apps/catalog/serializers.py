from rest_framework import serializers
from .models import Product, Supplier
from .services import effective_threshold


class SupplierSerializer(serializers.ModelSerializer):
    """Supplier details."""

    class Meta:
        model = Supplier
        fields = [
            'id',
            'name',
            'contact_name',
            'email',
            'phone',
            'address',
            'is_active',
        ]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Product with resolved reorder threshold."""

    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    reorder_level = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id',
            'name',
            'sku',
            'price',
            'stock_quantity',
            'low_stock_threshold',
            'reorder_level',
            'supplier',
            'supplier_name',
            'is_active',
        ]
        read_only_fields = fields

    def get_reorder_level(self, obj) -> int:
        return effective_threshold(obj)
