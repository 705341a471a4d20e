from rest_framework import serializers
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus


class AdminIdField(serializers.UUIDField):
    """
    UUID of the admin an action is performed for.

    A missing, blank or null value comes through as ``None`` so the service
    answers with ``Missing adminId``; anything else must be a valid UUID.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        kwargs.setdefault('default', None)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if data in ('', None):
            return None
        return super().to_internal_value(data)


# =============================================================================
# Input Serializers
# =============================================================================

class PurchaseOrderFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for purchase order listing.

    Query Parameters:
        adminId (UUID): Only orders owned by this admin
        status (str): DRAFT or APPROVED
    """

    adminId = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(
        choices=PurchaseOrderStatus.choices,
        required=False
    )


class PurchaseOrderItemInputSerializer(serializers.Serializer):
    """One line of a manually drafted order."""

    productId = serializers.UUIDField(required=False, allow_null=True, default=None)
    name = serializers.CharField(max_length=200)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    def to_internal_value(self, data):
        attrs = super().to_internal_value(data)
        return {
            'product_id': attrs['productId'],
            'name': attrs['name'],
            'quantity': attrs['quantity'],
            'price': attrs['price'],
        }


class PurchaseOrderCreateSerializer(serializers.Serializer):
    """Validate a manual purchase order draft."""

    adminId = AdminIdField()
    supplierId = serializers.UUIDField()
    items = PurchaseOrderItemInputSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ApprovePurchaseOrderSerializer(serializers.Serializer):
    """Validate an approval request: ``{id, adminId}``."""

    id = serializers.UUIDField()
    adminId = AdminIdField()


class AutoDraftInputSerializer(serializers.Serializer):
    """Validate an auto-draft request: ``{adminId}``."""

    adminId = AdminIdField()


class ChangeSupplierSerializer(serializers.Serializer):
    supplierId = serializers.UUIDField()


class UpdateQuantitySerializer(serializers.Serializer):
    """Validate a quantity edit: ``{quantity, itemId?}``."""

    quantity = serializers.IntegerField(min_value=1)
    itemId = serializers.UUIDField(required=False, allow_null=True, default=None)


class DeleteDraftsSerializer(serializers.Serializer):
    adminId = AdminIdField()
    poIds = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=False
    )


# =============================================================================
# Output Serializers
# =============================================================================

class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    """Purchase order line."""

    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = [
            'product',
            'name',
            'quantity',
            'price',
            'line_total',
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    """Purchase order with supplier name and ordered items."""

    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id',
            'order_number',
            'status',
            'admin',
            'supplier',
            'supplier_name',
            'items',
            'total',
            'notes',
            'approved_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class AutoDraftResponseSerializer(serializers.Serializer):
    created = serializers.IntegerField()
    purchaseOrders = PurchaseOrderSerializer(many=True)


class DeleteDraftsResponseSerializer(serializers.Serializer):
    deleted = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
