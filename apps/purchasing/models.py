from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class PurchaseOrderStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    APPROVED = 'APPROVED', 'Approved'


class PurchaseOrder(models.Model):
    """Order to a supplier, drafted from low stock or by hand."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    
    # PO-YYYYMMDD-NNNN
    order_number = models.CharField(max_length=32, unique=True, editable=False)
    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.DRAFT
    )
    
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='purchase_orders'
    )
    supplier = models.ForeignKey(
        'catalog.Supplier',
        on_delete=models.PROTECT,
        related_name='purchase_orders'
    )
    
    # Sum of item price * quantity, fixed when the order is created
    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    notes = models.TextField(blank=True)
    
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'purchase_orders'
        indexes = [
            models.Index(fields=['admin', 'status'], name='purchase_or_admin_i_7c41d2_idx'),
            models.Index(fields=['supplier', 'status'], name='purchase_or_supplie_2e8b90_idx'),
        ]
        ordering = ['-created_at']
    
    def __str__(self):
        return f"{self.order_number} - {self.supplier.name} ({self.status})"
    
    @property
    def is_draft(self):
        return self.status == PurchaseOrderStatus.DRAFT


class PurchaseOrderItem(models.Model):
    """Line of a purchase order; ``position`` keeps the original ordering."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name='items'
    )
    position = models.PositiveIntegerField(default=0)
    
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_order_items'
    )
    # Snapshot of the product at ordering time
    name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    
    class Meta:
        db_table = 'purchase_order_items'
        indexes = [
            models.Index(fields=['product'], name='purchase_or_product_4a6f13_idx'),
        ]
        ordering = ['position']
    
    def __str__(self):
        return f"{self.quantity} x {self.name} @ {self.price}"
    
    @property
    def line_total(self):
        return self.price * self.quantity
