from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Supplier(models.Model):
    """Nursery or wholesaler the store restocks from."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True)
    contact_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'suppliers'
        ordering = ['name']
    
    def __str__(self):
        return self.name


class Product(models.Model):
    """Catalog product with stock tracking."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    
    # Stock
    stock_quantity = models.IntegerField(default=0)
    # Null means the store-wide LOW_STOCK_THRESHOLD applies
    low_stock_threshold = models.IntegerField(null=True, blank=True)
    
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )
    is_active = models.BooleanField(default=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['supplier'], name='products_supplie_8a2c1e_idx'),
            models.Index(fields=['stock_quantity'], name='products_stock_q_5b0d7f_idx'),
        ]
        ordering = ['name']
    
    def __str__(self):
        return f"{self.name} ({self.stock_quantity} in stock)"
