from django.contrib import admin
from django.utils.html import format_html
from .models import Product, Supplier
from .services import effective_threshold, is_low_stock


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_name', 'email', 'phone', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'contact_name', 'email']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin highlighting stock that needs reordering."""

    list_display = [
        'name',
        'sku',
        'price',
        'stock_quantity',
        'reorder_level_display',
        'stock_badge',
        'supplier',
    ]
    list_filter = ['supplier', 'is_active']
    search_fields = ['name', 'sku', 'supplier__name']
    list_select_related = ['supplier']

    def reorder_level_display(self, obj):
        return effective_threshold(obj)
    reorder_level_display.short_description = 'Reorder level'

    def stock_badge(self, obj):
        """Display stock status as colored badge."""
        if is_low_stock(obj):
            return format_html(
                '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Low</span>'
            )
        return format_html(
            '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">OK</span>'
        )
    stock_badge.short_description = 'Stock'
