# ==========================================
# apps/purchasing/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus


class PurchaseOrderItemInline(admin.TabularInline):
    """Inline admin for order lines."""
    model = PurchaseOrderItem
    extra = 0
    fields = ['position', 'product', 'name', 'quantity', 'price']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Lines are fixed when the order is created."""
        return False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    """
    Admin interface for purchase orders.

    Orders are created through the purchasing services so that totals
    and notifications stay consistent; the admin is read-mostly.
    """

    list_display = [
        'order_number',
        'supplier',
        'admin',
        'total',
        'status_badge',
        'created_at',
    ]
    list_filter = ['status', 'supplier', 'created_at']
    search_fields = ['order_number', 'supplier__name', 'admin__email']
    readonly_fields = ['order_number', 'total', 'approved_at', 'created_at', 'updated_at']
    inlines = [PurchaseOrderItemInline]
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        """Display order status as colored badge."""
        colors = {
            PurchaseOrderStatus.DRAFT: ('#E5C49A', '#2C1810'),
            PurchaseOrderStatus.APPROVED: ('#6B8E5E', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
