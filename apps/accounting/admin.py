from django.contrib import admin
from django.utils.html import format_html
from .models import BankTransaction, Expense, ExpenseCategory, ExpenseStatus


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """
    Admin interface for expenses.

    Status changes go through the accounting services (approval rules,
    notifications), so status and review fields are read-only here.
    """

    list_display = [
        'description',
        'amount',
        'vat_amount',
        'expense_date',
        'category',
        'status_badge',
        'created_by',
    ]
    list_filter = ['status', 'category', 'expense_date']
    search_fields = ['description', 'vendor_name', 'created_by__email']
    readonly_fields = [
        'vat_amount', 'status', 'approved_by', 'approved_at',
        'review_comments', 'created_at', 'updated_at',
    ]
    list_select_related = ['category', 'created_by']
    date_hierarchy = 'expense_date'

    def status_badge(self, obj):
        """Display expense status as colored badge."""
        colors = {
            ExpenseStatus.DRAFT: '#999',
            ExpenseStatus.PENDING_APPROVAL: '#D4A04C',
            ExpenseStatus.APPROVED: '#6B8E5E',
            ExpenseStatus.REJECTED: '#B85C5C',
            ExpenseStatus.PAID: '#4A6FA5',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#ccc'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(BankTransaction)
class BankTransactionAdmin(admin.ModelAdmin):
    list_display = [
        'bank_reference',
        'account_number',
        'transaction_date',
        'amount',
        'type',
        'reconciled',
        'expense',
    ]
    list_filter = ['reconciled', 'type', 'account_number']
    search_fields = ['bank_reference', 'description', 'account_number']
    readonly_fields = ['reconciled', 'reconciled_at', 'expense', 'created_at', 'updated_at']
    list_select_related = ['expense']
    date_hierarchy = 'transaction_date'
