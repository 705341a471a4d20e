from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class ExpenseCategory(models.Model):
    """Bookkeeping category an expense is filed under."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'expense_categories'
        verbose_name_plural = 'expense categories'
        ordering = ['name']
    
    def __str__(self):
        return self.name


class ExpenseStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    PENDING_APPROVAL = 'PENDING_APPROVAL', 'Pending approval'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'
    PAID = 'PAID', 'Paid'


class Expense(models.Model):
    """
    Business expense. ``amount`` is VAT inclusive; ``vat_amount`` is the VAT
    share extracted from it at creation.
    """
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    description = models.CharField(max_length=500)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('15.00'))
    vat_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    expense_date = models.DateField()
    
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.PROTECT,
        related_name='expenses'
    )
    vendor_name = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    
    status = models.CharField(
        max_length=20,
        choices=ExpenseStatus.choices,
        default=ExpenseStatus.DRAFT
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='expenses'
    )
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_expenses'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    review_comments = models.TextField(blank=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['status', '-expense_date'], name='expenses_status_9e1b3c_idx'),
            models.Index(fields=['category'], name='expenses_categor_61d0aa_idx'),
        ]
        ordering = ['-expense_date', '-created_at']
    
    def __str__(self):
        return f"{self.description} - R{self.amount} ({self.status})"
    
    @property
    def amount_excl_vat(self):
        return self.amount - self.vat_amount


class TransactionType(models.TextChoices):
    CREDIT = 'credit', 'Credit'
    DEBIT = 'debit', 'Debit'


class BankTransaction(models.Model):
    """
    One line of the bank feed.

    A reconciled transaction always has an expense link and ``reconciled_at``.
    """
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account_number = models.CharField(max_length=34)
    transaction_date = models.DateField()
    description = models.CharField(max_length=500)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    bank_reference = models.CharField(max_length=100, unique=True)
    category = models.CharField(max_length=100, blank=True)
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    
    # Reconciliation
    reconciled = models.BooleanField(default=False)
    reconciled_at = models.DateTimeField(null=True, blank=True)
    expense = models.ForeignKey(
        Expense,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bank_transactions'
    )
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'bank_transactions'
        indexes = [
            models.Index(
                fields=['account_number', 'reconciled', '-transaction_date'],
                name='bank_transa_account_3f2d71_idx'
            ),
            models.Index(fields=['expense'], name='bank_transa_expense_b8c04e_idx'),
        ]
        ordering = ['-transaction_date', '-created_at']
    
    def __str__(self):
        state = 'reconciled' if self.reconciled else 'open'
        return f"{self.bank_reference} {self.amount} on {self.transaction_date} ({state})"
