from decimal import Decimal
from rest_framework import serializers
from .models import (
    BankTransaction,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    TransactionType,
)


# =============================================================================
# Input Serializers
# =============================================================================

class ReconcileActionSerializer(serializers.Serializer):
    """Only reads ``action``; the rest of the body depends on it."""

    action = serializers.CharField(required=False, allow_blank=True, default='')


class ManualReconcileSerializer(serializers.Serializer):
    """Body of ``{action: 'manual', transactionId, expenseId}``."""

    transactionId = serializers.UUIDField()
    expenseId = serializers.UUIDField()


class AutoReconcileSerializer(serializers.Serializer):
    """Body of ``{action: 'auto', accountNumber, startDate?, endDate?}``."""

    accountNumber = serializers.CharField(max_length=34)
    startDate = serializers.DateField(required=False, allow_null=True)
    endDate = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError("startDate must be before endDate")
        return attrs


class BankTransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for bank transaction listing.

    Query Parameters:
        accountNumber (str): Only this account
        reconciled (bool): Reconciled or open lines only
        startDate / endDate (date): Inclusive booking date range
    """

    accountNumber = serializers.CharField(required=False)
    reconciled = serializers.BooleanField(required=False, allow_null=True, default=None)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)


class BankTransactionCreateSerializer(serializers.Serializer):
    accountNumber = serializers.CharField(max_length=34)
    transactionDate = serializers.DateField()
    description = serializers.CharField(max_length=500)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    type = serializers.ChoiceField(choices=TransactionType.choices)
    bankReference = serializers.CharField(max_length=100)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class ExpenseFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ExpenseStatus.choices, required=False)
    categoryId = serializers.UUIDField(required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)


class ExpenseCreateSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    expenseDate = serializers.DateField()
    categoryId = serializers.UUIDField()
    vendorName = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    vatRate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        default=None
    )


class ExpenseReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[ExpenseStatus.APPROVED, ExpenseStatus.REJECTED],
        error_messages={'invalid_choice': 'Status must be either APPROVED or REJECTED'}
    )
    comments = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class ExpenseCategoryFilterSerializer(serializers.Serializer):
    activeOnly = serializers.BooleanField(required=False, default=False)


class ExpenseCategoryCreateSerializer(serializers.Serializer):
    """Validate a new category: ``{name, description?, isActive?}``."""

    name = serializers.CharField(max_length=100, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    isActive = serializers.BooleanField(required=False, default=True)


class ExpenseCategoryUpdateSerializer(serializers.Serializer):
    """Partial category update; omitted fields are left unchanged."""

    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False)


class SummaryFilterSerializer(serializers.Serializer):
    accountNumber = serializers.CharField(required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class ExpenseCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'description', 'is_active']
        read_only_fields = fields


class ExpenseCategoryDetailSerializer(serializers.ModelSerializer):
    """Category with the number of expenses filed under it."""
    expense_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'description', 'is_active', 'expense_count', 'created_at']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Expense with its category."""

    category = ExpenseCategorySerializer(read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'description',
            'amount',
            'vat_rate',
            'vat_amount',
            'expense_date',
            'category',
            'vendor_name',
            'notes',
            'status',
            'created_by_email',
            'approved_by',
            'approved_at',
            'review_comments',
            'created_at',
        ]
        read_only_fields = fields


class BankTransactionSerializer(serializers.ModelSerializer):
    """Bank feed line with the expense (and category) it is matched to."""

    expense = ExpenseSerializer(read_only=True)

    class Meta:
        model = BankTransaction
        fields = [
            'id',
            'account_number',
            'transaction_date',
            'description',
            'amount',
            'type',
            'bank_reference',
            'category',
            'balance',
            'reconciled',
            'reconciled_at',
            'expense',
            'created_at',
        ]
        read_only_fields = fields


class ReconciliationMatchSerializer(serializers.Serializer):
    transactionId = serializers.UUIDField()
    expenseId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, coerce_to_string=False)
    date = serializers.DateField()


class ManualReconcileResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    transaction = BankTransactionSerializer()


class AutoReconcileResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    reconciledCount = serializers.IntegerField()
    results = ReconciliationMatchSerializer(many=True)


class AmountMismatchSerializer(serializers.Serializer):
    error = serializers.CharField()
    transactionAmount = serializers.DecimalField(max_digits=12, decimal_places=2, coerce_to_string=False)
    expenseAmount = serializers.DecimalField(max_digits=12, decimal_places=2, coerce_to_string=False)


class ReconciliationSummarySerializer(serializers.Serializer):
    reconciled_count = serializers.IntegerField()
    reconciled_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    unreconciled_count = serializers.IntegerField()
    unreconciled_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    unmatched_expense_count = serializers.IntegerField()
    unmatched_expense_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    approved_expense_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    approved_vat_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    reconciliation_rate = serializers.DecimalField(max_digits=4, decimal_places=1)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()


class CategoryInUseSerializer(serializers.Serializer):
    error = serializers.CharField()
    expenseCount = serializers.IntegerField()
