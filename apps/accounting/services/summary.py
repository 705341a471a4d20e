"""
Reconciliation summary - read-only aggregates for the accounting dashboard.

Example:
    Month-end check for one account::

        summary = get_reconciliation_summary(
            account_number='62001234567',
            start_date=date(2025, 3, 1),
            end_date=date(2025, 3, 31),
        )
        print(f"{summary['unreconciled_count']} lines still open")
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from apps.accounting.models import BankTransaction, Expense, ExpenseStatus
from .reconciliation import get_unreconciled_expenses


def _sum(field_name, **filters):
    return Coalesce(
        Sum(field_name, filter=Q(**filters) if filters else None),
        Value(Decimal('0.00')),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def get_reconciliation_summary(
    *,
    account_number: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> dict:
    """
    Reconciled vs. open bank lines and the approved expenses behind them.

    Args:
        account_number: Restrict bank lines to one account
        start_date: Earliest date (inclusive) for bank lines and expenses
        end_date: Latest date (inclusive) for bank lines and expenses

    Returns:
        dict with:
            - reconciled_count / reconciled_amount
            - unreconciled_count / unreconciled_amount
            - unmatched_expense_count / unmatched_expense_amount:
              APPROVED expenses not yet linked to a bank line
            - approved_expense_total / approved_vat_total:
              APPROVED and PAID expenses in the period
            - reconciliation_rate: percentage of bank lines reconciled
    """
    transactions = BankTransaction.objects.all()
    if account_number:
        transactions = transactions.filter(account_number=account_number)
    if start_date:
        transactions = transactions.filter(transaction_date__gte=start_date)
    if end_date:
        transactions = transactions.filter(transaction_date__lte=end_date)

    lines = transactions.aggregate(
        reconciled_count=Count('id', filter=Q(reconciled=True)),
        unreconciled_count=Count('id', filter=Q(reconciled=False)),
        reconciled_amount=_sum('amount', reconciled=True),
        unreconciled_amount=_sum('amount', reconciled=False),
    )

    expenses = Expense.objects.filter(
        status__in=[ExpenseStatus.APPROVED, ExpenseStatus.PAID]
    )
    unmatched = get_unreconciled_expenses()
    if start_date:
        expenses = expenses.filter(expense_date__gte=start_date)
        unmatched = unmatched.filter(expense_date__gte=start_date)
    if end_date:
        expenses = expenses.filter(expense_date__lte=end_date)
        unmatched = unmatched.filter(expense_date__lte=end_date)

    booked = expenses.aggregate(
        approved_expense_total=_sum('amount'),
        approved_vat_total=_sum('vat_amount'),
    )
    open_expenses = unmatched.order_by().aggregate(
        unmatched_expense_count=Count('id'),
        unmatched_expense_amount=_sum('amount'),
    )

    total_lines = lines['reconciled_count'] + lines['unreconciled_count']
    if total_lines:
        rate = (Decimal(lines['reconciled_count']) * 100 / total_lines).quantize(Decimal('0.1'))
    else:
        rate = Decimal('0.0')

    return {
        **lines,
        **open_expenses,
        **booked,
        'reconciliation_rate': rate,
    }
