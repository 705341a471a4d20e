"""
Reconciliation service - the matching engine.

Links bank transactions to the approved expenses they pay for, either on
an operator's instruction (manual match) or by scanning an account's
unreconciled transactions (auto-reconcile).

Matching rules:
- Manual: amounts may differ by at most the tolerance (inclusive)
- Auto: amounts differ by less than the tolerance, and the transaction
  and expense dates are less than the date window apart
- Auto scans transactions and candidate expenses most-recent-first;
  the first qualifying expense wins and leaves the candidate pool
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction, DatabaseError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounting.models import BankTransaction, Expense, ExpenseStatus
from .exceptions import (
    AlreadyReconciledError,
    AmountMismatchError,
    ExpenseAlreadyLinkedError,
    ExpenseNotFoundError,
    MissingParameterError,
    PersistenceFailureError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)


class ReconciliationResult(NamedTuple):
    reconciled_count: int
    results: list


def amounts_match(
    transaction_amount: Decimal,
    expense_amount: Decimal,
    *,
    tolerance: Optional[Decimal] = None,
    inclusive: bool = True
) -> bool:
    """
    True if the two amounts are within ``tolerance`` of each other.

    Manual matching accepts a difference equal to the tolerance
    (``inclusive=True``); auto-reconcile requires it to be strictly smaller.

    >>> amounts_match(Decimal('150.00'), Decimal('150.005'))
    True
    >>> amounts_match(Decimal('150.00'), Decimal('150.02'))
    False
    """
    if tolerance is None:
        tolerance = settings.RECONCILIATION_AMOUNT_TOLERANCE
    diff = abs(Decimal(transaction_amount) - Decimal(expense_amount))
    if inclusive:
        return diff <= tolerance
    return diff < tolerance


def dates_within_window(first: date, second: date, *, days: Optional[int] = None) -> bool:
    """True if the dates are strictly less than ``days`` apart."""
    if days is None:
        days = settings.RECONCILIATION_DATE_WINDOW_DAYS
    return abs((first - second).days) < days


def select_expense(bank_transaction: BankTransaction, candidates: list) -> Optional[Expense]:
    """
    First expense in ``candidates`` that auto-matches the transaction.

    The order of ``candidates`` is the tie-break: callers pass them
    most-recent-first.
    """
    for expense in candidates:
        if (
            amounts_match(bank_transaction.amount, expense.amount, inclusive=False)
            and dates_within_window(bank_transaction.transaction_date, expense.expense_date)
        ):
            return expense
    return None


def get_unreconciled_expenses() -> QuerySet:
    """APPROVED expenses not yet linked to any transaction, most recent first."""
    return (
        Expense.objects
        .filter(status=ExpenseStatus.APPROVED, bank_transactions__isnull=True)
        .select_related('category')
        .order_by('-expense_date', '-created_at')
    )


def get_transaction(*, transaction_id: UUID) -> BankTransaction:
    """
    Get a bank transaction with its linked expense and category.

    Raises:
        TransactionNotFoundError: If it doesn't exist
    """
    try:
        return (
            BankTransaction.objects
            .select_related('expense', 'expense__category')
            .get(id=transaction_id)
        )
    except (BankTransaction.DoesNotExist, ValidationError):
        raise TransactionNotFoundError("Transaction not found")


def _link(bank_transaction: BankTransaction, expense: Expense) -> None:
    bank_transaction.reconciled = True
    bank_transaction.reconciled_at = timezone.now()
    bank_transaction.expense = expense
    bank_transaction.save(update_fields=['reconciled', 'reconciled_at', 'expense', 'updated_at'])


@transaction.atomic
def match_transaction(*, transaction_id: UUID, expense_id: UUID) -> BankTransaction:
    """
    Manually match a bank transaction to an expense.

    This operation:
    1. Locks the transaction row (prevents two operators matching it at once)
    2. Checks the amounts are within the tolerance
    3. Marks the transaction reconciled and links the expense

    Re-matching a transaction to the expense it already carries is a no-op.

    Args:
        transaction_id: Bank transaction to reconcile
        expense_id: Expense it pays for

    Returns:
        Updated BankTransaction with expense and category loaded

    Raises:
        MissingParameterError: If either id is empty
        TransactionNotFoundError: If the transaction doesn't exist
        ExpenseNotFoundError: If the expense doesn't exist
        AmountMismatchError: If the amounts differ by more than the tolerance
        AlreadyReconciledError: If the transaction is matched to another expense
        ExpenseAlreadyLinkedError: If the expense is matched to another transaction
    """
    if not transaction_id or not expense_id:
        raise MissingParameterError("Transaction ID and expense ID are required")

    try:
        bank_transaction = (
            BankTransaction.objects
            .select_for_update()
            .get(id=transaction_id)
        )
    except (BankTransaction.DoesNotExist, ValidationError):
        raise TransactionNotFoundError("Transaction not found")

    try:
        expense = Expense.objects.get(id=expense_id)
    except (Expense.DoesNotExist, ValidationError):
        raise ExpenseNotFoundError("Expense not found")

    if not amounts_match(bank_transaction.amount, expense.amount, inclusive=True):
        raise AmountMismatchError(bank_transaction.amount, expense.amount)

    if bank_transaction.reconciled:
        if bank_transaction.expense_id == expense.id:
            return get_transaction(transaction_id=bank_transaction.id)
        raise AlreadyReconciledError(
            f"Transaction {bank_transaction.bank_reference} is already reconciled"
        )

    if expense.bank_transactions.exclude(id=bank_transaction.id).exists():
        raise ExpenseAlreadyLinkedError(
            f"Expense '{expense.description}' is already matched to another transaction"
        )

    _link(bank_transaction, expense)

    logger.info(
        "Transaction %s matched to expense %s",
        bank_transaction.bank_reference, expense.id
    )
    return get_transaction(transaction_id=bank_transaction.id)


def auto_reconcile(
    *,
    account_number: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> ReconciliationResult:
    """
    Match an account's unreconciled transactions to approved expenses.

    Algorithm:
    1. Load the account's unreconciled transactions (optionally within
       ``start_date``..``end_date`` inclusive), most recent first
    2. Load APPROVED expenses with no linked transaction, most recent first
    3. For each transaction pick the first expense with amount diff below
       the tolerance and dates less than the window apart
    4. Link the pair and drop the expense from the candidate pool

    The whole pass is one database transaction: it either commits every
    match or none.

    Args:
        account_number: Bank account to reconcile
        start_date: Earliest transaction date (inclusive)
        end_date: Latest transaction date (inclusive)

    Returns:
        ReconciliationResult with the count and one
        ``{transactionId, expenseId, amount, date}`` dict per match

    Raises:
        MissingParameterError: If account_number is empty
        PersistenceFailureError: If the database fails; nothing is committed
    """
    if not account_number:
        raise MissingParameterError("Account number is required")

    try:
        with transaction.atomic():
            transactions = (
                BankTransaction.objects
                .select_for_update()
                .filter(account_number=account_number, reconciled=False)
            )
            if start_date:
                transactions = transactions.filter(transaction_date__gte=start_date)
            if end_date:
                transactions = transactions.filter(transaction_date__lte=end_date)
            transactions = transactions.order_by('-transaction_date', '-created_at')

            candidates = list(get_unreconciled_expenses())
            results = []

            for bank_transaction in transactions:
                expense = select_expense(bank_transaction, candidates)
                if expense is None:
                    continue

                _link(bank_transaction, expense)
                candidates.remove(expense)

                results.append({
                    'transactionId': bank_transaction.id,
                    'expenseId': expense.id,
                    'amount': bank_transaction.amount,
                    'date': bank_transaction.transaction_date,
                })

    except DatabaseError as e:
        logger.exception("Auto-reconcile of account %s failed", account_number)
        raise PersistenceFailureError("Failed to reconcile transactions") from e

    logger.info("Auto-reconciled %d transaction(s) on account %s", len(results), account_number)
    return ReconciliationResult(reconciled_count=len(results), results=results)


@transaction.atomic
def unreconcile_transaction(*, transaction_id: UUID) -> BankTransaction:
    """
    Undo a match, returning the transaction and its expense to the pool.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
    """
    try:
        bank_transaction = (
            BankTransaction.objects
            .select_for_update()
            .get(id=transaction_id)
        )
    except (BankTransaction.DoesNotExist, ValidationError):
        raise TransactionNotFoundError("Transaction not found")

    if bank_transaction.reconciled or bank_transaction.expense_id:
        bank_transaction.reconciled = False
        bank_transaction.reconciled_at = None
        bank_transaction.expense = None
        bank_transaction.save(update_fields=['reconciled', 'reconciled_at', 'expense', 'updated_at'])
        logger.info("Transaction %s unreconciled", bank_transaction.bank_reference)

    return get_transaction(transaction_id=bank_transaction.id)
