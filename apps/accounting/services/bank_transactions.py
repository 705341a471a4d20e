"""Bank transaction service - recording and filtering bank feed lines."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounting.models import BankTransaction
from .exceptions import DuplicateBankReferenceError

logger = logging.getLogger(__name__)


def record_transaction(
    *,
    account_number: str,
    transaction_date: date,
    description: str,
    amount: Decimal,
    type: str,
    bank_reference: str,
    balance: Decimal,
    category: str = ''
) -> BankTransaction:
    """
    Record one line of the bank feed.

    Args:
        account_number: Bank account the line belongs to
        transaction_date: Booking date
        description: Bank narrative
        amount: Transaction amount
        type: ``credit`` or ``debit``
        bank_reference: Bank's unique reference for the line
        balance: Running balance after the line
        category: Optional bank-assigned category

    Returns:
        Created BankTransaction (unreconciled)

    Raises:
        DuplicateBankReferenceError: If the reference was already recorded
    """
    if BankTransaction.objects.filter(bank_reference=bank_reference).exists():
        raise DuplicateBankReferenceError("Transaction with this reference already exists")

    try:
        with transaction.atomic():
            bank_transaction = BankTransaction.objects.create(
                account_number=account_number,
                transaction_date=transaction_date,
                description=description,
                amount=amount,
                type=type,
                bank_reference=bank_reference,
                balance=balance,
                category=category or '',
            )
    except IntegrityError:
        # Lost a race with a concurrent import of the same line
        raise DuplicateBankReferenceError("Transaction with this reference already exists")

    logger.info("Bank transaction %s recorded on %s", bank_reference, account_number)
    return bank_transaction


def filter_transactions(
    *,
    account_number: Optional[str] = None,
    reconciled: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet:
    """Bank transactions most recent first, with their linked expense."""
    queryset = BankTransaction.objects.select_related('expense', 'expense__category')
    if account_number:
        queryset = queryset.filter(account_number=account_number)
    if reconciled is not None:
        queryset = queryset.filter(reconciled=reconciled)
    if start_date:
        queryset = queryset.filter(transaction_date__gte=start_date)
    if end_date:
        queryset = queryset.filter(transaction_date__lte=end_date)
    return queryset.order_by('-transaction_date', '-created_at')
