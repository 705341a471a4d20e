"""
Expense service - creation and the approval workflow.

Status flow:
    DRAFT -> PENDING_APPROVAL -> APPROVED -> PAID
                              -> REJECTED

Only APPROVED expenses without a linked bank transaction are candidates
for auto-reconcile.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.accounting.models import Expense, ExpenseCategory, ExpenseStatus
from apps.notifications.models import NotificationType
from apps.notifications.services import create_notification
from .exceptions import (
    CategoryNotFoundError,
    ExpenseNotFoundError,
    InactiveCategoryError,
    InvalidExpenseStatusError,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

EXPENSES_LINK = '/admin/accounting/expenses'


def calculate_vat(amount: Decimal, vat_rate: Decimal) -> Decimal:
    """
    VAT contained in a VAT-inclusive ``amount``, rounded to cents.

    >>> calculate_vat(Decimal('115.00'), Decimal('15'))
    Decimal('15.00')
    """
    rate = Decimal(vat_rate) / 100
    vat = Decimal(amount) / (1 + rate) * rate
    return vat.quantize(CENT, rounding=ROUND_HALF_UP)


@transaction.atomic
def create_expense(
    *,
    user: User,
    description: str,
    amount: Decimal,
    expense_date: date,
    category_id: UUID,
    vendor_name: str = '',
    notes: str = '',
    vat_rate: Optional[Decimal] = None
) -> Expense:
    """
    Record a DRAFT expense.

    Args:
        user: Who captured the expense
        description: What was bought
        amount: VAT-inclusive amount
        expense_date: Date on the invoice
        category_id: Expense category
        vendor_name: Optional vendor
        notes: Optional notes
        vat_rate: VAT percentage; DEFAULT_VAT_RATE when omitted

    Returns:
        Created Expense with ``vat_amount`` filled in

    Raises:
        CategoryNotFoundError: If the category doesn't exist
        InactiveCategoryError: If the category has been deactivated
    """
    try:
        category = ExpenseCategory.objects.get(id=category_id)
    except (ExpenseCategory.DoesNotExist, ValidationError):
        raise CategoryNotFoundError("Category not found")

    if not category.is_active:
        raise InactiveCategoryError(f"Category '{category.name}' is inactive")

    if vat_rate is None:
        vat_rate = settings.DEFAULT_VAT_RATE

    expense = Expense.objects.create(
        description=description,
        amount=amount,
        vat_rate=vat_rate,
        vat_amount=calculate_vat(amount, vat_rate),
        expense_date=expense_date,
        category=category,
        vendor_name=vendor_name or '',
        notes=notes or '',
        status=ExpenseStatus.DRAFT,
        created_by=user,
    )

    logger.info("Expense %s (%s) created by %s", expense.id, amount, user.email)
    return expense


def get_expense(*, expense_id: UUID) -> Expense:
    """
    Get an expense with its category.

    Raises:
        ExpenseNotFoundError: If it doesn't exist
    """
    try:
        return Expense.objects.select_related('category', 'created_by').get(id=expense_id)
    except (Expense.DoesNotExist, ValidationError):
        raise ExpenseNotFoundError("Expense not found")


def list_expenses(
    *,
    status: Optional[str] = None,
    category_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet:
    """Expenses newest first, filtered by status, category and date range."""
    queryset = Expense.objects.select_related('category', 'created_by')
    if status:
        queryset = queryset.filter(status=status)
    if category_id:
        queryset = queryset.filter(category_id=category_id)
    if start_date:
        queryset = queryset.filter(expense_date__gte=start_date)
    if end_date:
        queryset = queryset.filter(expense_date__lte=end_date)
    return queryset.order_by('-created_at')


def _lock_expense(expense_id: UUID) -> Expense:
    try:
        return Expense.objects.select_for_update().get(id=expense_id)
    except (Expense.DoesNotExist, ValidationError):
        raise ExpenseNotFoundError("Expense not found")


@transaction.atomic
def submit_expense(*, expense_id: UUID) -> Expense:
    """
    Send a DRAFT expense for approval and notify the approvers.

    Raises:
        ExpenseNotFoundError: If it doesn't exist
        InvalidExpenseStatusError: If it is not a DRAFT
    """
    expense = _lock_expense(expense_id)

    if expense.status != ExpenseStatus.DRAFT:
        raise InvalidExpenseStatusError("Only draft expenses can be submitted")

    expense.status = ExpenseStatus.PENDING_APPROVAL
    expense.save(update_fields=['status', 'updated_at'])

    approvers = User.objects.filter(
        role__in=[UserRole.FINANCIAL_MANAGER, UserRole.SUPER_ADMIN],
        is_active=True,
    )
    for approver in approvers:
        create_notification(
            user_id=approver.id,
            type=NotificationType.EXPENSE_APPROVAL,
            message=f"Expense '{expense.description}' (R{expense.amount}) awaits approval",
            link=EXPENSES_LINK,
        )

    logger.info("Expense %s submitted for approval", expense.id)
    return get_expense(expense_id=expense.id)


@transaction.atomic
def review_expense(
    *,
    expense_id: UUID,
    reviewer: User,
    status: str,
    comments: str = ''
) -> Expense:
    """
    Approve or reject an expense awaiting approval.

    Args:
        expense_id: Expense under review
        reviewer: Financial manager or super admin
        status: APPROVED or REJECTED
        comments: Optional reviewer comments

    Returns:
        Updated Expense

    Raises:
        ExpenseNotFoundError: If it doesn't exist
        InvalidExpenseStatusError: If it isn't pending approval, or
            ``status`` is neither APPROVED nor REJECTED
    """
    if status not in (ExpenseStatus.APPROVED, ExpenseStatus.REJECTED):
        raise InvalidExpenseStatusError("Status must be either APPROVED or REJECTED")

    expense = _lock_expense(expense_id)

    if expense.status != ExpenseStatus.PENDING_APPROVAL:
        raise InvalidExpenseStatusError("Expense is not pending approval")

    expense.status = status
    expense.approved_by = reviewer
    expense.approved_at = timezone.now()
    expense.review_comments = comments or ''
    expense.save(update_fields=[
        'status', 'approved_by', 'approved_at', 'review_comments', 'updated_at'
    ])

    logger.info("Expense %s %s by %s", expense.id, status.lower(), reviewer.email)
    return get_expense(expense_id=expense.id)


@transaction.atomic
def mark_expense_paid(*, expense_id: UUID) -> Expense:
    """
    Mark an APPROVED expense as paid.

    Raises:
        ExpenseNotFoundError: If it doesn't exist
        InvalidExpenseStatusError: If it isn't APPROVED
    """
    expense = _lock_expense(expense_id)

    if expense.status != ExpenseStatus.APPROVED:
        raise InvalidExpenseStatusError("Only approved expenses can be marked as paid")

    expense.status = ExpenseStatus.PAID
    expense.save(update_fields=['status', 'updated_at'])

    return get_expense(expense_id=expense.id)
