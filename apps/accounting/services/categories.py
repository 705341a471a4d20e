"""
Expense category service.

Categories are referenced by expenses with PROTECT, so a category in use
can only be deactivated. Inactive categories stay on their old expenses
but cannot be chosen for new ones.
"""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import Count, QuerySet

from apps.accounting.models import ExpenseCategory
from .exceptions import (
    CategoryInUseError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    MissingParameterError,
)

logger = logging.getLogger(__name__)


def _with_expense_count(queryset: QuerySet) -> QuerySet:
    return queryset.annotate(expense_count=Count('expenses'))


def _clean_name(name: Optional[str]) -> str:
    name = (name or '').strip()
    if not name:
        raise MissingParameterError("Category name is required")
    return name


def _save(category: ExpenseCategory) -> None:
    try:
        with transaction.atomic():
            category.save()
    except IntegrityError:
        raise DuplicateCategoryError("Category name already exists")


def list_categories(*, active_only: bool = False) -> QuerySet:
    """Categories by name, each annotated with ``expense_count``."""
    queryset = ExpenseCategory.objects.all()
    if active_only:
        queryset = queryset.filter(is_active=True)
    return _with_expense_count(queryset).order_by('name')


def get_category(*, category_id: UUID) -> ExpenseCategory:
    """
    Get a category annotated with ``expense_count``.

    Raises:
        CategoryNotFoundError: If it doesn't exist
    """
    try:
        return _with_expense_count(ExpenseCategory.objects.all()).get(id=category_id)
    except (ExpenseCategory.DoesNotExist, ValidationError):
        raise CategoryNotFoundError("Category not found")


def create_category(
    *,
    name: str,
    description: str = '',
    is_active: bool = True
) -> ExpenseCategory:
    """
    Create an expense category.

    Args:
        name: Unique name; surrounding whitespace is stripped
        description: Optional description
        is_active: Whether new expenses may use it

    Returns:
        Created ExpenseCategory

    Raises:
        MissingParameterError: If the name is blank
        DuplicateCategoryError: If the name is taken
    """
    name = _clean_name(name)

    if ExpenseCategory.objects.filter(name=name).exists():
        raise DuplicateCategoryError("Category name already exists")

    category = ExpenseCategory(
        name=name,
        description=(description or '').strip(),
        is_active=is_active,
    )
    _save(category)

    logger.info("Expense category '%s' created", name)
    return get_category(category_id=category.id)


@transaction.atomic
def update_category(
    *,
    category_id: UUID,
    name: Optional[str] = None,
    description: Optional[str] = None,
    is_active: Optional[bool] = None
) -> ExpenseCategory:
    """
    Update the fields that were given; ``None`` leaves a field unchanged.

    Raises:
        CategoryNotFoundError: If the category doesn't exist
        MissingParameterError: If the new name is blank
        DuplicateCategoryError: If the new name belongs to another category
    """
    try:
        category = ExpenseCategory.objects.select_for_update().get(id=category_id)
    except (ExpenseCategory.DoesNotExist, ValidationError):
        raise CategoryNotFoundError("Category not found")

    if name is not None:
        name = _clean_name(name)
        if ExpenseCategory.objects.filter(name=name).exclude(id=category.id).exists():
            raise DuplicateCategoryError("Category name already exists")
        category.name = name
    if description is not None:
        category.description = description.strip()
    if is_active is not None:
        category.is_active = is_active

    _save(category)
    return get_category(category_id=category.id)


def deactivate_category(*, category_id: UUID) -> ExpenseCategory:
    """Hide a category from new expenses; existing expenses keep it."""
    category = update_category(category_id=category_id, is_active=False)
    logger.info("Expense category '%s' deactivated", category.name)
    return category


@transaction.atomic
def delete_category(*, category_id: UUID) -> None:
    """
    Delete a category that no expense uses.

    Raises:
        CategoryNotFoundError: If the category doesn't exist
        CategoryInUseError: If expenses reference it; deactivate it instead
    """
    category = get_category(category_id=category_id)

    if category.expense_count:
        raise CategoryInUseError(category.expense_count)

    category.delete()
    logger.info("Expense category '%s' deleted", category.name)
