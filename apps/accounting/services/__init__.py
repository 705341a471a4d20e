"""
Accounting app services layer.

Services contain business logic and orchestrate operations across models.
Matching and approval transitions lock the affected rows.
"""

from .exceptions import (
    AccountingServiceError,
    MissingParameterError,
    TransactionNotFoundError,
    ExpenseNotFoundError,
    CategoryNotFoundError,
    InactiveCategoryError,
    DuplicateCategoryError,
    CategoryInUseError,
    AmountMismatchError,
    AlreadyReconciledError,
    ExpenseAlreadyLinkedError,
    InvalidExpenseStatusError,
    DuplicateBankReferenceError,
    PersistenceFailureError,
)

from .reconciliation import (
    ReconciliationResult,
    amounts_match,
    dates_within_window,
    select_expense,
    get_unreconciled_expenses,
    get_transaction,
    match_transaction,
    auto_reconcile,
    unreconcile_transaction,
)

from .expenses import (
    calculate_vat,
    create_expense,
    get_expense,
    list_expenses,
    submit_expense,
    review_expense,
    mark_expense_paid,
)

from .categories import (
    list_categories,
    get_category,
    create_category,
    update_category,
    deactivate_category,
    delete_category,
)

from .bank_transactions import (
    record_transaction,
    filter_transactions,
)

from .summary import (
    get_reconciliation_summary,
)


__all__ = [
    # Exceptions
    'AccountingServiceError',
    'MissingParameterError',
    'TransactionNotFoundError',
    'ExpenseNotFoundError',
    'CategoryNotFoundError',
    'InactiveCategoryError',
    'DuplicateCategoryError',
    'CategoryInUseError',
    'AmountMismatchError',
    'AlreadyReconciledError',
    'ExpenseAlreadyLinkedError',
    'InvalidExpenseStatusError',
    'DuplicateBankReferenceError',
    'PersistenceFailureError',

    # Reconciliation
    'ReconciliationResult',
    'amounts_match',
    'dates_within_window',
    'select_expense',
    'get_unreconciled_expenses',
    'get_transaction',
    'match_transaction',
    'auto_reconcile',
    'unreconcile_transaction',

    # Expenses
    'calculate_vat',
    'create_expense',
    'get_expense',
    'list_expenses',
    'submit_expense',
    'review_expense',
    'mark_expense_paid',

    # Categories
    'list_categories',
    'get_category',
    'create_category',
    'update_category',
    'deactivate_category',
    'delete_category',

    # Bank transactions
    'record_transaction',
    'filter_transactions',

    # Summary
    'get_reconciliation_summary',
]
