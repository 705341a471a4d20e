"""
Domain-specific exceptions for accounting app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.

Exception Hierarchy:
    AccountingServiceError (base)
    ├── MissingParameterError
    ├── TransactionNotFoundError
    ├── ExpenseNotFoundError
    ├── CategoryNotFoundError
    ├── InactiveCategoryError
    ├── DuplicateCategoryError
    ├── CategoryInUseError
    ├── AmountMismatchError
    ├── AlreadyReconciledError
    ├── ExpenseAlreadyLinkedError
    ├── InvalidExpenseStatusError
    ├── DuplicateBankReferenceError
    └── PersistenceFailureError
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service errors."""
    pass


class MissingParameterError(AccountingServiceError):
    """Raised when a required input (e.g. the account number) is absent."""
    pass


class TransactionNotFoundError(AccountingServiceError):
    """Raised when a bank transaction does not exist."""
    pass


class ExpenseNotFoundError(AccountingServiceError):
    """Raised when an expense does not exist."""
    pass


class CategoryNotFoundError(AccountingServiceError):
    """Raised when an expense category does not exist."""
    pass


class InactiveCategoryError(AccountingServiceError):
    """Raised when a new expense is filed under a deactivated category."""
    pass


class DuplicateCategoryError(AccountingServiceError):
    """Raised when an expense category name is already taken."""
    pass


class CategoryInUseError(AccountingServiceError):
    """Raised when deleting a category that expenses still reference."""

    def __init__(self, expense_count):
        self.expense_count = expense_count
        super().__init__("Cannot delete category with associated expenses")


class AmountMismatchError(AccountingServiceError):
    """
    Raised when a manual match pairs amounts more than the tolerance apart.

    Carries both amounts so the caller can show the discrepancy.
    """

    def __init__(self, transaction_amount, expense_amount):
        self.transaction_amount = transaction_amount
        self.expense_amount = expense_amount
        super().__init__(
            f"Amount mismatch: transaction {transaction_amount}, expense {expense_amount}"
        )


class AlreadyReconciledError(AccountingServiceError):
    """Raised when a transaction is already matched to a different expense."""
    pass


class ExpenseAlreadyLinkedError(AccountingServiceError):
    """Raised when an expense is already matched to another transaction."""
    pass


class InvalidExpenseStatusError(AccountingServiceError):
    """
    Raised when an expense is not in the status an action requires.

    DRAFT -> PENDING_APPROVAL -> APPROVED | REJECTED, APPROVED -> PAID.
    """
    pass


class DuplicateBankReferenceError(AccountingServiceError):
    """Raised when a bank transaction with the same reference already exists."""
    pass


class PersistenceFailureError(AccountingServiceError):
    """Raised when the database fails mid-operation; the work is rolled back."""
    pass
