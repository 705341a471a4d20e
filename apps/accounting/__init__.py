"""
Accounting App - Expenses, bank feed and reconciliation.

Expenses move through an approval workflow; approved expenses are matched
to imported bank transactions either by an operator (manual match) or by
the auto-reconcile scan (amount within a cent, dates within a week).

Architecture:
- Models: ExpenseCategory, Expense, BankTransaction
- Services: reconciliation (matching engine), expenses, bank_transactions, summary
- Views: function-based API views, reconciliation staff only
"""
