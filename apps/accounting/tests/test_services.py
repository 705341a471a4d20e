"""
Service layer unit tests for accounting app.

Tests cover:
- Amount and date matching rules
- Manual match (tolerance, re-matching, one expense per transaction)
- Auto-reconcile ordering, windows and atomicity
- Expense workflow and VAT extraction
- Bank transaction import and the summary
- Expense category management
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4
from unittest.mock import patch

from django.db import DatabaseError

from apps.accounting.models import BankTransaction, Expense, ExpenseCategory, ExpenseStatus
from apps.accounting.services import (
    amounts_match,
    dates_within_window,
    select_expense,
    get_unreconciled_expenses,
    match_transaction,
    auto_reconcile,
    unreconcile_transaction,
    calculate_vat,
    create_expense,
    submit_expense,
    review_expense,
    mark_expense_paid,
    record_transaction,
    filter_transactions,
    get_reconciliation_summary,
    list_categories,
    get_category,
    create_category,
    update_category,
    deactivate_category,
    delete_category,
)
from apps.accounting.services import reconciliation
from apps.accounting.services.exceptions import (
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
from apps.notifications.models import Notification, NotificationType

ACCOUNT = '62001234567'
BASE_DATE = date(2025, 3, 14)


# =============================================================================
# Matching rules
# =============================================================================

class TestMatchingRules:
    """Pure predicates, no database needed."""

    def test_half_cent_difference_matches(self):
        assert amounts_match(Decimal('150.00'), Decimal('150.005')) is True

    def test_exact_cent_difference_matches_inclusive(self):
        assert amounts_match(Decimal('150.00'), Decimal('150.01')) is True

    def test_exact_cent_difference_fails_strict(self):
        assert amounts_match(Decimal('150.00'), Decimal('150.01'), inclusive=False) is False

    def test_two_cent_difference_fails(self):
        assert amounts_match(Decimal('150.00'), Decimal('150.02')) is False

    def test_dates_six_days_apart_within_window(self):
        assert dates_within_window(BASE_DATE, BASE_DATE + timedelta(days=6)) is True

    def test_dates_seven_days_apart_outside_window(self):
        assert dates_within_window(BASE_DATE, BASE_DATE - timedelta(days=7)) is False

    def test_dates_eight_days_apart_outside_window(self):
        assert dates_within_window(BASE_DATE, BASE_DATE + timedelta(days=8)) is False


@pytest.mark.django_db
class TestSelectExpense:
    """First match wins in the order the candidates are given."""

    def test_first_candidate_in_list_order_wins(self, make_transaction, make_expense):
        tx = make_transaction(transaction_date=BASE_DATE)
        two_days = make_expense(expense_date=BASE_DATE - timedelta(days=2))
        five_days = make_expense(expense_date=BASE_DATE - timedelta(days=5))

        assert select_expense(tx, [two_days, five_days]) == two_days
        assert select_expense(tx, [five_days, two_days]) == five_days

    def test_skips_candidates_outside_rules(self, make_transaction, make_expense):
        tx = make_transaction(transaction_date=BASE_DATE)
        wrong_amount = make_expense(amount='149.00')
        too_old = make_expense(expense_date=BASE_DATE - timedelta(days=8))
        good = make_expense(expense_date=BASE_DATE - timedelta(days=6))

        assert select_expense(tx, [wrong_amount, too_old, good]) == good

    def test_no_candidates(self, make_transaction):
        assert select_expense(make_transaction(), []) is None


# =============================================================================
# Manual match
# =============================================================================

@pytest.mark.django_db
class TestMatchTransaction:
    """Tests for reconciliation.match_transaction."""

    def test_match_success(self, bank_transaction, expense):
        result = match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)

        assert result.reconciled is True
        assert result.reconciled_at is not None
        assert result.expense == expense
        assert result.expense.category.name == 'Stock purchases'

        # Re-reading returns the same link
        stored = BankTransaction.objects.get(id=bank_transaction.id)
        assert stored.reconciled is True
        assert stored.expense_id == expense.id

    def test_match_within_one_cent(self, make_transaction, make_expense):
        tx = make_transaction(amount='150.00')
        exp = make_expense(amount='150.01')

        assert match_transaction(transaction_id=tx.id, expense_id=exp.id).reconciled is True

    def test_amount_mismatch_carries_both_amounts(self, make_transaction, make_expense):
        tx = make_transaction(amount='150.00')
        exp = make_expense(amount='150.02')

        with pytest.raises(AmountMismatchError) as exc_info:
            match_transaction(transaction_id=tx.id, expense_id=exp.id)

        assert exc_info.value.transaction_amount == Decimal('150.00')
        assert exc_info.value.expense_amount == Decimal('150.02')
        tx.refresh_from_db()
        assert tx.reconciled is False

    def test_transaction_not_found(self, expense):
        with pytest.raises(TransactionNotFoundError):
            match_transaction(transaction_id=uuid4(), expense_id=expense.id)

    def test_expense_not_found(self, bank_transaction):
        with pytest.raises(ExpenseNotFoundError):
            match_transaction(transaction_id=bank_transaction.id, expense_id=uuid4())

    def test_missing_ids(self):
        with pytest.raises(MissingParameterError):
            match_transaction(transaction_id=None, expense_id=None)

    def test_rematch_same_expense_is_noop(self, bank_transaction, expense):
        first = match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)
        second = match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)

        assert second.expense == expense
        assert second.reconciled_at == first.reconciled_at

    def test_rematch_other_expense_fails(self, bank_transaction, expense, make_expense):
        match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)
        other = make_expense(description='Other invoice')

        with pytest.raises(AlreadyReconciledError):
            match_transaction(transaction_id=bank_transaction.id, expense_id=other.id)

    def test_expense_linked_elsewhere_fails(self, bank_transaction, expense, make_transaction):
        match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)
        other_tx = make_transaction()

        with pytest.raises(ExpenseAlreadyLinkedError):
            match_transaction(transaction_id=other_tx.id, expense_id=expense.id)

    def test_unreconcile_returns_expense_to_pool(self, bank_transaction, expense):
        match_transaction(transaction_id=bank_transaction.id, expense_id=expense.id)
        assert expense not in get_unreconciled_expenses()

        result = unreconcile_transaction(transaction_id=bank_transaction.id)

        assert result.reconciled is False
        assert result.reconciled_at is None
        assert result.expense is None
        assert expense in get_unreconciled_expenses()

    def test_unreconcile_not_found(self):
        with pytest.raises(TransactionNotFoundError):
            unreconcile_transaction(transaction_id=uuid4())


# =============================================================================
# Auto-reconcile
# =============================================================================

@pytest.mark.django_db
class TestAutoReconcile:
    """Tests for reconciliation.auto_reconcile."""

    def test_matches_within_six_days(self, make_transaction, make_expense):
        tx = make_transaction(transaction_date=BASE_DATE)
        exp = make_expense(expense_date=BASE_DATE - timedelta(days=6))

        result = auto_reconcile(account_number=ACCOUNT)

        assert result.reconciled_count == 1
        assert result.results == [{
            'transactionId': tx.id,
            'expenseId': exp.id,
            'amount': Decimal('150.00'),
            'date': BASE_DATE,
        }]
        tx.refresh_from_db()
        assert tx.reconciled is True
        assert tx.expense_id == exp.id

    def test_does_not_match_eight_days_apart(self, make_transaction, make_expense):
        make_transaction(transaction_date=BASE_DATE)
        make_expense(expense_date=BASE_DATE + timedelta(days=8))

        result = auto_reconcile(account_number=ACCOUNT)

        assert result.reconciled_count == 0
        assert result.results == []

    def test_requires_amount_strictly_within_a_cent(self, make_transaction, make_expense):
        make_transaction(amount='150.00')
        make_expense(amount='150.01')

        assert auto_reconcile(account_number=ACCOUNT).reconciled_count == 0

    def test_prefers_most_recent_expense(self, make_transaction, make_expense):
        """Candidates are scanned most-recent-first."""
        make_transaction(transaction_date=BASE_DATE)
        older = make_expense(expense_date=BASE_DATE - timedelta(days=5))
        newer = make_expense(expense_date=BASE_DATE - timedelta(days=2))

        result = auto_reconcile(account_number=ACCOUNT)

        assert result.results[0]['expenseId'] == newer.id
        assert older in get_unreconciled_expenses()

    def test_expense_used_once_per_pass(self, make_transaction, make_expense):
        """Two identical transactions, one expense: only the most recent transaction matches."""
        recent = make_transaction(transaction_date=BASE_DATE)
        earlier = make_transaction(transaction_date=BASE_DATE - timedelta(days=1))
        exp = make_expense(expense_date=BASE_DATE - timedelta(days=1))

        result = auto_reconcile(account_number=ACCOUNT)

        assert result.reconciled_count == 1
        assert result.results[0]['transactionId'] == recent.id
        assert result.results[0]['expenseId'] == exp.id
        earlier.refresh_from_db()
        assert earlier.reconciled is False

    def test_ignores_unapproved_and_linked_expenses(self, make_transaction, make_expense):
        make_transaction()
        make_expense(status=ExpenseStatus.PENDING_APPROVAL)
        make_expense(status=ExpenseStatus.PAID)
        linked = make_expense()
        other_tx = make_transaction(account_number='99999999')
        match_transaction(transaction_id=other_tx.id, expense_id=linked.id)

        assert auto_reconcile(account_number=ACCOUNT).reconciled_count == 0

    def test_only_scans_requested_account(self, make_transaction, make_expense):
        make_transaction(account_number='99999999')
        make_expense()

        assert auto_reconcile(account_number=ACCOUNT).reconciled_count == 0

    def test_date_window_limits_transactions(self, make_transaction, make_expense):
        make_transaction(transaction_date=BASE_DATE)
        make_expense(expense_date=BASE_DATE)

        result = auto_reconcile(
            account_number=ACCOUNT,
            start_date=BASE_DATE + timedelta(days=1),
            end_date=BASE_DATE + timedelta(days=30),
        )
        assert result.reconciled_count == 0

        result = auto_reconcile(account_number=ACCOUNT, start_date=BASE_DATE, end_date=BASE_DATE)
        assert result.reconciled_count == 1

    def test_missing_account_number(self):
        with pytest.raises(MissingParameterError):
            auto_reconcile(account_number='')

    def test_database_failure_rolls_back_whole_pass(self, make_transaction, make_expense):
        make_transaction(transaction_date=BASE_DATE)
        make_transaction(transaction_date=BASE_DATE - timedelta(days=1), amount='80.00')
        make_expense(expense_date=BASE_DATE)
        make_expense(expense_date=BASE_DATE - timedelta(days=1), amount='80.00')

        real_link = reconciliation._link
        linked = []

        def flaky_link(bank_transaction, expense):
            if linked:
                raise DatabaseError('connection lost')
            linked.append(bank_transaction)
            real_link(bank_transaction, expense)

        with patch('apps.accounting.services.reconciliation._link', side_effect=flaky_link):
            with pytest.raises(PersistenceFailureError):
                auto_reconcile(account_number=ACCOUNT)

        assert len(linked) == 1
        assert not BankTransaction.objects.filter(reconciled=True).exists()


# =============================================================================
# Expenses
# =============================================================================

@pytest.mark.django_db
class TestExpenses:
    """Tests for the expense workflow."""

    def test_vat_extracted_from_inclusive_amount(self):
        assert calculate_vat(Decimal('115.00'), Decimal('15')) == Decimal('15.00')
        assert calculate_vat(Decimal('100.00'), Decimal('15')) == Decimal('13.04')
        assert calculate_vat(Decimal('100.00'), Decimal('0')) == Decimal('0.00')

    def test_create_expense_defaults(self, accountant, category):
        expense = create_expense(
            user=accountant,
            description='Terracotta pots',
            amount=Decimal('230.00'),
            expense_date=BASE_DATE,
            category_id=category.id,
        )

        assert expense.status == ExpenseStatus.DRAFT
        assert expense.vat_rate == Decimal('15')
        assert expense.vat_amount == Decimal('30.00')
        assert expense.created_by == accountant

    def test_create_expense_unknown_category(self, accountant):
        with pytest.raises(CategoryNotFoundError):
            create_expense(
                user=accountant,
                description='Pots',
                amount=Decimal('10.00'),
                expense_date=BASE_DATE,
                category_id=uuid4(),
            )

    def test_create_expense_inactive_category(self, accountant, category):
        category.is_active = False
        category.save()

        with pytest.raises(InactiveCategoryError):
            create_expense(
                user=accountant,
                description='Pots',
                amount=Decimal('10.00'),
                expense_date=BASE_DATE,
                category_id=category.id,
            )
        assert Expense.objects.count() == 0

    def test_workflow_to_paid(self, make_expense, financial_manager):
        expense = make_expense(status=ExpenseStatus.DRAFT)

        expense = submit_expense(expense_id=expense.id)
        assert expense.status == ExpenseStatus.PENDING_APPROVAL

        expense = review_expense(
            expense_id=expense.id,
            reviewer=financial_manager,
            status=ExpenseStatus.APPROVED,
            comments='OK',
        )
        assert expense.status == ExpenseStatus.APPROVED
        assert expense.approved_by == financial_manager
        assert expense.approved_at is not None

        expense = mark_expense_paid(expense_id=expense.id)
        assert expense.status == ExpenseStatus.PAID

    def test_submit_notifies_approvers(self, make_expense, financial_manager, accountant):
        expense = make_expense(status=ExpenseStatus.DRAFT)

        submit_expense(expense_id=expense.id)

        notification = Notification.objects.get(user=financial_manager)
        assert notification.type == NotificationType.EXPENSE_APPROVAL
        assert 'Nursery invoice' in notification.message
        assert not Notification.objects.filter(user=accountant).exists()

    def test_review_requires_pending(self, make_expense, financial_manager):
        expense = make_expense(status=ExpenseStatus.DRAFT)

        with pytest.raises(InvalidExpenseStatusError):
            review_expense(
                expense_id=expense.id,
                reviewer=financial_manager,
                status=ExpenseStatus.APPROVED,
            )

    def test_review_rejects_other_statuses(self, make_expense, financial_manager):
        expense = make_expense(status=ExpenseStatus.PENDING_APPROVAL)

        with pytest.raises(InvalidExpenseStatusError):
            review_expense(
                expense_id=expense.id,
                reviewer=financial_manager,
                status=ExpenseStatus.PAID,
            )

    def test_mark_paid_requires_approved(self, make_expense):
        expense = make_expense(status=ExpenseStatus.REJECTED)

        with pytest.raises(InvalidExpenseStatusError):
            mark_expense_paid(expense_id=expense.id)

    def test_submit_unknown_expense(self):
        with pytest.raises(ExpenseNotFoundError):
            submit_expense(expense_id=uuid4())


# =============================================================================
# Bank transactions and summary
# =============================================================================

@pytest.mark.django_db
class TestBankTransactions:
    """Tests for bank_transactions service."""

    def test_record_transaction(self):
        tx = record_transaction(
            account_number=ACCOUNT,
            transaction_date=BASE_DATE,
            description='EFT FERN & CO',
            amount=Decimal('80.00'),
            type='debit',
            bank_reference='FNB-0001',
            balance=Decimal('920.00'),
        )

        assert tx.reconciled is False
        assert tx.expense is None

    def test_duplicate_reference_rejected(self, make_transaction):
        make_transaction(bank_reference='FNB-0001')

        with pytest.raises(DuplicateBankReferenceError):
            record_transaction(
                account_number=ACCOUNT,
                transaction_date=BASE_DATE,
                description='EFT FERN & CO',
                amount=Decimal('80.00'),
                type='debit',
                bank_reference='FNB-0001',
                balance=Decimal('920.00'),
            )

    def test_filter_transactions(self, make_transaction, expense):
        open_tx = make_transaction(transaction_date=BASE_DATE)
        done_tx = make_transaction(transaction_date=BASE_DATE - timedelta(days=1))
        match_transaction(transaction_id=done_tx.id, expense_id=expense.id)
        make_transaction(account_number='99999999')

        assert list(filter_transactions(account_number=ACCOUNT, reconciled=False)) == [open_tx]
        assert list(filter_transactions(account_number=ACCOUNT, reconciled=True)) == [done_tx]
        assert list(filter_transactions(
            account_number=ACCOUNT,
            start_date=BASE_DATE,
            end_date=BASE_DATE,
        )) == [open_tx]


@pytest.mark.django_db
class TestSummary:
    """Tests for summary.get_reconciliation_summary."""

    def test_summary_counts_and_totals(self, make_transaction, make_expense):
        linked = make_expense(amount='115.00', vat_amount=Decimal('15.00'))
        make_expense(amount='46.00', vat_amount=Decimal('6.00'))
        make_expense(amount='999.00', status=ExpenseStatus.DRAFT)
        tx = make_transaction(amount='115.00')
        make_transaction(amount='20.00')
        match_transaction(transaction_id=tx.id, expense_id=linked.id)

        summary = get_reconciliation_summary(account_number=ACCOUNT)

        assert summary['reconciled_count'] == 1
        assert summary['reconciled_amount'] == Decimal('115.00')
        assert summary['unreconciled_count'] == 1
        assert summary['unreconciled_amount'] == Decimal('20.00')
        assert summary['unmatched_expense_count'] == 1
        assert summary['unmatched_expense_amount'] == Decimal('46.00')
        assert summary['approved_expense_total'] == Decimal('161.00')
        assert summary['approved_vat_total'] == Decimal('21.00')
        assert summary['reconciliation_rate'] == Decimal('50.0')

    def test_empty_summary(self, db):
        summary = get_reconciliation_summary()

        assert summary['reconciled_count'] == 0
        assert summary['unreconciled_amount'] == Decimal('0.00')
        assert summary['reconciliation_rate'] == Decimal('0.0')


# =============================================================================
# Expense categories
# =============================================================================

@pytest.mark.django_db
class TestExpenseCategories:
    """Tests for expense category management."""

    def test_create_category_strips_name(self):
        category = create_category(name='  Packaging  ', description=' Boxes and tape ')

        assert category.name == 'Packaging'
        assert category.description == 'Boxes and tape'
        assert category.is_active is True
        assert category.expense_count == 0

    @pytest.mark.parametrize('name', ['', '   ', None])
    def test_create_category_requires_name(self, name):
        with pytest.raises(MissingParameterError):
            create_category(name=name)

    def test_create_duplicate_name(self, category):
        with pytest.raises(DuplicateCategoryError):
            create_category(name='Stock purchases')

    def test_list_counts_expenses_and_sorts_by_name(self, category, make_expense):
        make_expense()
        make_expense()
        create_category(name='Advertising')

        categories = list(list_categories())

        assert [c.name for c in categories] == ['Advertising', 'Stock purchases']
        assert [c.expense_count for c in categories] == [0, 2]

    def test_list_active_only(self, category):
        create_category(name='Old rent', is_active=False)

        assert [c.name for c in list_categories(active_only=True)] == ['Stock purchases']

    def test_get_unknown_category(self):
        with pytest.raises(CategoryNotFoundError):
            get_category(category_id=uuid4())

    def test_update_only_given_fields(self, category):
        category.description = 'Plants for resale'
        category.save()

        updated = update_category(category_id=category.id, name='Plant stock')

        assert updated.name == 'Plant stock'
        assert updated.description == 'Plants for resale'
        assert updated.is_active is True

    def test_update_to_taken_name(self, category):
        other = create_category(name='Rent')

        with pytest.raises(DuplicateCategoryError):
            update_category(category_id=other.id, name='Stock purchases')

    def test_update_keeping_own_name(self, category):
        updated = update_category(category_id=category.id, name='Stock purchases', description='Resale')

        assert updated.description == 'Resale'

    def test_update_unknown_category(self):
        with pytest.raises(CategoryNotFoundError):
            update_category(category_id=uuid4(), name='Rent')

    def test_deactivate_keeps_existing_expenses(self, category, make_expense):
        expense = make_expense()

        deactivated = deactivate_category(category_id=category.id)

        assert deactivated.is_active is False
        expense.refresh_from_db()
        assert expense.category_id == category.id

    def test_delete_unused_category(self, category):
        delete_category(category_id=category.id)

        assert not ExpenseCategory.objects.filter(id=category.id).exists()

    def test_delete_category_in_use(self, category, make_expense):
        make_expense()

        with pytest.raises(CategoryInUseError) as exc_info:
            delete_category(category_id=category.id)

        assert exc_info.value.expense_count == 1
        assert ExpenseCategory.objects.filter(id=category.id).exists()
