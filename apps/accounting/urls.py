from django.urls import path
from . import views

app_name = 'accounting'

urlpatterns = [
    # POST /api/accounting/reconcile/  {action: 'manual' | 'auto', ...}
    path('reconcile/', views.reconcile, name='reconcile'),

    path('bank-transactions/', views.bank_transactions, name='bank-transactions'),
    path('bank-transactions/<uuid:transaction_id>/unreconcile/', views.bank_transaction_unreconcile, name='bank-transaction-unreconcile'),

    path('expenses/', views.expenses, name='expenses'),
    path('expenses/<uuid:expense_id>/submit/', views.expense_submit, name='expense-submit'),
    path('expenses/<uuid:expense_id>/approve/', views.expense_approve, name='expense-approve'),
    path('expenses/<uuid:expense_id>/mark-paid/', views.expense_mark_paid, name='expense-mark-paid'),

    path('expense-categories/', views.expense_categories, name='expense-categories'),
    path('expense-categories/<uuid:category_id>/', views.expense_category_detail, name='expense-category-detail'),
    path('expense-categories/<uuid:category_id>/deactivate/', views.expense_category_deactivate, name='expense-category-deactivate'),

    path('summary/', views.summary, name='summary'),
]
