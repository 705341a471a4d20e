"""
Role-based permission classes for the back office.

Every staff endpoint is gated on the requesting user's ``role``. The
role lists mirror the store's operating model:

    Reconciliation (bank feed, expenses, summaries)
        FINANCIAL_MANAGER, ACCOUNTANT, SUPER_ADMIN
    Expense approval, creating expense categories
        FINANCIAL_MANAGER, SUPER_ADMIN
    Purchasing (catalog stock, purchase orders)
        ADMIN, PLANT_MANAGER, SUPER_ADMIN

Usage:
    from apps.accounts.permissions import IsReconciliationStaff

    @api_view(['POST'])
    @permission_classes([IsAuthenticated, IsReconciliationStaff])
    def reconcile(request):
        ...
"""

from rest_framework.permissions import BasePermission

from .models import UserRole


RECONCILIATION_ROLES = (
    UserRole.FINANCIAL_MANAGER,
    UserRole.ACCOUNTANT,
    UserRole.SUPER_ADMIN,
)

EXPENSE_APPROVER_ROLES = (
    UserRole.FINANCIAL_MANAGER,
    UserRole.SUPER_ADMIN,
)

PURCHASING_ROLES = (
    UserRole.ADMIN,
    UserRole.PLANT_MANAGER,
    UserRole.SUPER_ADMIN,
)


class HasRole(BasePermission):
    """
    Allow access only to authenticated users holding one of ``allowed_roles``.

    Subclasses set ``allowed_roles``; this base denies everyone.
    """

    allowed_roles = ()
    message = 'Insufficient permissions'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.role in self.allowed_roles


class IsReconciliationStaff(HasRole):
    allowed_roles = RECONCILIATION_ROLES


class IsExpenseApprover(HasRole):
    allowed_roles = EXPENSE_APPROVER_ROLES
    message = 'Approval permission denied'


class IsPurchasingStaff(HasRole):
    allowed_roles = PURCHASING_ROLES


class IsApproverToCreate(HasRole):
    """Only expense approvers may POST; other methods are left to the other classes."""

    allowed_roles = EXPENSE_APPROVER_ROLES

    def has_permission(self, request, view):
        if request.method != 'POST':
            return True
        return super().has_permission(request, view)
