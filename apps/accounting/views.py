import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import DatabaseError
from drf_spectacular.utils import extend_schema, OpenApiParameter, PolymorphicProxySerializer
from drf_spectacular.types import OpenApiTypes

from apps.accounts.permissions import IsReconciliationStaff, IsExpenseApprover, IsApproverToCreate
from .serializers import (
    # Input serializers
    ReconcileActionSerializer,
    ManualReconcileSerializer,
    AutoReconcileSerializer,
    BankTransactionFilterSerializer,
    BankTransactionCreateSerializer,
    ExpenseFilterSerializer,
    ExpenseCreateSerializer,
    ExpenseReviewSerializer,
    ExpenseCategoryFilterSerializer,
    ExpenseCategoryCreateSerializer,
    ExpenseCategoryUpdateSerializer,
    SummaryFilterSerializer,
    # Response serializers
    BankTransactionSerializer,
    ExpenseSerializer,
    ExpenseCategoryDetailSerializer,
    CategoryInUseSerializer,
    ReconciliationMatchSerializer,
    ManualReconcileResponseSerializer,
    AutoReconcileResponseSerializer,
    AmountMismatchSerializer,
    ReconciliationSummarySerializer,
    ErrorSerializer,
)
from .services import (
    match_transaction,
    auto_reconcile,
    unreconcile_transaction,
    record_transaction,
    filter_transactions,
    create_expense,
    list_expenses,
    submit_expense,
    review_expense,
    mark_expense_paid,
    list_categories,
    get_category,
    create_category,
    update_category,
    deactivate_category,
    delete_category,
    get_reconciliation_summary,
    # Exceptions
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

logger = logging.getLogger(__name__)


def _error_response(exc: AccountingServiceError, failure_message: str) -> Response:
    """Translate an accounting domain error into an HTTP response."""
    if isinstance(exc, AmountMismatchError):
        return Response({
            'error': 'Amount mismatch',
            'transactionAmount': exc.transaction_amount,
            'expenseAmount': exc.expense_amount,
        }, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, (TransactionNotFoundError, ExpenseNotFoundError, CategoryNotFoundError)):
        return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, CategoryInUseError):
        return Response({
            'error': str(exc),
            'expenseCount': exc.expense_count,
        }, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, (DuplicateBankReferenceError, DuplicateCategoryError)):
        return Response({'error': str(exc)}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, (
        MissingParameterError,
        AlreadyReconciledError,
        ExpenseAlreadyLinkedError,
        InvalidExpenseStatusError,
        InactiveCategoryError,
    )):
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    if not isinstance(exc, PersistenceFailureError):
        logger.error("Unhandled accounting error: %s", exc)
    return Response({'error': failure_message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# =============================================================================
# Reconciliation
# =============================================================================

@extend_schema(
    request=PolymorphicProxySerializer(
        component_name='ReconcileRequest',
        serializers=[ManualReconcileSerializer, AutoReconcileSerializer],
        resource_type_field_name=None,
    ),
    responses={
        200: PolymorphicProxySerializer(
            component_name='ReconcileResponse',
            serializers=[ManualReconcileResponseSerializer, AutoReconcileResponseSerializer],
            resource_type_field_name=None,
        ),
        400: AmountMismatchSerializer,
        404: ErrorSerializer,
        500: ErrorSerializer,
    },
    description=(
        "Match bank transactions to expenses. "
        "action='manual' links one transaction to one expense; "
        "action='auto' scans an account's open transactions."
    ),
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def reconcile(request):
    """Manual or automatic reconciliation - thin HTTP handler."""
    action = ReconcileActionSerializer(data=request.data)
    action.is_valid(raise_exception=True)

    if action.validated_data['action'] == 'manual':
        return _reconcile_manual(request)
    if action.validated_data['action'] == 'auto':
        return _reconcile_auto(request)

    return Response({'error': 'Invalid action'}, status=status.HTTP_400_BAD_REQUEST)


def _reconcile_manual(request):
    input_serializer = ManualReconcileSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        bank_transaction = match_transaction(
            transaction_id=input_serializer.validated_data['transactionId'],
            expense_id=input_serializer.validated_data['expenseId'],
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to reconcile transactions')
    except DatabaseError:
        logger.exception("Manual reconciliation failed")
        return Response(
            {'error': 'Failed to reconcile transactions'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({
        'message': 'Transaction reconciled successfully',
        'transaction': BankTransactionSerializer(bank_transaction).data,
    })


def _reconcile_auto(request):
    input_serializer = AutoReconcileSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        result = auto_reconcile(
            account_number=data['accountNumber'],
            start_date=data.get('startDate'),
            end_date=data.get('endDate'),
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to reconcile transactions')

    return Response({
        'message': f'Auto-reconciled {result.reconciled_count} transactions',
        'reconciledCount': result.reconciled_count,
        'results': ReconciliationMatchSerializer(result.results, many=True).data,
    })


@extend_schema(
    request=None,
    responses={200: BankTransactionSerializer, 404: ErrorSerializer},
    description="Undo a match; the transaction and its expense become open again.",
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def bank_transaction_unreconcile(request, transaction_id):
    """Unreconcile a transaction - thin HTTP handler."""
    try:
        bank_transaction = unreconcile_transaction(transaction_id=transaction_id)
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to unreconcile transaction')

    return Response(BankTransactionSerializer(bank_transaction).data)


# =============================================================================
# Bank transactions
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('accountNumber', OpenApiTypes.STR, description='Bank account'),
        OpenApiParameter('reconciled', OpenApiTypes.BOOL, description='Reconciled or open lines only'),
        OpenApiParameter('startDate', OpenApiTypes.DATE, description='Earliest booking date'),
        OpenApiParameter('endDate', OpenApiTypes.DATE, description='Latest booking date'),
    ],
    responses={200: BankTransactionSerializer(many=True)},
    description="List bank feed lines, most recent first.",
    tags=['accounting'],
)
@extend_schema(
    methods=['POST'],
    request=BankTransactionCreateSerializer,
    responses={201: BankTransactionSerializer, 409: ErrorSerializer},
    description="Record one bank feed line.",
    tags=['accounting'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def bank_transactions(request):
    """List or record bank transactions - thin HTTP handler."""
    if request.method == 'GET':
        query_serializer = BankTransactionFilterSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        queryset = filter_transactions(
            account_number=params.get('accountNumber'),
            reconciled=params.get('reconciled'),
            start_date=params.get('startDate'),
            end_date=params.get('endDate'),
        )
        return Response(BankTransactionSerializer(queryset, many=True).data)

    input_serializer = BankTransactionCreateSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        bank_transaction = record_transaction(
            account_number=data['accountNumber'],
            transaction_date=data['transactionDate'],
            description=data['description'],
            amount=data['amount'],
            type=data['type'],
            bank_reference=data['bankReference'],
            balance=data['balance'],
            category=data['category'],
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to create transaction')

    return Response(
        BankTransactionSerializer(bank_transaction).data,
        status=status.HTTP_201_CREATED
    )


# =============================================================================
# Expenses
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('status', OpenApiTypes.STR, description='Expense status'),
        OpenApiParameter('categoryId', OpenApiTypes.UUID, description='Expense category'),
        OpenApiParameter('startDate', OpenApiTypes.DATE, description='Earliest expense date'),
        OpenApiParameter('endDate', OpenApiTypes.DATE, description='Latest expense date'),
    ],
    responses={200: ExpenseSerializer(many=True)},
    description="List expenses, newest first.",
    tags=['accounting'],
)
@extend_schema(
    methods=['POST'],
    request=ExpenseCreateSerializer,
    responses={201: ExpenseSerializer, 404: ErrorSerializer},
    description="Capture a DRAFT expense; VAT is extracted from the inclusive amount.",
    tags=['accounting'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def expenses(request):
    """List or create expenses - thin HTTP handler."""
    if request.method == 'GET':
        query_serializer = ExpenseFilterSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        queryset = list_expenses(
            status=params.get('status'),
            category_id=params.get('categoryId'),
            start_date=params.get('startDate'),
            end_date=params.get('endDate'),
        )
        return Response(ExpenseSerializer(queryset, many=True).data)

    input_serializer = ExpenseCreateSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        expense = create_expense(
            user=request.user,
            description=data['description'],
            amount=data['amount'],
            expense_date=data['expenseDate'],
            category_id=data['categoryId'],
            vendor_name=data['vendorName'],
            notes=data['notes'],
            vat_rate=data['vatRate'],
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to create expense')

    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={200: ExpenseSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Send a DRAFT expense for approval.",
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def expense_submit(request, expense_id):
    """Submit an expense - thin HTTP handler."""
    try:
        expense = submit_expense(expense_id=expense_id)
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to submit expense')

    return Response(ExpenseSerializer(expense).data)


@extend_schema(
    request=ExpenseReviewSerializer,
    responses={200: ExpenseSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Approve or reject an expense awaiting approval.",
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsExpenseApprover])
def expense_approve(request, expense_id):
    """Review an expense - thin HTTP handler."""
    input_serializer = ExpenseReviewSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        expense = review_expense(
            expense_id=expense_id,
            reviewer=request.user,
            status=input_serializer.validated_data['status'],
            comments=input_serializer.validated_data['comments'],
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to approve expense')

    return Response(ExpenseSerializer(expense).data)


@extend_schema(
    request=None,
    responses={200: ExpenseSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Mark an APPROVED expense as paid.",
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def expense_mark_paid(request, expense_id):
    """Mark an expense paid - thin HTTP handler."""
    try:
        expense = mark_expense_paid(expense_id=expense_id)
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to update expense')

    return Response(ExpenseSerializer(expense).data)


# =============================================================================
# Expense categories
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('activeOnly', OpenApiTypes.BOOL, description='Hide deactivated categories'),
    ],
    responses={200: ExpenseCategoryDetailSerializer(many=True)},
    description="List expense categories by name with their expense counts.",
    tags=['accounting'],
)
@extend_schema(
    methods=['POST'],
    request=ExpenseCategoryCreateSerializer,
    responses={201: ExpenseCategoryDetailSerializer, 400: ErrorSerializer, 409: ErrorSerializer},
    description="Create an expense category (approvers only).",
    tags=['accounting'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff, IsApproverToCreate])
def expense_categories(request):
    """List or create expense categories - thin HTTP handler."""
    if request.method == 'GET':
        query_serializer = ExpenseCategoryFilterSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        queryset = list_categories(active_only=query_serializer.validated_data['activeOnly'])
        return Response(ExpenseCategoryDetailSerializer(queryset, many=True).data)

    input_serializer = ExpenseCategoryCreateSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        category = create_category(
            name=data['name'],
            description=data['description'],
            is_active=data['isActive'],
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to create expense category')

    return Response(ExpenseCategoryDetailSerializer(category).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['GET'],
    responses={200: ExpenseCategoryDetailSerializer, 404: ErrorSerializer},
    description="Get an expense category.",
    tags=['accounting'],
)
@extend_schema(
    methods=['PATCH'],
    request=ExpenseCategoryUpdateSerializer,
    responses={
        200: ExpenseCategoryDetailSerializer,
        400: ErrorSerializer,
        404: ErrorSerializer,
        409: ErrorSerializer,
    },
    description="Rename, describe or (de)activate an expense category.",
    tags=['accounting'],
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None, 404: ErrorSerializer, 409: CategoryInUseSerializer},
    description="Delete an expense category no expense uses.",
    tags=['accounting'],
)
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def expense_category_detail(request, category_id):
    """Get, update or delete an expense category - thin HTTP handler."""
    if request.method == 'GET':
        try:
            category = get_category(category_id=category_id)
        except AccountingServiceError as e:
            return _error_response(e, 'Failed to fetch category')
        return Response(ExpenseCategoryDetailSerializer(category).data)

    if request.method == 'DELETE':
        try:
            delete_category(category_id=category_id)
        except AccountingServiceError as e:
            return _error_response(e, 'Failed to delete category')
        return Response(status=status.HTTP_204_NO_CONTENT)

    input_serializer = ExpenseCategoryUpdateSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        category = update_category(
            category_id=category_id,
            name=data.get('name'),
            description=data.get('description'),
            is_active=data.get('isActive'),
        )
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to update category')

    return Response(ExpenseCategoryDetailSerializer(category).data)


@extend_schema(
    request=None,
    responses={200: ExpenseCategoryDetailSerializer, 404: ErrorSerializer},
    description="Deactivate an expense category; its expenses keep it.",
    tags=['accounting'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def expense_category_deactivate(request, category_id):
    """Deactivate an expense category - thin HTTP handler."""
    try:
        category = deactivate_category(category_id=category_id)
    except AccountingServiceError as e:
        return _error_response(e, 'Failed to update category')

    return Response(ExpenseCategoryDetailSerializer(category).data)


# =============================================================================
# Summary
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('accountNumber', OpenApiTypes.STR, description='Bank account'),
        OpenApiParameter('startDate', OpenApiTypes.DATE, description='Period start'),
        OpenApiParameter('endDate', OpenApiTypes.DATE, description='Period end'),
    ],
    responses={200: ReconciliationSummarySerializer},
    description="Reconciled vs. open bank lines and approved expense totals.",
    tags=['accounting'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsReconciliationStaff])
def summary(request):
    """Reconciliation summary - thin HTTP handler."""
    query_serializer = SummaryFilterSerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = get_reconciliation_summary(
        account_number=params.get('accountNumber'),
        start_date=params.get('startDate'),
        end_date=params.get('endDate'),
    )
    return Response(ReconciliationSummarySerializer(data).data)
