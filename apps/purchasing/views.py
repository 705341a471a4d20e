import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import DatabaseError
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.permissions import IsPurchasingStaff
from .serializers import (
    # Input serializers
    PurchaseOrderFilterSerializer,
    PurchaseOrderCreateSerializer,
    ApprovePurchaseOrderSerializer,
    AutoDraftInputSerializer,
    ChangeSupplierSerializer,
    UpdateQuantitySerializer,
    DeleteDraftsSerializer,
    # Response serializers
    PurchaseOrderSerializer,
    AutoDraftResponseSerializer,
    DeleteDraftsResponseSerializer,
    ErrorSerializer,
)
from .services import (
    auto_draft_purchase_orders,
    create_purchase_order,
    get_purchase_order,
    list_purchase_orders,
    approve_purchase_order,
    change_supplier,
    delete_draft_purchase_orders,
    update_draft_quantity,
    # Exceptions
    PurchasingServiceError,
    MissingParameterError,
    InvalidOrderItemsError,
    InvalidStateTransitionError,
    PurchaseOrderNotFoundError,
    SupplierNotFoundError,
    AdminNotFoundError,
)

logger = logging.getLogger(__name__)


def _error_response(exc: PurchasingServiceError) -> Response:
    """Translate a purchasing domain error into an HTTP response."""
    if isinstance(exc, (PurchaseOrderNotFoundError, SupplierNotFoundError, AdminNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (MissingParameterError, InvalidOrderItemsError, InvalidStateTransitionError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        logger.error("Purchasing operation failed: %s", exc)
        return Response(
            {'error': 'Purchase order operation failed'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return Response({'error': str(exc)}, status=code)


@extend_schema(
    request=AutoDraftInputSerializer,
    responses={
        200: AutoDraftResponseSerializer,
        400: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Draft one purchase order per low-stock product that has a supplier.",
    tags=['purchasing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def auto_draft(request):
    """Auto-draft purchase orders for low stock - thin HTTP handler."""
    input_serializer = AutoDraftInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        result = auto_draft_purchase_orders(
            admin_id=input_serializer.validated_data.get('adminId')
        )
    except PurchasingServiceError as e:
        return _error_response(e)
    except DatabaseError:
        logger.exception("Auto-draft failed")
        return Response(
            {'error': 'Failed to create draft purchase orders'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({
        'created': result.created,
        'purchaseOrders': PurchaseOrderSerializer(result.purchase_orders, many=True).data,
    })


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('adminId', OpenApiTypes.UUID, description='Owning admin'),
        OpenApiParameter('status', OpenApiTypes.STR, description='DRAFT or APPROVED'),
    ],
    responses={200: PurchaseOrderSerializer(many=True)},
    description="List purchase orders, newest first.",
    tags=['purchasing'],
)
@extend_schema(
    methods=['POST'],
    request=PurchaseOrderCreateSerializer,
    responses={201: PurchaseOrderSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Draft a purchase order by hand.",
    tags=['purchasing'],
)
@extend_schema(
    methods=['PATCH'],
    request=ApprovePurchaseOrderSerializer,
    responses={200: PurchaseOrderSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Approve a DRAFT purchase order.",
    tags=['purchasing'],
)
@api_view(['GET', 'POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def purchase_orders(request):
    """List, draft or approve purchase orders - thin HTTP handler."""
    if request.method == 'GET':
        query_serializer = PurchaseOrderFilterSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        queryset = list_purchase_orders(
            admin_id=params.get('adminId'),
            status=params.get('status'),
        )

        return Response(PurchaseOrderSerializer(queryset, many=True).data)

    if request.method == 'POST':
        input_serializer = PurchaseOrderCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            order = create_purchase_order(
                admin_id=data['adminId'],
                supplier_id=data['supplierId'],
                items=data['items'],
                notes=data['notes'],
            )
        except PurchasingServiceError as e:
            return _error_response(e)

        order = get_purchase_order(purchase_order_id=order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    input_serializer = ApprovePurchaseOrderSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        order = approve_purchase_order(
            purchase_order_id=input_serializer.validated_data['id'],
            admin_id=input_serializer.validated_data['adminId'],
        )
    except PurchasingServiceError as e:
        return _error_response(e)

    return Response(PurchaseOrderSerializer(order).data)


@extend_schema(
    responses={200: PurchaseOrderSerializer, 404: ErrorSerializer},
    description="Get a purchase order with its items.",
    tags=['purchasing'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def purchase_order_detail(request, purchase_order_id):
    """Get a purchase order - thin HTTP handler."""
    try:
        order = get_purchase_order(purchase_order_id=purchase_order_id)
    except PurchasingServiceError as e:
        return _error_response(e)

    return Response(PurchaseOrderSerializer(order).data)


@extend_schema(
    request=ChangeSupplierSerializer,
    responses={200: PurchaseOrderSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Re-assign a DRAFT purchase order to another supplier.",
    tags=['purchasing'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def purchase_order_supplier(request, purchase_order_id):
    """Change a draft's supplier - thin HTTP handler."""
    input_serializer = ChangeSupplierSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        order = change_supplier(
            purchase_order_id=purchase_order_id,
            supplier_id=input_serializer.validated_data['supplierId'],
        )
    except PurchasingServiceError as e:
        return _error_response(e)

    return Response(PurchaseOrderSerializer(order).data)


@extend_schema(
    request=UpdateQuantitySerializer,
    responses={200: PurchaseOrderSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Change a DRAFT line quantity; the total is recomputed.",
    tags=['purchasing'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def purchase_order_quantity(request, purchase_order_id):
    """Change a draft line quantity - thin HTTP handler."""
    input_serializer = UpdateQuantitySerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        order = update_draft_quantity(
            purchase_order_id=purchase_order_id,
            quantity=input_serializer.validated_data['quantity'],
            item_id=input_serializer.validated_data['itemId'],
        )
    except PurchasingServiceError as e:
        return _error_response(e)

    return Response(PurchaseOrderSerializer(order).data)


@extend_schema(
    request=DeleteDraftsSerializer,
    responses={200: DeleteDraftsResponseSerializer, 400: ErrorSerializer},
    description="Delete DRAFT purchase orders owned by the admin.",
    tags=['purchasing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPurchasingStaff])
def purchase_order_delete(request):
    """Bulk-delete drafts - thin HTTP handler."""
    input_serializer = DeleteDraftsSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        deleted = delete_draft_purchase_orders(
            admin_id=input_serializer.validated_data['adminId'],
            purchase_order_ids=input_serializer.validated_data['poIds'],
        )
    except PurchasingServiceError as e:
        return _error_response(e)

    return Response({'deleted': deleted})
