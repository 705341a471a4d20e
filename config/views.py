from django.http import JsonResponse
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import exception_handler


def api_exception_handler(exc, context):
    """
    DRF exception handler that keeps every API failure in ``{error}`` form.

    Validation errors become ``{'error': 'Invalid request data', 'details': ...}``
    with the field errors under ``details``; authentication, permission and
    other DRF errors become ``{'error': <detail>}``.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, serializers.ValidationError):
        response.data = {'error': 'Invalid request data', 'details': response.data}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}

    return response


@extend_schema(
    responses={200: inline_serializer('HealthResponse', {'status': serializers.CharField()})},
    description="Liveness check for the load balancer.",
    tags=['health'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """Health check endpoint."""
    return Response({'status': 'ok'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
