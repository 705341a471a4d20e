from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .serializers import UserSerializer


@extend_schema(
    responses={200: UserSerializer},
    description="Get the authenticated user's profile and role.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current user profile."""
    serializer = UserSerializer(request.user)
    return Response(serializer.data)
