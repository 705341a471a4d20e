from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""
    
    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields
