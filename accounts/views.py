# accounts/views.py
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import transaction
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from bloodlink.exceptions import InvalidCredentials

User = get_user_model()

logger = logging.getLogger(__name__)


class AdminRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)

    def validate_email(self, value):
        if User.objects.filter(username__iexact=value).exists() or User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('Admin with this email already exists')
        return value.lower()


# -----------------------------
# HELPER: JWT TOKEN GENERATOR
# -----------------------------
def get_tokens_for_user(user):
    """
    Generate JWT tokens and embed role in payload
    """
    refresh = RefreshToken.for_user(user)
    refresh['role'] = 'admin' if user.is_staff else 'user'
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


def _admin_payload(user):
    return {
        'id': user.id,
        'name': user.first_name,
        'email': user.email,
        'username': user.username,
    }


# -----------------------------
# ADMIN REGISTER API
# -----------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def admin_register(request):
    """
    Creates a staff account. When BLOODLINK['ADMIN_REGISTRATION_KEY'] is set
    the request must carry the same value as `registration_key`.
    """
    registration_key = settings.BLOODLINK['ADMIN_REGISTRATION_KEY']
    if registration_key and request.data.get('registration_key') != registration_key:
        raise PermissionDenied('Invalid admin registration key')

    serializer = AdminRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        user = User.objects.create_user(
            username=data['email'],
            email=data['email'],
            password=data['password'],
            first_name=data['name'],
            is_staff=True,
        )

    logger.info(f"Admin registered: {user.email}")
    return Response({
        'success': True,
        'message': 'Admin registered successfully',
        'data': _admin_payload(user),
        'tokens': get_tokens_for_user(user),
    }, status=status.HTTP_201_CREATED)


# -----------------------------
# ADMIN LOGIN API
# -----------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def admin_login(request):
    """
    JWT login for staff accounts by email or username
    """
    username = request.data.get('email') or request.data.get('username')
    password = request.data.get('password')

    user = authenticate(request, username=username, password=password)
    if user is None or not user.is_staff:
        logger.warning(f"Failed admin login for {username}")
        raise InvalidCredentials()

    return Response({
        'success': True,
        'message': 'Login successful',
        'data': _admin_payload(user),
        'tokens': get_tokens_for_user(user),
    })
