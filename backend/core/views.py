import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from .models import AuditLog
from .permissions import IsPlatformAdmin
from .serializers import UserSerializer, UserCreateSerializer, AuditLogSerializer
from .utils import is_admin_user

logger = logging.getLogger('backend.core')

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['email'] = user.email
        token['is_admin'] = is_admin_user(user)
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh serializer that maps deleted users to an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    token = CustomTokenObtainPairSerializer.get_token(user)
    logger.info(f"Registered user {user.username} (id={user.id})")
    return Response({
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with profile and admin flag"""
    from backend.profiles.serializers import ProfileSerializer
    from backend.profiles.utils import get_or_create_profile

    user = request.user
    user_data = UserSerializer(user).data
    user_data['profile'] = ProfileSerializer(get_or_create_profile(user)).data
    user_data['is_admin'] = is_admin_user(user)
    return Response(user_data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


def _parse_user_ids(payload):
    """Return the list of integer ids or None when the payload is malformed"""
    if not isinstance(payload, dict):
        return None
    user_ids = payload.get('userIds')
    if not isinstance(user_ids, list) or not user_ids:
        return None
    parsed = []
    for value in user_ids:
        if isinstance(value, bool):
            return None
        try:
            parsed.append(int(value))
        except (TypeError, ValueError):
            return None
    return parsed


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_user_lookup(request):
    """
    Resolve user ids to e-mail addresses for the admin screens.

    Body: {"userIds": [...]}; response: {"emailMap": {"<id>": "<email>"}}.
    Unknown ids are left out of the map.
    """
    user_ids = _parse_user_ids(request.data)
    if user_ids is None:
        return Response({'error': 'Invalid or missing userIds array'}, status=status.HTTP_400_BAD_REQUEST)

    email_map = {
        str(user_id): email
        for user_id, email in User.objects.filter(id__in=user_ids).values_list('id', 'email')
    }
    logger.info(f"Admin {request.user.id} resolved {len(email_map)}/{len(user_ids)} user emails")
    return Response({'emailMap': email_map})
