import logging
import os

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.permissions import IsPlatformAdmin
from backend.core.storage import StorageError, ensure_bucket, upload_file
from backend.core.utils import create_audit_log
from backend.notifications.utils import create_notification
from .models import Profile, VerificationRequest
from .serializers import (
    ProfileSerializer, ProfileUpdateSerializer, PublicProfileSerializer,
    AvatarUploadSerializer, VerificationRequestSerializer,
    AdminVerificationRequestSerializer, AdminVerificationDecisionSerializer,
)
from .utils import get_or_create_profile, get_verification_status

logger = logging.getLogger('backend.profiles')

User = get_user_model()


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_me(request):
    """Retrieve or complete/update the current user's profile"""
    profile = get_or_create_profile(request.user)

    if request.method == 'GET':
        return Response(ProfileSerializer(profile).data)

    serializer = ProfileUpdateSerializer(profile, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    old_values = {field: getattr(profile, field) for field in serializer.validated_data}
    serializer.save()
    create_audit_log(
        request=request,
        action='profile_update',
        model_name='Profile',
        object_id=profile.pk,
        object_name=profile.full_name,
        changes={field: {'old': old_values[field], 'new': value} for field, value in serializer.validated_data.items()},
    )
    logger.info(f"User {request.user.id} updated profile fields: {', '.join(serializer.validated_data)}")
    return Response(ProfileSerializer(profile).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def profile_avatar_upload(request):
    """Upload a new avatar image and store its public URL on the profile"""
    serializer = AvatarUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    avatar = serializer.validated_data['avatar']

    ext = os.path.splitext(avatar.name)[1].lstrip('.').lower() or 'jpg'
    path = f"{request.user.id}/{int(timezone.now().timestamp() * 1000)}-avatar.{ext}"
    try:
        ensure_bucket(settings.AVATARS_BUCKET, public=True)
        url = upload_file(settings.AVATARS_BUCKET, path, avatar, content_type=getattr(avatar, 'content_type', None))
    except StorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    profile = get_or_create_profile(request.user)
    profile.avatar_url = request.build_absolute_uri(url) if url.startswith('/') else url
    profile.save(update_fields=['avatar_url', 'updated_at'])
    logger.info(f"User {request.user.id} uploaded avatar {path}")
    return Response(ProfileSerializer(profile).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_detail(request, pk):
    """Public subset of another user's profile"""
    profile = get_object_or_404(Profile, pk=pk)
    return Response(PublicProfileSerializer(profile).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def verification(request):
    """Current verification status, or submit identity documents"""
    if request.method == 'GET':
        latest = VerificationRequest.objects.filter(user=request.user).order_by('-created_at', '-id').first()
        return Response({
            'status': get_verification_status(request.user),
            'request': VerificationRequestSerializer(latest).data if latest else None,
        })

    if VerificationRequest.objects.filter(user=request.user, status='pending').exists():
        return Response(
            {'error': _('You already have a verification request under review.')},
            status=status.HTTP_400_BAD_REQUEST
        )
    if Profile.objects.filter(user=request.user, is_verified=True).exists():
        return Response({'error': _('Your account is already verified.')}, status=status.HTTP_400_BAD_REQUEST)

    serializer = VerificationRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    verification_request = serializer.save(user=request.user, status='pending')
    create_audit_log(
        request=request,
        action='verification_submit',
        model_name='VerificationRequest',
        object_id=verification_request.id,
    )
    logger.info(f"User {request.user.id} submitted verification request {verification_request.id}")
    return Response(VerificationRequestSerializer(verification_request).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_verification_requests(request):
    """Verification requests for the admin dashboard, newest first"""
    queryset = VerificationRequest.objects.select_related('user', 'user__profile').order_by('-created_at')
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    return Response(AdminVerificationRequestSerializer(queryset, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_verification(request):
    """
    Approve or reject a verification request.

    Body: {request_id, user_id, status}. The user's profile is marked
    verified exactly when the request is approved.
    """
    serializer = AdminVerificationDecisionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        verification_request = get_object_or_404(
            VerificationRequest.objects.select_for_update(),
            pk=data['request_id'],
            user_id=data['user_id'],
        )
        old_status = verification_request.status
        verification_request.status = data['status']
        verification_request.reviewed_by = request.user
        verification_request.reviewed_at = timezone.now()
        verification_request.save(update_fields=['status', 'reviewed_by', 'reviewed_at', 'updated_at'])

        profile = get_or_create_profile(verification_request.user)
        profile.is_verified = data['status'] == 'approved'
        profile.save(update_fields=['is_verified', 'updated_at'])

    create_audit_log(
        request=request,
        action='verification_review',
        model_name='VerificationRequest',
        object_id=verification_request.id,
        object_name=profile.full_name,
        object_reference=str(data['user_id']),
        changes={'status': {'old': old_status, 'new': data['status']}},
    )
    if data['status'] == 'approved':
        message = _('Your identity verification has been approved.')
    else:
        message = _('Your identity verification was rejected. Please submit clearer documents.')
    create_notification(verification_request.user, message, link='/my-profile')

    logger.info(f"Admin {request.user.id} set verification request {verification_request.id} to {data['status']}")
    return Response({'success': True})
