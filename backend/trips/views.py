import logging
import os

from django.conf import settings
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from backend.core.cache_utils import get_cached_trips_list, cache_trips_list
from backend.core.permissions import IsPlatformAdmin
from backend.core.storage import StorageError, ensure_bucket, upload_file
from backend.core.utils import create_audit_log, is_admin_user
from backend.notifications.utils import create_notification
from .filters import TripFilter
from .models import Trip
from .serializers import TripSerializer, TripWriteSerializer, TicketUploadSerializer

logger = logging.getLogger('backend.trips')

# Changing any of these on an approved trip sends it back to admin review
REVIEWED_FIELDS = ('from_country', 'to_country', 'trip_date')


def _is_verified(user):
    return is_admin_user(user) or getattr(getattr(user, 'profile', None), 'is_verified', False)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def trip_list_create(request):
    """List approved trips (cached) or publish a new trip for admin approval"""
    if request.method == 'GET':
        filters_dict = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
        cached_data, cache_key = get_cached_trips_list(filters_dict)
        if cached_data is not None:
            return Response(cached_data)

        queryset = Trip.objects.filter(is_approved=True).select_related('user', 'user__profile')
        filterset = TripFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response({'error': _('Invalid filters'), 'details': filterset.errors}, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('trip_date', 'id')
        data = TripSerializer(queryset, many=True).data
        cache_trips_list(cache_key, data)
        return Response(data)

    if not _is_verified(request.user):
        logger.warning(f"Unverified user {request.user.id} tried to add a trip")
        return Response(
            {'error': _('Your account must be verified before you can add trips.')},
            status=status.HTTP_403_FORBIDDEN
        )

    serializer = TripWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    trip = serializer.save(user=request.user)
    logger.info(f"User {request.user.id} created trip {trip.id} ({trip.from_country} -> {trip.to_country})")
    return Response(TripSerializer(trip).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_trips(request):
    """All trips of the current user, approved or not"""
    queryset = Trip.objects.filter(user=request.user).select_related('user', 'user__profile').order_by('-trip_date', '-id')
    return Response(TripSerializer(queryset, many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def trip_detail(request, pk):
    """Retrieve, update or delete a trip"""
    trip = get_object_or_404(Trip.objects.select_related('user', 'user__profile'), pk=pk)
    is_owner = request.user.is_authenticated and trip.user_id == request.user.id
    is_admin = is_admin_user(request.user)

    if request.method == 'GET':
        if not (trip.is_approved or is_owner or is_admin):
            return Response({'error': _('Trip not found')}, status=status.HTTP_404_NOT_FOUND)
        return Response(TripSerializer(trip).data)

    if not (is_owner or is_admin):
        return Response({'error': _('Permission denied')}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        serializer = TripWriteSerializer(trip, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        route_changed = any(
            field in serializer.validated_data and serializer.validated_data[field] != getattr(trip, field)
            for field in REVIEWED_FIELDS
        )
        if route_changed and trip.is_approved and not is_admin:
            serializer.save(is_approved=False, approved_by=None, approved_at=None)
            logger.info(f"Trip {trip.id} route changed by owner, back to pending approval")
        else:
            serializer.save()
        logger.info(f"User {request.user.id} updated trip {trip.id}")
        return Response(TripSerializer(trip).data)

    trip_id = trip.id
    trip.delete()
    create_audit_log(request=request, action='delete', model_name='Trip', object_id=trip_id)
    logger.info(f"User {request.user.id} deleted trip {trip_id}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def trip_approve(request, pk):
    """Approve a trip so it shows up in the public list"""
    trip = get_object_or_404(Trip, pk=pk)
    if trip.is_approved:
        return Response(TripSerializer(trip).data)

    trip.is_approved = True
    trip.approved_by = request.user
    trip.approved_at = timezone.now()
    trip.save(update_fields=['is_approved', 'approved_by', 'approved_at', 'updated_at'])

    create_audit_log(
        request=request,
        action='trip_approve',
        model_name='Trip',
        object_id=trip.id,
        object_name=str(trip),
        changes={'is_approved': {'old': False, 'new': True}},
    )
    create_notification(trip.user, _('Your trip has been approved and is now visible to senders.'), link='/my-trips')
    logger.info(f"Admin {request.user.id} approved trip {trip.id}")
    return Response(TripSerializer(trip).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_pending_trips(request):
    queryset = Trip.objects.filter(is_approved=False).select_related('user', 'user__profile').order_by('created_at')
    return Response(TripSerializer(queryset, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def trip_ticket_upload(request):
    """Upload a flight ticket to the trip-tickets bucket and return its URL"""
    serializer = TicketUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    ticket = serializer.validated_data['file']

    ext = os.path.splitext(ticket.name)[1].lstrip('.').lower()
    path = f"{request.user.id}/{int(timezone.now().timestamp() * 1000)}-ticket.{ext}"
    try:
        ensure_bucket(settings.TRIP_TICKETS_BUCKET, public=True)
        url = upload_file(
            settings.TRIP_TICKETS_BUCKET,
            path,
            ticket,
            content_type=getattr(ticket, 'content_type', None),
            cache_control=settings.TICKET_CACHE_CONTROL,
        )
    except StorageError as e:
        return Response({'error': _('Failed to upload ticket file.'), 'details': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if url.startswith('/'):
        url = request.build_absolute_uri(url)
    logger.info(f"User {request.user.id} uploaded ticket {path}")
    return Response({'url': url, 'path': path}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_trip_tickets_bucket(request):
    """Provision the public trip-tickets bucket; safe to call repeatedly"""
    bucket = settings.TRIP_TICKETS_BUCKET
    try:
        ensure_bucket(bucket, public=True)
    except StorageError:
        return Response({'error': f'Failed to create {bucket} bucket'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'success': True, 'bucket': bucket})
