import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Count, Q
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.permissions import IsPlatformAdmin
from backend.core.utils import create_audit_log
from backend.orders.models import DeliveryRequest, GeneralOrder
from backend.profiles.models import VerificationRequest
from backend.trips.models import Trip
from .emails import NOT_PROVIDED, send_report_email
from .models import Report
from .serializers import ReportCreateSerializer, ReportSerializer

logger = logging.getLogger('backend.reports')

NO_NAME = 'بدون اسم'


def _reporter_identity(user):
    """Name and phone from the profile, with Arabic placeholders when missing"""
    try:
        profile = user.profile
    except ObjectDoesNotExist:
        return NO_NAME, NOT_PROVIDED
    full_name = f"{profile.first_name or ''} {profile.last_name or ''}".strip() or NO_NAME
    return full_name, profile.phone or NOT_PROVIDED


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def report_order_issue(request):
    """
    Report a problem with a delivery request.

    Only the request's sender and traveler may report, at most
    MAX_REPORTS_PER_ORDER times each. The report is stored first and then
    e-mailed to the operator.
    """
    serializer = ReportCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid payload', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        delivery_request = DeliveryRequest.objects.select_related('trip').get(pk=data['request_id'])
    except DeliveryRequest.DoesNotExist:
        return Response({'error': _('Request not found')}, status=status.HTTP_404_NOT_FOUND)

    if not delivery_request.is_participant(request.user):
        logger.warning(f"User {request.user.id} tried to report request {delivery_request.id} without being part of it")
        return Response({'error': _('Permission denied')}, status=status.HTTP_403_FORBIDDEN)

    existing = Report.objects.filter(request=delivery_request, reporter=request.user).count()
    if existing >= settings.MAX_REPORTS_PER_ORDER:
        return Response({'error': 'Max reports reached for this order'}, status=status.HTTP_400_BAD_REQUEST)

    reporter_name, reporter_phone = _reporter_identity(request.user)
    report = Report.objects.create(
        request=delivery_request,
        reporter=request.user,
        reporter_name=reporter_name,
        reporter_phone=reporter_phone,
        reporter_email=request.user.email or '',
        description=data['description'],
        problem_photo_url=data.get('problem_photo_url') or None,
    )
    create_audit_log(
        request=request,
        action='report_create',
        model_name='Report',
        object_id=report.id,
        object_name=str(report),
        object_reference=str(delivery_request.id),
    )
    logger.info(f"User {request.user.id} reported an issue on request {delivery_request.id}")

    send_report_email(report)
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_reports(request):
    queryset = Report.objects.all()
    request_id = request.query_params.get('request')
    if request_id:
        queryset = queryset.filter(request_id=request_id)
    return Response(ReportSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_dashboard(request):
    """Counts of everything waiting for an admin decision"""
    payments = DeliveryRequest.objects.aggregate(
        pending=Count('id', filter=Q(payment_status='pending_review')),
    )
    return Response({
        'pending_trips': Trip.objects.filter(is_approved=False).count(),
        'pending_verifications': VerificationRequest.objects.filter(status='pending').count(),
        'new_general_orders': GeneralOrder.objects.filter(status='new').count(),
        'pending_payments': payments['pending'],
        'reports': Report.objects.count(),
    })
