import logging

from django.shortcuts import get_object_or_404
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from backend.core.permissions import IsPlatformAdmin
from backend.core.utils import create_audit_log, display_name, is_admin_user
from backend.notifications.utils import create_notification
from . import utils as order_actions
from .forbidden_items import FORBIDDEN_ITEMS
from .models import DeliveryRequest, GeneralOrder
from .pricing import calculate_shipping_cost, zoned_countries
from .serializers import (
    DeliveryRequestSerializer, DeliveryRequestCreateSerializer, ProposeChangesSerializer,
    ReviewChangesSerializer, RespondSerializer, TrackingUpdateSerializer, PhotosSerializer,
    SenderPhotosSerializer, PaymentProofSerializer, PaymentReviewSerializer, GeneralOrderSerializer,
    GeneralOrderCreateSerializer, GeneralOrderReviewSerializer, PricingQuerySerializer,
)
from .tracking import TRACKING_STAGES

logger = logging.getLogger('backend.orders')

REQUEST_RELATED = ('trip', 'trip__user', 'trip__user__profile', 'sender', 'sender__profile', 'chat')


def _request_queryset():
    return DeliveryRequest.objects.select_related(*REQUEST_RELATED)


def _action_error(e):
    logger.warning(f"Order action rejected: {e}")
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _request_link(delivery_request_id):
    return f'/request/{delivery_request_id}'


def _get_participant_request(request, pk):
    delivery_request = get_object_or_404(_request_queryset(), pk=pk)
    if not (delivery_request.is_participant(request.user) or is_admin_user(request.user)):
        return None
    return delivery_request


def _refreshed(pk):
    return DeliveryRequestSerializer(_request_queryset().get(pk=pk)).data


# Pricing and reference data

@api_view(['GET'])
@permission_classes([AllowAny])
def pricing_calculate(request):
    """Price a shipment for a route, weight and insurance percentage"""
    serializer = PricingQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    result = calculate_shipping_cost(
        data['from_country'], data['to_country'], data['weight'], data['insurance_percentage']
    )
    return Response({
        'zone': result['zone'],
        'price_per_kg_usd': str(result['price_per_kg_usd']),
        'total_price_usd': str(result['total_price_usd']),
        'total_price_iqd': result['total_price_iqd'],
        'insurance_multiplier': str(result['insurance_multiplier']),
        'error': result['error'],
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def pricing_countries(request):
    return Response({'countries': zoned_countries()})


@api_view(['GET'])
@permission_classes([AllowAny])
def tracking_stages(request):
    return Response(TRACKING_STAGES)


@api_view(['GET'])
@permission_classes([AllowAny])
def forbidden_items(request):
    return Response(FORBIDDEN_ITEMS)


# Delivery requests

@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_create(request):
    """Send a delivery request on an approved trip"""
    serializer = DeliveryRequestCreateSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    delivery_request = serializer.save(sender=request.user)

    create_audit_log(
        request=request,
        action='create',
        model_name='DeliveryRequest',
        object_id=delivery_request.id,
        object_name=str(delivery_request),
    )
    create_notification(
        delivery_request.trip.user,
        _('New delivery request from %(name)s') % {'name': display_name(request.user)},
        link='/my-trips',
    )
    logger.info(f"User {request.user.id} sent request {delivery_request.id} on trip {delivery_request.trip_id}")
    return Response(_refreshed(delivery_request.id), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sent_requests(request):
    queryset = _request_queryset().filter(sender=request.user).order_by('-created_at')
    return Response(DeliveryRequestSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def received_requests(request):
    """Requests on the current user's trips, optionally filtered by status"""
    queryset = _request_queryset().filter(trip__user=request.user)
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    return Response(DeliveryRequestSerializer(queryset.order_by('-created_at'), many=True).data)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def request_detail(request, pk):
    delivery_request = _get_participant_request(request, pk)
    if delivery_request is None:
        return Response({'error': _('Permission denied')}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(DeliveryRequestSerializer(delivery_request).data)

    try:
        order_actions.delete_request(pk, request.user)
    except order_actions.OrderActionError as e:
        return _action_error(e)
    create_audit_log(request=request, action='delete', model_name='DeliveryRequest', object_id=pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_respond(request, pk):
    """Traveler accepts or rejects a pending request"""
    serializer = RespondSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    decision = serializer.validated_data['status']
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.respond_to_request(pk, request.user, decision)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='request_accept' if decision == 'accepted' else 'request_reject',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'status': {'old': 'pending', 'new': decision}},
    )
    if decision == 'accepted':
        message = _('Your delivery request has been accepted.')
    else:
        message = _('Your delivery request has been rejected.')
    create_notification(delivery_request.sender, message, link='/my-requests')
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_cancel(request, pk):
    """
    Ask for, or confirm, mutual cancellation.

    Returns {'status': 'requested'} with the request, or
    {'status': 'deleted'} once the second participant confirms.
    """
    delivery_request = get_object_or_404(_request_queryset(), pk=pk)
    other_user = delivery_request.trip.user if request.user.id == delivery_request.sender_id else delivery_request.sender

    try:
        outcome = order_actions.request_cancellation(pk, request.user)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='request_cancel',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'cancellation': outcome},
    )
    if outcome == 'requested':
        create_notification(other_user, _('The other party asked to cancel a delivery request.'), link=_request_link(pk))
        return Response({'status': outcome, 'request': _refreshed(pk)})
    create_notification(other_user, _('A delivery request was cancelled by mutual agreement.'))
    return Response({'status': outcome})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_propose_changes(request, pk):
    serializer = ProposeChangesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.propose_changes(pk, request.user, **serializer.validated_data)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='changes_propose',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'proposed_changes': delivery_request.proposed_changes},
    )
    create_notification(delivery_request.trip.user, _('The sender proposed changes to a request.'), link=_request_link(pk))
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_review_changes(request, pk):
    serializer = ReviewChangesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    accept = serializer.validated_data['accept']
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request, changes = order_actions.review_changes(pk, request.user, accept)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='changes_review',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'accepted': accept, 'proposed_changes': changes},
    )
    if accept:
        message = _('The traveler accepted your proposed changes.')
    else:
        message = _('The traveler rejected your proposed changes.')
    create_notification(delivery_request.sender, message, link=_request_link(pk))
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_tracking(request, pk):
    """Advance tracking to the next stage"""
    serializer = TrackingUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    new_status = serializer.validated_data['tracking_status']
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request, old_status = order_actions.update_tracking(pk, request.user, new_status)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='tracking_update',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'tracking_status': {'old': old_status, 'new': new_status}},
    )
    other_user = delivery_request.sender if request.user.id == delivery_request.trip.user_id else delivery_request.trip.user
    create_notification(other_user, _('Delivery tracking was updated.'), link=_request_link(pk))
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_inspection_photos(request, pk):
    serializer = PhotosSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.submit_inspection(pk, request.user, serializer.validated_data['photos'])
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_notification(delivery_request.sender, _('The traveler inspected your item.'), link=_request_link(pk))
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_sender_photos(request, pk):
    serializer = SenderPhotosSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.submit_sender_photos(pk, request.user, serializer.validated_data['photos'])
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_notification(delivery_request.trip.user, _('The sender uploaded photos of the item.'), link=_request_link(pk))
    return Response(_refreshed(pk))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_payment(request, pk):
    """Submit a payment receipt; the amount is priced server-side"""
    serializer = PaymentProofSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.submit_payment_proof(
            pk,
            request.user,
            data['payment_method'],
            data['payment_proof_url'],
            data.get('payment_reference'),
        )
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='payment_submit',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'payment_status': {'old': 'unpaid', 'new': 'pending_review'},
                 'payment_amount_iqd': delivery_request.payment_amount_iqd},
    )
    return Response(_refreshed(pk))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_payments(request):
    """Requests with a payment, waiting for review by default"""
    payment_status = request.query_params.get('payment_status', 'pending_review')
    queryset = _request_queryset().filter(payment_status=payment_status).order_by('payment_updated_at')
    return Response(DeliveryRequestSerializer(queryset, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_payment_review(request, pk):
    serializer = PaymentReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    decision = serializer.validated_data['payment_status']
    get_object_or_404(DeliveryRequest, pk=pk)

    try:
        delivery_request = order_actions.review_payment(pk, request.user, decision)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='payment_review',
        model_name='DeliveryRequest',
        object_id=pk,
        changes={'payment_status': {'old': 'pending_review', 'new': decision}},
    )
    if decision == 'paid':
        message = _('Your payment has been confirmed.')
    else:
        message = _('Your payment was rejected. Please submit a new receipt.')
    create_notification(delivery_request.sender, message, link=_request_link(pk))
    return Response(_refreshed(pk))


# General orders

@api_view(['POST'])
@permission_classes([IsAuthenticated])
def general_order_create(request):
    serializer = GeneralOrderCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = serializer.save(user=request.user)
    create_audit_log(request=request, action='create', model_name='GeneralOrder', object_id=order.id, object_name=str(order))
    logger.info(f"User {request.user.id} created general order {order.id}")
    return Response(GeneralOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def general_orders_available(request):
    """Unclaimed orders of other users that travelers can still take"""
    queryset = (
        GeneralOrder.objects
        .filter(status__in=order_actions.AVAILABLE_ORDER_STATUSES, claimed_by__isnull=True)
        .exclude(user=request.user)
        .select_related('user', 'user__profile')
    )
    from_country = request.query_params.get('from_country')
    to_country = request.query_params.get('to_country')
    if from_country:
        queryset = queryset.filter(from_country=from_country)
    if to_country:
        queryset = queryset.filter(to_country=to_country)
    return Response(GeneralOrderSerializer(queryset.order_by('-created_at'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def general_orders_mine(request):
    queryset = GeneralOrder.objects.filter(user=request.user).select_related('user', 'user__profile')
    return Response(GeneralOrderSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def general_orders_claimed(request):
    queryset = GeneralOrder.objects.filter(claimed_by=request.user).select_related('user', 'user__profile')
    return Response(GeneralOrderSerializer(queryset.order_by('-claimed_at'), many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def general_order_claim(request, pk):
    order = get_object_or_404(GeneralOrder, pk=pk)
    try:
        order = order_actions.claim_general_order(order.id, request.user)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='order_claim',
        model_name='GeneralOrder',
        object_id=order.id,
        changes={'status': {'old': 'available', 'new': 'claimed'}},
    )
    create_notification(
        order.user,
        _('%(name)s claimed your order.') % {'name': display_name(request.user)},
        link='/my-orders',
    )
    return Response(GeneralOrderSerializer(order).data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def general_order_delete(request, pk):
    get_object_or_404(GeneralOrder, pk=pk, user=request.user)
    try:
        order_actions.delete_general_order(pk, request.user)
    except order_actions.OrderActionError as e:
        return _action_error(e)
    create_audit_log(request=request, action='delete', model_name='GeneralOrder', object_id=pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_general_orders(request):
    queryset = GeneralOrder.objects.select_related('user', 'user__profile')
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    return Response(GeneralOrderSerializer(queryset, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_general_order_review(request, pk):
    serializer = GeneralOrderReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    decision = serializer.validated_data['status']
    get_object_or_404(GeneralOrder, pk=pk)

    try:
        order = order_actions.review_general_order(pk, request.user, decision)
    except order_actions.OrderActionError as e:
        return _action_error(e)

    create_audit_log(
        request=request,
        action='order_review',
        model_name='GeneralOrder',
        object_id=pk,
        changes={'status': {'old': 'new', 'new': decision}},
    )
    if decision == 'approved':
        message = _('Your order has been approved.')
    else:
        message = _('Your order has been rejected.')
    create_notification(order.user, message, link='/my-orders')
    return Response(GeneralOrderSerializer(order).data)
