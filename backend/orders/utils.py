"""
Delivery request and general order workflow.

Every helper locks the rows it changes inside a transaction and raises
OrderActionError when a business rule forbids the action; views turn that
into a 400 response.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from backend.chat.utils import get_or_create_chat
from backend.trips.models import Trip
from .models import DeliveryRequest, GeneralOrder
from .pricing import calculate_shipping_cost
from .tracking import get_next_stage, get_tracking_stage

logger = logging.getLogger(__name__)


class OrderActionError(Exception):
    """A request/order action that the current state does not allow"""


def _lock_request(request_id):
    return DeliveryRequest.objects.select_for_update().select_related('trip').get(pk=request_id)


def _lock_trip(trip_id):
    return Trip.objects.select_for_update().get(pk=trip_id)


def _require_sender(delivery_request, user):
    if delivery_request.sender_id != user.id:
        raise OrderActionError(_('Only the sender can do this.'))


def _require_traveler(delivery_request, user):
    if delivery_request.trip.user_id != user.id:
        raise OrderActionError(_('Only the traveler can do this.'))


def _require_accepted(delivery_request):
    if delivery_request.status != 'accepted':
        raise OrderActionError(_('The request has not been accepted yet.'))


def respond_to_request(request_id, user, decision):
    """
    Traveler accepts or rejects a pending request.

    Accepting needs enough free capacity on the trip; the request weight is
    taken off the trip, tracking moves to item_accepted and the chat opens.
    """
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_traveler(delivery_request, user)
        if delivery_request.status != 'pending':
            raise OrderActionError(_('This request has already been answered.'))

        if decision == 'accepted':
            trip = _lock_trip(delivery_request.trip_id)
            if trip.free_kg < delivery_request.weight_kg:
                raise OrderActionError(_('Not enough free weight on this trip.'))
            trip.free_kg -= delivery_request.weight_kg
            trip.save(update_fields=['free_kg', 'updated_at'])
            delivery_request.trip = trip
            delivery_request.status = 'accepted'
            delivery_request.tracking_status = 'item_accepted'
        else:
            delivery_request.status = 'rejected'
            delivery_request.tracking_status = 'waiting_approval'
        delivery_request.save(update_fields=['status', 'tracking_status', 'updated_at'])

        if decision == 'accepted':
            get_or_create_chat(delivery_request)

    logger.info(f"Traveler {user.id} {decision} request {delivery_request.id}")
    return delivery_request


def _release_capacity(delivery_request):
    if delivery_request.status == 'accepted':
        trip = _lock_trip(delivery_request.trip_id)
        trip.free_kg += delivery_request.weight_kg
        trip.save(update_fields=['free_kg', 'updated_at'])


def request_cancellation(request_id, user):
    """
    Mutual cancellation of a request by its participants.

    The first party only records the wish; when the other party confirms the
    request is deleted. Returns 'requested' or 'deleted'.
    """
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        if not delivery_request.is_participant(user):
            raise OrderActionError(_('You are not part of this request.'))

        if delivery_request.cancellation_requested_by_id is None:
            delivery_request.cancellation_requested_by = user
            delivery_request.save(update_fields=['cancellation_requested_by', 'updated_at'])
            logger.info(f"User {user.id} asked to cancel request {delivery_request.id}")
            return 'requested'

        if delivery_request.cancellation_requested_by_id == user.id:
            raise OrderActionError(_('You have already requested cancellation.'))

        _release_capacity(delivery_request)
        delivery_request.delete()
    logger.info(f"User {user.id} confirmed cancellation of request {request_id}")
    return 'deleted'


def delete_request(request_id, user):
    """Sender withdraws a request outright"""
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_sender(delivery_request, user)
        _release_capacity(delivery_request)
        delivery_request.delete()
    logger.info(f"Sender {user.id} deleted request {request_id}")


def propose_changes(request_id, user, weight_kg, description):
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_sender(delivery_request, user)
        if delivery_request.status == 'rejected':
            raise OrderActionError(_('A rejected request cannot be changed.'))
        delivery_request.proposed_changes = {'weight_kg': str(weight_kg), 'description': description}
        delivery_request.save(update_fields=['proposed_changes', 'updated_at'])
    return delivery_request


def review_changes(request_id, user, accept):
    """
    Traveler accepts (applies) or rejects the sender's proposed changes.
    Either way the proposal is cleared.
    """
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_traveler(delivery_request, user)
        changes = delivery_request.proposed_changes
        if not changes:
            raise OrderActionError(_('There are no proposed changes to review.'))

        update_fields = ['proposed_changes', 'updated_at']
        if accept:
            new_weight = Decimal(str(changes['weight_kg']))
            if delivery_request.status == 'accepted':
                delta = new_weight - delivery_request.weight_kg
                trip = _lock_trip(delivery_request.trip_id)
                if delta > trip.free_kg:
                    raise OrderActionError(_('Not enough free weight on this trip.'))
                trip.free_kg -= delta
                trip.save(update_fields=['free_kg', 'updated_at'])
            delivery_request.weight_kg = new_weight
            delivery_request.description = changes['description']
            update_fields += ['weight_kg', 'description']
        delivery_request.proposed_changes = None
        delivery_request.save(update_fields=update_fields)
    return delivery_request, changes


def update_tracking(request_id, user, new_status):
    """Move tracking exactly one stage forward"""
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        if not delivery_request.is_participant(user):
            raise OrderActionError(_('You are not part of this request.'))
        _require_accepted(delivery_request)

        if not get_tracking_stage(new_status) or get_next_stage(delivery_request.tracking_status) != new_status:
            raise OrderActionError(_('Tracking can only move to the next stage.'))
        if new_status == 'payment_done' and delivery_request.payment_status != 'paid':
            raise OrderActionError(_('Payment must be confirmed by an admin first.'))
        if new_status == 'traveler_on_the_way' and not delivery_request.traveler_inspection_photos:
            raise OrderActionError(_('The traveler must inspect the item before travelling.'))

        old_status = delivery_request.tracking_status
        delivery_request.tracking_status = new_status
        delivery_request.save(update_fields=['tracking_status', 'updated_at'])
    logger.info(f"User {user.id} moved request {delivery_request.id} tracking {old_status} -> {new_status}")
    return delivery_request, old_status


def submit_inspection(request_id, user, photos):
    """Traveler records inspection photos of the item"""
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_traveler(delivery_request, user)
        _require_accepted(delivery_request)
        delivery_request.traveler_inspection_photos = list(photos)
        delivery_request.save(update_fields=['traveler_inspection_photos', 'updated_at'])
    return delivery_request


def submit_sender_photos(request_id, user, photos):
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_sender(delivery_request, user)
        _require_accepted(delivery_request)
        delivery_request.sender_item_photos = list(photos)
        delivery_request.save(update_fields=['sender_item_photos', 'updated_at'])
    return delivery_request


def expected_payment_iqd(delivery_request):
    price = calculate_shipping_cost(
        delivery_request.trip.from_country,
        delivery_request.trip.to_country,
        delivery_request.weight_kg,
    )
    if price['error']:
        return 0
    return price['total_price_iqd']


def submit_payment_proof(request_id, user, method, proof_url, reference=None):
    """Sender hands in a manual payment receipt for admin review"""
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        _require_sender(delivery_request, user)
        _require_accepted(delivery_request)
        if delivery_request.payment_status in ('pending_review', 'paid'):
            raise OrderActionError(_('Payment has already been submitted.'))

        amount = expected_payment_iqd(delivery_request)
        if amount <= 0:
            raise OrderActionError(_('The price of this route cannot be calculated.'))

        delivery_request.payment_status = 'pending_review'
        delivery_request.payment_method = method
        delivery_request.payment_proof_url = proof_url
        delivery_request.payment_reference = reference or None
        delivery_request.payment_amount_iqd = amount
        delivery_request.payment_updated_at = timezone.now()
        delivery_request.save(update_fields=[
            'payment_status', 'payment_method', 'payment_proof_url', 'payment_reference',
            'payment_amount_iqd', 'payment_updated_at', 'updated_at',
        ])
    logger.info(f"Sender {user.id} submitted payment proof for request {delivery_request.id} ({amount} IQD)")
    return delivery_request


def review_payment(request_id, admin_user, decision):
    """
    Admin marks a submitted payment as paid or rejected. A confirmed payment
    moves tracking from item_accepted to payment_done.
    """
    with transaction.atomic():
        delivery_request = _lock_request(request_id)
        if delivery_request.payment_status != 'pending_review':
            raise OrderActionError(_('There is no payment waiting for review.'))
        delivery_request.payment_status = decision
        delivery_request.payment_reviewed_at = timezone.now()
        delivery_request.payment_reviewed_by = admin_user
        update_fields = ['payment_status', 'payment_reviewed_at', 'payment_reviewed_by', 'updated_at']
        if decision == 'paid' and delivery_request.tracking_status == 'item_accepted':
            delivery_request.tracking_status = 'payment_done'
            update_fields.append('tracking_status')
        delivery_request.save(update_fields=update_fields)
    logger.info(f"Admin {admin_user.id} marked payment of request {delivery_request.id} as {decision}")
    return delivery_request


AVAILABLE_ORDER_STATUSES = ('new', 'approved')
DELETABLE_ORDER_STATUSES = ('new', 'approved', 'matched')


def claim_general_order(order_id, user):
    with transaction.atomic():
        order = GeneralOrder.objects.select_for_update().get(pk=order_id)
        if order.user_id == user.id:
            raise OrderActionError(_('You cannot claim your own order.'))
        if order.claimed_by_id is not None or order.status not in AVAILABLE_ORDER_STATUSES:
            raise OrderActionError(_('This order is no longer available.'))
        order.claimed_by = user
        order.claimed_at = timezone.now()
        order.status = 'claimed'
        order.save(update_fields=['claimed_by', 'claimed_at', 'status', 'updated_at'])
    logger.info(f"Traveler {user.id} claimed general order {order.id}")
    return order


def delete_general_order(order_id, user):
    with transaction.atomic():
        order = GeneralOrder.objects.select_for_update().get(pk=order_id, user=user)
        if order.status not in DELETABLE_ORDER_STATUSES or order.claimed_by_id is not None:
            raise OrderActionError(_('A claimed order cannot be deleted.'))
        order.delete()
    logger.info(f"User {user.id} deleted general order {order_id}")


def review_general_order(order_id, admin_user, decision):
    with transaction.atomic():
        order = GeneralOrder.objects.select_for_update().get(pk=order_id)
        if order.status != 'new':
            raise OrderActionError(_('Only new orders can be reviewed.'))
        order.status = decision
        order.reviewed_by = admin_user
        order.reviewed_at = timezone.now()
        order.save(update_fields=['status', 'reviewed_by', 'reviewed_at', 'updated_at'])
    logger.info(f"Admin {admin_user.id} set general order {order.id} to {decision}")
    return order
