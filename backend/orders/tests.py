"""
Comprehensive test suite for the orders module
Tests: pricing, tracking stages, request lifecycle (accept/reject, mutual
cancel, proposed changes, tracking), photos, payments and general orders
"""
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.chat.models import Chat
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingTestCase
from backend.notifications.models import Notification
from backend.orders.models import DeliveryRequest, GeneralOrder
from backend.orders.pricing import (
    ROUTE_NOT_SUPPORTED, calculate_shipping_cost, default_charge_per_kg, get_price_per_kg, get_zone, usd_to_iqd,
)
from backend.orders.tracking import TRACKING_STAGES, get_next_stage

PHOTOS = ['https://files.test/p1.jpg', 'https://files.test/p2.jpg']


class PricingTests(TestCase):
    """Test zone and tier pricing"""

    def test_zones(self):
        self.assertEqual(get_zone('Iraq'), 'A')
        self.assertEqual(get_zone('Germany'), 'B')
        self.assertEqual(get_zone('China'), 'C')
        self.assertIsNone(get_zone('Atlantis'))

    def test_tiers(self):
        """Test per-kg rates drop with weight"""
        self.assertEqual(get_price_per_kg('A', 1), Decimal('5.0'))
        self.assertEqual(get_price_per_kg('A', 2), Decimal('5.0'))
        self.assertEqual(get_price_per_kg('A', Decimal('2.5')), Decimal('4.5'))
        self.assertEqual(get_price_per_kg('A', 10), Decimal('4.0'))
        self.assertEqual(get_price_per_kg('A', 11), Decimal('3.5'))

    def test_most_expensive_zone_wins_both_directions(self):
        there = calculate_shipping_cost('Iraq', 'Germany', 1)
        back = calculate_shipping_cost('Germany', 'Iraq', 1)
        self.assertEqual(there['zone'], 'B')
        self.assertEqual(there['total_price_usd'], Decimal('5.50'))
        self.assertEqual(there['total_price_iqd'], back['total_price_iqd'])
        self.assertEqual(there['total_price_iqd'], 8250)

    def test_insurance_multiplier(self):
        result = calculate_shipping_cost('China', 'Iraq', 12, insurance_percentage=50)
        self.assertEqual(result['price_per_kg_usd'], Decimal('9.0'))
        self.assertEqual(result['total_price_usd'], Decimal('108.00'))
        self.assertEqual(result['total_price_iqd'], 162000)

    def test_unsupported_route_and_zero_weight(self):
        unsupported = calculate_shipping_cost('Atlantis', 'Iraq', 3)
        self.assertEqual(unsupported['error'], ROUTE_NOT_SUPPORTED)
        self.assertEqual(unsupported['total_price_iqd'], 0)
        free = calculate_shipping_cost('Turkey', 'Iraq', 0)
        self.assertIsNone(free['error'])
        self.assertEqual(free['total_price_usd'], Decimal('0'))

    @override_settings(USD_TO_IQD_RATE=1310)
    def test_exchange_rate_setting(self):
        self.assertEqual(usd_to_iqd(Decimal('10.00')), 13100)

    def test_default_charge_per_kg(self):
        self.assertEqual(default_charge_per_kg('Turkey', 'Iraq'), Decimal('5.0'))
        self.assertIsNone(default_charge_per_kg('Atlantis', 'Iraq'))


class ReferenceDataAPITests(TestCase):
    """Test public pricing and reference endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_pricing_calculate(self):
        response = self.client.get('/api/v1/pricing/calculate/', {
            'from_country': 'Turkey', 'to_country': 'Iraq', 'weight': '3', 'insurance_percentage': '0'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_price_usd'], '13.50')
        self.assertEqual(response.data['total_price_iqd'], 20250)
        self.assertIsNone(response.data['error'])

    def test_pricing_calculate_requires_weight(self):
        response = self.client.get('/api/v1/pricing/calculate/', {'from_country': 'Turkey', 'to_country': 'Iraq'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_countries_tracking_and_forbidden_items(self):
        countries = self.client.get('/api/v1/pricing/countries/').data['countries']
        self.assertIn('Iraq', countries)
        self.assertEqual(countries, sorted(countries))
        stages = self.client.get('/api/v1/tracking-stages/').data
        self.assertEqual([s['order'] for s in stages], list(range(1, 9)))
        items = self.client.get('/api/v1/forbidden-items/').data
        self.assertIn('powerBanks', [i['key'] for i in items])

    def test_next_stage(self):
        self.assertEqual(get_next_stage('waiting_approval'), 'item_accepted')
        self.assertIsNone(get_next_stage('completed'))
        self.assertIsNone(get_next_stage('unknown'))
        self.assertEqual(TRACKING_STAGES[-1]['key'], 'completed')


class RequestCreateTests(CacheClearingTestCase):
    """Test sending delivery requests"""

    def setUp(self):
        super().setUp()
        self.traveler = TestDataFactory.create_verified_user()
        self.trip = TestDataFactory.create_trip(user=self.traveler)
        self.sender = TestDataFactory.create_user(first_name='Rana', last_name='Fadhil')
        self.client = AuthenticatedAPIClient().authenticate_user(self.sender)

    def _payload(self, **overrides):
        payload = {
            'trip': self.trip.id,
            'description': 'Two books and a scarf',
            'weight_kg': '3',
            'destination_city': 'Basra',
            'receiver_details': 'Mustafa, 07801234567',
        }
        payload.update(overrides)
        return payload

    def test_create_request_notifies_traveler(self):
        response = self.client.post('/api/v1/requests/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['tracking_status'], 'waiting_approval')
        self.assertEqual(response.data['sender_id'], self.sender.id)
        notification = Notification.objects.get(user=self.traveler)
        self.assertIn('Rana Fadhil', notification.message)

    def test_validation_rules(self):
        """Test weight, text lengths, own trip and unapproved trip"""
        unapproved = TestDataFactory.create_trip(is_approved=False)
        cases = [
            {'weight_kg': '0.05'},
            {'description': 'short'},
            {'destination_city': 'B'},
            {'receiver_details': 'too short'},
            {'trip': unapproved.id},
        ]
        for overrides in cases:
            response = self.client.post('/api/v1/requests/', self._payload(**overrides), format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, overrides)

        own = AuthenticatedAPIClient().authenticate_user(self.traveler)
        response = own.post('/api/v1/requests/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeliveryRequest.objects.exists())

    def test_sent_and_received_lists(self):
        TestDataFactory.create_request(self.trip, sender=self.sender)
        sent = self.client.get('/api/v1/requests/sent/')
        self.assertEqual(len(sent.data), 1)
        traveler_client = AuthenticatedAPIClient().authenticate_user(self.traveler)
        received = traveler_client.get('/api/v1/requests/received/', {'status': 'pending'})
        self.assertEqual(len(received.data), 1)

    def test_detail_limited_to_participants(self):
        delivery_request = TestDataFactory.create_request(self.trip, sender=self.sender)
        stranger = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(stranger.get(f'/api/v1/requests/{delivery_request.id}/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(f'/api/v1/requests/{delivery_request.id}/').status_code, status.HTTP_200_OK)


class RequestResponseTests(CacheClearingTestCase):
    """Test the traveler's accept/reject decision"""

    def setUp(self):
        super().setUp()
        self.traveler = TestDataFactory.create_verified_user()
        self.trip = TestDataFactory.create_trip(user=self.traveler, free_kg=Decimal('5.00'))
        self.sender = TestDataFactory.create_user()
        self.delivery_request = TestDataFactory.create_request(self.trip, sender=self.sender, weight_kg=Decimal('3.00'))
        self.client = AuthenticatedAPIClient().authenticate_user(self.traveler)

    def _respond(self, client, decision, delivery_request=None):
        delivery_request = delivery_request or self.delivery_request
        return client.post(f'/api/v1/requests/{delivery_request.id}/respond/', {'status': decision}, format='json')

    def test_accept_takes_capacity_and_opens_chat(self):
        response = self._respond(self.client, 'accepted')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'accepted')
        self.assertEqual(response.data['tracking_status'], 'item_accepted')
        self.assertIsNotNone(response.data['chat_id'])
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.free_kg, Decimal('2.00'))
        self.assertTrue(Chat.objects.filter(request=self.delivery_request).exists())
        self.assertTrue(Notification.objects.filter(user=self.sender, link='/my-requests').exists())
        self.assertTrue(AuditLog.objects.filter(action='request_accept').exists())

    def test_accept_over_capacity(self):
        second = TestDataFactory.create_request(self.trip, weight_kg=Decimal('3.00'))
        self._respond(self.client, 'accepted')
        response = self._respond(self.client, 'accepted', second)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        second.refresh_from_db()
        self.assertEqual(second.status, 'pending')
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.free_kg, Decimal('2.00'))

    def test_only_traveler_responds_once(self):
        sender_client = AuthenticatedAPIClient().authenticate_user(self.sender)
        self.assertEqual(self._respond(sender_client, 'accepted').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self._respond(self.client, 'rejected').status_code, status.HTTP_200_OK)
        self.assertEqual(self._respond(self.client, 'accepted').status_code, status.HTTP_400_BAD_REQUEST)
        self.delivery_request.refresh_from_db()
        self.assertEqual(self.delivery_request.status, 'rejected')
        self.assertEqual(self.delivery_request.tracking_status, 'waiting_approval')

    def test_invalid_decision(self):
        self.assertEqual(self._respond(self.client, 'maybe').status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_request(self):
        response = self.client.post('/api/v1/requests/999999/respond/', {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class MutualCancellationTests(CacheClearingTestCase):
    """Test two-party cancellation"""

    def setUp(self):
        super().setUp()
        self.delivery_request = TestDataFactory.create_accepted_request(weight_kg=Decimal('4.00'))
        self.trip = self.delivery_request.trip
        self.sender_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.sender)
        self.traveler_client = AuthenticatedAPIClient().authenticate_user(self.trip.user)
        self.url = f'/api/v1/requests/{self.delivery_request.id}/cancel/'

    def test_second_party_confirms_and_capacity_returns(self):
        first = self.sender_client.post(self.url)
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['status'], 'requested')
        self.assertEqual(first.data['request']['cancellation_requested_by'], self.delivery_request.sender_id)

        second = self.traveler_client.post(self.url)
        self.assertEqual(second.data, {'status': 'deleted'})
        self.assertFalse(DeliveryRequest.objects.filter(pk=self.delivery_request.pk).exists())
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.free_kg, Decimal('20.00'))

    def test_same_party_twice(self):
        self.sender_client.post(self.url)
        response = self.sender_client.post(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(DeliveryRequest.objects.filter(pk=self.delivery_request.pk).exists())

    def test_outsider_cannot_cancel(self):
        outsider = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(outsider.post(self.url).status_code, status.HTTP_400_BAD_REQUEST)

    def test_sender_delete_restores_capacity(self):
        response = self.sender_client.delete(f'/api/v1/requests/{self.delivery_request.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.free_kg, Decimal('20.00'))

    def test_traveler_cannot_delete(self):
        response = self.traveler_client.delete(f'/api/v1/requests/{self.delivery_request.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ProposedChangesTests(CacheClearingTestCase):
    """Test sender proposals reviewed by the traveler"""

    def setUp(self):
        super().setUp()
        self.delivery_request = TestDataFactory.create_accepted_request(weight_kg=Decimal('3.00'))
        self.trip = self.delivery_request.trip
        self.sender_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.sender)
        self.traveler_client = AuthenticatedAPIClient().authenticate_user(self.trip.user)
        self.base = f'/api/v1/requests/{self.delivery_request.id}'

    def _propose(self, weight):
        return self.sender_client.post(f'{self.base}/propose-changes/', {
            'weight_kg': weight, 'description': 'Books, scarf and a small box of sweets'
        }, format='json')

    def test_accept_applies_changes_and_adjusts_capacity(self):
        self.assertEqual(self._propose('5').status_code, status.HTTP_200_OK)
        response = self.traveler_client.post(f'{self.base}/review-changes/', {'accept': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['proposed_changes'])
        self.assertEqual(Decimal(response.data['weight_kg']), Decimal('5'))
        self.trip.refresh_from_db()
        self.assertEqual(self.trip.free_kg, Decimal('15.00'))

    def test_reject_clears_proposal(self):
        self._propose('5')
        response = self.traveler_client.post(f'{self.base}/review-changes/', {'accept': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['weight_kg']), Decimal('3'))
        self.assertIsNone(response.data['proposed_changes'])

    def test_accept_over_capacity(self):
        self._propose('30')
        response = self.traveler_client.post(f'{self.base}/review-changes/', {'accept': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_sender_proposes(self):
        response = self.traveler_client.post(f'{self.base}/propose-changes/', {
            'weight_kg': '2', 'description': 'Changed by the traveler'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_review_without_proposal(self):
        response = self.traveler_client.post(f'{self.base}/review-changes/', {'accept': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TrackingTests(CacheClearingTestCase):
    """Test tracking stage moves and photos"""

    def setUp(self):
        super().setUp()
        self.delivery_request = TestDataFactory.create_accepted_request()
        self.sender_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.sender)
        self.traveler_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.trip.user)
        self.base = f'/api/v1/requests/{self.delivery_request.id}'

    def _track(self, client, stage):
        return client.post(f'{self.base}/tracking/', {'tracking_status': stage}, format='json')

    def test_moves_one_stage_at_a_time(self):
        DeliveryRequest.objects.filter(pk=self.delivery_request.pk).update(tracking_status='payment_done')
        self.assertEqual(self._track(self.traveler_client, 'traveler_inspection_complete').status_code, status.HTTP_400_BAD_REQUEST)
        response = self._track(self.sender_client, 'sender_photos_uploaded')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['tracking_status'], 'sender_photos_uploaded')
        self.assertTrue(AuditLog.objects.filter(action='tracking_update').exists())
        self.assertTrue(Notification.objects.filter(user=self.delivery_request.trip.user).exists())

    def test_payment_done_needs_confirmed_payment(self):
        """Test tracking cannot reach payment_done until an admin confirms the payment"""
        response = self._track(self.sender_client, 'payment_done')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.delivery_request.refresh_from_db()
        self.assertEqual(self.delivery_request.tracking_status, 'item_accepted')
        self.assertEqual(self.delivery_request.payment_status, 'unpaid')

        self.sender_client.post(f'{self.base}/payment/', {
            'payment_method': 'qicard',
            'payment_proof_url': 'https://files.test/receipt.jpg',
        }, format='json')
        self.assertEqual(self._track(self.sender_client, 'payment_done').status_code, status.HTTP_400_BAD_REQUEST)

        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        review = admin_client.post(
            f'/api/v1/admin/payments/{self.delivery_request.id}/review/', {'payment_status': 'paid'}, format='json'
        )
        self.assertEqual(review.data['tracking_status'], 'payment_done')
        self.assertEqual(self._track(self.sender_client, 'sender_photos_uploaded').status_code, status.HTTP_200_OK)

    def test_on_the_way_requires_inspection(self):
        DeliveryRequest.objects.filter(pk=self.delivery_request.pk).update(tracking_status='traveler_inspection_complete')
        self.assertEqual(self._track(self.traveler_client, 'traveler_on_the_way').status_code, status.HTTP_400_BAD_REQUEST)

        photos = self.traveler_client.post(f'{self.base}/inspection-photos/', {'photos': PHOTOS}, format='json')
        self.assertEqual(photos.status_code, status.HTTP_200_OK)
        self.assertEqual(photos.data['traveler_inspection_photos'], PHOTOS)
        self.assertEqual(self._track(self.traveler_client, 'traveler_on_the_way').status_code, status.HTTP_200_OK)

    def test_pending_request_cannot_be_tracked(self):
        pending = TestDataFactory.create_request(self.delivery_request.trip, sender=self.delivery_request.sender)
        response = self.sender_client.post(f'/api/v1/requests/{pending.id}/tracking/', {'tracking_status': 'item_accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_photo_roles(self):
        """Test only the sender uploads sender photos and only the traveler inspects"""
        self.assertEqual(
            self.traveler_client.post(f'{self.base}/sender-photos/', {'photos': PHOTOS}, format='json').status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        self.assertEqual(
            self.sender_client.post(f'{self.base}/inspection-photos/', {'photos': PHOTOS}, format='json').status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        response = self.sender_client.post(f'{self.base}/sender-photos/', {'photos': PHOTOS}, format='json')
        self.assertEqual(response.data['sender_item_photos'], PHOTOS)

    def test_empty_photo_list(self):
        response = self.sender_client.post(f'{self.base}/sender-photos/', {'photos': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sender_needs_two_photos(self):
        """Test the sender uploads at least two item photos, the traveler at least one"""
        response = self.sender_client.post(f'{self.base}/sender-photos/', {'photos': PHOTOS[:1]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('photos', response.data['details'])

        response = self.traveler_client.post(f'{self.base}/inspection-photos/', {'photos': PHOTOS[:1]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'accepted')


class PaymentTests(CacheClearingTestCase):
    """Test payment proof submission and admin review"""

    def setUp(self):
        super().setUp()
        self.delivery_request = TestDataFactory.create_accepted_request(weight_kg=Decimal('3.00'))
        self.sender_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.sender)
        self.admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        self.url = f'/api/v1/requests/{self.delivery_request.id}/payment/'
        self.proof = {
            'payment_method': 'zaincash',
            'payment_proof_url': 'https://files.test/receipt.jpg',
            'payment_reference': 'ZC-123',
        }

    def test_submit_prices_server_side(self):
        response = self.sender_client.post(self.url, self.proof, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'pending_review')
        self.assertEqual(response.data['payment_amount_iqd'], 20250)
        self.assertIsNotNone(response.data['payment_updated_at'])

    def test_resubmit_blocked_while_pending(self):
        self.sender_client.post(self.url, self.proof, format='json')
        response = self.sender_client.post(self.url, self.proof, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_sender_of_accepted_request(self):
        traveler_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.trip.user)
        self.assertEqual(traveler_client.post(self.url, self.proof, format='json').status_code, status.HTTP_400_BAD_REQUEST)
        pending = TestDataFactory.create_request(self.delivery_request.trip, sender=self.delivery_request.sender)
        response = self.sender_client.post(f'/api/v1/requests/{pending.id}/payment/', self.proof, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_method(self):
        response = self.sender_client.post(self.url, dict(self.proof, payment_method='cash'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_marks_paid_and_advances_tracking(self):
        self.sender_client.post(self.url, self.proof, format='json')
        listing = self.admin_client.get('/api/v1/admin/payments/')
        self.assertEqual([r['id'] for r in listing.data], [self.delivery_request.id])

        response = self.admin_client.post(
            f'/api/v1/admin/payments/{self.delivery_request.id}/review/', {'payment_status': 'paid'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'paid')
        self.assertEqual(response.data['tracking_status'], 'payment_done')
        self.assertTrue(AuditLog.objects.filter(action='payment_review').exists())

    def test_admin_rejects_and_sender_resubmits(self):
        self.sender_client.post(self.url, self.proof, format='json')
        self.admin_client.post(
            f'/api/v1/admin/payments/{self.delivery_request.id}/review/', {'payment_status': 'rejected'}, format='json'
        )
        response = self.sender_client.post(self.url, self.proof, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_review_without_submission(self):
        response = self.admin_client.post(
            f'/api/v1/admin/payments/{self.delivery_request.id}/review/', {'payment_status': 'paid'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_admin_cannot_review(self):
        response = self.sender_client.post(
            f'/api/v1/admin/payments/{self.delivery_request.id}/review/', {'payment_status': 'paid'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class GeneralOrderTests(TestCase):
    """Test trip-less general orders"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.traveler = TestDataFactory.create_verified_user()
        self.owner_client = AuthenticatedAPIClient().authenticate_user(self.owner)
        self.traveler_client = AuthenticatedAPIClient().authenticate_user(self.traveler)

    def _payload(self, **overrides):
        payload = {
            'from_country': 'Germany',
            'to_country': 'Iraq',
            'description': 'Laptop charger in original box',
            'weight_kg': '2',
            'insurance_percentage': 50,
        }
        payload.update(overrides)
        return payload

    def test_create_sets_insurance_flags(self):
        response = self.owner_client.post('/api/v1/general-orders/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'new')
        self.assertTrue(response.data['is_valuable'])
        self.assertTrue(response.data['insurance_requested'])

    def test_create_validation(self):
        cases = [
            {'from_country': 'Iraq', 'to_country': 'Iraq'},
            {'from_country': 'Germany', 'to_country': 'France'},
            {'weight_kg': '0.5'},
            {'weight_kg': '51'},
            {'description': 'short'},
            {'insurance_percentage': 30},
        ]
        for overrides in cases:
            response = self.owner_client.post('/api/v1/general-orders/', self._payload(**overrides), format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, overrides)

    def test_available_excludes_own_and_claimed(self):
        mine = TestDataFactory.create_general_order(user=self.traveler)
        open_order = TestDataFactory.create_general_order(user=self.owner)
        TestDataFactory.create_general_order(user=self.owner, status='rejected')
        response = self.traveler_client.get('/api/v1/general-orders/available/')
        ids = [o['id'] for o in response.data]
        self.assertEqual(ids, [open_order.id])
        self.assertNotIn(mine.id, ids)

    def test_claim_flow(self):
        order = TestDataFactory.create_general_order(user=self.owner)
        self.assertEqual(
            self.owner_client.post(f'/api/v1/general-orders/{order.id}/claim/').status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        response = self.traveler_client.post(f'/api/v1/general-orders/{order.id}/claim/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'claimed')
        self.assertEqual(response.data['claimed_by_id'], self.traveler.id)
        self.assertTrue(Notification.objects.filter(user=self.owner, link='/my-orders').exists())

        other = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(other.post(f'/api/v1/general-orders/{order.id}/claim/').status_code, status.HTTP_400_BAD_REQUEST)
        claimed = self.traveler_client.get('/api/v1/general-orders/claimed/')
        self.assertEqual([o['id'] for o in claimed.data], [order.id])

    def test_delete_before_claim_only(self):
        order = TestDataFactory.create_general_order(user=self.owner)
        claimed = TestDataFactory.create_general_order(user=self.owner)
        self.traveler_client.post(f'/api/v1/general-orders/{claimed.id}/claim/')

        self.assertEqual(self.owner_client.delete(f'/api/v1/general-orders/{claimed.id}/').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.traveler_client.delete(f'/api/v1/general-orders/{order.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.owner_client.delete(f'/api/v1/general-orders/{order.id}/').status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(list(GeneralOrder.objects.values_list('id', flat=True)), [claimed.id])

    def test_mine(self):
        TestDataFactory.create_general_order(user=self.owner)
        self.assertEqual(len(self.owner_client.get('/api/v1/general-orders/mine/').data), 1)

    def test_admin_review(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        order = TestDataFactory.create_general_order(user=self.owner)
        response = admin_client.post(f'/api/v1/admin/general-orders/{order.id}/review/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        again = admin_client.post(f'/api/v1/admin/general-orders/{order.id}/review/', {'status': 'rejected'}, format='json')
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(AuditLog.objects.filter(action='order_review').exists())

        forbidden = self.owner_client.post(f'/api/v1/admin/general-orders/{order.id}/review/', {'status': 'approved'}, format='json')
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
