"""
Test suite for the trips module
Tests: public listing and filters, list caching, trip creation rules,
admin approval, ticket upload and the trip-tickets bucket function
"""
import shutil
import tempfile
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.cache_utils import get_cached_trips_list
from backend.core.models import AuditLog
from backend.core.storage import StorageError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingTestCase
from backend.notifications.models import Notification
from backend.trips.models import Trip


def _future(days=10):
    return (timezone.localdate() + timedelta(days=days)).isoformat()


class TripListTests(CacheClearingTestCase):
    """Test the public trips list"""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.turkey_trip = TestDataFactory.create_trip(from_country='Turkey', to_country='Iraq', days_ahead=5)
        self.germany_trip = TestDataFactory.create_trip(from_country='Germany', to_country='Iraq', days_ahead=2)
        self.pending_trip = TestDataFactory.create_trip(is_approved=False)

    def test_lists_only_approved_trips_ordered_by_date(self):
        """Test anonymous users see approved trips, soonest first"""
        response = self.client.get('/api/v1/trips/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['id'] for t in response.data], [self.germany_trip.id, self.turkey_trip.id])

    def test_filter_by_route(self):
        response = self.client.get('/api/v1/trips/', {'from_country': 'Turkey'})
        self.assertEqual([t['id'] for t in response.data], [self.turkey_trip.id])

    def test_filter_by_date_on_or_after(self):
        response = self.client.get('/api/v1/trips/', {'trip_date': _future(3)})
        self.assertEqual([t['id'] for t in response.data], [self.turkey_trip.id])

    def test_list_is_cached_and_invalidated_on_save(self):
        """Test a cached list is dropped when a trip changes"""
        self.client.get('/api/v1/trips/')
        cached, _ = get_cached_trips_list({})
        self.assertIsNotNone(cached)

        self.pending_trip.is_approved = True
        self.pending_trip.save()

        cached, _ = get_cached_trips_list({})
        self.assertIsNone(cached)
        response = self.client.get('/api/v1/trips/')
        self.assertEqual(len(response.data), 3)

    def test_list_cache_invalidated_on_delete(self):
        self.client.get('/api/v1/trips/')
        self.germany_trip.delete()
        response = self.client.get('/api/v1/trips/')
        self.assertEqual([t['id'] for t in response.data], [self.turkey_trip.id])


class TripCreateTests(CacheClearingTestCase):
    """Test trip creation rules"""

    def setUp(self):
        super().setUp()
        self.traveler = TestDataFactory.create_verified_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.traveler)

    def _payload(self, **overrides):
        payload = {
            'from_country': 'Turkey',
            'to_country': 'Iraq',
            'trip_date': _future(),
            'free_kg': '15',
            'traveler_location': 'Istanbul',
        }
        payload.update(overrides)
        return payload

    def test_verified_user_creates_unapproved_trip(self):
        """Test new trips wait for approval and get the default rate"""
        response = self.client.post('/api/v1/trips/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        trip = Trip.objects.get(pk=response.data['id'])
        self.assertFalse(trip.is_approved)
        self.assertEqual(trip.charge_per_kg, Decimal('5.00'))
        self.assertEqual(trip.user, self.traveler)

    def test_unverified_user_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.post('/api/v1/trips/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

    def test_anonymous_create_is_401(self):
        response = APIClient().post('/api/v1/trips/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_rejects_past_date_same_route_and_negative_weight(self):
        past = (timezone.localdate() - timedelta(days=1)).isoformat()
        for overrides in [{'trip_date': past}, {'to_country': 'Turkey'}, {'free_kg': '-1'}]:
            response = self.client.post('/api/v1/trips/', self._payload(**overrides), format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, overrides)

    def test_mine_includes_unapproved(self):
        TestDataFactory.create_trip(user=self.traveler, is_approved=False)
        response = self.client.get('/api/v1/trips/mine/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class TripDetailTests(CacheClearingTestCase):
    """Test trip detail visibility and mutation"""

    def setUp(self):
        super().setUp()
        self.owner = TestDataFactory.create_verified_user()
        self.trip = TestDataFactory.create_trip(user=self.owner, is_approved=False)
        self.other = TestDataFactory.create_user()

    def test_unapproved_hidden_from_others(self):
        client = AuthenticatedAPIClient().authenticate_user(self.other)
        response = client.get(f'/api/v1/trips/{self.trip.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_sees_and_updates(self):
        client = AuthenticatedAPIClient().authenticate_user(self.owner)
        self.assertEqual(client.get(f'/api/v1/trips/{self.trip.id}/').status_code, status.HTTP_200_OK)
        response = client.patch(f'/api/v1/trips/{self.trip.id}/', {'free_kg': '8'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['free_kg']), Decimal('8'))

    def test_route_change_requires_new_approval(self):
        """Test editing the route of an approved trip sends it back to admin review"""
        self.trip.is_approved = True
        self.trip.save()
        client = AuthenticatedAPIClient().authenticate_user(self.owner)

        response = client.patch(f'/api/v1/trips/{self.trip.id}/', {'free_kg': '12', 'to_country': 'Iraq'}, format='json')
        self.assertTrue(response.data['is_approved'])

        response = client.patch(f'/api/v1/trips/{self.trip.id}/', {'to_country': 'Jordan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_approved'])
        self.trip.refresh_from_db()
        self.assertIsNone(self.trip.approved_at)
        listing = APIClient().get('/api/v1/trips/')
        self.assertNotIn(self.trip.id, [t['id'] for t in listing.data])

    def test_admin_edit_keeps_approval(self):
        self.trip.is_approved = True
        self.trip.save()
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = client.patch(f'/api/v1/trips/{self.trip.id}/', {'to_country': 'Jordan'}, format='json')
        self.assertTrue(response.data['is_approved'])

    def test_others_cannot_delete(self):
        self.trip.is_approved = True
        self.trip.save()
        client = AuthenticatedAPIClient().authenticate_user(self.other)
        response = client.delete(f'/api/v1/trips/{self.trip.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Trip.objects.filter(pk=self.trip.pk).exists())


class TripApprovalTests(CacheClearingTestCase):
    """Test admin trip approval"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.trip = TestDataFactory.create_trip(is_approved=False)

    def test_pending_list_and_approve(self):
        response = self.client.get('/api/v1/admin/trips/pending/')
        self.assertEqual([t['id'] for t in response.data], [self.trip.id])

        response = self.client.post(f'/api/v1/trips/{self.trip.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.trip.refresh_from_db()
        self.assertTrue(self.trip.is_approved)
        self.assertEqual(self.trip.approved_by, self.admin)
        self.assertTrue(AuditLog.objects.filter(action='trip_approve', object_id=str(self.trip.id)).exists())
        self.assertTrue(Notification.objects.filter(user=self.trip.user, link='/my-trips').exists())

    def test_non_admin_cannot_approve(self):
        client = AuthenticatedAPIClient().authenticate_user(self.trip.user)
        response = client.post(f'/api/v1/trips/{self.trip.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TicketUploadTests(CacheClearingTestCase):
    """Test ticket uploads and bucket provisioning"""

    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.user = TestDataFactory.create_verified_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_upload_ticket_path(self):
        """Test the ticket lands at <user_id>/<timestamp>-ticket.<ext>"""
        ticket = SimpleUploadedFile('Ticket.PDF', b'%PDF-1.4 test', content_type='application/pdf')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/trips/tickets/', {'file': ticket}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['path'].startswith(f'{self.user.id}/'))
        self.assertTrue(response.data['path'].endswith('-ticket.pdf'))
        self.assertIn('/media/trip-tickets/', response.data['url'])

    def test_upload_disk_failure_returns_json_error(self):
        """Test a local storage OSError comes back as a 500 with an error body"""
        ticket = SimpleUploadedFile('ticket.pdf', b'%PDF-1.4 test', content_type='application/pdf')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''), \
                mock.patch('backend.core.storage.default_storage.save', side_effect=OSError('disk full')):
            response = self.client.post('/api/v1/trips/tickets/', {'file': ticket}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to upload ticket file.')
        self.assertEqual(response.data['details'], 'disk full')

    def test_rejects_unsupported_type(self):
        ticket = SimpleUploadedFile('ticket.exe', b'MZ', content_type='application/octet-stream')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/trips/tickets/', {'file': ticket}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bucket_function_is_idempotent(self):
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            first = self.client.post('/api/v1/functions/create-trip-tickets-bucket/')
            second = self.client.post('/api/v1/functions/create-trip-tickets-bucket/')
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data, {'success': True, 'bucket': 'trip-tickets'})

    def test_bucket_function_storage_failure(self):
        with mock.patch('backend.trips.views.ensure_bucket', side_effect=StorageError('boom')):
            response = self.client.post('/api/v1/functions/create-trip-tickets-bucket/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Failed to create trip-tickets bucket'})

    def test_bucket_function_uses_azure_when_configured(self):
        """Test an existing Azure container counts as success"""
        from azure.core.exceptions import ResourceExistsError

        service = mock.MagicMock()
        service.create_container.side_effect = ResourceExistsError('exists')
        with override_settings(AZURE_STORAGE_CONNECTION_STRING='UseDevelopmentStorage=true'), \
                mock.patch('backend.core.storage.get_blob_service_client', return_value=service):
            response = self.client.post('/api/v1/functions/create-trip-tickets-bucket/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        service.create_container.assert_called_once_with('trip-tickets', public_access='blob')

    def test_bucket_function_requires_token(self):
        response = APIClient().post('/api/v1/functions/create-trip-tickets-bucket/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
