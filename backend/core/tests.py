"""
Test suite for the core module
Tests: registration, JWT login/refresh, error envelope, admin e-mail lookup,
audit logs and the create_admin_user command
"""
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.exceptions import MISSING_AUTH_MESSAGE, INVALID_TOKEN_MESSAGE, first_error_message
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, display_name, is_admin_user
from backend.profiles.models import Profile

User = get_user_model()


class AuthTests(TestCase):
    """Test register, login, refresh and me endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_register_creates_user_profile_and_tokens(self):
        """Test registration returns tokens and creates the profile"""
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'layla',
            'email': 'Layla@Example.com',
            'password': 'strong-pass-987',
            'password_confirm': 'strong-pass-987',
            'phone': '07701234567',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        user = User.objects.get(username='layla')
        self.assertEqual(user.email, 'layla@example.com')
        self.assertEqual(user.profile.phone, '7701234567')

    def test_register_password_mismatch(self):
        """Test mismatching passwords are rejected with an error key"""
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'omar',
            'email': 'omar@example.com',
            'password': 'strong-pass-987',
            'password_confirm': 'other-pass-987',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_register_duplicate_email(self):
        """Test e-mail uniqueness is case-insensitive"""
        TestDataFactory.create_user(email='taken@example.com')
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'someone',
            'email': 'TAKEN@example.com',
            'password': 'strong-pass-987',
            'password_confirm': 'strong-pass-987',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_and_refresh(self):
        """Test login returns a token pair that can be refreshed"""
        TestDataFactory.create_user(username='traveler1', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'traveler1', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        refresh = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh.data)

    def test_login_disabled_user(self):
        """Test disabled users cannot log in"""
        user = TestDataFactory.create_user(username='disabled', password='testpass123')
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'disabled', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_profile_and_admin_flag(self):
        """Test me endpoint includes the profile and is_admin"""
        admin = TestDataFactory.create_admin(first_name='Sara', last_name='Ali')
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_admin'])
        self.assertEqual(response.data['profile']['first_name'], 'Sara')

    def test_missing_header_returns_401_message(self):
        """Test missing Authorization header gives the 401 error body"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': MISSING_AUTH_MESSAGE})

    def test_invalid_token_returns_401_message(self):
        """Test a garbage Bearer token gives the invalid token body"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': INVALID_TOKEN_MESSAGE})


class AdminUserLookupTests(TestCase):
    """Test the admin e-mail lookup function"""

    url = '/api/v1/functions/admin-user-lookup/'

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.alice = TestDataFactory.create_user(email='alice@example.com')
        self.bob = TestDataFactory.create_user(email='bob@example.com')

    def test_lookup_returns_email_map(self):
        """Test ids resolve to e-mails keyed by string id"""
        response = self.client.post(self.url, {'userIds': [self.alice.id, str(self.bob.id)]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['emailMap'], {
            str(self.alice.id): 'alice@example.com',
            str(self.bob.id): 'bob@example.com',
        })

    def test_unknown_ids_are_left_out(self):
        """Test unknown ids are not in the map"""
        response = self.client.post(self.url, {'userIds': [self.alice.id, 999999]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(response.data['emailMap'].keys()), [str(self.alice.id)])

    def test_malformed_payloads(self):
        """Test missing, empty and non-list userIds give 400"""
        for payload in [{}, {'userIds': []}, {'userIds': 'abc'}, {'userIds': ['x']}, {'userIds': [True]}]:
            response = self.client.post(self.url, payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, payload)
            self.assertEqual(response.data['error'], 'Invalid or missing userIds array')

    def test_requires_token(self):
        """Test lookup without a token is 401"""
        response = APIClient().post(self.url, {'userIds': [self.alice.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], MISSING_AUTH_MESSAGE)

    def test_requires_admin(self):
        """Test regular users are forbidden"""
        client = AuthenticatedAPIClient().authenticate_user(self.alice)
        response = client.post(self.url, {'userIds': [self.bob.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)


class AdminCheckTests(TestCase):
    """Test is_admin_user and display_name helpers"""

    def test_profile_flag_staff_and_regular(self):
        """Test profile admins and staff are admins; regular users are not"""
        self.assertTrue(is_admin_user(TestDataFactory.create_admin()))
        self.assertTrue(is_admin_user(TestDataFactory.create_user(is_staff=True)))
        self.assertFalse(is_admin_user(TestDataFactory.create_user()))

    def test_display_name_falls_back_to_username(self):
        """Test display name prefers the profile name"""
        named = TestDataFactory.create_user(first_name='Zaid', last_name='Hassan')
        unnamed = TestDataFactory.create_user(username='plainuser')
        self.assertEqual(display_name(named), 'Zaid Hassan')
        self.assertEqual(display_name(unnamed), 'plainuser')


class AuditLogTests(TestCase):
    """Test audit log creation and listing"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def test_create_audit_log_with_user(self):
        """Test audit log entries can be written without a request"""
        log = create_audit_log(user=self.admin, action='trip_approve', model_name='Trip', object_id=5)
        self.assertIsNotNone(log)
        self.assertEqual(log.object_id, '5')

    def test_list_filters_by_action(self):
        """Test the admin list filters by action"""
        create_audit_log(user=self.admin, action='trip_approve', model_name='Trip', object_id=1)
        create_audit_log(user=self.admin, action='payment_review', model_name='DeliveryRequest', object_id=2)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'payment_review'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'DeliveryRequest')

    def test_list_requires_admin(self):
        """Test regular users cannot read audit logs"""
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CorsTests(TestCase):
    """Test browser clients can call the functions from any origin"""

    FUNCTION_URLS = [
        '/api/v1/functions/admin-user-lookup/',
        '/api/v1/functions/unread-chat-count/',
    ]

    def test_preflight(self):
        for url in self.FUNCTION_URLS:
            response = self.client.options(
                url,
                HTTP_ORIGIN='https://app.waslaha.test',
                HTTP_ACCESS_CONTROL_REQUEST_METHOD='POST',
                HTTP_ACCESS_CONTROL_REQUEST_HEADERS='authorization, content-type',
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK, url)
            self.assertEqual(response['Access-Control-Allow-Origin'], '*')
            self.assertEqual(
                response['Access-Control-Allow-Headers'],
                'authorization, x-client-info, apikey, content-type',
            )

    def test_error_responses_carry_origin_header(self):
        response = self.client.post(self.FUNCTION_URLS[0], {}, HTTP_ORIGIN='https://app.waslaha.test')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response['Access-Control-Allow-Origin'], '*')


class ErrorMessageTests(TestCase):
    """Test first_error_message flattening"""

    def test_nested_field_errors(self):
        self.assertEqual(first_error_message({'weight_kg': ['Too small.']}), 'weight_kg: Too small.')
        self.assertEqual(first_error_message({'non_field_errors': ['Bad.']}), 'Bad.')
        self.assertIsNone(first_error_message({}))


class CreateAdminUserCommandTests(TestCase):
    """Test the create_admin_user management command"""

    def test_creates_admin_and_is_idempotent(self):
        """Test running twice keeps one admin with an admin profile"""
        out = StringIO()
        call_command('create_admin_user', '--password', 'admin-pass-123', '--phone', '+9647701234567', stdout=out)
        call_command('create_admin_user', '--password', 'other-pass-123', stdout=out)

        self.assertEqual(User.objects.filter(username='admin').count(), 1)
        admin = User.objects.get(username='admin')
        self.assertTrue(admin.check_password('admin-pass-123'))
        profile = Profile.objects.get(user=admin)
        self.assertTrue(profile.is_admin)
        self.assertTrue(profile.is_verified)
        self.assertEqual(profile.phone, '7701234567')
        self.assertIn('already exists', out.getvalue())
