"""
Test suite for the profiles module
Tests: phone normalisation, profile completion, avatar upload,
verification submission and the admin verification function
"""
import io
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.notifications.models import Notification
from backend.profiles.models import Profile, VerificationRequest
from backend.profiles.utils import normalize_iraqi_phone, international_phone, get_verification_status

DOCUMENTS = {
    'id_front_url': 'https://files.test/front.jpg',
    'id_back_url': 'https://files.test/back.jpg',
    'photo_id_url': 'https://files.test/selfie.jpg',
}


class PhoneNormalizationTests(TestCase):
    """Test Iraqi phone normalisation"""

    def test_accepted_formats(self):
        """Test local, international and separated formats"""
        for raw in ['07701234567', '9647701234567', '+9647701234567', '009647701234567',
                    '0770 123 4567', '+964-770-123-4567', '7701234567']:
            self.assertEqual(normalize_iraqi_phone(raw), '7701234567', raw)

    def test_rejected_formats(self):
        """Test wrong lengths and prefixes"""
        for raw in ['', None, '0123', '06701234567', '+9646701234567', '077012345678']:
            self.assertIsNone(normalize_iraqi_phone(raw), raw)

    def test_international_phone(self):
        self.assertEqual(international_phone('7701234567'), '+9647701234567')
        self.assertIsNone(international_phone(None))


class ProfileSignalTests(TestCase):
    """Test profile creation on user creation"""

    def test_profile_created_with_user(self):
        user = TestDataFactory.create_user()
        self.assertTrue(Profile.objects.filter(user=user).exists())
        self.assertEqual(user.profile.role, 'both')
        self.assertFalse(user.profile.is_complete)


class ProfileAPITests(TestCase):
    """Test profile endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_get_own_profile(self):
        response = self.client.get('/api/v1/profiles/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.id)
        self.assertFalse(response.data['is_complete'])

    def test_complete_profile(self):
        """Test setting names and phone completes the profile"""
        response = self.client.patch('/api/v1/profiles/me/', {
            'first_name': ' Huda ', 'last_name': 'Kareem', 'phone': '+964 770 123 4567', 'role': 'sender'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_complete'])
        self.assertEqual(response.data['first_name'], 'Huda')
        self.assertEqual(response.data['phone'], '7701234567')
        self.assertTrue(AuditLog.objects.filter(action='profile_update', user=self.user).exists())

    def test_names_are_required(self):
        """Test a profile cannot be saved without first and last name"""
        response = self.client.patch('/api/v1/profiles/me/', {'first_name': 'Huda'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('last_name', response.data['details'])

    def test_invalid_phone(self):
        response = self.client.patch('/api/v1/profiles/me/', {
            'first_name': 'Huda', 'last_name': 'Kareem', 'phone': '12345'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_grant_self_admin(self):
        """Test admin and verified flags are read-only"""
        self.client.patch('/api/v1/profiles/me/', {
            'first_name': 'Huda', 'last_name': 'Kareem', 'is_admin': True, 'is_verified': True
        }, format='json')
        self.user.profile.refresh_from_db()
        self.assertFalse(self.user.profile.is_admin)
        self.assertFalse(self.user.profile.is_verified)

    def test_public_profile(self):
        """Test public profile hides the phone"""
        other = TestDataFactory.create_user(first_name='Ahmed', phone='7701234567')
        response = self.client.get(f'/api/v1/profiles/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Ahmed')
        self.assertNotIn('phone', response.data)


class AvatarUploadTests(TestCase):
    """Test avatar upload to local storage"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def _image(self):
        buffer = io.BytesIO()
        Image.new('RGB', (10, 10), 'red').save(buffer, format='PNG')
        return SimpleUploadedFile('me.png', buffer.getvalue(), content_type='image/png')

    def test_upload_sets_avatar_url(self):
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/profiles/me/avatar/', {'avatar': self._image()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(f'/media/avatars/{self.user.id}/', response.data['avatar_url'])
        self.assertTrue(response.data['avatar_url'].endswith('-avatar.png'))

    def test_rejects_non_image(self):
        bogus = SimpleUploadedFile('me.png', b'not an image', content_type='image/png')
        with override_settings(MEDIA_ROOT=self.media_root, AZURE_STORAGE_CONNECTION_STRING=''):
            response = self.client.post('/api/v1/profiles/me/avatar/', {'avatar': bogus}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class VerificationTests(TestCase):
    """Test verification submission and status"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_status_none_then_pending(self):
        """Test status moves from none to pending after submitting"""
        self.assertEqual(self.client.get('/api/v1/verification/').data['status'], 'none')
        response = self.client.post('/api/v1/verification/', DOCUMENTS, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(self.client.get('/api/v1/verification/').data['status'], 'pending')

    def test_one_pending_request_at_a_time(self):
        TestDataFactory.create_verification_request(self.user)
        response = self.client.post('/api/v1/verification/', DOCUMENTS, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_resubmit_after_rejection(self):
        TestDataFactory.create_verification_request(self.user, status='rejected')
        response = self.client.post('/api/v1/verification/', DOCUMENTS, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_missing_documents(self):
        response = self.client.post('/api/v1/verification/', {'id_front_url': 'https://files.test/a.jpg'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verified_without_request_is_approved(self):
        """Test profiles verified by an admin directly report approved"""
        verified = TestDataFactory.create_verified_user()
        self.assertEqual(get_verification_status(verified), 'approved')


class AdminVerificationTests(TestCase):
    """Test the admin verification function"""

    url = '/api/v1/functions/admin-verification/'

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.user = TestDataFactory.create_user(first_name='Noor', last_name='Saad')
        self.verification_request = TestDataFactory.create_verification_request(self.user)

    def test_approve_marks_profile_verified(self):
        response = self.client.post(self.url, {
            'request_id': self.verification_request.id, 'user_id': self.user.id, 'status': 'approved'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})
        self.verification_request.refresh_from_db()
        self.assertEqual(self.verification_request.status, 'approved')
        self.assertEqual(self.verification_request.reviewed_by, self.admin)
        self.assertTrue(Profile.objects.get(user=self.user).is_verified)
        self.assertTrue(Notification.objects.filter(user=self.user, link='/my-profile').exists())
        self.assertTrue(AuditLog.objects.filter(action='verification_review').exists())

    def test_reject_clears_verified_flag(self):
        Profile.objects.filter(user=self.user).update(is_verified=True)
        response = self.client.post(self.url, {
            'request_id': self.verification_request.id, 'user_id': self.user.id, 'status': 'rejected'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Profile.objects.get(user=self.user).is_verified)
        self.assertEqual(get_verification_status(self.user), 'rejected')

    def test_invalid_status(self):
        response = self.client.post(self.url, {
            'request_id': self.verification_request.id, 'user_id': self.user.id, 'status': 'maybe'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_mismatch_is_404(self):
        other = TestDataFactory.create_user()
        response = self.client.post(self.url, {
            'request_id': self.verification_request.id, 'user_id': other.id, 'status': 'approved'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', response.data)

    def test_non_admin_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.post(self.url, {
            'request_id': self.verification_request.id, 'user_id': self.user.id, 'status': 'approved'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(VerificationRequest.objects.get(pk=self.verification_request.pk).status, 'pending')

    def test_admin_list_includes_names_and_email(self):
        response = self.client.get('/api/v1/admin/verification-requests/', {'status': 'pending'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['first_name'], 'Noor')
        self.assertEqual(response.data[0]['email'], self.user.email)
