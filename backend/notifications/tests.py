"""
Test suite for the notifications module
Tests: listing with unread count, mark read, delete and clear all
"""
from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.notifications.models import Notification
from backend.notifications.utils import create_notification


class CreateNotificationTests(TestCase):
    """Test the create_notification helper"""

    def test_unique_per_link(self):
        user = TestDataFactory.create_user()
        self.assertIsNotNone(create_notification(user, 'First', link='/chat/1', unique=True))
        self.assertIsNone(create_notification(user, 'Second', link='/chat/1', unique=True))
        self.assertIsNotNone(create_notification(user, 'Plain', link='/chat/1'))
        self.assertEqual(Notification.objects.filter(user=user).count(), 2)


class NotificationAPITests(TestCase):
    """Test notification endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.older = create_notification(self.user, 'Trip approved', link='/my-trips')
        self.newer = create_notification(self.user, 'New request', link='/my-requests')
        self.other_users = create_notification(TestDataFactory.create_user(), 'Not yours')

    def test_list_newest_first_with_unread_count(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['id'] for n in response.data['results']], [self.newer.id, self.older.id])
        self.assertEqual(response.data['unread_count'], 2)

    def test_mark_read(self):
        response = self.client.post(f'/api/v1/notifications/{self.older.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        self.assertEqual(self.client.get('/api/v1/notifications/').data['unread_count'], 1)

    def test_delete_one(self):
        response = self.client.delete(f'/api/v1/notifications/{self.older.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(pk=self.older.pk).exists())

    def test_cannot_touch_other_users_notifications(self):
        self.assertEqual(self.client.delete(f'/api/v1/notifications/{self.other_users.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.post(f'/api/v1/notifications/{self.other_users.id}/read/').status_code, status.HTTP_404_NOT_FOUND)

    def test_clear_all(self):
        response = self.client.delete('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(user=self.user).exists())
        self.assertTrue(Notification.objects.filter(pk=self.other_users.pk).exists())
