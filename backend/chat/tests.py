"""
Test suite for the chat module
Tests: participants, messages, read markers, unread counting and its cache,
new-message notifications, the unread-count function and the sync command
"""
from io import StringIO

from django.core.management import call_command
from rest_framework import status
from rest_framework.test import APIClient

from backend.chat.models import ChatReadStatus
from backend.chat.utils import get_unread_count, mark_chat_read, sync_unread_chat_notifications
from backend.core.cache_utils import get_cached_unread
from backend.core.exceptions import MISSING_AUTH_MESSAGE, INVALID_TOKEN_MESSAGE
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, CacheClearingTestCase
from backend.notifications.models import Notification


class ChatTestCase(CacheClearingTestCase):
    """An accepted request with its chat and both participants"""

    def setUp(self):
        super().setUp()
        self.sender = TestDataFactory.create_user(first_name='Maryam')
        self.traveler = TestDataFactory.create_verified_user(first_name='Karrar')
        trip = TestDataFactory.create_trip(user=self.traveler)
        self.delivery_request = TestDataFactory.create_accepted_request(trip=trip, sender=self.sender)
        self.chat = self.delivery_request.chat
        self.sender_client = AuthenticatedAPIClient().authenticate_user(self.sender)
        self.traveler_client = AuthenticatedAPIClient().authenticate_user(self.traveler)


class ChatAPITests(ChatTestCase):
    """Test chat endpoints"""

    def test_chat_by_request(self):
        response = self.sender_client.get(f'/api/v1/chats/by-request/{self.delivery_request.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.chat.id)

    def test_outsider_is_forbidden(self):
        outsider = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(
            outsider.get(f'/api/v1/chats/by-request/{self.delivery_request.id}/').status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.assertEqual(outsider.get(f'/api/v1/chats/{self.chat.id}/messages/').status_code, status.HTTP_403_FORBIDDEN)

    def test_pending_request_has_no_chat(self):
        pending = TestDataFactory.create_request(self.delivery_request.trip, sender=self.sender)
        response = self.sender_client.get(f'/api/v1/chats/by-request/{pending.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_send_and_list_messages(self):
        response = self.sender_client.post(f'/api/v1/chats/{self.chat.id}/messages/', {'content': '  Hello!  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['content'], 'Hello!')
        self.traveler_client.post(f'/api/v1/chats/{self.chat.id}/messages/', {'content': 'Hi'}, format='json')

        listing = self.traveler_client.get(f'/api/v1/chats/{self.chat.id}/messages/')
        self.assertEqual([m['content'] for m in listing.data], ['Hello!', 'Hi'])

    def test_blank_message_rejected(self):
        response = self.sender_client.post(f'/api/v1/chats/{self.chat.id}/messages/', {'content': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_read_and_status(self):
        TestDataFactory.create_message(self.chat, self.sender)
        status_url = f'/api/v1/chats/by-request/{self.delivery_request.id}/status/'
        before = self.traveler_client.get(status_url)
        self.assertTrue(before.data['has_unread'])
        self.assertIsNone(before.data['last_read_at'])

        self.traveler_client.post(f'/api/v1/chats/{self.chat.id}/read/')
        self.traveler_client.post(f'/api/v1/chats/{self.chat.id}/read/')
        after = self.traveler_client.get(status_url)
        self.assertFalse(after.data['has_unread'])
        self.assertIsNotNone(after.data['last_read_at'])
        self.assertEqual(ChatReadStatus.objects.filter(chat=self.chat, user=self.traveler).count(), 1)


class UnreadCountTests(ChatTestCase):
    """Test unread counting and cache invalidation"""

    def test_counts_only_other_participants_messages(self):
        TestDataFactory.create_message(self.chat, self.sender, 'one')
        TestDataFactory.create_message(self.chat, self.sender, 'two')
        TestDataFactory.create_message(self.chat, self.traveler, 'reply')
        self.assertEqual(get_unread_count(self.traveler), 2)
        self.assertEqual(get_unread_count(self.sender), 1)

    def test_messages_after_last_read_count(self):
        TestDataFactory.create_message(self.chat, self.sender, 'old')
        mark_chat_read(self.chat, self.traveler)
        self.assertEqual(get_unread_count(self.traveler), 0)
        TestDataFactory.create_message(self.chat, self.sender, 'new')
        self.assertEqual(get_unread_count(self.traveler), 1)

    def test_new_message_invalidates_both_participants(self):
        get_unread_count(self.traveler)
        get_unread_count(self.sender)
        self.assertIsNotNone(get_cached_unread(self.traveler.id, 'count')[0])

        TestDataFactory.create_message(self.chat, self.sender)
        self.assertIsNone(get_cached_unread(self.traveler.id, 'count')[0])
        self.assertIsNone(get_cached_unread(self.sender.id, 'count')[0])

    def test_read_marker_invalidates_reader_only(self):
        TestDataFactory.create_message(self.chat, self.sender)
        get_unread_count(self.traveler)
        get_unread_count(self.sender)
        mark_chat_read(self.chat, self.traveler)
        self.assertIsNone(get_cached_unread(self.traveler.id, 'count')[0])
        self.assertIsNotNone(get_cached_unread(self.sender.id, 'count')[0])

    def test_unread_by_tab(self):
        """Test sent/received split by the user's role in each chat"""
        own_trip = TestDataFactory.create_trip(user=self.sender)
        other_request = TestDataFactory.create_accepted_request(trip=own_trip)
        TestDataFactory.create_message(self.chat, self.traveler, 'on my sent request')
        TestDataFactory.create_message(other_request.chat, other_request.sender, 'on my trip')
        TestDataFactory.create_message(other_request.chat, other_request.sender, 'again')

        response = self.sender_client.get('/api/v1/chats/unread-by-tab/')
        self.assertEqual(response.data, {'sent': 1, 'received': 2})


class UnreadCountFunctionTests(ChatTestCase):
    """Test the unread chat count function"""

    url = '/api/v1/functions/unread-chat-count/'

    def test_returns_count_for_get_and_post(self):
        TestDataFactory.create_message(self.chat, self.sender)
        self.assertEqual(self.traveler_client.get(self.url).data, {'unread_count': 1})
        self.assertEqual(self.traveler_client.post(self.url).data, {'unread_count': 1})
        self.assertEqual(self.sender_client.get(self.url).data, {'unread_count': 0})

    def test_missing_token(self):
        response = APIClient().get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': MISSING_AUTH_MESSAGE})

    def test_invalid_token(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION='Bearer broken')
        response = client.post(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': INVALID_TOKEN_MESSAGE})


class MessageNotificationTests(ChatTestCase):
    """Test notifications derived from new messages"""

    def test_recipient_notified_once_per_chat(self):
        TestDataFactory.create_message(self.chat, self.sender, 'first')
        TestDataFactory.create_message(self.chat, self.sender, 'second')
        notifications = Notification.objects.filter(user=self.traveler, link=f'/chat/{self.delivery_request.id}')
        self.assertEqual(notifications.count(), 1)
        self.assertIn('Maryam', notifications.get().message)
        self.assertFalse(Notification.objects.filter(user=self.sender).exists())

    def test_reply_notifies_sender(self):
        TestDataFactory.create_message(self.chat, self.traveler, 'reply')
        notification = Notification.objects.get(user=self.sender)
        self.assertIn('Karrar', notification.message)


class SyncChatNotificationsTests(ChatTestCase):
    """Test backfilling notifications for unread chats"""

    def test_backfills_missing_notifications(self):
        TestDataFactory.create_message(self.chat, self.sender)
        Notification.objects.all().delete()

        self.assertEqual(sync_unread_chat_notifications(), 1)
        self.assertTrue(Notification.objects.filter(user=self.traveler, link=f'/chat/{self.delivery_request.id}').exists())
        self.assertEqual(sync_unread_chat_notifications(), 0)

    def test_command_with_user_filter(self):
        TestDataFactory.create_message(self.chat, self.sender)
        Notification.objects.all().delete()
        out = StringIO()
        call_command('sync_chat_notifications', '--user', str(self.sender.id), stdout=out)
        self.assertIn('Created 0', out.getvalue())
        call_command('sync_chat_notifications', stdout=out)
        self.assertEqual(Notification.objects.filter(user=self.traveler).count(), 1)
