"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from backend.chat.models import Chat, ChatMessage
from backend.orders.models import DeliveryRequest, GeneralOrder
from backend.profiles.models import Profile, VerificationRequest
from backend.trips.models import Trip

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False,
                    first_name='', last_name='', phone=None):
        """Create a test user; the profile is created by the post_save signal"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        Profile.objects.filter(user=user).update(first_name=first_name, last_name=last_name, phone=phone)
        return User.objects.get(pk=user.pk)

    @staticmethod
    def create_verified_user(**kwargs):
        user = TestDataFactory.create_user(**kwargs)
        Profile.objects.filter(user=user).update(is_verified=True)
        return User.objects.get(pk=user.pk)

    @staticmethod
    def create_admin(**kwargs):
        """A platform admin through the profile flag, not Django staff"""
        user = TestDataFactory.create_user(**kwargs)
        Profile.objects.filter(user=user).update(is_admin=True, is_verified=True)
        return User.objects.get(pk=user.pk)

    @staticmethod
    def create_verification_request(user, status='pending'):
        return VerificationRequest.objects.create(
            user=user,
            id_front_url='https://files.test/id-front.jpg',
            id_back_url='https://files.test/id-back.jpg',
            photo_id_url='https://files.test/selfie.jpg',
            status=status,
        )

    @staticmethod
    def create_trip(user=None, from_country='Turkey', to_country='Iraq', free_kg=Decimal('20.00'),
                    is_approved=True, days_ahead=10, charge_per_kg=Decimal('5.00')):
        """Create a test trip, approved by default"""
        if user is None:
            user = TestDataFactory.create_verified_user()
        return Trip.objects.create(
            user=user,
            from_country=from_country,
            to_country=to_country,
            trip_date=timezone.localdate() + timedelta(days=days_ahead),
            free_kg=free_kg,
            charge_per_kg=charge_per_kg,
            traveler_location='Istanbul Airport',
            is_approved=is_approved,
        )

    @staticmethod
    def create_request(trip, sender=None, weight_kg=Decimal('3.00'), status='pending', tracking_status=None):
        """Create a test delivery request on a trip"""
        if sender is None:
            sender = TestDataFactory.create_user()
        if tracking_status is None:
            tracking_status = 'item_accepted' if status == 'accepted' else 'waiting_approval'
        return DeliveryRequest.objects.create(
            trip=trip,
            sender=sender,
            description='A box of books for my brother',
            weight_kg=weight_kg,
            destination_city='Baghdad',
            receiver_details='Ali, 07701234567, Karrada',
            status=status,
            tracking_status=tracking_status,
        )

    @staticmethod
    def create_accepted_request(trip=None, sender=None, weight_kg=Decimal('3.00')):
        """An accepted request with its chat; capacity is taken off the trip"""
        if trip is None:
            trip = TestDataFactory.create_trip()
        delivery_request = TestDataFactory.create_request(trip, sender=sender, weight_kg=weight_kg, status='accepted')
        trip.free_kg -= weight_kg
        trip.save()
        Chat.objects.create(request=delivery_request)
        return delivery_request

    @staticmethod
    def create_message(chat, sender, content='Hello'):
        return ChatMessage.objects.create(chat=chat, sender=sender, content=content)

    @staticmethod
    def create_general_order(user=None, from_country='Turkey', to_country='Iraq', weight_kg=Decimal('2.00'),
                             status='new', insurance_percentage=0):
        """Create a test general order"""
        if user is None:
            user = TestDataFactory.create_user()
        return GeneralOrder.objects.create(
            user=user,
            from_country=from_country,
            to_country=to_country,
            description='Perfume bottle, sealed box',
            weight_kg=weight_kg,
            insurance_percentage=insurance_percentage,
            is_valuable=insurance_percentage > 0,
            insurance_requested=insurance_percentage > 0,
            status=status,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


class CacheClearingTestCase(TestCase):
    """TestCase that starts every test with an empty cache"""

    def setUp(self):
        super().setUp()
        cache.clear()
