from django.utils.translation import gettext as _
from rest_framework import serializers

from backend.profiles.serializers import PublicProfileSerializer
from .models import Chat, ChatMessage


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ChatMessage
        fields = ['id', 'chat', 'sender_id', 'content', 'created_at']
        read_only_fields = ['id', 'chat', 'sender_id', 'created_at']

    def validate_content(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Message cannot be empty."))
        return value


class ChatSerializer(serializers.ModelSerializer):
    request_id = serializers.IntegerField(read_only=True)
    sender = PublicProfileSerializer(source='request.sender.profile', read_only=True)
    traveler = PublicProfileSerializer(source='request.trip.user.profile', read_only=True)
    trip = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = ['id', 'request_id', 'sender', 'traveler', 'trip', 'created_at']
        read_only_fields = fields

    def get_trip(self, obj):
        trip = obj.request.trip
        return {
            'id': trip.id,
            'from_country': trip.from_country,
            'to_country': trip.to_country,
            'trip_date': trip.trip_date,
        }
