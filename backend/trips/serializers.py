import os
from decimal import Decimal

from django.utils import timezone
from django.utils.translation import gettext as _
from rest_framework import serializers

from backend.profiles.serializers import PublicProfileSerializer
from .models import Trip

TICKET_EXTENSIONS = ('jpg', 'jpeg', 'png', 'webp', 'pdf')
TICKET_MAX_SIZE = 10 * 1024 * 1024


class TripSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    traveler = PublicProfileSerializer(source='user.profile', read_only=True)

    class Meta:
        model = Trip
        fields = ['id', 'user_id', 'traveler', 'from_country', 'to_country', 'trip_date', 'free_kg',
                  'charge_per_kg', 'traveler_location', 'notes', 'ticket_file_url', 'is_approved',
                  'approved_at', 'created_at', 'updated_at']
        read_only_fields = fields


class TripWriteSerializer(serializers.ModelSerializer):
    free_kg = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=Decimal('0'))
    charge_per_kg = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)

    class Meta:
        model = Trip
        fields = ['from_country', 'to_country', 'trip_date', 'free_kg', 'charge_per_kg',
                  'traveler_location', 'notes', 'ticket_file_url']

    def validate_trip_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError(_("Trip date cannot be in the past."))
        return value

    def validate(self, attrs):
        from_country = attrs.get('from_country', getattr(self.instance, 'from_country', None))
        to_country = attrs.get('to_country', getattr(self.instance, 'to_country', None))
        if from_country and from_country == to_country:
            raise serializers.ValidationError({'to_country': _("Destination must differ from origin.")})
        return attrs

    def create(self, validated_data):
        from backend.orders.pricing import default_charge_per_kg

        if validated_data.get('charge_per_kg') is None:
            default_rate = default_charge_per_kg(validated_data['from_country'], validated_data['to_country'])
            validated_data['charge_per_kg'] = default_rate if default_rate is not None else Decimal('0.00')
        validated_data['is_approved'] = False
        return super().create(validated_data)


class TicketUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        ext = os.path.splitext(value.name)[1].lstrip('.').lower()
        if ext not in TICKET_EXTENSIONS:
            raise serializers.ValidationError(_("Unsupported ticket file type."))
        if value.size > TICKET_MAX_SIZE:
            raise serializers.ValidationError(_("Ticket file must be 10MB or smaller."))
        return value
