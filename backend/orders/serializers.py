from decimal import Decimal

from django.utils.translation import gettext as _
from rest_framework import serializers

from backend.profiles.serializers import PublicProfileSerializer
from backend.trips.serializers import TripSerializer
from .models import DeliveryRequest, GeneralOrder
from .pricing import get_zone
from .tracking import TRACKING_STAGES

IRAQ = 'Iraq'


class DeliveryRequestSerializer(serializers.ModelSerializer):
    sender_id = serializers.IntegerField(read_only=True)
    sender = PublicProfileSerializer(source='sender.profile', read_only=True)
    trip = TripSerializer(read_only=True)
    chat_id = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryRequest
        fields = ['id', 'trip', 'sender_id', 'sender', 'general_order', 'description', 'weight_kg',
                  'destination_city', 'receiver_details', 'handover_location', 'status', 'tracking_status',
                  'cancellation_requested_by', 'proposed_changes', 'traveler_inspection_photos',
                  'sender_item_photos', 'payment_status', 'payment_method', 'payment_amount_iqd',
                  'payment_proof_url', 'payment_reference', 'payment_updated_at', 'payment_reviewed_at',
                  'chat_id', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_chat_id(self, obj):
        chat = getattr(obj, 'chat', None)
        return chat.id if chat else None


class DeliveryRequestCreateSerializer(serializers.ModelSerializer):
    weight_kg = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal('0.1'))
    description = serializers.CharField(min_length=10)
    destination_city = serializers.CharField(min_length=2, max_length=100)
    receiver_details = serializers.CharField(min_length=10)

    class Meta:
        model = DeliveryRequest
        fields = ['trip', 'general_order', 'description', 'weight_kg', 'destination_city',
                  'receiver_details', 'handover_location']

    def validate_trip(self, trip):
        if not trip.is_approved:
            raise serializers.ValidationError(_("This trip is not open for requests."))
        user = self.context['request'].user
        if trip.user_id == user.id:
            raise serializers.ValidationError(_("You cannot send a request on your own trip."))
        return trip

    def validate_general_order(self, order):
        if order and order.user_id != self.context['request'].user.id:
            raise serializers.ValidationError(_("You can only link your own general orders."))
        return order


class ProposeChangesSerializer(serializers.Serializer):
    weight_kg = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal('0.1'))
    description = serializers.CharField(min_length=10)


class ReviewChangesSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class RespondSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['accepted', 'rejected'])


class TrackingUpdateSerializer(serializers.Serializer):
    tracking_status = serializers.ChoiceField(choices=[stage['key'] for stage in TRACKING_STAGES])


class PhotosSerializer(serializers.Serializer):
    photos = serializers.ListField(child=serializers.URLField(max_length=500), allow_empty=False, max_length=10)


class SenderPhotosSerializer(PhotosSerializer):
    photos = serializers.ListField(child=serializers.URLField(max_length=500), min_length=2, max_length=10)


class PaymentProofSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=['zaincash', 'qicard'])
    payment_proof_url = serializers.URLField(max_length=500)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PaymentReviewSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=['paid', 'rejected'])


class GeneralOrderSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    owner = PublicProfileSerializer(source='user.profile', read_only=True)
    claimed_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = GeneralOrder
        fields = ['id', 'user_id', 'owner', 'from_country', 'to_country', 'description', 'weight_kg',
                  'is_valuable', 'insurance_requested', 'insurance_percentage', 'status',
                  'claimed_by_id', 'claimed_at', 'reviewed_at', 'created_at', 'updated_at']
        read_only_fields = fields


class GeneralOrderCreateSerializer(serializers.ModelSerializer):
    """
    A trip-less order. Exactly one end of the route must be Iraq and both
    ends must have a pricing zone; insurance flags follow the percentage.
    """
    weight_kg = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal('1'), max_value=Decimal('50'))
    description = serializers.CharField(min_length=10)
    insurance_percentage = serializers.ChoiceField(choices=[0, 25, 50, 75, 100], required=False, default=0)

    class Meta:
        model = GeneralOrder
        fields = ['from_country', 'to_country', 'description', 'weight_kg', 'insurance_percentage']

    def validate(self, attrs):
        from_country = attrs['from_country']
        to_country = attrs['to_country']
        if (from_country == IRAQ) == (to_country == IRAQ):
            raise serializers.ValidationError({'to_country': _("One end of the route must be Iraq.")})
        if not get_zone(from_country) or not get_zone(to_country):
            raise serializers.ValidationError({'to_country': _("Route not supported for calculation.")})
        return attrs

    def create(self, validated_data):
        insured = validated_data.get('insurance_percentage', 0) > 0
        validated_data['is_valuable'] = insured
        validated_data['insurance_requested'] = insured
        validated_data['status'] = 'new'
        return super().create(validated_data)


class GeneralOrderReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['approved', 'rejected'])


class PricingQuerySerializer(serializers.Serializer):
    from_country = serializers.CharField()
    to_country = serializers.CharField()
    weight = serializers.DecimalField(max_digits=8, decimal_places=2)
    insurance_percentage = serializers.ChoiceField(choices=[0, 25, 50, 75, 100], required=False, default=0)
