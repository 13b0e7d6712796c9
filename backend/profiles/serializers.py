from django.utils.translation import gettext as _
from rest_framework import serializers

from .models import Profile, VerificationRequest
from .utils import normalize_iraqi_phone


class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user_id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    is_complete = serializers.BooleanField(read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'email', 'first_name', 'last_name', 'avatar_url', 'phone', 'role',
                  'is_verified', 'is_admin', 'address', 'is_complete', 'created_at', 'updated_at']
        read_only_fields = ['avatar_url', 'is_verified', 'is_admin', 'created_at', 'updated_at']


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Self-service profile edits; first and last name must end up filled in"""
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Profile
        fields = ['first_name', 'last_name', 'phone', 'role', 'address']

    def validate_phone(self, value):
        if not value:
            return None
        normalized = normalize_iraqi_phone(value)
        if normalized is None:
            raise serializers.ValidationError(_("Enter a valid Iraqi mobile number."))
        return normalized

    def validate(self, attrs):
        first_name = attrs.get('first_name', getattr(self.instance, 'first_name', None))
        last_name = attrs.get('last_name', getattr(self.instance, 'last_name', None))
        errors = {}
        if not (first_name or '').strip():
            errors['first_name'] = _("First name is required.")
        if not (last_name or '').strip():
            errors['last_name'] = _("Last name is required.")
        if errors:
            raise serializers.ValidationError(errors)
        for field in ('first_name', 'last_name'):
            if field in attrs:
                attrs[field] = attrs[field].strip()
        return attrs


class PublicProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user_id', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'first_name', 'last_name', 'avatar_url', 'role', 'is_verified']
        read_only_fields = fields


class AvatarUploadSerializer(serializers.Serializer):
    avatar = serializers.ImageField()

    def validate_avatar(self, value):
        max_size = 5 * 1024 * 1024
        if value.size > max_size:
            raise serializers.ValidationError(_("Image must be 5MB or smaller."))
        return value


class VerificationRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = VerificationRequest
        fields = ['id', 'id_front_url', 'id_back_url', 'residential_card_url', 'photo_id_url',
                  'status', 'reviewed_at', 'created_at', 'updated_at']
        read_only_fields = ['status', 'reviewed_at', 'created_at', 'updated_at']


class AdminVerificationRequestSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    first_name = serializers.CharField(source='user.profile.first_name', read_only=True, default=None)
    last_name = serializers.CharField(source='user.profile.last_name', read_only=True, default=None)
    phone = serializers.CharField(source='user.profile.phone', read_only=True, default=None)

    class Meta:
        model = VerificationRequest
        fields = ['id', 'user_id', 'email', 'first_name', 'last_name', 'phone',
                  'id_front_url', 'id_back_url', 'residential_card_url', 'photo_id_url',
                  'status', 'reviewed_at', 'created_at']
        read_only_fields = fields


class AdminVerificationDecisionSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=['approved', 'rejected'])
