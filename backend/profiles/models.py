from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Public-facing details of a user; shares its primary key with the user"""
    ROLE_CHOICES = [
        ('traveler', 'Traveler'),
        ('sender', 'Sender'),
        ('both', 'Both'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, primary_key=True, related_name='profile')
    first_name = models.CharField(max_length=150, blank=True, null=True)
    last_name = models.CharField(max_length=150, blank=True, null=True)
    avatar_url = models.URLField(max_length=500, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True, help_text="Iraqi mobile number stored as 10 digits starting with 7")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='both')
    is_verified = models.BooleanField(default=False)
    is_admin = models.BooleanField(default=False)
    address = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'

    def __str__(self):
        return self.full_name or f"Profile {self.pk}"

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_complete(self):
        return bool(self.first_name and self.last_name)


class VerificationRequest(models.Model):
    """Identity documents submitted by a user for admin review"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='verification_requests')
    id_front_url = models.URLField(max_length=500)
    id_back_url = models.URLField(max_length=500)
    residential_card_url = models.URLField(max_length=500, blank=True, null=True)
    photo_id_url = models.URLField(max_length=500)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_verifications')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'verification_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='verif_user_created_idx'),
            models.Index(fields=['status'], name='verif_status_idx'),
        ]

    def __str__(self):
        return f"Verification {self.pk} ({self.status})"
