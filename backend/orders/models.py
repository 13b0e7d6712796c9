from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .tracking import TRACKING_CHOICES


class DeliveryRequest(models.Model):
    """A sender's request to ship an item with a specific trip"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ]
    PAYMENT_STATUS_CHOICES = [
        ('unpaid', 'Unpaid'),
        ('pending_review', 'Pending Review'),
        ('paid', 'Paid'),
        ('rejected', 'Rejected'),
    ]
    PAYMENT_METHOD_CHOICES = [
        ('zaincash', 'ZainCash'),
        ('qicard', 'Qi Card'),
        ('other', 'Other'),
    ]

    trip = models.ForeignKey('trips.Trip', on_delete=models.CASCADE, related_name='requests')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_requests')
    general_order = models.ForeignKey('orders.GeneralOrder', on_delete=models.SET_NULL, null=True, blank=True, related_name='requests')
    description = models.TextField()
    weight_kg = models.DecimalField(max_digits=6, decimal_places=2, validators=[MinValueValidator(Decimal('0.1'))])
    destination_city = models.CharField(max_length=100)
    receiver_details = models.TextField()
    handover_location = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    tracking_status = models.CharField(max_length=40, choices=TRACKING_CHOICES, default='waiting_approval')
    cancellation_requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    proposed_changes = models.JSONField(null=True, blank=True, help_text="Pending sender edits: {weight_kg, description}")
    traveler_inspection_photos = models.JSONField(default=list, blank=True)
    sender_item_photos = models.JSONField(default=list, blank=True)

    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='unpaid')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True, null=True)
    payment_amount_iqd = models.PositiveIntegerField(null=True, blank=True)
    payment_proof_url = models.URLField(max_length=500, blank=True, null=True)
    payment_reference = models.CharField(max_length=100, blank=True, null=True)
    payment_updated_at = models.DateTimeField(null=True, blank=True)
    payment_reviewed_at = models.DateTimeField(null=True, blank=True)
    payment_reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sender', '-created_at'], name='requests_sender_idx'),
            models.Index(fields=['trip', 'status'], name='requests_trip_status_idx'),
            models.Index(fields=['payment_status'], name='requests_payment_idx'),
        ]

    def __str__(self):
        return f"Request {self.pk} ({self.status})"

    @property
    def traveler_id(self):
        return self.trip.user_id

    def is_participant(self, user):
        return user.id in (self.sender_id, self.trip.user_id)


class GeneralOrder(models.Model):
    """A sender's trip-less order that any traveler may claim"""
    STATUS_CHOICES = [
        ('new', 'New'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('matched', 'Matched'),
        ('claimed', 'Claimed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    INSURANCE_CHOICES = [
        (0, '0%'),
        (25, '25%'),
        (50, '50%'),
        (75, '75%'),
        (100, '100%'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='general_orders')
    from_country = models.CharField(max_length=100)
    to_country = models.CharField(max_length=100)
    description = models.TextField()
    weight_kg = models.DecimalField(max_digits=6, decimal_places=2, validators=[MinValueValidator(Decimal('1'))])
    is_valuable = models.BooleanField(default=False)
    insurance_requested = models.BooleanField(default=False)
    insurance_percentage = models.PositiveSmallIntegerField(choices=INSURANCE_CHOICES, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new')
    claimed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='claimed_orders')
    claimed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'general_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='gorders_status_idx'),
            models.Index(fields=['claimed_by'], name='gorders_claimed_idx'),
        ]

    def __str__(self):
        return f"General order {self.pk} ({self.from_country} → {self.to_country})"
