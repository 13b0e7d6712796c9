from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Trip(models.Model):
    """A traveler's planned journey with spare luggage capacity"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='trips')
    from_country = models.CharField(max_length=100)
    to_country = models.CharField(max_length=100)
    trip_date = models.DateField()
    free_kg = models.DecimalField(max_digits=8, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    charge_per_kg = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))], help_text="USD per kg")
    traveler_location = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    ticket_file_url = models.URLField(max_length=500, blank=True, null=True)
    is_approved = models.BooleanField(default=False)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_trips')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trips'
        ordering = ['trip_date', 'id']
        indexes = [
            models.Index(fields=['is_approved', 'trip_date'], name='trips_approved_date_idx'),
            models.Index(fields=['from_country', 'to_country'], name='trips_route_idx'),
        ]

    def __str__(self):
        return f"{self.from_country} → {self.to_country} ({self.trip_date})"
