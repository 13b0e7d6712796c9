from django.contrib import admin
from .models import Trip


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'from_country', 'to_country', 'trip_date', 'free_kg', 'charge_per_kg', 'is_approved', 'created_at']
    list_filter = ['is_approved', 'from_country', 'to_country', 'trip_date']
    search_fields = ['user__username', 'user__email', 'from_country', 'to_country', 'traveler_location']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'approved_at']
