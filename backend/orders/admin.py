from django.contrib import admin
from .models import DeliveryRequest, GeneralOrder


@admin.register(DeliveryRequest)
class DeliveryRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'sender', 'trip', 'weight_kg', 'status', 'tracking_status', 'payment_status', 'created_at']
    list_filter = ['status', 'tracking_status', 'payment_status', 'payment_method']
    search_fields = ['sender__username', 'sender__email', 'description', 'destination_city', 'payment_reference']
    ordering = ['-created_at']
    raw_id_fields = ['trip', 'sender', 'general_order']
    readonly_fields = ['created_at', 'updated_at', 'payment_updated_at', 'payment_reviewed_at']


@admin.register(GeneralOrder)
class GeneralOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'from_country', 'to_country', 'weight_kg', 'insurance_percentage', 'status', 'claimed_by', 'created_at']
    list_filter = ['status', 'insurance_percentage', 'from_country', 'to_country']
    search_fields = ['user__username', 'user__email', 'description']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'claimed_at', 'reviewed_at']
