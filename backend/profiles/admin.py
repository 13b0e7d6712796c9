from django.contrib import admin
from .models import Profile, VerificationRequest


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'first_name', 'last_name', 'phone', 'role', 'is_verified', 'is_admin', 'updated_at']
    list_filter = ['role', 'is_verified', 'is_admin']
    search_fields = ['first_name', 'last_name', 'phone', 'user__email', 'user__username']
    ordering = ['-updated_at']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(VerificationRequest)
class VerificationRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'status', 'reviewed_by', 'reviewed_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['user__email', 'user__username', 'user__profile__first_name', 'user__profile__last_name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'reviewed_at']
