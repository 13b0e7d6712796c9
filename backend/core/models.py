from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Account used for authentication; personal details live on profiles.Profile"""
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for admin decisions and delivery request state changes"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('trip_approve', 'Trip Approved'),
        ('order_review', 'General Order Reviewed'),
        ('order_claim', 'General Order Claimed'),
        ('verification_submit', 'Verification Submitted'),
        ('verification_review', 'Verification Reviewed'),
        ('payment_submit', 'Payment Proof Submitted'),
        ('payment_review', 'Payment Reviewed'),
        ('request_accept', 'Request Accepted'),
        ('request_reject', 'Request Rejected'),
        ('request_cancel', 'Request Cancellation'),
        ('changes_propose', 'Changes Proposed'),
        ('changes_review', 'Changes Reviewed'),
        ('tracking_update', 'Tracking Updated'),
        ('report_create', 'Issue Reported'),
        ('profile_update', 'Profile Updated'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., route, user name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Related identifier (e.g., trip id of a request)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_d5d1a8_idx'),
            models.Index(fields=['action'], name='audit_logs_action_a1b2c3_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_4e5f6a_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__7b8c9d_idx'),
        ]
