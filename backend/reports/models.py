from django.conf import settings
from django.db import models


class Report(models.Model):
    """An issue a participant reported about a delivery request"""
    request = models.ForeignKey('orders.DeliveryRequest', on_delete=models.CASCADE, related_name='reports')
    reporter = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reports')
    reporter_name = models.CharField(max_length=255)
    reporter_phone = models.CharField(max_length=20)
    reporter_email = models.EmailField(blank=True)
    description = models.TextField()
    problem_photo_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['request', 'reporter'], name='reports_request_reporter_idx'),
        ]

    def __str__(self):
        return f"Report {self.pk} on request {self.request_id}"
