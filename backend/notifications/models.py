from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app notification shown in the user's bell menu"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True, null=True, help_text="Client route opened when the notification is clicked")
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='notif_user_created_idx'),
            models.Index(fields=['user', 'link'], name='notif_user_link_idx'),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.message[:50]}"
