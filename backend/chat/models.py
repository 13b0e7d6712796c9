from django.conf import settings
from django.db import models


class Chat(models.Model):
    """Conversation between the sender and the traveler of one request"""
    request = models.OneToOneField('orders.DeliveryRequest', on_delete=models.CASCADE, related_name='chat')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'chats'

    def __str__(self):
        return f"Chat for request {self.request_id}"


class ChatMessage(models.Model):
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='chat_messages')
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'chat_messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['chat', 'created_at'], name='chat_msgs_chat_created_idx'),
        ]

    def __str__(self):
        return f"Message {self.pk} in chat {self.chat_id}"


class ChatReadStatus(models.Model):
    """Per-user read marker of a chat; messages after last_read_at are unread"""
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name='read_statuses')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='chat_read_statuses')
    last_read_at = models.DateTimeField()

    class Meta:
        db_table = 'chat_read_status'
        constraints = [
            models.UniqueConstraint(fields=['chat', 'user'], name='unique_chat_read_status'),
        ]

    def __str__(self):
        return f"{self.user_id} read chat {self.chat_id} at {self.last_read_at}"
