from django.urls import path
from .views import (
    chat_by_request, chat_status, chat_messages, chat_mark_read,
    unread_by_tab, unread_chat_count,
)

urlpatterns = [
    path('chats/by-request/<int:request_id>/', chat_by_request, name='chat-by-request'),
    path('chats/by-request/<int:request_id>/status/', chat_status, name='chat-status'),
    path('chats/unread-by-tab/', unread_by_tab, name='chat-unread-by-tab'),
    path('chats/<int:pk>/messages/', chat_messages, name='chat-messages'),
    path('chats/<int:pk>/read/', chat_mark_read, name='chat-mark-read'),

    # Functions
    path('functions/unread-chat-count/', unread_chat_count, name='unread-chat-count'),
]
