from django.contrib import admin
from .models import Chat, ChatMessage, ChatReadStatus


class ChatMessageInline(admin.TabularInline):
    model = ChatMessage
    extra = 0
    readonly_fields = ['sender', 'content', 'created_at']


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ['id', 'request', 'created_at']
    search_fields = ['request__id', 'request__sender__username', 'request__trip__user__username']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
    inlines = [ChatMessageInline]


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'chat', 'sender', 'content', 'created_at']
    list_filter = ['created_at']
    search_fields = ['content', 'sender__username']
    ordering = ['-created_at']
    readonly_fields = ['created_at']


@admin.register(ChatReadStatus)
class ChatReadStatusAdmin(admin.ModelAdmin):
    list_display = ['chat', 'user', 'last_read_at']
    search_fields = ['user__username']
    ordering = ['-last_read_at']
