import logging

from django.shortcuts import get_object_or_404
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.orders.models import DeliveryRequest
from .models import Chat
from .serializers import ChatSerializer, ChatMessageSerializer
from .utils import (
    get_read_status, get_unread_count, get_unread_counts_by_tab,
    is_chat_participant, mark_chat_read, unread_messages,
)

logger = logging.getLogger('backend.chat')

CHAT_RELATED = ('request', 'request__sender__profile', 'request__trip', 'request__trip__user__profile')


def _get_chat_for_participant(request, /, **lookup):
    """Chat matching lookup, or an error Response when missing or not a participant"""
    chat = Chat.objects.select_related(*CHAT_RELATED).filter(**lookup).first()
    if chat is None:
        return None, Response({'error': _('Chat not found')}, status=status.HTTP_404_NOT_FOUND)
    if not is_chat_participant(chat, request.user):
        return None, Response({'error': _('You are not a participant of this chat')}, status=status.HTTP_403_FORBIDDEN)
    return chat, None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def chat_by_request(request, request_id):
    """Chat of a delivery request with both participants"""
    delivery_request = get_object_or_404(DeliveryRequest.objects.select_related('trip'), pk=request_id)
    if not delivery_request.is_participant(request.user):
        return Response({'error': _('You are not a participant of this chat')}, status=status.HTTP_403_FORBIDDEN)
    chat, error = _get_chat_for_participant(request, request=delivery_request)
    if error:
        return error
    return Response(ChatSerializer(chat).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def chat_status(request, request_id):
    """Whether the chat of a request has unread messages for the current user"""
    chat, error = _get_chat_for_participant(request, request_id=request_id)
    if error:
        return error
    return Response({
        'has_unread': unread_messages(request.user, chat=chat).exists(),
        'last_read_at': get_read_status(chat, request.user),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def chat_messages(request, pk):
    """List the chat's messages (oldest first) or send a new one"""
    chat, error = _get_chat_for_participant(request, pk=pk)
    if error:
        return error

    if request.method == 'GET':
        messages = chat.messages.order_by('created_at', 'id')
        return Response(ChatMessageSerializer(messages, many=True).data)

    serializer = ChatMessageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    message = serializer.save(chat=chat, sender=request.user)
    logger.info(f"User {request.user.id} sent message {message.id} in chat {chat.id}")
    return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def chat_mark_read(request, pk):
    """Move the current user's read marker of the chat to now"""
    chat, error = _get_chat_for_participant(request, pk=pk)
    if error:
        return error
    read_status = mark_chat_read(chat, request.user)
    return Response({'chat_id': chat.id, 'last_read_at': read_status.last_read_at})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_by_tab(request):
    return Response(get_unread_counts_by_tab(request.user))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def unread_chat_count(request):
    """Total unread chat messages of the Bearer token's user"""
    return Response({'unread_count': get_unread_count(request.user)})
