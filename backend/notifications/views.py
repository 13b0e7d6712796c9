import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger('backend.notifications')


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """List the user's notifications (newest first) or clear all of them"""
    queryset = Notification.objects.filter(user=request.user)

    if request.method == 'DELETE':
        deleted, _ = queryset.delete()
        logger.info(f"User {request.user.id} cleared {deleted} notifications")
        return Response(status=status.HTTP_204_NO_CONTENT)

    queryset = queryset.order_by('-created_at', '-id')
    return Response({
        'results': NotificationSerializer(queryset, many=True).data,
        'unread_count': queryset.filter(is_read=False).count(),
    })


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def notification_delete(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return Response(NotificationSerializer(notification).data)
