from django.urls import path
from .views import notification_list, notification_delete, notification_mark_read

urlpatterns = [
    path('notifications/', notification_list, name='notification-list'),
    path('notifications/<int:pk>/', notification_delete, name='notification-delete'),
    path('notifications/<int:pk>/read/', notification_mark_read, name='notification-mark-read'),
]
