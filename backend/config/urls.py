"""
URL configuration for the Waslaha backend.

Every app mounts its routes under /api/v1/; the privileged single-purpose
handlers live under /api/v1/functions/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Waslaha Admin Panel"
admin.site.site_title = "Waslaha Admin Portal"
admin.site.index_title = "Welcome to the Waslaha Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.profiles.urls')),
    path('api/v1/', include('backend.trips.urls')),
    path('api/v1/', include('backend.orders.urls')),
    path('api/v1/', include('backend.chat.urls')),
    path('api/v1/', include('backend.notifications.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
