from django.urls import path
from .views import (
    profile_me, profile_avatar_upload, profile_detail,
    verification, admin_verification_requests, admin_verification,
)

urlpatterns = [
    path('profiles/me/', profile_me, name='profile-me'),
    path('profiles/me/avatar/', profile_avatar_upload, name='profile-avatar-upload'),
    path('profiles/<int:pk>/', profile_detail, name='profile-detail'),

    path('verification/', verification, name='verification'),
    path('admin/verification-requests/', admin_verification_requests, name='admin-verification-requests'),

    # Functions
    path('functions/admin-verification/', admin_verification, name='admin-verification'),
]
