from rest_framework.permissions import BasePermission

from .utils import is_admin_user


class IsPlatformAdmin(BasePermission):
    """Allows access only to platform admins (profile flag, staff or superuser)"""
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
