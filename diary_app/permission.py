# diary_app/permission.py
from rest_framework.permissions import BasePermission

class IsJWTAuthenticated(BasePermission):
    """
    Only allows requests that carry a valid JWT access token.
    """
    message = 'Authentication required. Please provide a valid JWT token.'

    def has_permission(self, request, view):
        return bool(
            getattr(request, 'user', None) and
            getattr(request, 'auth', None)
        )

class IsAdmin(BasePermission):
    """
    Only allows authenticated accounts with the admin role.
    """
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return bool(
            getattr(request, 'user', None) and
            getattr(request, 'auth', None) and
            getattr(request.user, 'role', None) == 'admin'
        )
