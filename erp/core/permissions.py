from rest_framework.permissions import BasePermission


class IsGlobalAdmin(BasePermission):
    """Allows access only to global administrators."""
    message = 'Administrator privileges required'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_global_admin)
