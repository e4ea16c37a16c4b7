from rest_framework import permissions

from .models import Role


def _authenticated(request):
    return bool(request.user and request.user.is_authenticated)


class IsAdminRole(permissions.BasePermission):
    """
    Admin-level guard: superadmins, and admins whose access request was
    approved. An admin that was never approved is refused here even when it
    holds a valid token.
    """

    message = "Not authorized - admin access required"

    def has_permission(self, request, view):
        if not _authenticated(request):
            return False
        if request.user.has_admin_role and not request.user.is_authorized_for_role():
            self.message = "Admin access not approved - please contact a superadmin"
            return False
        return request.user.has_admin_role


class IsSuperAdmin(permissions.BasePermission):
    message = "Superadmin access required"

    def has_permission(self, request, view):
        return _authenticated(request) and request.user.role == Role.SUPERADMIN


class IsAdminOrReadOnly(IsAdminRole):
    """
    Read access for everyone (including anonymous), write access
    (POST, PUT, PATCH, DELETE) only for admin-level users.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_permission(request, view)
