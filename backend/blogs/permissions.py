from rest_framework import permissions


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Allow access to the object only if the user owns it OR is an admin.
    The owner is read from `owner_field` ("author" for blogs, "user" for comments).
    """

    message = "User not authorized"

    def __init__(self, owner_field="user"):
        self.owner_field = owner_field

    def has_permission(self, request, view):
        # Anonymous users are turned away here; DRF answers 401 UNAUTHORIZED
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        return request.user.can_modify(getattr(obj, f"{self.owner_field}_id"))
