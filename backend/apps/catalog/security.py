from __future__ import annotations

from django.utils.translation import gettext_lazy as _
from rest_framework.permissions import BasePermission

READ = "read"
CREATE = "create"
UPDATE = "update"
DELETE = "delete"

PERMISSIONS = {
    READ: "catalog.view_product",
    CREATE: "catalog.add_product",
    UPDATE: "catalog.change_product",
    DELETE: "catalog.delete_product",
}

ACCESS_DENIED_MESSAGE = _("Access denied.")
CANNOT_CREATE_MESSAGE = _("You do not have permission to create this.")
CANNOT_UPDATE_MESSAGE = _("You do not have permission to update this.")
CANNOT_EDIT_MESSAGE = _("You do not have permission to edit this.")
CANNOT_DELETE_MESSAGE = _("You do not have permission to delete this.")
DEMO_MODE_MESSAGE = _("This functionality has been disabled.")


class UserPermissions:
    """Back-office grants of a user on products."""

    def __init__(self, user):
        self.user = user

    def is_granted(self, action: str) -> bool:
        user = self.user
        if user is None or not getattr(user, "is_authenticated", False):
            return False
        if not (user.is_active and user.is_staff):
            return False
        return user.has_perm(PERMISSIONS[action])


class CanReadProducts(BasePermission):
    message = ACCESS_DENIED_MESSAGE

    def has_permission(self, request, view):
        return UserPermissions(request.user).is_granted(READ)
