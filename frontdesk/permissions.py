from django.apps import apps
from rest_framework.permissions import SAFE_METHODS, BasePermission

from .roles import Permissions

READ_ONLY_MESSAGE = "Demo mode: Modifications are disabled. This is a read-only demonstration."


def read_only_mode():
    return apps.get_app_config("frontdesk").read_only


class WritesAllowed(BasePermission):
    """Refuse every unsafe method while the deployment runs read-only."""

    message = READ_ONLY_MESSAGE

    def has_permission(self, request, view):
        return request.method in SAFE_METHODS or not read_only_mode()


def HasPermission(name):
    """Permission class requiring one of the five admin permission flags."""
    if name not in Permissions.names():
        raise ValueError(f"Unknown permission '{name}'")

    class _HasPermission(BasePermission):
        message = "Insufficient permissions"

        def has_permission(self, request, view):
            return bool(getattr(request.user, name, False))

    _HasPermission.__name__ = f"HasPermission[{name}]"
    return _HasPermission
