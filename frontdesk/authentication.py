from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from .exceptions import Unauthorized
from .models import Admin
from .tokens import read_session_token

KEYWORD = "Bearer"


class SessionTokenAuthentication(BaseAuthentication):
    """
    ``Authorization: Bearer <token>`` where the token carries ``admin_id``
    and ``role``. Resolves ``request.user`` to the active Admin.
    """

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].decode().lower() != KEYWORD.lower():
            return None
        if len(parts) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header.")

        try:
            claims = read_session_token(parts[1].decode())
        except (Unauthorized, UnicodeError):
            raise exceptions.AuthenticationFailed("Invalid token")

        try:
            admin = Admin.objects.filter(id=claims.admin_id).first()
        except (ValueError, DjangoValidationError):
            raise exceptions.AuthenticationFailed("Invalid token")
        if admin is None:
            raise exceptions.AuthenticationFailed("Admin not found")
        if not admin.is_active:
            raise exceptions.AuthenticationFailed("Account is disabled")
        return admin, claims

    def authenticate_header(self, request):
        return KEYWORD
