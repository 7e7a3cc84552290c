"""Signed session tokens carrying ``{admin_id, role}`` with a fixed 24h life."""

from dataclasses import dataclass
from datetime import timedelta

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import Unauthorized

SESSION_LIFETIME = timedelta(hours=24)


@dataclass(frozen=True)
class SessionClaims:
    admin_id: str
    role: str


def issue_session_token(admin):
    token = AccessToken()
    token.set_exp(lifetime=SESSION_LIFETIME)
    token["admin_id"] = str(admin.pk)
    token["role"] = admin.role
    return str(token)


def read_session_token(raw):
    try:
        token = AccessToken(raw)
    except TokenError as e:
        raise Unauthorized("Invalid token") from e
    admin_id = token.get("admin_id")
    role = token.get("role")
    if not admin_id or not role:
        raise Unauthorized("Invalid token")
    return SessionClaims(admin_id=admin_id, role=role)
