"""
Admin accounts: credential check, failed-attempt lockout, account management.

Lockout is derived, never stored as a state: an account is locked while
``lock_until`` lies in the future. A wrong password bumps ``login_attempts``
and, once the count reaches MAX_LOGIN_ATTEMPTS on an account that is not
already locked, sets ``lock_until`` LOCKOUT_HOURS ahead. A locked account is
refused before the password is even looked at, so it stops counting.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.db.models import Case, Count, DateTimeField, F, Q, Value, When
from django.utils import timezone

from . import roles
from .audit import log_action
from .conf import frontdesk_setting
from .exceptions import (
    AccountLocked, AlreadyExists, Forbidden, NotFound, Unauthorized, ValidationError,
)
from .models import Admin
from .roles import Permissions
from .tokens import issue_session_token

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("username", "email", "password", "first_name", "last_name", "department")
PROFILE_FIELDS = ("first_name", "last_name", "email", "department")
UPDATABLE_FIELDS = ("username", "email", "first_name", "last_name", "department", "role", "is_active")
MIN_PASSWORD_LENGTH = 8


@dataclass
class LoginResult:
    token: str
    admin: Admin


def _normalize_email(value):
    return str(value or "").strip().lower()


def _clean_email(value):
    email = _normalize_email(value)
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Enter a valid email address.", details={"field": "email"})
    return email


def _clean_role(value):
    role = str(value).strip().upper().replace(" ", "_")
    if role not in roles.ROLE_LABELS:
        raise ValidationError(f"Unknown role '{value}'.",
                              details={"allowed": list(roles.ROLE_LABELS)})
    return role


def _clean_password(value):
    password = str(value or "")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            details={"field": "password"},
        )
    return password


def _check_unique(username=None, email=None, exclude_id=None):
    clash = Q()
    if username:
        clash |= Q(username=username)
    if email:
        clash |= Q(email=email)
    if not clash:
        return
    qs = Admin.objects.filter(clash)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise AlreadyExists("Email or username already exists")


def _save(admin, **kwargs):
    try:
        with transaction.atomic():
            admin.save(**kwargs)
    except IntegrityError as e:
        raise AlreadyExists("Email or username already exists") from e
    return admin


# =============================================================================
# AUTHENTICATION
# =============================================================================

def login(email, password, request=None):
    admin = Admin.objects.filter(email=_normalize_email(email)).first()
    if admin is None:
        logger.info("Login failed for unknown email %s", _normalize_email(email))
        raise Unauthorized("Invalid credentials")

    if admin.is_locked:
        logger.warning("Login refused for locked admin %s", admin.username)
        raise AccountLocked(admin.lock_until)

    if not admin.check_password(password or ""):
        register_failed_attempt(admin, request=request)
        raise Unauthorized("Invalid credentials")

    if not admin.is_active:
        raise Forbidden("Account is disabled")

    reset_attempts(admin)
    token = issue_session_token(admin)
    log_action(admin, "LOGIN", "Admin", admin.id, f"{admin.username} logged in", request=request)
    logger.info("Admin %s logged in", admin.username)
    return LoginResult(token=token, admin=admin)


def register_failed_attempt(admin, at=None, request=None):
    """
    Count one failed login in a single UPDATE so two concurrent failures
    cannot overwrite each other's increment.
    """
    at = at or timezone.now()
    max_attempts = frontdesk_setting("MAX_LOGIN_ATTEMPTS")
    lock_at = at + timedelta(hours=frontdesk_setting("LOCKOUT_HOURS"))
    not_locked = Q(lock_until__isnull=True) | Q(lock_until__lte=at)
    was_locked = admin.is_locked_at(at)

    # lock_until is assigned first so its condition sees the pre-increment count.
    Admin.objects.filter(pk=admin.pk).update(
        lock_until=Case(
            When(Q(login_attempts__gte=max_attempts - 1) & not_locked, then=Value(lock_at)),
            default=F("lock_until"),
            output_field=DateTimeField(),
        ),
        login_attempts=F("login_attempts") + 1,
    )
    admin.refresh_from_db(fields=["login_attempts", "lock_until"])

    if not was_locked and admin.is_locked_at(at):
        logger.warning(
            "Admin %s locked until %s after %s failed attempts",
            admin.username, admin.lock_until, admin.login_attempts,
        )
        log_action(admin, "LOCKOUT", "Admin", admin.id,
                   f"Locked after {admin.login_attempts} failed login attempts", request=request)
    else:
        logger.info("Failed login %s for admin %s", admin.login_attempts, admin.username)
    return admin


def reset_attempts(admin, at=None):
    at = at or timezone.now()
    Admin.objects.filter(pk=admin.pk).update(login_attempts=0, lock_until=None, last_login=at)
    admin.login_attempts = 0
    admin.lock_until = None
    admin.last_login = at
    return admin


# =============================================================================
# ACCOUNT MANAGEMENT
# =============================================================================

def _build_admin(data, role):
    missing = [f for f in REQUIRED_FIELDS if not str(data.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Field '{missing[0]}' is required.", details={"missing": missing})

    username = str(data["username"]).strip()
    email = _clean_email(data["email"])
    password = _clean_password(data["password"])
    _check_unique(username=username, email=email)

    if data.get("permissions"):
        permissions = Permissions.from_mapping(data["permissions"])
    else:
        permissions = Permissions.for_role(role)

    admin = Admin(
        username=username,
        email=email,
        first_name=str(data["first_name"]).strip(),
        last_name=str(data["last_name"]).strip(),
        department=str(data["department"]).strip(),
        role=role,
    )
    admin.set_permissions(permissions)
    admin.set_password(password)
    return admin


def create_admin(actor, data):
    """Super Admins create accounts of any role. Role defaults to ADMIN."""
    if actor.role != roles.SUPER_ADMIN:
        raise Forbidden("Only a Super Admin can create admin accounts")
    role = _clean_role(data.get("role") or roles.ADMIN)
    admin = _save(_build_admin(data, role))
    log_action(actor, "CREATE", "Admin", admin.id, f"Created {admin.get_role_display()} {admin.username}")
    logger.info("Admin %s created by %s", admin.username, actor.username)
    return admin


def create_staff_user(actor, data):
    """Admins and Super Admins create Security or Receptionist accounts."""
    if actor.role not in roles.PRIVILEGED_ROLES:
        raise Forbidden("Insufficient permissions")
    role = _clean_role(data.get("role") or roles.SECURITY)
    if not roles.can_create_role(actor.role, role) or role not in roles.STAFF_ROLES:
        raise Forbidden("Only Security or Receptionist roles are allowed here")
    admin = _save(_build_admin(data, role))
    log_action(actor, "CREATE", "Admin", admin.id, f"Created {admin.get_role_display()} {admin.username}")
    logger.info("Staff user %s (%s) created by %s", admin.username, role, actor.username)
    return admin


def get_admin(admin_id):
    admin = Admin.objects.filter(id=admin_id).first()
    if admin is None:
        raise NotFound("Admin", admin_id)
    return admin


def list_admins(role=None):
    qs = Admin.objects.filter(is_active=True)
    if role:
        qs = qs.filter(role=_clean_role(role))
    return list(qs.order_by("-created_at"))


def update_admin(actor, admin_id, fields):
    if not actor.can_manage_admins:
        raise Forbidden("Insufficient permissions")
    admin = get_admin(admin_id)

    changes = []
    for name in UPDATABLE_FIELDS:
        if name not in fields or fields[name] is None:
            continue
        value = fields[name]
        if name == "email":
            value = _clean_email(value)
        elif name == "role":
            value = _clean_role(value)
        elif name == "is_active":
            value = bool(value)
        else:
            value = str(value).strip()
            if not value:
                raise ValidationError(f"Field '{name}' cannot be blank.", details={"field": name})
        before = getattr(admin, name)
        if before != value:
            setattr(admin, name, value)
            changes.append({"field": name, "before": str(before), "after": str(value)})

    if fields.get("permissions"):
        admin.set_permissions(Permissions.from_mapping(fields["permissions"]))
        changes.append({"field": "permissions", "after": admin.permissions.as_dict()})
    elif "role" in fields and fields["role"]:
        admin.set_permissions(Permissions.for_role(admin.role))

    if fields.get("password"):
        admin.set_password(_clean_password(fields["password"]))
        changes.append({"field": "password"})

    _check_unique(username=admin.username, email=admin.email, exclude_id=admin.id)
    _save(admin)
    log_action(actor, "UPDATE", "Admin", admin.id, f"Updated {admin.username}", changes=changes)
    return admin


def deactivate_admin(actor, admin_id):
    if not actor.can_manage_admins:
        raise Forbidden("Insufficient permissions")
    admin = get_admin(admin_id)
    admin.is_active = False
    admin.save(update_fields=["is_active", "updated_at"])
    log_action(actor, "DEACTIVATE", "Admin", admin.id, f"Deactivated {admin.username}")
    logger.info("Admin %s deactivated by %s", admin.username, actor.username)
    return admin


def update_profile(admin, fields):
    """Self-service edit of name, e-mail and department."""
    changes = []
    for name in PROFILE_FIELDS:
        if name not in fields or fields[name] is None:
            continue
        value = _clean_email(fields[name]) if name == "email" else str(fields[name]).strip()
        if not value:
            raise ValidationError(f"Field '{name}' cannot be blank.", details={"field": name})
        if getattr(admin, name) != value:
            changes.append({"field": name, "before": getattr(admin, name), "after": value})
            setattr(admin, name, value)
    if changes:
        _check_unique(email=admin.email, exclude_id=admin.id)
        _save(admin)
        log_action(admin, "UPDATE", "Admin", admin.id, "Profile updated", changes=changes)
    return admin


def change_password(admin, current_password, new_password):
    if not admin.check_password(current_password or ""):
        raise ValidationError("Current password is incorrect")
    admin.set_password(_clean_password(new_password))
    admin.save(update_fields=["password", "updated_at"])
    log_action(admin, "UPDATE", "Admin", admin.id, "Password changed", changes=[{"field": "password"}])
    return admin


def admin_stats(at=None):
    at = at or timezone.now()
    day_start = timezone.make_aware(
        datetime.combine(timezone.localtime(at).date(), time.min),
        timezone.get_current_timezone(),
    )
    by_role = (
        Admin.objects.filter(is_active=True)
        .values("role")
        .annotate(count=Count("id"))
        .order_by("role")
    )
    return {
        "by_role": [{"role": row["role"], "count": row["count"]} for row in by_role],
        "total_admins": Admin.objects.filter(is_active=True).count(),
        "active_today": Admin.objects.filter(is_active=True, last_login__gte=day_start).count(),
    }


def list_roles():
    return roles.list_roles()
