"""
=============================================================================
FRONT DESK VISITOR MANAGEMENT - views.py  (Function-Based Views)
=============================================================================
Every endpoint is a plain @api_view FBV using DRF. Views only parse the
request and shape the response; the work happens in the core modules:

    visitors.py     check-in / checkout / corrections / queries
    identifiers.py  badge, QR, phone, e-mail and ID lookup
    accounts.py     login, lockout, admin management
    emergencies.py  incident report / listing / close

Permissions used throughout:
    IsAuthenticated      → Bearer session token (authentication.py)
    WritesAllowed        → refuses unsafe methods in read-only demo mode
    HasPermission(flag)  → one of the five admin permission flags

Check-in, lookup and checkout stay open to the lobby kiosk.

Return format (all endpoints):
    Success → {"success": True, "data": {...}, "message": "..."}
    Error   → {"success": False, "error": "...", "details": {...}}
=============================================================================
"""

import functools
import logging
from datetime import date

from django.db import DatabaseError
from django.utils import timezone

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler

from . import accounts, emergencies, identifiers, visitors
from .exceptions import FrontdeskError, StoreError, ValidationError
from .permissions import HasPermission, WritesAllowed, read_only_mode
from .presenters import admin_dict, emergency_dict, visitor_dict

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def ok(data=None, message="Success", status_code=status.HTTP_200_OK):
    return Response({"success": True, "message": message, "data": data}, status=status_code)


def err(error, details=None, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({"success": False, "error": error, "details": details}, status=status_code)


def handles_domain_errors(view):
    """Turn core exceptions into the error envelope with their status code."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except FrontdeskError as e:
            return err(e.message, details=e.details or None, status_code=e.status_code)
        except DatabaseError as e:
            logger.exception("Database failure in %s", view.__name__)
            failure = StoreError("Database error")
            return err(failure.message, details={"reason": str(e)}, status_code=failure.status_code)
    return wrapper


def api_exception_handler(exc, context):
    """DRF failures (authentication, permissions, parsing) in the same envelope."""
    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        response.data = {
            "success": False,
            "error": str(detail) if detail else "Request failed.",
            "details": None if detail else response.data,
        }
    return response


def paginate(result, render):
    """Shape a ``{"rows", "total", "page", "limit"}`` page for the response."""
    total, page, per_page = result["total"], result["page"], result["limit"]
    return {
        "results": [render(row) for row in result["rows"]],
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": (total + per_page - 1) // per_page,
            "has_next": page * per_page < total,
            "has_prev": page > 1,
        },
    }


def _int_param(request, name, default):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer.")


def _date_param(request, name):
    raw = request.GET.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be a date (YYYY-MM-DD).")


def _list_param(request, name):
    values = []
    for raw in request.GET.getlist(name):
        values.extend(v.strip() for v in raw.split(",") if v.strip())
    return values


# =============================================================================
# AUTH
# =============================================================================

@api_view(["POST"])
@permission_classes([AllowAny])
@handles_domain_errors
def login_view(request):
    """
    POST /api/auth/login/
    Body: { "email": "...", "password": "..." }
    Returns: 24h session token + admin profile.
    """
    email = str(request.data.get("email", "")).strip()
    password = request.data.get("password", "")
    if not email or not password:
        return err("Email and password are required.")

    result = accounts.login(email, password, request=request)
    return ok({"token": result.token, "admin": admin_dict(result.admin)}, message="Login successful.")


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    POST /api/auth/logout/
    Session tokens are stateless; the client drops its copy.
    """
    return ok(message="Logged out successfully.")


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def profile_view(request):
    """
    GET /api/auth/profile/   → current admin
    PUT /api/auth/profile/   → update name, e-mail, department
    """
    if request.method == "GET":
        return ok(admin_dict(request.user, detail=True))
    admin = accounts.update_profile(request.user, request.data)
    return ok(admin_dict(admin, detail=True), message="Profile updated.")


@api_view(["PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def change_password_view(request):
    """
    PUT /api/auth/change-password/
    Body: { "current_password", "new_password" }
    """
    accounts.change_password(
        request.user,
        request.data.get("current_password", ""),
        request.data.get("new_password", ""),
    )
    return ok(message="Password updated successfully.")


# =============================================================================
# ADMINS
# =============================================================================

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def admin_list_create(request):
    """
    GET  /api/admins/   → active admins
    POST /api/admins/   → create (Super Admin only, role defaults to ADMIN)
    """
    if request.method == "GET":
        return ok([admin_dict(a, detail=True) for a in accounts.list_admins()])
    admin = accounts.create_admin(request.user, request.data)
    return ok(admin_dict(admin), message="Admin created.", status_code=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def staff_user_create(request):
    """
    POST /api/admins/users/
    Security or Receptionist accounts, created by Admins and Super Admins.
    """
    admin = accounts.create_staff_user(request.user, request.data)
    return ok(admin_dict(admin), message="User created.", status_code=status.HTTP_201_CREATED)


@api_view(["PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def admin_update(request, admin_id):
    """PUT /api/admins/<id>/"""
    admin = accounts.update_admin(request.user, admin_id, request.data)
    return ok(admin_dict(admin, detail=True), message="Admin updated.")


@api_view(["PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def admin_deactivate(request, admin_id):
    """PUT /api/admins/<id>/deactivate/"""
    admin = accounts.deactivate_admin(request.user, admin_id)
    return ok(admin_dict(admin, detail=True), message="Admin deactivated.")


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def role_list(request):
    """GET /api/admins/roles/"""
    return ok(accounts.list_roles())


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def admins_by_role(request, role):
    """GET /api/admins/by-role/<role>/"""
    return ok([admin_dict(a) for a in accounts.list_admins(role=role)])


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def admin_stats(request):
    """GET /api/admins/stats/"""
    return ok(accounts.admin_stats())


# =============================================================================
# VISITORS
# =============================================================================

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def visitor_list(request):
    """
    GET /api/visitors/
    Query: status, date, start_date, end_date, purpose, company,
           security_level (comma separated lists), page, limit
    """
    filters = visitors.VisitorFilter(
        statuses=[s.upper() for s in _list_param(request, "status")],
        date=_date_param(request, "date"),
        start_date=_date_param(request, "start_date"),
        end_date=_date_param(request, "end_date"),
        purposes=_list_param(request, "purpose"),
        companies=_list_param(request, "company"),
        security_levels=_list_param(request, "security_level"),
        page=_int_param(request, "page", 1),
        limit=_int_param(request, "limit", 100),
    )
    return ok(paginate(visitors.list_visitors(filters), visitor_dict))


@api_view(["POST"])
@permission_classes([AllowAny, WritesAllowed])
@handles_domain_errors
def visitor_check_in(request):
    """
    POST /api/visitors/check-in/
    Body: first_name, last_name, email, phone, purpose (+ optional extras)
    """
    actor = request.user if request.user.is_authenticated else None
    visitor = visitors.check_in(request.data, actor=actor)
    return ok(visitor_dict(visitor, detail=True), message="Visitor checked in.",
              status_code=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
@handles_domain_errors
def visitor_find(request):
    """
    GET /api/visitors/find/?id=<badge | qr | phone | email | gov id>
    """
    visitor = identifiers.resolve(request.GET.get("id", ""))
    if visitor is None:
        return err("Visitor not found", status_code=status.HTTP_404_NOT_FOUND)
    return ok(visitor_dict(visitor, detail=True))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def visitors_active(request):
    """GET /api/visitors/current/active/"""
    return ok([visitor_dict(v) for v in visitors.current_active()])


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def visitors_overdue(request):
    """GET /api/visitors/current/overdue/"""
    now = timezone.now()
    return ok([
        {**visitor_dict(v), "overdue_minutes": int((now - v.expected_departure).total_seconds() // 60)}
        for v in visitors.overdue(now)
    ])


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def visitor_stats_summary(request):
    """GET /api/visitors/stats/summary/"""
    return ok(visitors.stats_summary())


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def visitor_detail(request, visitor_id):
    """
    GET    /api/visitors/<id>/   → full record
    PUT    /api/visitors/<id>/   → correction, first hour after check-in only
    DELETE /api/visitors/<id>/   → hard delete (can_manage_visitors)
    """
    if request.method == "GET":
        return ok(visitor_dict(visitors.get(visitor_id), detail=True))

    if request.method == "PUT":
        visitor = visitors.edit_within_window(visitor_id, request.data, actor=request.user)
        return ok(visitor_dict(visitor, detail=True), message="Visitor updated.")

    if not request.user.can_manage_visitors:
        return err("Insufficient permissions", status_code=status.HTTP_403_FORBIDDEN)
    if not visitors.delete(visitor_id, actor=request.user):
        return err("Visitor not found", status_code=status.HTTP_404_NOT_FOUND)
    return ok(message="Visitor deleted.")


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@handles_domain_errors
def visitor_history(request, visitor_id):
    """GET /api/visitors/<id>/history/  → earlier visits by the same person"""
    limit = _int_param(request, "limit", 10)
    return ok([visitor_dict(v) for v in visitors.history(visitor_id, limit=limit)])


@api_view(["PUT", "POST"])
@permission_classes([AllowAny, WritesAllowed])
@handles_domain_errors
def visitor_checkout(request, visitor_id):
    """PUT /api/visitors/<id>/checkout/"""
    actor = request.user if request.user.is_authenticated else None
    visitor = visitors.checkout(visitor_id, actor=actor)
    return ok(visitor_dict(visitor, detail=True), message="Visitor checked out.")


# =============================================================================
# EMERGENCIES
# =============================================================================

@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def emergency_list_create(request):
    """
    GET  /api/emergencies/   Query: type, status, location, from, to, q, page, limit
    POST /api/emergencies/   → report (type DEPARTMENTAL | VISITOR)
    """
    if request.method == "POST":
        emergency = emergencies.report(request.data, actor=request.user)
        return ok(emergency_dict(emergency, detail=True), message="Emergency reported.",
                  status_code=status.HTTP_201_CREATED)

    filters = emergencies.EmergencyFilter(
        type=request.GET.get("type") or None,
        status=request.GET.get("status") or None,
        location=request.GET.get("location") or None,
        created_from=_date_param(request, "from"),
        created_to=_date_param(request, "to"),
        search=request.GET.get("q") or None,
        page=_int_param(request, "page", 1),
        limit=_int_param(request, "limit", emergencies.DEFAULT_LIMIT),
    )
    return ok(paginate(emergencies.list_emergencies(filters),
                       lambda e: emergency_dict(e, detail=True)))


@api_view(["PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def emergency_resolve(request, emergency_id):
    """PUT /api/emergencies/<id>/resolve/"""
    emergency = emergencies.resolve(emergency_id, actor=request.user)
    return ok(emergency_dict(emergency, detail=True), message="Emergency resolved.")


@api_view(["PUT"])
@permission_classes([IsAuthenticated, WritesAllowed])
@handles_domain_errors
def emergency_cancel(request, emergency_id):
    """PUT /api/emergencies/<id>/cancel/"""
    emergency = emergencies.cancel(emergency_id, actor=request.user)
    return ok(emergency_dict(emergency, detail=True), message="Emergency cancelled.")


@api_view(["GET"])
@permission_classes([IsAuthenticated, HasPermission("can_view_reports")])
@handles_domain_errors
def emergency_active_count(request):
    """GET /api/emergencies/active-count/"""
    return ok({"active": emergencies.active_count()})


# =============================================================================
# SYSTEM
# =============================================================================

@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    """GET /api/health/"""
    return ok({"status": "OK", "timestamp": timezone.now(), "demo_mode": read_only_mode()})


@api_view(["GET"])
@permission_classes([AllowAny])
def mode(request):
    """GET /api/mode/  → read-only flag and what the client may offer"""
    read_only = read_only_mode()
    return ok({
        "demo_mode": read_only,
        "message": "Running in demo mode - read-only access" if read_only else "Running in full mode",
        "features": {
            "can_view": True,
            "can_add": not read_only,
            "can_edit": not read_only,
            "can_delete": not read_only,
        },
    })
