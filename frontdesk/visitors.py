"""
Visitor lifecycle: check-in → (edit window) → checkout.

    check_in()            mint badge, status CHECKED_IN, emit visitor-checkin
    checkout()            CHECKED_IN → CHECKED_OUT, emit visitor-checkout
    edit_within_window()  allowlisted corrections during the first hour
    overdue()             checked-in visitors past their expected duration
    stats_summary()       today / current / total / per-purpose counts
    delete()              hard delete, False when nothing was removed
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db.models import Count, Q
from django.utils import timezone

from . import realtime
from .audit import log_action
from .conf import frontdesk_setting
from .exceptions import Forbidden, InvalidState, NotFound, ValidationError
from .models import Visitor
from .presenters import visitor_dict

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email", "phone", "purpose")
OPTIONAL_TEXT_FIELDS = (
    "company", "location", "notes", "photo",
    "aadhaar_id", "pan_id", "passport_id", "driving_license_id",
)
EDITABLE_FIELDS = (
    "first_name", "last_name", "email", "phone", "company", "purpose", "notes",
    "aadhaar_id", "pan_id", "passport_id", "driving_license_id",
)
IDENTITY_FIELDS = ("email", "phone", "aadhaar_id", "pan_id", "passport_id", "driving_license_id")
SECURITY_LEVELS = [code for code, _ in Visitor.SECURITY_LEVEL_CHOICES]
STATUSES = [code for code, _ in Visitor.STATUS_CHOICES]


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _clean_email(value):
    email = str(value).strip().lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Enter a valid email address.", details={"field": "email"})
    return email


def _clean_duration(value):
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Expected duration must be a whole number of minutes.",
                              details={"field": "expected_duration"})
    if minutes <= 0:
        raise ValidationError("Expected duration must be positive.",
                              details={"field": "expected_duration"})
    return minutes


def _clean_temperature(value):
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("Temperature must be a number.", details={"field": "temperature"})


def _day_bounds(day):
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    return start, start + timedelta(days=1)


def get(visitor_id):
    visitor = Visitor.objects.filter(id=visitor_id).first()
    if visitor is None:
        raise NotFound("Visitor", visitor_id)
    return visitor


# =============================================================================
# CHECK-IN / CHECK-OUT
# =============================================================================

def check_in(data, actor=None):
    missing = [f for f in REQUIRED_FIELDS if not str(data.get(f) or "").strip()]
    if missing:
        raise ValidationError(
            f"Field '{missing[0]}' is required.", details={"missing": missing}
        )

    values = {f: str(data[f]).strip() for f in REQUIRED_FIELDS}
    values["email"] = _clean_email(values["email"])
    for f in OPTIONAL_TEXT_FIELDS:
        if data.get(f):
            values[f] = str(data[f]).strip()
    values.setdefault("location", frontdesk_setting("DEFAULT_LOCATION"))

    values["expected_duration"] = (
        _clean_duration(data["expected_duration"])
        if data.get("expected_duration") not in (None, "")
        else frontdesk_setting("DEFAULT_EXPECTED_DURATION")
    )
    level = str(data.get("security_level") or "LOW").upper()
    if level not in SECURITY_LEVELS:
        raise ValidationError(f"Unknown security level '{level}'.",
                              details={"allowed": SECURITY_LEVELS})
    values["security_level"] = level
    if data.get("temperature") not in (None, ""):
        values["temperature"] = _clean_temperature(data["temperature"])
    values["is_vip"] = _as_bool(data.get("is_vip", False))
    values["health_declaration"] = _as_bool(data.get("health_declaration", False))

    badge_id = str(uuid.uuid4())
    qr_code = str(data["qr_code"]) if data.get("qr_code") else badge_id

    visitor = Visitor.objects.create(
        **values,
        badge_id=badge_id,
        qr_code=qr_code,
        check_in_time=timezone.now(),
        status=Visitor.STATUS_CHECKED_IN,
    )
    logger.info("Visitor %s checked in with badge %s", visitor.id, badge_id)
    log_action(actor, "CHECKIN", "Visitor", visitor.id, f"{visitor} checked in")
    realtime.emit(realtime.VISITOR_CHECKIN, {"type": "checkin", "visitor": visitor_dict(visitor)})
    return visitor


def checkout(visitor_id, actor=None):
    visitor = get(visitor_id)
    if visitor.status != Visitor.STATUS_CHECKED_IN:
        raise InvalidState("Visitor already checked out", details={"status": visitor.status})

    now = timezone.now()
    updated = Visitor.objects.filter(
        id=visitor.id, status=Visitor.STATUS_CHECKED_IN
    ).update(status=Visitor.STATUS_CHECKED_OUT, check_out_time=now, updated_at=now)
    if not updated:
        # Another desk closed the visit between the read and the write.
        raise InvalidState("Visitor already checked out")

    visitor.refresh_from_db()
    logger.info("Visitor %s checked out after %s minutes", visitor.id, visitor.duration_minutes())
    log_action(actor, "CHECKOUT", "Visitor", visitor.id, f"{visitor} checked out")
    realtime.emit(realtime.VISITOR_CHECKOUT, {"type": "checkout", "visitor": visitor_dict(visitor)})
    return visitor


# =============================================================================
# CORRECTIONS
# =============================================================================

def edit_within_window(visitor_id, fields, actor=None, at=None):
    """
    Apply allowlisted corrections while the visitor is checked in and the
    check-in is at most one hour old. Other keys in ``fields`` are ignored.
    """
    visitor = get(visitor_id)
    if not visitor.is_editable(at):
        raise Forbidden("Edit window expired")

    changes = []
    for name in EDITABLE_FIELDS:
        if name not in fields or fields[name] is None:
            continue
        after = str(fields[name]).strip()
        if name in REQUIRED_FIELDS and not after:
            raise ValidationError(f"Field '{name}' cannot be blank.", details={"field": name})
        if name == "email":
            after = _clean_email(after)
        before = getattr(visitor, name)
        if str(before) != after:
            setattr(visitor, name, after)
            changes.append({"field": name, "before": before, "after": after})

    if changes:
        visitor.save(update_fields=[c["field"] for c in changes] + ["updated_at"])
        log_action(actor, "UPDATE", "Visitor", visitor.id,
                   f"Corrected {', '.join(c['field'] for c in changes)}", changes=changes)
    return visitor


def delete(visitor_id, actor=None):
    deleted, _ = Visitor.objects.filter(id=visitor_id).delete()
    if deleted:
        log_action(actor, "DELETE", "Visitor", visitor_id, "Visitor deleted")
    return deleted > 0


# =============================================================================
# QUERIES
# =============================================================================

def current_active():
    return list(Visitor.objects.filter(status=Visitor.STATUS_CHECKED_IN).order_by("-check_in_time"))


def overdue(at=None):
    at = at or timezone.now()
    return [v for v in current_active() if v.is_overdue(at)]


def stats_summary(at=None):
    at = at or timezone.now()
    start, end = _day_bounds(timezone.localtime(at).date())
    by_purpose = (
        Visitor.objects.values("purpose")
        .annotate(count=Count("id"))
        .order_by("-count", "purpose")
    )
    return {
        "today": Visitor.objects.filter(check_in_time__gte=start, check_in_time__lt=end).count(),
        "current": Visitor.objects.filter(status=Visitor.STATUS_CHECKED_IN).count(),
        "total": Visitor.objects.count(),
        "by_purpose": [{"purpose": row["purpose"], "count": row["count"]} for row in by_purpose],
    }


def history(visitor_id, limit=10):
    """Earlier visits by the same person, matched on any non-empty identity field."""
    visitor = get(visitor_id)
    query = Q()
    for name in IDENTITY_FIELDS:
        value = getattr(visitor, name)
        if value:
            query |= Q(**{name: value})
    return list(
        Visitor.objects.filter(query).exclude(id=visitor.id).order_by("-check_in_time")[:limit]
    )


@dataclass
class VisitorFilter:
    statuses: list = field(default_factory=list)
    date: date = None
    start_date: date = None
    end_date: date = None
    purposes: list = field(default_factory=list)
    companies: list = field(default_factory=list)
    security_levels: list = field(default_factory=list)
    page: int = 1
    limit: int = 100


def build_visitor_query(filters):
    query = Q()
    statuses = [s for s in filters.statuses if s and s.lower() != "all"]
    if statuses:
        query &= Q(status__in=statuses)

    start_day = filters.start_date or filters.date
    end_day = filters.end_date or filters.date
    if start_day and end_day:
        start, _ = _day_bounds(start_day)
        _, end = _day_bounds(end_day)
        query &= Q(check_in_time__gte=start, check_in_time__lt=end)

    if filters.purposes:
        query &= Q(purpose__in=filters.purposes)
    if filters.companies:
        query &= Q(company__in=filters.companies)
    if filters.security_levels:
        query &= Q(security_level__in=[s.upper() for s in filters.security_levels])
    return query


def list_visitors(filters=None):
    filters = filters or VisitorFilter()
    page = filters.page if filters.page and filters.page > 0 else 1
    limit = filters.limit if filters.limit and filters.limit > 0 else 100
    qs = Visitor.objects.filter(build_visitor_query(filters)).order_by("-check_in_time")
    offset = (page - 1) * limit
    return {
        "rows": list(qs[offset:offset + limit]),
        "total": qs.count(),
        "page": page,
        "limit": limit,
    }
