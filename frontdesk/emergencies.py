"""
Emergency incidents: report, filtered listing, and the one-way close.

An incident is created ACTIVE and leaves that state exactly once, through
resolve() or cancel(). Closing an already closed incident is refused.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from . import realtime
from .audit import log_action
from .conf import frontdesk_setting
from .exceptions import AlreadyExists, InvalidState, NotFound, ValidationError
from .models import Emergency
from .presenters import emergency_dict

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 4
DEFAULT_LIMIT = 50
CODE_ATTEMPTS = 5

TYPES = [code for code, _ in Emergency.TYPE_CHOICES]
STATUSES = [code for code, _ in Emergency.STATUS_CHOICES]

TEXT_FIELDS = (
    "location", "notes", "reason",
    "department_name", "group_name", "poc_name", "poc_phone",
    "visitor_first_name", "visitor_last_name", "visitor_phone",
    "representative_id_document", "representative_id_number", "guardian_contact",
)
SEARCH_FIELDS = (
    "incident_code", "department_name", "poc_name", "visitor_first_name", "visitor_last_name",
)


def generate_incident_code(when=None):
    """``EMG-YYYYMMDD-HHMMSS-XXXX`` from the local time of ``when``."""
    local = timezone.localtime(when or timezone.now())
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"EMG-{local:%Y%m%d-%H%M%S}-{suffix}"


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _clean_choice(value, allowed, label):
    code = str(value or "").strip().upper()
    if code not in allowed:
        raise ValidationError(f"Unknown emergency {label} '{value}'.", details={"allowed": allowed})
    return code


def _clean_headcount(value):
    try:
        headcount = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Headcount must be a whole number.", details={"field": "headcount"})
    if headcount <= 0:
        raise ValidationError("Headcount must be positive.", details={"field": "headcount"})
    return headcount


def get(emergency_id):
    emergency = Emergency.objects.filter(id=emergency_id).first()
    if emergency is None:
        raise NotFound("Emergency", emergency_id)
    return emergency


def _insert(values, code, actor):
    """Create the incident, or return None when ``code`` is already taken."""
    try:
        with transaction.atomic():
            return Emergency.objects.create(
                **values,
                incident_code=code,
                status=Emergency.STATUS_ACTIVE,
                created_by=actor,
            )
    except IntegrityError:
        return None


def report(data, actor=None):
    if not data.get("type"):
        raise ValidationError("Field 'type' is required.", details={"missing": ["type"]})
    values = {"type": _clean_choice(data["type"], TYPES, "type")}
    for name in TEXT_FIELDS:
        if data.get(name):
            values[name] = str(data[name]).strip()
    values.setdefault("location", frontdesk_setting("DEFAULT_LOCATION"))

    values["is_minor"] = _as_bool(data.get("is_minor", False))
    if values["is_minor"] and not values.get("guardian_contact"):
        raise ValidationError("Guardian contact is required for a minor.",
                              details={"field": "guardian_contact"})
    if data.get("headcount") not in (None, ""):
        values["headcount"] = _clean_headcount(data["headcount"])

    supplied = str(data.get("incident_code") or "").strip()
    if supplied:
        emergency = _insert(values, supplied, actor)
        if emergency is None:
            raise AlreadyExists(f"Incident code {supplied} already exists")
    else:
        emergency = None
        for _ in range(CODE_ATTEMPTS):
            emergency = _insert(values, generate_incident_code(), actor)
            if emergency is not None:
                break
            logger.info("Incident code collision, generating another")
        if emergency is None:
            raise AlreadyExists("Could not allocate a unique incident code")

    logger.warning("Emergency %s reported at %s", emergency.incident_code, emergency.location)
    log_action(actor, "CREATE", "Emergency", emergency.id, f"Reported {emergency.incident_code}")
    realtime.emit(realtime.EMERGENCY_CREATED, emergency_dict(emergency, detail=True))
    return emergency


def _close(emergency_id, status, action, actor):
    emergency = get(emergency_id)
    if emergency.is_terminal:
        raise InvalidState(
            f"Emergency {emergency.incident_code} is already {emergency.get_status_display().lower()}",
            details={"status": emergency.status},
        )

    now = timezone.now()
    updated = Emergency.objects.filter(id=emergency.id, status=Emergency.STATUS_ACTIVE).update(
        status=status, resolved_at=now, resolved_by=actor, updated_at=now,
    )
    if not updated:
        raise InvalidState(f"Emergency {emergency.incident_code} is already closed")

    emergency.refresh_from_db()
    logger.info("Emergency %s %s", emergency.incident_code, status.lower())
    log_action(actor, action, "Emergency", emergency.id,
               f"{emergency.incident_code} {emergency.get_status_display().lower()}")
    realtime.emit(realtime.EMERGENCY_UPDATED, emergency_dict(emergency, detail=True))
    return emergency


def resolve(emergency_id, actor=None):
    return _close(emergency_id, Emergency.STATUS_RESOLVED, "RESOLVE", actor)


def cancel(emergency_id, actor=None):
    return _close(emergency_id, Emergency.STATUS_CANCELLED, "CANCEL", actor)


def active_count():
    return Emergency.objects.filter(status=Emergency.STATUS_ACTIVE).count()


@dataclass
class EmergencyFilter:
    type: str = None
    status: str = None
    location: str = None
    created_from: date = None
    created_to: date = None
    search: str = None
    page: int = 1
    limit: int = DEFAULT_LIMIT


def build_emergency_query(filters):
    query = Q()
    if filters.type:
        query &= Q(type=str(filters.type).upper())
    if filters.status:
        query &= Q(status=str(filters.status).upper())
    if filters.location:
        query &= Q(location=filters.location)

    tz = timezone.get_current_timezone()
    if filters.created_from:
        start = timezone.make_aware(datetime.combine(filters.created_from, time.min), tz)
        query &= Q(created_at__gte=start)
    if filters.created_to:
        end = timezone.make_aware(datetime.combine(filters.created_to, time.min), tz)
        query &= Q(created_at__lt=end + timedelta(days=1))

    term = (filters.search or "").strip()
    if term:
        matches = Q()
        for name in SEARCH_FIELDS:
            matches |= Q(**{f"{name}__icontains": term})
        query &= matches
    return query


def list_emergencies(filters=None):
    filters = filters or EmergencyFilter()
    page = filters.page if filters.page and filters.page > 0 else 1
    limit = filters.limit if filters.limit and filters.limit > 0 else DEFAULT_LIMIT
    qs = Emergency.objects.filter(build_emergency_query(filters)).order_by("-created_at")
    offset = (page - 1) * limit
    return {
        "rows": list(qs[offset:offset + limit]),
        "total": qs.count(),
        "page": page,
        "limit": limit,
    }
