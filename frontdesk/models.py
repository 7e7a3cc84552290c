"""
=============================================================================
FRONT DESK VISITOR MANAGEMENT - DJANGO MODELS
=============================================================================

  1. Visitor     one row per visit, minted at check-in with a badge id
  2. Admin       back-office accounts (roles, permissions, login lockout)
  3. Emergency   departmental / visitor emergency incidents
  4. AuditLog    immutable trail of who changed what

=============================================================================
"""

import uuid
from datetime import timedelta

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .conf import frontdesk_setting
from .roles import ROLE_CHOICES, Permissions


# ---------------------------------------------------------------------------
# UTILITY MIXINS
# ---------------------------------------------------------------------------

class TimeStampedModel(models.Model):
    """Abstract base with created/updated timestamps."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(models.Model):
    """Abstract base using UUID primary key for external-safe IDs."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


# ---------------------------------------------------------------------------
# 1. VISITORS  (Core)
# ---------------------------------------------------------------------------

class Visitor(UUIDModel, TimeStampedModel):
    """
    A single visit. Created on check-in, corrected in place during the edit
    window, closed on checkout. Hard-deleted by administrators.
    """
    STATUS_CHECKED_IN = "CHECKED_IN"
    STATUS_CHECKED_OUT = "CHECKED_OUT"
    STATUS_EXPIRED = "EXPIRED"
    STATUS_CHOICES = [
        (STATUS_CHECKED_IN, "Checked In"),
        (STATUS_CHECKED_OUT, "Checked Out"),
        (STATUS_EXPIRED, "Expired"),
    ]
    SECURITY_LEVEL_CHOICES = [
        ("LOW", "Low"),
        ("MEDIUM", "Medium"),
        ("HIGH", "High"),
    ]

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=20)

    # Government IDs, each independently matchable by the identifier resolver
    aadhaar_id = models.CharField(max_length=32, blank=True)
    pan_id = models.CharField(max_length=16, blank=True)
    passport_id = models.CharField(max_length=16, blank=True)
    driving_license_id = models.CharField(max_length=32, blank=True)

    company = models.CharField(max_length=255, blank=True)
    purpose = models.CharField(max_length=255)
    expected_duration = models.PositiveIntegerField(default=60, help_text="Minutes")
    location = models.CharField(max_length=100, default="Main Lobby")
    security_level = models.CharField(max_length=10, choices=SECURITY_LEVEL_CHOICES, default="LOW")
    is_vip = models.BooleanField(default=False)

    photo = models.TextField(blank=True, help_text="Data URI or URL of the check-in photo")
    temperature = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    health_declaration = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    check_in_time = models.DateTimeField(default=timezone.now)
    check_out_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_CHECKED_IN)

    badge_id = models.CharField(max_length=64, unique=True)
    qr_code = models.TextField(blank=True, help_text="Defaults to the badge id")

    class Meta:
        ordering = ["-check_in_time"]
        indexes = [
            models.Index(fields=["check_in_time"], name="visitor_check_in_idx"),
            models.Index(fields=["status"], name="visitor_status_idx"),
            models.Index(fields=["phone"], name="visitor_phone_idx"),
        ]

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.badge_id})"

    def clean(self):
        if self.expected_duration is not None and self.expected_duration <= 0:
            raise ValidationError({"expected_duration": "Expected duration must be positive."})
        checked_in = self.status == self.STATUS_CHECKED_IN
        if checked_in and self.check_out_time is not None:
            raise ValidationError({"check_out_time": "A checked-in visitor has no checkout time."})
        if not checked_in and self.check_out_time is None:
            raise ValidationError({"check_out_time": "Checkout time is required once the visit is closed."})

    @property
    def expected_departure(self):
        return self.check_in_time + timedelta(minutes=self.expected_duration)

    def is_overdue(self, at=None):
        at = at or timezone.now()
        return self.status == self.STATUS_CHECKED_IN and at > self.expected_departure

    def is_editable(self, at=None):
        at = at or timezone.now()
        window = timedelta(minutes=frontdesk_setting("EDIT_WINDOW_MINUTES"))
        return self.status == self.STATUS_CHECKED_IN and at - self.check_in_time <= window

    def duration_minutes(self):
        if self.check_in_time and self.check_out_time:
            return int((self.check_out_time - self.check_in_time).total_seconds() / 60)
        return None


# ---------------------------------------------------------------------------
# 2. ADMINS
# ---------------------------------------------------------------------------

class AdminManager(BaseUserManager):
    use_in_migrations = True

    def create_admin(self, username, email, password, permissions=None, **extra):
        admin = self.model(username=username, email=self.normalize_email(email).lower(), **extra)
        admin.set_permissions(permissions or Permissions.for_role(admin.role))
        admin.set_password(password)
        admin.save(using=self._db)
        return admin


class Admin(UUIDModel, TimeStampedModel, AbstractBaseUser):
    """
    Back-office account. Password hashing and ``last_login`` come from
    AbstractBaseUser; the login lockout lives in ``login_attempts`` and
    ``lock_until``. Never hard-deleted: ``is_active=False`` retires it.
    """
    username = models.CharField(max_length=100, unique=True)
    email = models.EmailField(max_length=255, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="ADMIN")
    department = models.CharField(max_length=100)

    can_view_analytics = models.BooleanField(default=False)
    can_manage_visitors = models.BooleanField(default=False)
    can_manage_admins = models.BooleanField(default=False)
    can_export_data = models.BooleanField(default=False)
    can_view_reports = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    login_attempts = models.PositiveIntegerField(default=0)
    lock_until = models.DateTimeField(null=True, blank=True)

    objects = AdminManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username", "first_name", "last_name", "department"]

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.get_role_display()})"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def is_locked_at(self, at=None):
        at = at or timezone.now()
        return self.lock_until is not None and self.lock_until > at

    @property
    def is_locked(self):
        return self.is_locked_at()

    @property
    def permissions(self):
        return Permissions(**{name: getattr(self, name) for name in Permissions.names()})

    def set_permissions(self, permissions):
        for name, value in permissions.as_dict().items():
            setattr(self, name, value)


# ---------------------------------------------------------------------------
# 3. EMERGENCIES
# ---------------------------------------------------------------------------

class Emergency(UUIDModel, TimeStampedModel):
    """
    Departmental or visitor emergency. Created ACTIVE, closed once by a
    resolve or cancel transition, never deleted.
    """
    TYPE_DEPARTMENTAL = "DEPARTMENTAL"
    TYPE_VISITOR = "VISITOR"
    TYPE_CHOICES = [
        (TYPE_DEPARTMENTAL, "Departmental"),
        (TYPE_VISITOR, "Visitor"),
    ]
    STATUS_ACTIVE = "ACTIVE"
    STATUS_RESOLVED = "RESOLVED"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_RESOLVED, "Resolved"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    incident_code = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    location = models.CharField(max_length=255, default="Main Lobby")
    notes = models.TextField(blank=True)
    reason = models.CharField(max_length=255, blank=True)

    # Departmental
    department_name = models.CharField(max_length=255, blank=True)
    group_name = models.CharField(max_length=255, blank=True)
    poc_name = models.CharField(max_length=255, blank=True)
    poc_phone = models.CharField(max_length=20, blank=True)

    # Visitor
    visitor_first_name = models.CharField(max_length=100, blank=True)
    visitor_last_name = models.CharField(max_length=100, blank=True)
    visitor_phone = models.CharField(max_length=20, blank=True)
    representative_id_document = models.CharField(max_length=64, blank=True)
    representative_id_number = models.CharField(max_length=128, blank=True)
    headcount = models.PositiveIntegerField(null=True, blank=True)
    is_minor = models.BooleanField(default=False)
    guardian_contact = models.CharField(max_length=255, blank=True)

    created_by = models.ForeignKey(
        Admin, on_delete=models.SET_NULL, null=True, blank=True, related_name="reported_emergencies"
    )
    resolved_by = models.ForeignKey(
        Admin, on_delete=models.SET_NULL, null=True, blank=True, related_name="closed_emergencies"
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "emergencies"
        indexes = [
            models.Index(fields=["type", "status", "created_at"], name="emergency_type_status_idx"),
            models.Index(fields=["location", "created_at"], name="emergency_location_idx"),
        ]

    def __str__(self):
        return f"{self.incident_code} [{self.status}]"

    @property
    def is_terminal(self):
        return self.status != self.STATUS_ACTIVE


# ---------------------------------------------------------------------------
# 4. AUDIT TRAIL
# ---------------------------------------------------------------------------

class AuditLog(UUIDModel):
    """Immutable record of every mutating front desk operation."""
    ACTION_CHOICES = [
        ("CHECKIN", "Check-in"),
        ("CHECKOUT", "Check-out"),
        ("UPDATE", "Update"),
        ("DELETE", "Delete"),
        ("CREATE", "Create"),
        ("DEACTIVATE", "Deactivate"),
        ("LOGIN", "Login"),
        ("LOCKOUT", "Lockout"),
        ("UNLOCK", "Unlock"),
        ("RESOLVE", "Resolve"),
        ("CANCEL", "Cancel"),
    ]

    actor = models.ForeignKey(
        Admin, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_entries"
    )
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=50)
    object_id = models.CharField(max_length=64)
    description = models.TextField(blank=True)
    changes = models.JSONField(default=list, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["model_name", "object_id"], name="auditlog_object_idx")]

    def __str__(self):
        return f"{self.action} {self.model_name}:{self.object_id}"
