"""
=============================================================================
FRONT DESK VISITOR MANAGEMENT - admin.py
=============================================================================
Django Admin configuration for the front desk models.
Features:
  - list_display, list_filter, search_fields per model
  - Custom actions (checkout, unlock, resolve / cancel, export CSV)
  - Read-only audit trail
  - Colour-coded status badges via custom methods
  - Collapsible fieldsets for long forms
=============================================================================
"""

import csv
from django.contrib import admin
from django.utils.html import format_html
from django.http import HttpResponse

from . import emergencies, visitors
from .audit import log_action
from .exceptions import InvalidState
from .models import Admin, AuditLog, Emergency, Visitor


# =============================================================================
# UTILITY: CSV EXPORT ACTION
# =============================================================================

def export_as_csv(modeladmin, request, queryset):
    """Generic action to export selected records as CSV."""
    meta = modeladmin.model._meta
    field_names = [f.name for f in meta.fields if f.name != "password"]

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f"attachment; filename={meta.model_name}_export.csv"

    writer = csv.writer(response)
    writer.writerow(field_names)
    for obj in queryset:
        writer.writerow([getattr(obj, name) for name in field_names])
    return response

export_as_csv.short_description = "Export selected records as CSV"


# =============================================================================
# UTILITY: STATUS BADGE HELPERS
# =============================================================================

STATUS_COLORS = {
    # Visitor
    "CHECKED_IN":   "#10b981",
    "CHECKED_OUT":  "#6b7280",
    "EXPIRED":      "#9ca3af",
    # Security level
    "LOW":          "#10b981",
    "MEDIUM":       "#f59e0b",
    "HIGH":         "#ef4444",
    # Emergency
    "ACTIVE":       "#dc2626",
    "RESOLVED":     "#10b981",
    "CANCELLED":    "#9ca3af",
    # Admin account
    "LOCKED":       "#ef4444",
    "INACTIVE":     "#9ca3af",
}


def colored_status(status):
    color = STATUS_COLORS.get(status, "#6b7280")
    return format_html(
        '<span style="background:{};color:#fff;padding:2px 8px;border-radius:4px;'
        'font-size:11px;font-weight:600;">{}</span>',
        color, status,
    )


# =============================================================================
# 1. VISITORS
# =============================================================================

@admin.register(Visitor)
class VisitorAdmin(admin.ModelAdmin):
    list_display = ("get_full_name", "phone", "company", "purpose", "colored_status_badge",
                    "security_badge", "is_vip", "check_in_time", "check_out_time", "location")
    list_filter = ("status", "security_level", "is_vip", "location", "purpose")
    search_fields = ("first_name", "last_name", "phone", "email", "company", "badge_id",
                     "aadhaar_id", "pan_id", "passport_id", "driving_license_id")
    readonly_fields = ("id", "badge_id", "created_at", "updated_at")
    date_hierarchy = "check_in_time"
    actions = [export_as_csv, "check_out_visitors"]

    fieldsets = (
        ("Personal Info", {
            "fields": ("first_name", "last_name", "email", "phone", "company", "photo")
        }),
        ("Government IDs", {
            "classes": ("collapse",),
            "fields": ("aadhaar_id", "pan_id", "passport_id", "driving_license_id")
        }),
        ("Visit", {
            "fields": ("purpose", "location", "expected_duration", "security_level", "is_vip",
                       "status", "check_in_time", "check_out_time")
        }),
        ("Badge", {
            "fields": ("badge_id", "qr_code")
        }),
        ("Health & Notes", {
            "classes": ("collapse",),
            "fields": ("temperature", "health_declaration", "notes")
        }),
        ("Timestamps", {
            "classes": ("collapse",),
            "fields": ("id", "created_at", "updated_at")
        }),
    )

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}"
    get_full_name.short_description = "Name"

    def colored_status_badge(self, obj):
        return colored_status(obj.status)
    colored_status_badge.short_description = "Status"

    def security_badge(self, obj):
        return colored_status(obj.security_level)
    security_badge.short_description = "Security"

    @admin.action(description="Check out selected visitors")
    def check_out_visitors(self, request, queryset):
        done = 0
        for visitor in queryset.filter(status=Visitor.STATUS_CHECKED_IN):
            try:
                visitors.checkout(visitor.id)
                done += 1
            except InvalidState:
                continue
        self.message_user(request, f"{done} visitor(s) checked out.")


# =============================================================================
# 2. ADMINS
# =============================================================================

@admin.register(Admin)
class AdminAccountAdmin(admin.ModelAdmin):
    list_display = ("username", "email", "get_full_name", "role", "department",
                    "account_badge", "login_attempts", "last_login")
    list_filter = ("role", "is_active", "department",
                   "can_manage_admins", "can_manage_visitors")
    search_fields = ("username", "email", "first_name", "last_name", "department")
    readonly_fields = ("id", "password", "last_login", "login_attempts", "lock_until",
                       "created_at", "updated_at")
    actions = [export_as_csv, "unlock_accounts", "deactivate_accounts"]

    fieldsets = (
        ("Account", {
            "fields": ("id", "username", "email", "password", "first_name", "last_name",
                       "role", "department", "is_active")
        }),
        ("Permissions", {
            "fields": ("can_view_analytics", "can_manage_visitors", "can_manage_admins",
                       "can_export_data", "can_view_reports")
        }),
        ("Login Security", {
            "fields": ("last_login", "login_attempts", "lock_until")
        }),
        ("Timestamps", {
            "classes": ("collapse",),
            "fields": ("created_at", "updated_at")
        }),
    )

    def get_full_name(self, obj):
        return obj.get_full_name()
    get_full_name.short_description = "Name"

    def account_badge(self, obj):
        if not obj.is_active:
            return colored_status("INACTIVE")
        if obj.is_locked:
            return colored_status("LOCKED")
        return colored_status("ACTIVE")
    account_badge.short_description = "Account"

    def has_delete_permission(self, request, obj=None):
        return False  # Accounts are deactivated, never deleted

    def _log_each(self, request, accounts, action, verb):
        for account in accounts:
            log_action(None, action, "Admin", account.pk,
                       f"{verb} {account.username} via Django admin by {request.user}",
                       request=request)

    @admin.action(description="Clear lockout on selected accounts")
    def unlock_accounts(self, request, queryset):
        accounts = list(queryset)
        updated = queryset.update(login_attempts=0, lock_until=None)
        self._log_each(request, accounts, "UNLOCK", "Unlocked")
        self.message_user(request, f"{updated} account(s) unlocked.")

    @admin.action(description="Deactivate selected accounts")
    def deactivate_accounts(self, request, queryset):
        accounts = list(queryset.filter(is_active=True))
        updated = queryset.filter(is_active=True).update(is_active=False)
        self._log_each(request, accounts, "DEACTIVATE", "Deactivated")
        self.message_user(request, f"{updated} account(s) deactivated.")


# =============================================================================
# 3. EMERGENCIES
# =============================================================================

@admin.register(Emergency)
class EmergencyAdmin(admin.ModelAdmin):
    list_display = ("incident_code", "type", "colored_status_badge", "location",
                    "department_name", "visitor_name", "headcount", "created_at", "resolved_at")
    list_filter = ("type", "status", "location", "is_minor")
    search_fields = ("incident_code", "department_name", "poc_name",
                     "visitor_first_name", "visitor_last_name")
    readonly_fields = ("id", "incident_code", "created_by", "resolved_by", "resolved_at",
                       "created_at", "updated_at")
    date_hierarchy = "created_at"
    actions = [export_as_csv, "resolve_incidents", "cancel_incidents"]

    fieldsets = (
        ("Incident", {
            "fields": ("id", "incident_code", "type", "status", "location", "reason", "notes")
        }),
        ("Departmental", {
            "classes": ("collapse",),
            "fields": ("department_name", "group_name", "poc_name", "poc_phone")
        }),
        ("Visitor", {
            "classes": ("collapse",),
            "fields": ("visitor_first_name", "visitor_last_name", "visitor_phone",
                       "representative_id_document", "representative_id_number",
                       "headcount", "is_minor", "guardian_contact")
        }),
        ("Resolution", {
            "fields": ("created_by", "resolved_by", "resolved_at")
        }),
        ("Timestamps", {
            "classes": ("collapse",),
            "fields": ("created_at", "updated_at")
        }),
    )

    def colored_status_badge(self, obj):
        return colored_status(obj.status)
    colored_status_badge.short_description = "Status"

    def visitor_name(self, obj):
        return f"{obj.visitor_first_name} {obj.visitor_last_name}".strip() or "-"
    visitor_name.short_description = "Visitor"

    def has_delete_permission(self, request, obj=None):
        return False  # Incidents are closed, never deleted

    def _close(self, request, queryset, close, verb):
        done = 0
        for emergency in queryset.filter(status=Emergency.STATUS_ACTIVE):
            try:
                close(emergency.id)
                done += 1
            except InvalidState:
                continue
        self.message_user(request, f"{done} incident(s) {verb}.")

    @admin.action(description="Resolve selected incidents")
    def resolve_incidents(self, request, queryset):
        self._close(request, queryset, emergencies.resolve, "resolved")

    @admin.action(description="Cancel selected incidents")
    def cancel_incidents(self, request, queryset):
        self._close(request, queryset, emergencies.cancel, "cancelled")


# =============================================================================
# 4. AUDIT TRAIL
# =============================================================================

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "model_name", "object_id", "actor", "ip_address", "created_at")
    list_filter = ("action", "model_name")
    search_fields = ("description", "model_name", "object_id",
                     "actor__username", "actor__email", "ip_address")
    readonly_fields = ("id", "created_at", "actor", "action", "model_name", "object_id",
                       "description", "changes", "ip_address")
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False  # Audit logs are system-generated only

    def has_change_permission(self, request, obj=None):
        return False  # Immutable
