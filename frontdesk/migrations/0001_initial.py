import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import frontdesk.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Admin",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("username", models.CharField(max_length=100, unique=True)),
                ("email", models.EmailField(max_length=255, unique=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("role", models.CharField(choices=[("SUPER_ADMIN", "Super Admin"), ("ADMIN", "Admin"), ("SECURITY", "Security"), ("RECEPTIONIST", "Receptionist")], default="ADMIN", max_length=20)),
                ("department", models.CharField(max_length=100)),
                ("can_view_analytics", models.BooleanField(default=False)),
                ("can_manage_visitors", models.BooleanField(default=False)),
                ("can_manage_admins", models.BooleanField(default=False)),
                ("can_export_data", models.BooleanField(default=False)),
                ("can_view_reports", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("login_attempts", models.PositiveIntegerField(default=0)),
                ("lock_until", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
            managers=[
                ("objects", frontdesk.models.AdminManager()),
            ],
        ),
        migrations.CreateModel(
            name="Visitor",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=255)),
                ("phone", models.CharField(max_length=20)),
                ("aadhaar_id", models.CharField(blank=True, max_length=32)),
                ("pan_id", models.CharField(blank=True, max_length=16)),
                ("passport_id", models.CharField(blank=True, max_length=16)),
                ("driving_license_id", models.CharField(blank=True, max_length=32)),
                ("company", models.CharField(blank=True, max_length=255)),
                ("purpose", models.CharField(max_length=255)),
                ("expected_duration", models.PositiveIntegerField(default=60, help_text="Minutes")),
                ("location", models.CharField(default="Main Lobby", max_length=100)),
                ("security_level", models.CharField(choices=[("LOW", "Low"), ("MEDIUM", "Medium"), ("HIGH", "High")], default="LOW", max_length=10)),
                ("is_vip", models.BooleanField(default=False)),
                ("photo", models.TextField(blank=True, help_text="Data URI or URL of the check-in photo")),
                ("temperature", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("health_declaration", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("check_in_time", models.DateTimeField(default=django.utils.timezone.now)),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                ("status", models.CharField(choices=[("CHECKED_IN", "Checked In"), ("CHECKED_OUT", "Checked Out"), ("EXPIRED", "Expired")], default="CHECKED_IN", max_length=20)),
                ("badge_id", models.CharField(max_length=64, unique=True)),
                ("qr_code", models.TextField(blank=True, help_text="Defaults to the badge id")),
            ],
            options={
                "ordering": ["-check_in_time"],
                "indexes": [
                    models.Index(fields=["check_in_time"], name="visitor_check_in_idx"),
                    models.Index(fields=["status"], name="visitor_status_idx"),
                    models.Index(fields=["phone"], name="visitor_phone_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Emergency",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("type", models.CharField(choices=[("DEPARTMENTAL", "Departmental"), ("VISITOR", "Visitor")], max_length=20)),
                ("incident_code", models.CharField(max_length=64, unique=True)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("RESOLVED", "Resolved"), ("CANCELLED", "Cancelled")], default="ACTIVE", max_length=20)),
                ("location", models.CharField(default="Main Lobby", max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("department_name", models.CharField(blank=True, max_length=255)),
                ("group_name", models.CharField(blank=True, max_length=255)),
                ("poc_name", models.CharField(blank=True, max_length=255)),
                ("poc_phone", models.CharField(blank=True, max_length=20)),
                ("visitor_first_name", models.CharField(blank=True, max_length=100)),
                ("visitor_last_name", models.CharField(blank=True, max_length=100)),
                ("visitor_phone", models.CharField(blank=True, max_length=20)),
                ("representative_id_document", models.CharField(blank=True, max_length=64)),
                ("representative_id_number", models.CharField(blank=True, max_length=128)),
                ("headcount", models.PositiveIntegerField(blank=True, null=True)),
                ("is_minor", models.BooleanField(default=False)),
                ("guardian_contact", models.CharField(blank=True, max_length=255)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reported_emergencies", to="frontdesk.admin")),
                ("resolved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="closed_emergencies", to="frontdesk.admin")),
            ],
            options={
                "verbose_name_plural": "emergencies",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["type", "status", "created_at"], name="emergency_type_status_idx"),
                    models.Index(fields=["location", "created_at"], name="emergency_location_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("action", models.CharField(choices=[("CHECKIN", "Check-in"), ("CHECKOUT", "Check-out"), ("UPDATE", "Update"), ("DELETE", "Delete"), ("CREATE", "Create"), ("DEACTIVATE", "Deactivate"), ("LOGIN", "Login"), ("LOCKOUT", "Lockout"), ("UNLOCK", "Unlock"), ("RESOLVE", "Resolve"), ("CANCEL", "Cancel")], max_length=20)),
                ("model_name", models.CharField(max_length=50)),
                ("object_id", models.CharField(max_length=64)),
                ("description", models.TextField(blank=True)),
                ("changes", models.JSONField(blank=True, default=list)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="audit_entries", to="frontdesk.admin")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["model_name", "object_id"], name="auditlog_object_idx"),
                ],
            },
        ),
    ]
