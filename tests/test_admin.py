"""
Tests for the Django admin actions on front desk accounts
"""
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.contrib.admin.sites import site
from django.contrib.auth.models import User
from django.test import RequestFactory
from django.utils import timezone

from frontdesk.admin import AdminAccountAdmin
from frontdesk.models import Admin, AuditLog

pytestmark = pytest.mark.django_db


@pytest.fixture
def model_admin():
    with patch.object(AdminAccountAdmin, "message_user"):
        yield AdminAccountAdmin(Admin, site)


@pytest.fixture
def admin_request():
    request = RequestFactory().post("/admin/frontdesk/admin/", REMOTE_ADDR="10.0.0.7")
    request.user = User(username="ops")
    return request


class TestAccountActions:
    """unlock_accounts / deactivate_accounts"""

    def test_unlock_clears_lock_and_is_audited(self, model_admin, admin_request, admin_user):
        Admin.objects.filter(pk=admin_user.pk).update(
            login_attempts=5, lock_until=timezone.now() + timedelta(hours=1)
        )

        model_admin.unlock_accounts(admin_request, Admin.objects.filter(pk=admin_user.pk))

        admin_user.refresh_from_db()
        assert admin_user.login_attempts == 0
        assert admin_user.lock_until is None
        entry = AuditLog.objects.get(object_id=str(admin_user.pk), action="UNLOCK")
        assert "ops" in entry.description
        assert entry.ip_address == "10.0.0.7"

    def test_deactivate_is_audited_per_account(self, model_admin, admin_request,
                                               admin_user, security_user):
        queryset = Admin.objects.filter(pk__in=[admin_user.pk, security_user.pk])

        model_admin.deactivate_accounts(admin_request, queryset)

        assert not Admin.objects.filter(pk__in=[admin_user.pk, security_user.pk],
                                        is_active=True).exists()
        logged = set(AuditLog.objects.filter(action="DEACTIVATE").values_list("object_id", flat=True))
        assert logged == {str(admin_user.pk), str(security_user.pk)}

    def test_deactivate_skips_already_inactive(self, model_admin, admin_request, admin_user):
        Admin.objects.filter(pk=admin_user.pk).update(is_active=False)

        model_admin.deactivate_accounts(admin_request, Admin.objects.filter(pk=admin_user.pk))

        assert not AuditLog.objects.filter(action="DEACTIVATE").exists()
