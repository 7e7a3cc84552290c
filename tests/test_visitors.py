"""
Unit Tests for the visitor lifecycle
Tests for: check-in, checkout, edit window, overdue detection, queries
"""
import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest

from frontdesk import realtime, visitors
from frontdesk.exceptions import Forbidden, InvalidState, NotFound, ValidationError
from frontdesk.models import AuditLog, Visitor

pytestmark = pytest.mark.django_db

CHECK_IN_DATA = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "Ada@Example.com ",
    "phone": "+44 20 7946 0958",
    "purpose": "Interview",
    "company": "Analytical Engines",
}


class TestCheckIn:
    """check_in()"""

    def test_creates_checked_in_visit(self):
        visitor = visitors.check_in(CHECK_IN_DATA)

        assert visitor.status == Visitor.STATUS_CHECKED_IN
        assert visitor.check_out_time is None
        assert visitor.email == "ada@example.com"
        assert visitor.expected_duration == 60
        assert visitor.location == "Main Lobby"
        assert visitor.security_level == "LOW"

    def test_mints_uuid_badge_and_default_qr(self):
        visitor = visitors.check_in(CHECK_IN_DATA)

        assert uuid.UUID(visitor.badge_id)
        assert visitor.qr_code == visitor.badge_id

    def test_badges_are_unique(self):
        first = visitors.check_in(CHECK_IN_DATA)
        second = visitors.check_in(CHECK_IN_DATA)
        assert first.badge_id != second.badge_id

    def test_emits_checkin_event(self, events):
        visitor = visitors.check_in(CHECK_IN_DATA)

        assert events[0][0] == realtime.VISITOR_CHECKIN
        payload = events[0][1]
        assert payload["type"] == "checkin"
        assert payload["visitor"]["id"] == str(visitor.id)
        assert "timestamp" in payload

    def test_missing_required_field(self):
        data = {**CHECK_IN_DATA, "purpose": ""}
        with pytest.raises(ValidationError) as exc:
            visitors.check_in(data)
        assert exc.value.details["missing"] == ["purpose"]
        assert Visitor.objects.count() == 0

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            visitors.check_in({**CHECK_IN_DATA, "email": "not-an-email"})

    @pytest.mark.parametrize("duration", [0, -5, "abc"])
    def test_rejects_bad_duration(self, duration):
        with pytest.raises(ValidationError):
            visitors.check_in({**CHECK_IN_DATA, "expected_duration": duration})

    def test_rejects_unknown_security_level(self):
        with pytest.raises(ValidationError):
            visitors.check_in({**CHECK_IN_DATA, "security_level": "EXTREME"})

    def test_optional_fields(self):
        visitor = visitors.check_in({
            **CHECK_IN_DATA,
            "security_level": "high",
            "expected_duration": "90",
            "is_vip": "true",
            "temperature": "36.6",
            "pan_id": "ABCDE1234F",
        })
        assert visitor.security_level == "HIGH"
        assert visitor.expected_duration == 90
        assert visitor.is_vip is True
        assert str(visitor.temperature) == "36.6"
        assert visitor.pan_id == "ABCDE1234F"

    def test_writes_audit_entry(self, admin_user):
        visitor = visitors.check_in(CHECK_IN_DATA, actor=admin_user)
        entry = AuditLog.objects.get(object_id=str(visitor.id))
        assert entry.action == "CHECKIN"
        assert entry.actor == admin_user


class TestCheckout:
    """checkout()"""

    def test_checks_out(self, make_visitor, events):
        visitor = make_visitor()

        result = visitors.checkout(visitor.id)

        assert result.status == Visitor.STATUS_CHECKED_OUT
        assert result.check_out_time is not None
        assert result.check_out_time >= result.check_in_time
        assert events[-1][0] == realtime.VISITOR_CHECKOUT

    def test_second_checkout_rejected(self, make_visitor):
        visitor = make_visitor()
        first = visitors.checkout(visitor.id)

        with pytest.raises(InvalidState):
            visitors.checkout(visitor.id)

        visitor.refresh_from_db()
        assert visitor.check_out_time == first.check_out_time

    def test_unknown_visitor(self):
        with pytest.raises(NotFound):
            visitors.checkout(uuid.uuid4())


class TestEditWindow:
    """edit_within_window()"""

    def test_edit_inside_window(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0, company="Old Co")

        result = visitors.edit_within_window(
            visitor.id, {"company": "New Co"}, at=t0 + timedelta(minutes=59)
        )

        assert result.company == "New Co"
        visitor.refresh_from_db()
        assert visitor.company == "New Co"

    def test_edit_after_window(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0, company="Old Co")

        with pytest.raises(Forbidden):
            visitors.edit_within_window(
                visitor.id, {"company": "New Co"}, at=t0 + timedelta(minutes=61)
            )

        visitor.refresh_from_db()
        assert visitor.company == "Old Co"

    def test_edit_rejected_after_checkout(self, make_visitor, t0):
        visitor = make_visitor(
            check_in_time=t0,
            status=Visitor.STATUS_CHECKED_OUT,
            check_out_time=t0 + timedelta(minutes=5),
        )
        with pytest.raises(Forbidden):
            visitors.edit_within_window(visitor.id, {"company": "X"}, at=t0 + timedelta(minutes=10))

    def test_ignores_fields_outside_allowlist(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0)
        visitors.edit_within_window(
            visitor.id,
            {"status": Visitor.STATUS_CHECKED_OUT, "badge_id": "forged", "notes": "wheelchair"},
            at=t0 + timedelta(minutes=1),
        )
        visitor.refresh_from_db()
        assert visitor.status == Visitor.STATUS_CHECKED_IN
        assert visitor.badge_id != "forged"
        assert visitor.notes == "wheelchair"

    def test_records_changes_in_audit_log(self, make_visitor, admin_user, t0):
        visitor = make_visitor(check_in_time=t0, company="Old Co")
        visitors.edit_within_window(
            visitor.id, {"company": "New Co"}, actor=admin_user, at=t0 + timedelta(minutes=2)
        )
        entry = AuditLog.objects.get(object_id=str(visitor.id), action="UPDATE")
        assert entry.changes == [{"field": "company", "before": "Old Co", "after": "New Co"}]

    def test_blank_required_field_rejected(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0)
        with pytest.raises(ValidationError):
            visitors.edit_within_window(visitor.id, {"first_name": "  "}, at=t0)


class TestOverdue:
    """overdue() / is_overdue()"""

    def test_overdue_after_expected_duration(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0, expected_duration=30)

        assert visitor in visitors.overdue(at=t0 + timedelta(minutes=31))

    def test_not_overdue_before_expected_duration(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0, expected_duration=30)

        assert visitor not in visitors.overdue(at=t0 + timedelta(minutes=29))

    def test_checked_out_never_overdue(self, make_visitor, t0):
        make_visitor(
            check_in_time=t0,
            expected_duration=30,
            status=Visitor.STATUS_CHECKED_OUT,
            check_out_time=t0 + timedelta(minutes=20),
        )
        assert visitors.overdue(at=t0 + timedelta(hours=5)) == []

    def test_uses_current_time_by_default(self, make_visitor, t0):
        visitor = make_visitor(check_in_time=t0, expected_duration=30)
        with patch("django.utils.timezone.now", return_value=t0 + timedelta(minutes=45)):
            assert visitors.overdue() == [visitor]


class TestQueries:
    """get / delete / stats / history / list"""

    def test_delete_twice(self, make_visitor):
        visitor = make_visitor()

        assert visitors.delete(visitor.id) is True
        assert visitors.delete(visitor.id) is False

    def test_current_active(self, make_visitor, t0):
        active = make_visitor()
        make_visitor(status=Visitor.STATUS_CHECKED_OUT, check_out_time=t0)

        assert visitors.current_active() == [active]

    def test_stats_summary(self, make_visitor, t0):
        make_visitor(check_in_time=t0, purpose="Meeting")
        make_visitor(check_in_time=t0 + timedelta(hours=1), purpose="Meeting")
        make_visitor(
            check_in_time=t0 - timedelta(days=2), purpose="Delivery",
            status=Visitor.STATUS_CHECKED_OUT, check_out_time=t0 - timedelta(days=2),
        )

        stats = visitors.stats_summary(at=t0 + timedelta(hours=2))

        assert stats["today"] == 2
        assert stats["current"] == 2
        assert stats["total"] == 3
        assert stats["by_purpose"][0] == {"purpose": "Meeting", "count": 2}

    def test_history_matches_identity_fields(self, make_visitor, t0):
        earlier = make_visitor(email="repeat@example.com", phone="111", check_in_time=t0 - timedelta(days=7))
        make_visitor(email="someone@example.com", phone="222", check_in_time=t0 - timedelta(days=1))
        current = make_visitor(email="repeat@example.com", phone="333", check_in_time=t0)

        assert visitors.history(current.id) == [earlier]

    def test_list_filters_by_status(self, make_visitor, t0):
        active = make_visitor()
        make_visitor(status=Visitor.STATUS_CHECKED_OUT, check_out_time=t0)

        page = visitors.list_visitors(visitors.VisitorFilter(statuses=[Visitor.STATUS_CHECKED_IN]))

        assert page["rows"] == [active]
        assert page["total"] == 1

    def test_list_filters_by_day_and_company(self, make_visitor, t0):
        match = make_visitor(check_in_time=t0, company="Acme")
        make_visitor(check_in_time=t0, company="Globex")
        make_visitor(check_in_time=t0 - timedelta(days=1), company="Acme")

        page = visitors.list_visitors(visitors.VisitorFilter(date=t0.date(), companies=["Acme"]))

        assert page["rows"] == [match]

    def test_list_paginates(self, make_visitor):
        for _ in range(5):
            make_visitor()
        page = visitors.list_visitors(visitors.VisitorFilter(page=2, limit=2))
        assert len(page["rows"]) == 2
        assert page["total"] == 5
        assert page["page"] == 2
