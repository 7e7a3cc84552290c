"""
Unit Tests for the identifier resolver
Tests for: badge / QR lookup, phone matching, data-URI QR codes, ordering
"""
from datetime import timedelta

import pytest

from frontdesk import identifiers
from frontdesk.exceptions import ValidationError

pytestmark = pytest.mark.django_db


class TestHelpers:
    """Pure string helpers"""

    def test_digits_only_strips_punctuation(self):
        assert identifiers.digits_only("+1 (555) 010-1") == "15550101"

    def test_extract_badge_candidate_from_url(self):
        raw = "https://desk.example.com/badge/3F2504E0-4F89-11D3-9A0C-0305E82C3301?x=1"
        assert identifiers.extract_badge_candidate(raw) == "3f2504e0-4f89-11d3-9a0c-0305e82c3301"

    def test_extract_badge_candidate_none(self):
        assert identifiers.extract_badge_candidate("no uuid here") is None

    def test_is_image_data_uri(self):
        assert identifiers.is_image_data_uri("data:image/png;base64,AAAA")
        assert not identifiers.is_image_data_uri("data:text/plain,hello")


class TestResolve:
    """resolve() against stored visitors"""

    def test_empty_input_rejected(self):
        with pytest.raises(ValidationError):
            identifiers.resolve("   ")

    def test_unknown_identifier_returns_none(self, make_visitor):
        make_visitor()
        assert identifiers.resolve("does-not-exist") is None

    def test_exact_badge_id(self, make_visitor):
        visitor = make_visitor()
        assert identifiers.resolve(visitor.badge_id) == visitor

    def test_input_is_trimmed(self, make_visitor):
        visitor = make_visitor()
        assert identifiers.resolve(f"  {visitor.badge_id}\n") == visitor

    def test_badge_embedded_in_url(self, make_visitor):
        visitor = make_visitor(qr_code="printed-label")
        raw = f"https://desk.example.com/v/{visitor.badge_id.upper()}"
        assert identifiers.resolve(raw) == visitor

    def test_exact_phone(self, make_visitor):
        visitor = make_visitor(phone="+1-555-0101")
        assert identifiers.resolve("+1-555-0101") == visitor

    def test_phone_digits_match_punctuated_stored_number(self, make_visitor):
        visitor = make_visitor(phone="+1-555-0101")
        assert identifiers.resolve("5550101") == visitor

    def test_phone_full_digits_match(self, make_visitor):
        visitor = make_visitor(phone="(555) 010-1234")
        assert identifiers.resolve("5550101234") == visitor

    def test_short_digit_strings_do_not_suffix_match(self, make_visitor):
        make_visitor(phone="+1-555-0101")
        assert identifiers.resolve("0101") is None

    def test_email_match_is_case_insensitive_on_input(self, make_visitor):
        visitor = make_visitor(email="guest@example.com")
        assert identifiers.resolve("Guest@Example.com") == visitor

    @pytest.mark.parametrize("field,value", [
        ("aadhaar_id", "1234 5678 9012"),
        ("pan_id", "ABCDE1234F"),
        ("passport_id", "K1234567"),
        ("driving_license_id", "DL-0420110149646"),
    ])
    def test_government_ids(self, make_visitor, field, value):
        visitor = make_visitor(**{field: value})
        assert identifiers.resolve(value) == visitor

    def test_data_uri_matches_stored_image_qr(self, make_visitor):
        visitor = make_visitor(qr_code="data:image/png;base64,iVBORw0KGgo")
        assert identifiers.resolve("data:image/jpeg;base64,/9j/4AAQ") == visitor

    def test_most_recent_visit_wins(self, make_visitor, t0):
        make_visitor(phone="+1-555-0101", check_in_time=t0)
        latest = make_visitor(phone="+1-555-0101", check_in_time=t0 + timedelta(days=1))
        make_visitor(phone="+1-555-0101", check_in_time=t0 - timedelta(days=3))

        assert identifiers.resolve("5550101") == latest

    def test_id_lookup_ignores_newer_phone_ending_in_same_digits(self, make_visitor, t0):
        owner = make_visitor(passport_id="K5550101", phone="+44 20 7946 0000", check_in_time=t0)
        make_visitor(phone="+1-212-555-0101", check_in_time=t0 + timedelta(minutes=5))

        assert identifiers.resolve("K5550101") == owner

    def test_email_lookup_ignores_phone_suffix(self, make_visitor, t0):
        owner = make_visitor(email="room5550101@example.com", check_in_time=t0)
        make_visitor(phone="+1-212-555-0101", check_in_time=t0 + timedelta(minutes=5))

        assert identifiers.resolve("room5550101@example.com") == owner
