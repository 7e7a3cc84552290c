"""
Front desk test configuration and fixtures
"""
import uuid
from datetime import datetime

import pytest
from django.utils import timezone
from faker import Faker
from rest_framework.test import APIClient

from frontdesk import roles
from frontdesk.models import Admin, Emergency, Visitor
from frontdesk.realtime import realtime_event
from frontdesk.tokens import issue_session_token

fake = Faker()

PASSWORD = "correct-horse-42"


@pytest.fixture
def t0():
    """A fixed, timezone-aware check-in instant."""
    return timezone.make_aware(datetime(2024, 3, 5, 9, 0, 0))


@pytest.fixture
def make_admin(db):
    def _make(role=roles.ADMIN, password=PASSWORD, **extra):
        username = extra.pop("username", fake.unique.user_name())
        email = extra.pop("email", fake.unique.email())
        return Admin.objects.create_admin(
            username=username,
            email=email,
            password=password,
            first_name=extra.pop("first_name", fake.first_name()),
            last_name=extra.pop("last_name", fake.last_name()),
            department=extra.pop("department", "Operations"),
            role=role,
            **extra,
        )
    return _make


@pytest.fixture
def super_admin(make_admin):
    return make_admin(role=roles.SUPER_ADMIN)


@pytest.fixture
def admin_user(make_admin):
    return make_admin(role=roles.ADMIN)


@pytest.fixture
def security_user(make_admin):
    return make_admin(role=roles.SECURITY)


@pytest.fixture
def make_visitor(db):
    def _make(**overrides):
        badge_id = str(uuid.uuid4())
        values = {
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "email": fake.unique.email(),
            "phone": "+1-555-0199",
            "purpose": "Meeting",
            "company": "Acme",
            "badge_id": badge_id,
            "qr_code": badge_id,
            "status": Visitor.STATUS_CHECKED_IN,
        }
        values.update(overrides)
        return Visitor.objects.create(**values)
    return _make


@pytest.fixture
def make_emergency(db):
    def _make(**overrides):
        values = {
            "type": Emergency.TYPE_DEPARTMENTAL,
            "incident_code": f"EMG-TEST-{uuid.uuid4().hex.upper()}",
            "department_name": "Finance",
            "poc_name": "Dana Lee",
        }
        values.update(overrides)
        return Emergency.objects.create(**values)
    return _make


@pytest.fixture
def events():
    """Collect realtime events emitted during the test."""
    received = []

    def _collect(sender, event, payload, **kwargs):
        received.append((event, payload))

    realtime_event.connect(_collect, weak=False, dispatch_uid="test-collector")
    yield received
    realtime_event.disconnect(dispatch_uid="test-collector")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    def _client(admin):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_session_token(admin)}")
        return client
    return _client


@pytest.fixture
def read_only():
    from django.apps import apps

    config = apps.get_app_config("frontdesk")
    previous = config.read_only
    config.read_only = True
    yield config
    config.read_only = previous
