from django.conf import settings

DEFAULTS = {
    "READ_ONLY": False,
    "EDIT_WINDOW_MINUTES": 60,
    "MAX_LOGIN_ATTEMPTS": 5,
    "LOCKOUT_HOURS": 2,
    "DEFAULT_LOCATION": "Main Lobby",
    "DEFAULT_EXPECTED_DURATION": 60,
}


def frontdesk_setting(name):
    """Read one value from ``settings.FRONTDESK`` falling back to DEFAULTS."""
    return getattr(settings, "FRONTDESK", {}).get(name, DEFAULTS[name])
