import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class FrontdeskConfig(AppConfig):
    name = "frontdesk"
    verbose_name = "Front Desk"
    default_auto_field = "django.db.models.BigAutoField"

    read_only = False

    def ready(self):
        from . import realtime  # noqa: F401  registers the logging receiver

        self.read_only = bool(getattr(settings, "FRONTDESK", {}).get("READ_ONLY", False))
        if self.read_only:
            logger.warning("Front desk running in read-only demo mode")
