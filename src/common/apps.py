import structlog
from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Configuration for the common app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self) -> None:
        """Announce the logging pipeline once Django is fully loaded."""
        from django.conf import settings

        logger = structlog.get_logger(__name__)
        logger.debug(
            "structlog_configured",
            service=getattr(settings, "SERVICE_NAME", "pulakatraca"),
            environment=getattr(settings, "DEPLOYMENT_ENVIRONMENT", "development"),
        )
