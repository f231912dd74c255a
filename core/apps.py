"""Core application configuration."""

import logging
import os

from django.apps import AppConfig
from django.db.models.signals import post_migrate

logger = logging.getLogger(__name__)


def _create_admin_user(sender, **kwargs):
    """Create the bootstrap superuser when ``ADMIN_BOOTSTRAP_PASSWORD`` is set."""

    password = os.getenv("ADMIN_BOOTSTRAP_PASSWORD")
    if not password:
        return

    from django.contrib.auth import get_user_model

    User = get_user_model()
    username = os.getenv("ADMIN_BOOTSTRAP_USERNAME", "admin")
    if not User.objects.filter(username=username).exists():
        User.objects.create_superuser(username, email="", password=password)
        logger.info("Created bootstrap superuser %s", username)


class CoreConfig(AppConfig):
    """Configuration for the core app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self):  # pragma: no cover - executed via Django startup
        """Connect signal handlers when the app is ready."""

        post_migrate.connect(
            _create_admin_user, dispatch_uid="core.create_admin_user"
        )
