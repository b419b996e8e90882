"""django_passkeys app config."""
from django.apps import AppConfig
from django.test.signals import setting_changed
from django.utils.translation import gettext_lazy as _

from django_passkeys.settings import SETTINGS


class DjangoPasskeysConfig(AppConfig):
    """django_passkeys app config."""

    name = 'django_passkeys'
    verbose_name = _('Django application for passkey options')

    def ready(self):
        """Check configuration."""
        SETTINGS.check()
        setting_changed.connect(SETTINGS.invalidate_cache)
