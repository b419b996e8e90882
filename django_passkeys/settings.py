"""Django settings specific for django_passkeys."""
from typing import Optional, cast

from appsettings import AppSettings, CallablePathSetting, NestedDictSetting, Setting, StringSetting
from django.core.exceptions import ImproperlyConfigured, ValidationError

from .constants import AUTHENTICATION_OPTIONS_PATH, REGISTRATION_OPTIONS_PATH


def timeout_validator(value):
    """Validate timeouts - must contain a number or tuple with two numbers."""
    if isinstance(value, (float, int)):
        return
    if isinstance(value, tuple) and len(value) == 2 and all(isinstance(v, (float, int)) for v in value):
        return
    raise ValidationError('Value %(value)s must be a float, int or a tuple with 2 float or int items.',
                          params={'value': value})


class DjangoPasskeysSettings(AppSettings):
    """Application specific settings."""

    rp_id = cast(Optional[str], StringSetting(default=None))
    relying_party_server = NestedDictSetting(settings=dict(
        url=StringSetting(default=None),
        registration_path=StringSetting(default=REGISTRATION_OPTIONS_PATH),
        authentication_path=StringSetting(default=AUTHENTICATION_OPTIONS_PATH),
        timeout=Setting(default=10, validators=[timeout_validator]),
    ), default=None)
    user_handle = CallablePathSetting(default=None)

    @classmethod
    def check(cls):
        """Extend parent class check method to perform further project specific settings check."""
        super(DjangoPasskeysSettings, cls).check()

        rp_id = cls.settings['rp_id'].get_value()
        if rp_id is not None and not rp_id.strip():
            raise ImproperlyConfigured("RP_ID setting must not be blank, leave it unset to use the request host")

        server = cls.settings['relying_party_server'].get_value()
        if server is not None and not server['url']:
            raise ImproperlyConfigured("To fetch passkey options, RELYING_PARTY_SERVER must contain URL")

    class Meta:
        """Meta class."""

        setting_prefix = 'django_passkeys_'


SETTINGS = DjangoPasskeysSettings()
