"""Test utilities."""
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.conf import settings
from django.test import override_settings

from django_passkeys.settings import SETTINGS

if TYPE_CHECKING:  # pragma: no branch
    from django.contrib.auth import get_user_model

    User = get_user_model()


def helper_handle(user: "User"):
    return 'handle-' + user.get_username()


def helper_none(user: "User"):
    return None


@contextmanager
def without_relying_party_server():
    """Remove `DJANGO_PASSKEYS_RELYING_PARTY_SERVER` setting, usable as a decorator too."""
    with override_settings():
        del settings.DJANGO_PASSKEYS_RELYING_PARTY_SERVER
        # Deleting a setting doesn't send `setting_changed` signal.
        SETTINGS.invalidate_cache()
        try:
            yield
        finally:
            SETTINGS.invalidate_cache()
