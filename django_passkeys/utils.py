"""Utilities for django_passkeys."""
from typing import Any, Callable, Union

from django.contrib.auth.base_user import AbstractBaseUser
from django.utils.module_loading import import_string
from fido2.utils import websafe_encode

from .settings import SETTINGS


def process_callable(item: Union[Callable, str, None], *args: Any, **kwargs: Any) -> Any:
    """Call supplied callable or dotted path source.

    @raise ImportError: If supplied item[str] is not an importable dotted path.
    """

    if not item:
        return

    if isinstance(item, str):
        return import_string(item)(*args, **kwargs)

    if callable(item):
        return item(*args, **kwargs)


def get_user_handle(user: AbstractBaseUser) -> str:
    """Return user handle sent to the relying party.

    Returns result of `USER_HANDLE` setting if defined, Base64URL encoded username otherwise.
    """
    handle = process_callable(SETTINGS.user_handle, user)
    if handle is None:
        handle = websafe_encode(user.get_username().encode('utf-8'))
    return handle
