"""Client of the relying party server providing WebAuthn options."""
import logging
from typing import Any, Dict, Optional, Tuple, Union

import requests
from django.core.exceptions import ValidationError

from .constants import AUTHENTICATION_OPTIONS_PATH, REGISTRATION_OPTIONS_PATH, PasskeyOptionsError
from .options import AuthenticationOptions, RegistrationOptions
from .serialization import (DEFAULT_CODEC, JsonCodec, decode_authentication_options, decode_registration_options,
                            encode_options)
from .settings import SETTINGS
from .validation import sanitize_authentication_options, sanitize_registration_options

_LOGGER = logging.getLogger(__name__)


class RelyingPartyError(ValueError):
    """Relying party server failed to provide options."""

    def __init__(self, *args, error_code: PasskeyOptionsError):
        """Set error code."""
        super().__init__(*args)
        self.error_code = error_code


class RelyingPartyClient(object):
    """
    Fetch WebAuthn options from relying party server and sanitize them.

    @ivar url: Base URL of the relying party server.
    @ivar expected_rp_id: Relying party ID the options are pinned to.
    @ivar timeout: Timeout of requests, see `requests` documentation.
    @ivar codec: Options of JSON decoding and encoding.
    """

    def __init__(self, url: str, expected_rp_id: str, *, timeout: Union[float, Tuple[float, float]] = 10,
                 registration_path: str = REGISTRATION_OPTIONS_PATH,
                 authentication_path: str = AUTHENTICATION_OPTIONS_PATH,
                 codec: JsonCodec = DEFAULT_CODEC, session: Optional[requests.Session] = None):
        """Set up the client, requests are sent by `session` if provided."""
        self.url = url
        self.expected_rp_id = expected_rp_id
        self.timeout = timeout
        self.registration_path = registration_path
        self.authentication_path = authentication_path
        self.codec = codec
        self.session = session

    @classmethod
    def from_settings(cls, expected_rp_id: str, **kwargs: Any) -> 'RelyingPartyClient':
        """Return client configured by `RELYING_PARTY_SERVER` setting.

        @raise RelyingPartyError: If the relying party server isn't configured.
        """
        server = SETTINGS.relying_party_server
        if not server or not server['url']:
            raise RelyingPartyError("Relying party server is not configured.",
                                    error_code=PasskeyOptionsError.SERVER_UNAVAILABLE)
        kwargs.setdefault('timeout', server['timeout'])
        kwargs.setdefault('registration_path', server['registration_path'])
        kwargs.setdefault('authentication_path', server['authentication_path'])
        return cls(server['url'], expected_rp_id, **kwargs)

    def _post(self, path: str, body: Dict[str, str]) -> bytes:
        """Send request to relying party server and return response content.

        @raise RelyingPartyError: If the request fails.
        """
        url = '{}/{}'.format(self.url.rstrip('/'), path.lstrip('/'))
        try:
            post = requests.post if self.session is None else self.session.post
            response = post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as error:
            _LOGGER.info("Relying party request to %s failed with error: %r", url, error)
            raise RelyingPartyError('Relying party server is unavailable.',
                                    error_code=PasskeyOptionsError.SERVER_UNAVAILABLE) from error
        return response.content

    def _decode(self, decode, content: bytes):
        try:
            return decode(content, self.codec)
        except ValidationError as error:
            _LOGGER.info("Relying party response is malformed: %r", error)
            raise RelyingPartyError('Relying party response is malformed.',
                                    error_code=PasskeyOptionsError.MALFORMED_RESPONSE) from error

    def begin_registration(self, user_id: str) -> Optional[RegistrationOptions]:
        """Return registration options as provided by relying party.

        @raise RelyingPartyError: If the options can't be obtained.
        """
        content = self._post(self.registration_path, {'userId': user_id})
        return self._decode(decode_registration_options, content)

    def begin_authentication(self, username_or_email: str) -> Optional[AuthenticationOptions]:
        """Return authentication options as provided by relying party.

        @raise RelyingPartyError: If the options can't be obtained.
        """
        content = self._post(self.authentication_path, {'usernameOrEmail': username_or_email})
        return self._decode(decode_authentication_options, content)

    def get_registration_options(self, user_id: str) -> str:
        """Return sanitized registration request JSON for platform credential API.

        @raise RelyingPartyError: If the options can't be obtained.
        @raise ValidationError: If the options are invalid.
        """
        received = self.begin_registration(user_id)
        options = sanitize_registration_options(received, self.expected_rp_id)
        _log_pruned('excludeCredentials', received.exclude_credentials, options.exclude_credentials)
        return encode_options(options, self.codec)

    def get_authentication_options(self, username_or_email: str) -> str:
        """Return sanitized authentication request JSON for platform credential API.

        @raise RelyingPartyError: If the options can't be obtained.
        @raise ValidationError: If the options are invalid.
        """
        received = self.begin_authentication(username_or_email)
        options = sanitize_authentication_options(received, self.expected_rp_id)
        _log_pruned('allowCredentials', received.allow_credentials, options.allow_credentials)
        return encode_options(options, self.codec)


def _log_pruned(field, received, kept):
    dropped = len(received or ()) - len(kept or ())
    if dropped:
        _LOGGER.debug("Dropped %d invalid credentials from %s.", dropped, field)
