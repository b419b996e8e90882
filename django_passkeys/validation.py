"""Validation and sanitization of WebAuthn options received from a relying party.

Sanitizers pin the relying party ID, normalize lists of algorithms and prune lists of credentials. All other
problems are reported as `ValidationError` with the offending fields as keys and one of these codes:
 * missing - required member is absent
 * required - required member is blank
 * invalid - member is not Base64URL encoded
 * out_of_range - timeout out of bounds
 * invalid_choice - value is not one of the enumerated values
"""
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from .constants import (DEFAULT_ALGORITHM, MAX_TIMEOUT, MIN_TIMEOUT, PUBLIC_KEY_CREDENTIAL_TYPE,
                        VALID_ALGORITHMS, VALID_AUTHENTICATOR_ATTACHMENT, VALID_RESIDENT_KEY, VALID_TRANSPORTS,
                        VALID_USER_VERIFICATION)
from .options import (AlgorithmParam, AuthenticationOptions, CredentialDescriptor, RegistrationOptions,
                      RelyingParty)

BASE64URL_PATTERN = re.compile(r'[A-Za-z0-9_-]+')

DEFAULT_PUB_KEY_CRED_PARAMS = (AlgorithmParam(type=PUBLIC_KEY_CREDENTIAL_TYPE, alg=DEFAULT_ALGORITHM), )

_Errors = Dict[str, ValidationError]


def is_base64url(value: Any) -> bool:
    """Return whether value is a non-empty string of Base64URL alphabet without padding."""
    if not isinstance(value, str) or not value:
        return False
    return BASE64URL_PATTERN.fullmatch(value) is not None


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _is_public_key(credential_type: Optional[str]) -> bool:
    return credential_type is not None and credential_type.lower() == PUBLIC_KEY_CREDENTIAL_TYPE


def is_valid_credential(credential: Optional[CredentialDescriptor]) -> bool:
    """Return whether credential descriptor is structurally valid."""
    if credential is None:
        return False
    if not _is_public_key(credential.type) or _is_blank(credential.id) or not is_base64url(credential.id):
        return False
    return credential.transports is None or all(t in VALID_TRANSPORTS for t in credential.transports)


def prune_credentials(
        credentials: Optional[Iterable[Optional[CredentialDescriptor]]]) -> Optional[Tuple[CredentialDescriptor, ...]]:
    """Return only the valid credential descriptors, in their original order.

    Invalid descriptors are dropped silently, `None` is returned for `None`.
    """
    if credentials is None:
        return None
    return tuple(credential for credential in credentials if is_valid_credential(credential))


def normalize_pub_key_cred_params(params: Optional[Iterable[Optional[AlgorithmParam]]]) -> Tuple[AlgorithmParam, ...]:
    """Return only the supported algorithms, ES256 if there are none."""
    cleaned = tuple(p for p in params or () if p is not None and _is_public_key(p.type) and p.alg in VALID_ALGORITHMS)
    return cleaned or DEFAULT_PUB_KEY_CRED_PARAMS


def _add_error(errors: _Errors, field: str, message: str, code: str, **params: Any) -> None:
    params['field'] = field
    errors[field] = ValidationError(message, code=code, params=params)


def _check_challenge(errors: _Errors, challenge: Optional[str]) -> None:
    if challenge is None:
        _add_error(errors, 'challenge', _('Missing %(field)s.'), 'missing')
    elif not is_base64url(challenge):
        _add_error(errors, 'challenge', _('%(field)s must be Base64URL encoded.'), 'invalid', value=challenge)


def _check_timeout(errors: _Errors, timeout: Optional[int]) -> None:
    if timeout is not None and not MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
        _add_error(errors, 'timeout', _('Unreasonable %(field)s %(value)s, must be between %(min)s and %(max)s.'),
                   'out_of_range', value=timeout, min=MIN_TIMEOUT, max=MAX_TIMEOUT)


def _check_choice(errors: _Errors, field: str, value: Optional[str], choices: Iterable[str]) -> None:
    if value is not None and value not in choices:
        _add_error(errors, field, _('Invalid %(field)s: %(value)s.'), 'invalid_choice', value=value)


def _check_rp_id(expected_rp_id: str) -> None:
    if _is_blank(expected_rp_id):
        raise ValueError("Expected relying party ID must not be blank.")


def _missing_options() -> ValidationError:
    return ValidationError({'publicKey': ValidationError(_('Missing %(field)s.'), code='missing',
                                                         params={'field': 'publicKey'})})


def sanitize_registration_options(options: Optional[RegistrationOptions],
                                  expected_rp_id: str) -> RegistrationOptions:
    """Validate registration options and return their sanitized copy.

    The relying party ID is pinned to `expected_rp_id`, algorithms are normalized and invalid excluded
    credentials are pruned. Other members are kept unchanged.

    @raise ValidationError: If options are missing or invalid.
    """
    _check_rp_id(expected_rp_id)
    if options is None:
        raise _missing_options()

    errors = {}  # type: _Errors
    _check_challenge(errors, options.challenge)

    user = options.user
    if user is None:
        _add_error(errors, 'user', _('Missing %(field)s.'), 'missing')
    else:
        if _is_blank(user.id) or not is_base64url(user.id):
            _add_error(errors, 'user.id', _('%(field)s must be Base64URL encoded.'), 'invalid', value=user.id)
        if _is_blank(user.name):
            _add_error(errors, 'user.name', _('%(field)s is required.'), 'required')
        if _is_blank(user.display_name):
            _add_error(errors, 'user.displayName', _('%(field)s is required.'), 'required')

    _check_timeout(errors, options.timeout)

    selection = options.authenticator_selection
    if selection is not None:
        _check_choice(errors, 'authenticatorSelection.residentKey', selection.resident_key, VALID_RESIDENT_KEY)
        _check_choice(errors, 'authenticatorSelection.userVerification', selection.user_verification,
                      VALID_USER_VERIFICATION)
        _check_choice(errors, 'authenticatorSelection.authenticatorAttachment', selection.authenticator_attachment,
                      VALID_AUTHENTICATOR_ATTACHMENT)

    if errors:
        raise ValidationError(errors)

    return options.evolve(
        rp=(options.rp or RelyingParty()).evolve(id=expected_rp_id),
        pub_key_cred_params=normalize_pub_key_cred_params(options.pub_key_cred_params),
        exclude_credentials=prune_credentials(options.exclude_credentials),
    )


def sanitize_authentication_options(options: Optional[AuthenticationOptions],
                                    expected_rp_id: str) -> AuthenticationOptions:
    """Validate authentication options and return their sanitized copy.

    The relying party ID is pinned to `expected_rp_id` and invalid allowed credentials are pruned.
    Other members are kept unchanged.

    @raise ValidationError: If options are missing or invalid.
    """
    _check_rp_id(expected_rp_id)
    if options is None:
        raise _missing_options()

    errors = {}  # type: _Errors
    _check_challenge(errors, options.challenge)
    _check_choice(errors, 'userVerification', options.user_verification, VALID_USER_VERIFICATION)
    _check_timeout(errors, options.timeout)
    if errors:
        raise ValidationError(errors)

    return options.evolve(rp_id=expected_rp_id, allow_credentials=prune_credentials(options.allow_credentials))
