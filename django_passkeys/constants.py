"""
Django passkeys constants.

WebAuthn rule tables used to validate relying party options:
 * VALID_USER_VERIFICATION
 * VALID_RESIDENT_KEY
 * VALID_AUTHENTICATOR_ATTACHMENT
 * VALID_TRANSPORTS
 * VALID_ALGORITHMS

Timeout bounds in milliseconds: MIN_TIMEOUT, MAX_TIMEOUT

Paths of the relying party endpoints, relative to its URL:
 * REGISTRATION_OPTIONS_PATH
 * AUTHENTICATION_OPTIONS_PATH
"""
from enum import Enum, unique

from fido2.cose import ES256, RS256
from fido2.webauthn import (AuthenticatorAttachment, AuthenticatorTransport, PublicKeyCredentialType,
                            ResidentKeyRequirement, UserVerificationRequirement)

PUBLIC_KEY_CREDENTIAL_TYPE = PublicKeyCredentialType.PUBLIC_KEY.value

# Listed explicitly, newer fido2 releases may know more values than we accept.
VALID_USER_VERIFICATION = frozenset(requirement.value for requirement in (
    UserVerificationRequirement.REQUIRED,
    UserVerificationRequirement.PREFERRED,
    UserVerificationRequirement.DISCOURAGED,
))
VALID_RESIDENT_KEY = frozenset(requirement.value for requirement in (
    ResidentKeyRequirement.REQUIRED,
    ResidentKeyRequirement.PREFERRED,
    ResidentKeyRequirement.DISCOURAGED,
))
VALID_AUTHENTICATOR_ATTACHMENT = frozenset(attachment.value for attachment in (
    AuthenticatorAttachment.PLATFORM,
    AuthenticatorAttachment.CROSS_PLATFORM,
))
VALID_TRANSPORTS = frozenset(transport.value for transport in (
    AuthenticatorTransport.USB,
    AuthenticatorTransport.NFC,
    AuthenticatorTransport.BLE,
    AuthenticatorTransport.HYBRID,
    AuthenticatorTransport.INTERNAL,
))
# COSE algorithm identifiers, ES256 is required for passkeys.
VALID_ALGORITHMS = frozenset((ES256.ALGORITHM, RS256.ALGORITHM))
DEFAULT_ALGORITHM = ES256.ALGORITHM

MIN_TIMEOUT = 1000
MAX_TIMEOUT = 120000

REGISTRATION_OPTIONS_PATH = 'webauthn/registration/options'
AUTHENTICATION_OPTIONS_PATH = 'webauthn/authentication/options'

PASSKEY_REGISTRATION = 'registration'
PASSKEY_AUTHENTICATION = 'authentication'


@unique
class PasskeyOptionsError(str, Enum):
    """Error codes reported when passkey options can't be provided."""

    INVALID_REQUEST = 'InvalidRequestError'
    INVALID_OPTIONS = 'InvalidOptionsError'
    SERVER_UNAVAILABLE = 'ServerUnavailableError'
    MALFORMED_RESPONSE = 'MalformedResponseError'
