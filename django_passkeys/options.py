"""WebAuthn ceremony options as received from a relying party.

All fields are optional, because the values originate from an untrusted server. The structures are immutable,
sanitizers return new instances. Attribute names are snake_case; `wire_name` gives the WebAuthn member name.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple


def wire_name(name: str) -> str:
    """Return WebAuthn (camelCase) member name for a snake_case attribute name."""
    head, *tail = name.split('_')
    return head + ''.join(part.title() for part in tail)


class _OptionsObject(object):
    """Common methods of the options structures."""

    def to_dict(self, explicit_nulls: bool = False) -> Dict[str, Any]:
        """Return JSON compatible dictionary with WebAuthn member names.

        Members with `None` value are omitted unless `explicit_nulls` is set.
        """
        data = {}
        for item in fields(self):
            value = _to_json_value(getattr(self, item.name), explicit_nulls)
            if value is None and not explicit_nulls:
                continue
            data[wire_name(item.name)] = value
        return data

    def evolve(self, **changes):
        """Return a copy with the given attributes changed."""
        return replace(self, **changes)


def _to_json_value(value: Any, explicit_nulls: bool) -> Any:
    if isinstance(value, _OptionsObject):
        return value.to_dict(explicit_nulls)
    if isinstance(value, tuple):
        return [_to_json_value(item, explicit_nulls) for item in value]
    return value


@dataclass(frozen=True)
class RelyingParty(_OptionsObject):
    """Relying party entity - effective domain and human readable name."""

    id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class UserAccount(_OptionsObject):
    """User account the passkey is created for.

    @ivar id: Opaque Base64URL user handle.
    @ivar name: User recognizable identifier, e.g. email.
    @ivar display_name: Human friendly name.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class AlgorithmParam(_OptionsObject):
    """Acceptable public key algorithm - credential type and COSE algorithm identifier."""

    type: Optional[str] = None
    alg: Optional[int] = None


@dataclass(frozen=True)
class CredentialDescriptor(_OptionsObject):
    """Reference to an existing credential."""

    type: Optional[str] = None
    id: Optional[str] = None
    transports: Optional[Tuple[Optional[str], ...]] = None


@dataclass(frozen=True)
class AuthenticatorSelection(_OptionsObject):
    """Authenticator selection criteria of a registration."""

    resident_key: Optional[str] = None
    user_verification: Optional[str] = None
    authenticator_attachment: Optional[str] = None


@dataclass(frozen=True)
class RegistrationOptions(_OptionsObject):
    """Public key credential creation options, i.e. the `publicKey` member of a registration request."""

    rp: Optional[RelyingParty] = None
    user: Optional[UserAccount] = None
    challenge: Optional[str] = None
    pub_key_cred_params: Optional[Tuple[Optional[AlgorithmParam], ...]] = None
    timeout: Optional[int] = None
    exclude_credentials: Optional[Tuple[Optional[CredentialDescriptor], ...]] = None
    authenticator_selection: Optional[AuthenticatorSelection] = None
    attestation: Optional[str] = None


@dataclass(frozen=True)
class AuthenticationOptions(_OptionsObject):
    """Public key credential request options, i.e. the `publicKey` member of an authentication request."""

    rp_id: Optional[str] = None
    challenge: Optional[str] = None
    allow_credentials: Optional[Tuple[Optional[CredentialDescriptor], ...]] = None
    timeout: Optional[int] = None
    user_verification: Optional[str] = None
