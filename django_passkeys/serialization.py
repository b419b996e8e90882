"""Decoding of relying party responses and encoding of options for the platform credential API."""
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type, Union

from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.utils.translation import gettext_lazy as _

from .options import (AlgorithmParam, AuthenticationOptions, AuthenticatorSelection, CredentialDescriptor,
                      RegistrationOptions, RelyingParty, UserAccount, wire_name)

PUBLIC_KEY_MEMBER = 'publicKey'


@dataclass(frozen=True)
class JsonCodec(object):
    """
    Options of JSON decoding and encoding.

    @ivar ignore_unknown_keys: Whether unknown members are ignored when decoding. Otherwise they are errors.
    @ivar explicit_nulls: Whether members without value are encoded as `null`.
    @ivar encode_defaults: Whether members with default value are encoded. As all defaults are `null`,
        nulls are only encoded if both `explicit_nulls` and `encode_defaults` are set.
    @ivar sort_keys: Whether to sort members in the output.
    @ivar indent: Indentation of the output, compact output if None.
    """

    ignore_unknown_keys: bool = True
    explicit_nulls: bool = False
    encode_defaults: bool = False
    sort_keys: bool = False
    indent: Optional[int] = None


DEFAULT_CODEC = JsonCodec()

_Decoder = Callable[[Any, str, JsonCodec], Any]


def _error(path: str, message: str, code: str, value: Any = None) -> ValidationError:
    return ValidationError({path: ValidationError(message, code=code, params={'field': path, 'value': value})})


def _malformed(path: str, value: Any) -> ValidationError:
    return _error(path, _('Value of %(field)s is malformed.'), 'malformed', value)


def _join(path: str, member: str) -> str:
    return '{}.{}'.format(path, member) if path else member


def _decode_string(value: Any, path: str, codec: JsonCodec) -> str:
    if not isinstance(value, str):
        raise _malformed(path, value)
    return value


def _decode_integer(value: Any, path: str, codec: JsonCodec) -> int:
    # bool is a subclass of int, but `true` is not a number in JSON.
    if isinstance(value, bool):
        raise _malformed(path, value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise _malformed(path, value)
    return value


def _list_of(decoder: _Decoder) -> _Decoder:
    """Return decoder of a list, `null` items are kept as `None`."""
    def decode(value: Any, path: str, codec: JsonCodec) -> tuple:
        if not isinstance(value, list):
            raise _malformed(path, value)
        return tuple(None if item is None else decoder(item, '{}[{}]'.format(path, index), codec)
                     for index, item in enumerate(value))
    return decode


def _check_unknown_keys(data: Mapping, known: Any, path: str, codec: JsonCodec) -> None:
    if codec.ignore_unknown_keys:
        return
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValidationError({
            _join(path, key): ValidationError(_('Unknown member %(field)s.'), code='unknown',
                                              params={'field': _join(path, key), 'value': data[key]})
            for key in unknown})


def _object_of(cls: Type, members: Dict[str, _Decoder]) -> _Decoder:
    """Return decoder of an object, `members` map attribute names to their decoders."""
    def decode(value: Any, path: str, codec: JsonCodec) -> Any:
        if not isinstance(value, Mapping):
            raise _malformed(path, value)
        _check_unknown_keys(value, (wire_name(name) for name in members), path, codec)
        kwargs = {}
        for name, decoder in members.items():
            member = wire_name(name)
            if value.get(member) is not None:
                kwargs[name] = decoder(value[member], _join(path, member), codec)
        return cls(**kwargs)
    return decode


_decode_credentials = _list_of(_object_of(CredentialDescriptor, {
    'type': _decode_string,
    'id': _decode_string,
    'transports': _list_of(_decode_string),
}))

_decode_registration = _object_of(RegistrationOptions, {
    'rp': _object_of(RelyingParty, {'id': _decode_string, 'name': _decode_string}),
    'user': _object_of(UserAccount, {'id': _decode_string, 'name': _decode_string, 'display_name': _decode_string}),
    'challenge': _decode_string,
    'pub_key_cred_params': _list_of(_object_of(AlgorithmParam, {'type': _decode_string, 'alg': _decode_integer})),
    'timeout': _decode_integer,
    'exclude_credentials': _decode_credentials,
    'authenticator_selection': _object_of(AuthenticatorSelection, {
        'resident_key': _decode_string,
        'user_verification': _decode_string,
        'authenticator_attachment': _decode_string,
    }),
    'attestation': _decode_string,
})

_decode_authentication = _object_of(AuthenticationOptions, {
    'rp_id': _decode_string,
    'challenge': _decode_string,
    'allow_credentials': _decode_credentials,
    'timeout': _decode_integer,
    'user_verification': _decode_string,
})


def _load_public_key(data: Union[str, bytes, Mapping], codec: JsonCodec) -> Optional[Any]:
    """Return the `publicKey` member of the response."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError:
            raise ValidationError({NON_FIELD_ERRORS: ValidationError(_('Options are not a valid JSON.'),
                                                                     code='malformed')})
    if not isinstance(data, Mapping):
        raise _malformed(NON_FIELD_ERRORS, data)
    _check_unknown_keys(data, (PUBLIC_KEY_MEMBER, ), '', codec)
    public_key = data.get(PUBLIC_KEY_MEMBER)
    if public_key is not None and not isinstance(public_key, Mapping):
        raise _malformed(PUBLIC_KEY_MEMBER, public_key)
    return public_key


def decode_registration_options(data: Union[str, bytes, Mapping],
                                codec: JsonCodec = DEFAULT_CODEC) -> Optional[RegistrationOptions]:
    """Decode registration options from relying party response.

    Missing members are decoded as `None`, `None` is returned if the `publicKey` member is missing.

    @raise ValidationError: If the response is malformed.
    """
    public_key = _load_public_key(data, codec)
    if public_key is None:
        return None
    return _decode_registration(public_key, '', codec)


def decode_authentication_options(data: Union[str, bytes, Mapping],
                                  codec: JsonCodec = DEFAULT_CODEC) -> Optional[AuthenticationOptions]:
    """Decode authentication options from relying party response.

    Missing members are decoded as `None`, `None` is returned if the `publicKey` member is missing.

    @raise ValidationError: If the response is malformed.
    """
    public_key = _load_public_key(data, codec)
    if public_key is None:
        return None
    return _decode_authentication(public_key, '', codec)


def encode_options(options: Union[RegistrationOptions, AuthenticationOptions],
                   codec: JsonCodec = DEFAULT_CODEC) -> str:
    """Return request JSON for the platform credential API."""
    explicit_nulls = codec.explicit_nulls and codec.encode_defaults
    separators = None if codec.indent is not None else (',', ':')
    return json.dumps({PUBLIC_KEY_MEMBER: options.to_dict(explicit_nulls=explicit_nulls)},
                      sort_keys=codec.sort_keys, indent=codec.indent, separators=separators)
