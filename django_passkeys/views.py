"""Views providing sanitized passkey registration and authentication options."""
import logging
from abc import ABCMeta, abstractmethod
from http.client import BAD_GATEWAY, BAD_REQUEST
from typing import Any, Dict, List, Optional

from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.encoding import force_str
from django.utils.translation import gettext_lazy as _
from django.views.generic import View

from .client import RelyingPartyClient, RelyingPartyError
from .constants import PasskeyOptionsError
from .forms import PasskeyAuthenticationRequestForm
from .serialization import DEFAULT_CODEC, JsonCodec
from .settings import SETTINGS
from .utils import get_user_handle

_LOGGER = logging.getLogger(__name__)


def get_error_data(error: ValidationError) -> Dict[str, List[Dict[str, str]]]:
    """Return validation error in the same format as `Form.errors.get_json_data`."""
    error_dict = error.error_dict if hasattr(error, 'error_dict') else {NON_FIELD_ERRORS: error.error_list}
    return {field: [{'message': force_str(next(iter(e))), 'code': e.code or ''} for e in errors]
            for field, errors in error_dict.items()}


class PasskeyOptionsViewMixin(object):
    """
    Mixin with common methods for all passkey options views.

    @cvar rp_id: Relying party ID the options are pinned to.
        If None, the value of setting ``DJANGO_PASSKEYS_RP_ID`` is used instead.
        If None, the request host is used instead.
    @cvar codec: Options of JSON decoding and encoding.
    """

    rp_id = None  # type: Optional[str]
    codec = DEFAULT_CODEC  # type: JsonCodec

    def get_rp_id(self) -> str:
        """Return RP id - only a hostname for web services."""
        # `partition()` is faster than `split()`
        return self.rp_id or SETTINGS.rp_id or self.request.get_host().partition(':')[0]  # type: ignore

    def get_client(self) -> RelyingPartyClient:
        """Return relying party client.

        @raise RelyingPartyError: If the relying party server isn't configured.
        """
        return RelyingPartyClient.from_settings(self.get_rp_id(), codec=self.codec)


class BasePasskeyOptionsView(PasskeyOptionsViewMixin, View, metaclass=ABCMeta):
    """Base view for passkey options views."""

    @abstractmethod
    def get_options_json(self) -> str:
        """Return sanitized options JSON.

        @raise RelyingPartyError: If the options can't be obtained.
        @raise ValidationError: If the options are invalid.
        """
        pass

    def error_response(self, error_code: PasskeyOptionsError, message: Any, status: int,
                       errors: Optional[Dict] = None) -> JsonResponse:
        """Return JSON response describing the error."""
        data = {'error_code': error_code, 'message': force_str(message)}  # type: Dict[str, Any]
        if errors is not None:
            data['errors'] = errors
        return JsonResponse(data, status=status)

    def get(self, request: HttpRequest) -> HttpResponse:
        """Return JSON with sanitized options."""
        try:
            options_json = self.get_options_json()
        except RelyingPartyError as error:
            return self.error_response(error.error_code, error, BAD_GATEWAY)
        except ValidationError as error:
            _LOGGER.info("Relying party provided invalid passkey options: %r", error)
            return self.error_response(PasskeyOptionsError.INVALID_OPTIONS,
                                       _('Relying party provided invalid options.'), BAD_GATEWAY,
                                       errors=get_error_data(error))
        return HttpResponse(options_json, content_type='application/json')


class PasskeyRegistrationOptionsView(LoginRequiredMixin, BasePasskeyOptionsView):
    """Returns registration options for the logged in user."""

    def get_options_json(self) -> str:
        """Return sanitized registration options JSON."""
        return self.get_client().get_registration_options(get_user_handle(self.request.user))


class PasskeyAuthenticationOptionsView(BasePasskeyOptionsView):
    """Returns authentication options for the user given by `username` parameter."""

    form_class = PasskeyAuthenticationRequestForm

    def get(self, request: HttpRequest) -> HttpResponse:
        """Validate the request and return JSON with sanitized options."""
        form = self.form_class(request.GET)
        if not form.is_valid():
            return self.error_response(PasskeyOptionsError.INVALID_REQUEST, _('Invalid request.'), BAD_REQUEST,
                                       errors=form.errors.get_json_data())
        self.username = form.cleaned_data['username']
        return super().get(request)

    def get_options_json(self) -> str:
        """Return sanitized authentication options JSON."""
        return self.get_client().get_authentication_options(self.username)
