"""Forms for passkey options requests."""
from django import forms
from django.utils.translation import gettext_lazy as _


class PasskeyAuthenticationRequestForm(forms.Form):
    """Form for authentication options requests."""

    username = forms.CharField(max_length=254, error_messages={'required': _("Username or email is required.")})
