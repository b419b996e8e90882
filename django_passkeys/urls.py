"""URLs for django_passkeys application."""
from django.urls import re_path

from .views import PasskeyAuthenticationOptionsView, PasskeyRegistrationOptionsView

app_name = 'django_passkeys'
urlpatterns = [
    re_path('^registration/options/$', PasskeyRegistrationOptionsView.as_view(), name='registration_options'),
    re_path('^authentication/options/$', PasskeyAuthenticationOptionsView.as_view(), name='authentication_options'),
]
