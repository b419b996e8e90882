"""Test `django_passkeys.client` module."""
import json

import requests
import responses
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, override_settings

from django_passkeys.client import RelyingPartyClient, RelyingPartyError
from django_passkeys.constants import PasskeyOptionsError
from django_passkeys.options import RegistrationOptions
from django_passkeys.serialization import JsonCodec

from .data import (AUTHENTICATION_RESPONSE, AUTHENTICATION_URL, CHALLENGE, REGISTRATION_RESPONSE, REGISTRATION_URL,
                   RP_ID, SANITIZED_AUTHENTICATION, SANITIZED_REGISTRATION, SERVER_URL, USER_ID, USERNAME)
from .utils import without_relying_party_server


class TestRelyingPartyClient(SimpleTestCase):
    """Test `RelyingPartyClient` class."""

    def setUp(self):
        self.rp_client = RelyingPartyClient(SERVER_URL, RP_ID, timeout=5)

    @responses.activate
    def test_begin_registration(self):
        responses.add(responses.POST, REGISTRATION_URL, json=REGISTRATION_RESPONSE)

        options = self.rp_client.begin_registration(USER_ID)

        self.assertIsInstance(options, RegistrationOptions)
        # Options are not sanitized yet
        self.assertEqual(options.rp.id, 'other.com')
        self.assertEqual(json.loads(responses.calls[0].request.body), {'userId': USER_ID})

    @responses.activate
    def test_get_registration_options(self):
        responses.add(responses.POST, REGISTRATION_URL, json=REGISTRATION_RESPONSE)

        options_json = self.rp_client.get_registration_options(USER_ID)

        self.assertEqual(json.loads(options_json), SANITIZED_REGISTRATION)

    @responses.activate
    def test_get_authentication_options(self):
        responses.add(responses.POST, AUTHENTICATION_URL, json=AUTHENTICATION_RESPONSE)

        with self.assertLogs('django_passkeys.client', level='DEBUG') as logs:
            options_json = self.rp_client.get_authentication_options(USERNAME)

        self.assertEqual(json.loads(options_json), SANITIZED_AUTHENTICATION)
        self.assertEqual(json.loads(responses.calls[0].request.body), {'usernameOrEmail': USERNAME})
        self.assertEqual(logs.output,
                         ['DEBUG:django_passkeys.client:Dropped 2 invalid credentials from allowCredentials.'])

    @responses.activate
    def test_custom_paths(self):
        responses.add(responses.POST, SERVER_URL + '/passkeys/login', json=AUTHENTICATION_RESPONSE)
        client = RelyingPartyClient(SERVER_URL + '/', RP_ID, authentication_path='/passkeys/login')

        self.assertEqual(json.loads(client.get_authentication_options(USERNAME)), SANITIZED_AUTHENTICATION)

    @responses.activate
    def test_codec(self):
        responses.add(responses.POST, AUTHENTICATION_URL, json=AUTHENTICATION_RESPONSE)
        client = RelyingPartyClient(SERVER_URL, RP_ID, codec=JsonCodec(ignore_unknown_keys=False))

        with self.assertRaises(RelyingPartyError) as catcher:
            client.get_authentication_options(USERNAME)

        self.assertEqual(catcher.exception.error_code, PasskeyOptionsError.MALFORMED_RESPONSE)

    @responses.activate
    def test_server_error(self):
        responses.add(responses.POST, REGISTRATION_URL, status=500)

        with self.assertLogs('django_passkeys.client', level='INFO'):
            with self.assertRaises(RelyingPartyError) as catcher:
                self.rp_client.get_registration_options(USER_ID)

        self.assertEqual(catcher.exception.error_code, PasskeyOptionsError.SERVER_UNAVAILABLE)
        self.assertEqual(str(catcher.exception), 'Relying party server is unavailable.')

    @responses.activate
    def test_connection_error(self):
        responses.add(responses.POST, AUTHENTICATION_URL, body=requests.exceptions.ConnectionError('Gazpacho!'))

        with self.assertLogs('django_passkeys.client', level='INFO'):
            with self.assertRaises(RelyingPartyError) as catcher:
                self.rp_client.get_authentication_options(USERNAME)

        self.assertEqual(catcher.exception.error_code, PasskeyOptionsError.SERVER_UNAVAILABLE)
        self.assertIsInstance(catcher.exception.__cause__, requests.exceptions.ConnectionError)

    @responses.activate
    def test_malformed_response(self):
        responses.add(responses.POST, REGISTRATION_URL, body='<html>Gazpacho!</html>')

        with self.assertLogs('django_passkeys.client', level='INFO'):
            with self.assertRaises(RelyingPartyError) as catcher:
                self.rp_client.get_registration_options(USER_ID)

        self.assertEqual(catcher.exception.error_code, PasskeyOptionsError.MALFORMED_RESPONSE)

    @responses.activate
    def test_missing_public_key(self):
        responses.add(responses.POST, REGISTRATION_URL, json={'error': 'unknown user'})

        with self.assertRaises(ValidationError) as catcher:
            self.rp_client.get_registration_options(USER_ID)

        self.assertEqual(catcher.exception.error_dict['publicKey'][0].code, 'missing')

    @responses.activate
    def test_invalid_options(self):
        responses.add(responses.POST, AUTHENTICATION_URL,
                      json={'publicKey': {'challenge': CHALLENGE, 'timeout': 500000}})

        with self.assertRaises(ValidationError) as catcher:
            self.rp_client.get_authentication_options(USERNAME)

        self.assertEqual(catcher.exception.error_dict['timeout'][0].code, 'out_of_range')

    def test_default_session(self):
        self.assertIsNone(self.rp_client.session)

    @responses.activate
    def test_session(self):
        responses.add(responses.POST, AUTHENTICATION_URL, json=AUTHENTICATION_RESPONSE)
        with requests.Session() as session:
            session.headers['Authorization'] = 'Bearer secret_token'
            client = RelyingPartyClient(SERVER_URL, RP_ID, session=session)

            self.assertEqual(json.loads(client.get_authentication_options(USERNAME)), SANITIZED_AUTHENTICATION)

        self.assertEqual(responses.calls[0].request.headers['Authorization'], 'Bearer secret_token')


class TestRelyingPartyClientFromSettings(SimpleTestCase):
    """Test `RelyingPartyClient.from_settings` method."""

    def test_default(self):
        client = RelyingPartyClient.from_settings(RP_ID)

        self.assertEqual(client.url, SERVER_URL)
        self.assertEqual(client.expected_rp_id, RP_ID)
        self.assertEqual(client.timeout, 10)
        self.assertEqual(client.registration_path, 'webauthn/registration/options')
        self.assertEqual(client.authentication_path, 'webauthn/authentication/options')

    @override_settings(DJANGO_PASSKEYS_RELYING_PARTY_SERVER={'URL': 'https://rp.example.net', 'TIMEOUT': (1, 2),
                                                             'REGISTRATION_PATH': 'register'})
    def test_custom(self):
        client = RelyingPartyClient.from_settings(RP_ID, timeout=3)

        self.assertEqual(client.url, 'https://rp.example.net')
        self.assertEqual(client.timeout, 3)
        self.assertEqual(client.registration_path, 'register')

    @without_relying_party_server()
    def test_not_configured(self):
        with self.assertRaises(RelyingPartyError) as catcher:
            RelyingPartyClient.from_settings(RP_ID)

        self.assertEqual(catcher.exception.error_code, PasskeyOptionsError.SERVER_UNAVAILABLE)
