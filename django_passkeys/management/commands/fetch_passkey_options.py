"""Command to fetch sanitized passkey options from relying party server."""
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from django_passkeys.client import RelyingPartyClient, RelyingPartyError
from django_passkeys.constants import PASSKEY_AUTHENTICATION, PASSKEY_REGISTRATION
from django_passkeys.serialization import JsonCodec
from django_passkeys.settings import SETTINGS


class Command(BaseCommand):
    """Fetch sanitized passkey options."""

    help = "Fetch passkey options from relying party server and print them sanitized."

    def add_arguments(self, parser):
        """Parse command arguments."""
        parser.add_argument('ceremony', choices=(PASSKEY_REGISTRATION, PASSKEY_AUTHENTICATION),
                            help="Type of the ceremony.")
        parser.add_argument('identifier', help="User handle for registration, username or email for authentication.")
        parser.add_argument('--rp-id', help="Relying party ID, defaults to DJANGO_PASSKEYS_RP_ID setting.")
        parser.add_argument('--indent', type=int, default=None, help="Indent the output.")

    def handle(self, **options):
        """Fetch and print the options."""
        rp_id = options['rp_id'] or SETTINGS.rp_id
        if not rp_id:
            raise CommandError('Relying party ID must be set by --rp-id or DJANGO_PASSKEYS_RP_ID setting.')

        try:
            client = RelyingPartyClient.from_settings(rp_id, codec=JsonCodec(indent=options['indent']))
            if options['ceremony'] == PASSKEY_REGISTRATION:
                options_json = client.get_registration_options(options['identifier'])
            else:
                options_json = client.get_authentication_options(options['identifier'])
        except RelyingPartyError as error:
            raise CommandError('{} ({})'.format(error, error.error_code.value))
        except ValidationError as error:
            fields = ', '.join(sorted(error.message_dict))
            raise CommandError('Relying party provided invalid options: {}.'.format(fields))

        self.stdout.write(options_json)
