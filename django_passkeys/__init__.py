"""Django application serving validated WebAuthn passkey options."""
__version__ = '0.1.0'
