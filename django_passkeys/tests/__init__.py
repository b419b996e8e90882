"""Tests for django_passkeys."""
