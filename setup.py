#!/usr/bin/python3
"""Setup script for django_passkeys."""
from setuptools import setup

setup()
