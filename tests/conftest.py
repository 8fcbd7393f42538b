"""Test configuration and fixtures for the user service."""

from tests.fixtures import *  # noqa: F401,F403
