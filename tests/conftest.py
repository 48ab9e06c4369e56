"""
tests/conftest.py — Shared fixtures.

Test doubles for the backend live in helpers.py; this module only builds
the Settings variants the tests need.
"""
import pytest

from career_guide.config import Settings
from helpers import BASE_URL


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, _env_file=None)


@pytest.fixture
def fast_timeout_settings() -> Settings:
    return Settings(api_base_url=BASE_URL, request_timeout_s=0.05, _env_file=None)


@pytest.fixture
def unconfigured_settings() -> Settings:
    return Settings(api_base_url=None, _env_file=None)
