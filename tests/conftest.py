"""
Pytest configuration and fixtures.
"""

import os
import pytest

from envstruct.schema import compile_schema
from envstruct.settings import get_settings


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable from the process environment for one test."""
    for key in list(os.environ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def env(clean_env):
    """Set variables on top of an empty environment: env(PORT="8080")."""
    def setter(**values):
        for key, value in values.items():
            clean_env.setenv(key, value)
    return setter


@pytest.fixture(autouse=True)
def reset_caches():
    """Settings and schemas are cached per process."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    compile_schema.cache_clear()
