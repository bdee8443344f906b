"""Shared pytest fixtures."""

import os

import pytest

from trampoline.config import get_settings

_ISOLATED_PREFIXES = ("TRAMPOLINE_", "BUNDLER_", "BUNDLE_", "GEM_")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Drop variables that would leak host configuration into tests."""
    for key in list(os.environ):
        if key.startswith(_ISOLATED_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
