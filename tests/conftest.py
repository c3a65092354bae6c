"""Pytest configuration and fixtures.

Provides environment isolation and logging configuration. All fixtures here
are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

import fallible.config

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_fallible_env(request, monkeypatch):
    """Ensure a clean ``FALLIBLE_*`` environment for each test.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith(fallible.config.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(fallible.config, "_DOTENV_LOADED", False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def debug_logs(caplog):
    """Capture DEBUG records from the ``fallible`` logger tree (opt-in)."""
    caplog.set_level(logging.DEBUG, logger="fallible")
    return caplog
