"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest

from dnschecker.config import load_settings

BASE_ENV = {
    "TELEGRAM_BOT_TOKEN": "123:ABC",
    "CHAT_ID": "456",
    "URL": "https://router.local/api/diagnostics/interface/getInterfaceConfig",
    "API_KEY": "router-key",
    "API_SECRET": "s3cr3t-value",
    "DNS_HOSTNAME": "home.example.com",
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test artifacts."""
    dirpath = tempfile.mkdtemp()
    yield Path(dirpath)
    shutil.rmtree(dirpath, ignore_errors=True)


@pytest.fixture
def base_env():
    """A complete environment with every required variable set."""
    return dict(BASE_ENV)


@pytest.fixture
def settings(base_env):
    """Settings loaded from base_env only, never from the real environment."""
    return load_settings(environ=base_env)
