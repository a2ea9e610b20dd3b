"""Pytest configuration for the NetDash engine."""
import os

import pytest

from netdash.base.config import LimitsConfig, NetDashConfig, SecurityConfig, set_config
from netdash.engine.diagnostics import set_service

TEST_TOKEN = "test-token"


def pytest_configure():
    # Keep test runs from writing a log file into the user's home directory.
    os.environ.pop("NETDASH_LOG_FILE", None)


@pytest.fixture(autouse=True)
def netdash_config():
    """Fresh config per test: short kill grace, auth off, known token."""
    config = NetDashConfig(
        limits=LimitsConfig(kill_grace_ms=200, dns_timeout_ms=1000),
        security=SecurityConfig(api_token=TEST_TOKEN, require_auth=False),
    )
    set_config(config)
    set_service(None)
    yield config
    set_config(None)
    set_service(None)
