"""
Shared fixtures for scraper tests.

Everything runs offline: transports are faked or mocked with respx, and
sleeps are recorded instead of awaited.
"""

import os
import sys

import pytest

# Make tests/fakes.py importable and the project root importable
_tests_dir = os.path.dirname(__file__)
_root_dir = os.path.dirname(_tests_dir)
for _path in (_tests_dir, _root_dir):
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fakes import SleepRecorder  # noqa: E402
from models import RetryPolicy  # noqa: E402
from services.fetcher import IdentityPool  # noqa: E402


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def policy():
    return RetryPolicy(max_attempts=3, base_delay=2.0, request_timeout=5.0)


@pytest.fixture
def identities():
    return IdentityPool(["test-agent/1.0"], chooser=lambda agents: agents[0])
