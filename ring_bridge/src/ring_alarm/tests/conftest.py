"""
Shared fixtures for ring_alarm tests.
"""

import pytest

from ring_alarm.tests.fakes import FakeLocation


@pytest.fixture
def location():
    """Connected location with no devices."""
    return FakeLocation()
