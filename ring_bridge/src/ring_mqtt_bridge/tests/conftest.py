"""
Shared fixtures for ring_mqtt_bridge tests.
"""

from unittest.mock import MagicMock

import pytest

from ring_alarm.api import RingDeviceType
from ring_alarm.tests.fakes import FakeClock, FakeDevice, FakeLocation, make_panel


@pytest.fixture
def mock_mqtt_client():
    """Mock MQTT client."""
    client = MagicMock()
    client.connect.return_value = 0
    client.subscribe.return_value = (0, 1)
    client.publish.return_value = MagicMock(rc=0)
    return client


@pytest.fixture
def clock():
    """Virtual clock driving every delay."""
    return FakeClock()


@pytest.fixture
def location():
    """Connected location named 'Home'."""
    return FakeLocation()


@pytest.fixture
def panel_device(location):
    """Disarmed remote security panel."""
    return make_panel(location, mode="none")


@pytest.fixture
def chime_device(location):
    """Remote chime at volume 5, not snoozed."""
    return location.add_device(
        FakeDevice(
            "chime-1",
            RingDeviceType.CHIME_PRO,
            location,
            name="Hall Chime",
            data={"settings": {"volume": 5}, "do_not_disturb": {"seconds_left": 0}},
        )
    )

