"""
Tests for the state synchronizer.
"""

import pytest
from unittest.mock import Mock

from ring_mqtt_bridge.entity import Entity
from ring_mqtt_bridge.state_sync import StateSynchronizer, format_payload


@pytest.fixture
def online():
    availability = Mock()
    availability.is_online = True
    availability.state = "online"
    return availability


@pytest.fixture
def entity():
    return Entity("siren", "switch", "ring/x/siren/state", "hass/x/config")


class TestPublishState:
    """Test full vs change-event publishing."""

    def test_change_event_with_same_value_publishes_nothing(
        self, mock_mqtt_client, online, entity
    ):
        sync = StateSynchronizer(mock_mqtt_client, online)
        entity.last_published = True

        assert sync.publish_state(entity, True, is_change_event=True) is False
        mock_mqtt_client.publish.assert_not_called()

    def test_change_event_with_new_value_publishes(self, mock_mqtt_client, online, entity):
        sync = StateSynchronizer(mock_mqtt_client, online)
        entity.last_published = False

        assert sync.publish_state(entity, True, is_change_event=True) is True
        mock_mqtt_client.publish.assert_called_once_with("ring/x/siren/state", "ON", qos=1)
        assert entity.last_published is True

    def test_full_sync_always_publishes(self, mock_mqtt_client, online, entity):
        sync = StateSynchronizer(mock_mqtt_client, online)
        entity.last_published = False

        sync.publish_state(entity, False, is_change_event=False)

        assert mock_mqtt_client.publish.call_count == 1

    def test_first_change_event_publishes(self, mock_mqtt_client, online, entity):
        sync = StateSynchronizer(mock_mqtt_client, online)

        assert sync.publish_state(entity, "disarmed", is_change_event=True) is True

    def test_offline_device_never_publishes(self, mock_mqtt_client, entity):
        availability = Mock(is_online=False, state="offline")
        sync = StateSynchronizer(mock_mqtt_client, availability)

        assert sync.publish_state(entity, True, is_change_event=False) is False
        mock_mqtt_client.publish.assert_not_called()
        assert entity.last_published is None


class TestFormatPayload:
    """Test domain value formatting."""

    @pytest.mark.parametrize(
        "value,payload",
        [(True, "ON"), (False, "OFF"), (7, "7"), (0, "0"), ("armed_home", "armed_home")],
    )
    def test_format(self, value, payload):
        assert format_payload(value) == payload
