"""
Tests for Home Assistant discovery config.
"""

import asyncio
import json
import logging

from ring_mqtt_bridge.chime import MQTTChime
from ring_mqtt_bridge.discovery import build_discovery_entries, publish_discovery
from ring_mqtt_bridge.security_panel import MQTTSecurityPanel


class TestBuildDiscoveryEntries:
    """Test discovery entries built from a device's entities."""

    def test_panel_entries_without_panic(self, panel_device, mock_mqtt_client):
        panel = MQTTSecurityPanel(panel_device, mock_mqtt_client)

        entries = build_discovery_entries(panel)

        assert [topic for topic, _ in entries] == [
            "homeassistant/alarm_control_panel/loc-1/panel-1_alarm/config",
            "homeassistant/switch/loc-1/panel-1_siren/config",
            "homeassistant/switch/loc-1/panel-1_bypass/config",
        ]

    def test_panel_entries_with_panic(self, panel_device, mock_mqtt_client):
        panel = MQTTSecurityPanel(panel_device, mock_mqtt_client, enable_panic=True)

        names = [config["unique_id"] for _, config in build_discovery_entries(panel)]

        assert names == [
            "panel-1_alarm",
            "panel-1_siren",
            "panel-1_bypass",
            "panel-1_police",
            "panel-1_fire",
        ]

    def test_payload_fields(self, panel_device, mock_mqtt_client):
        panel = MQTTSecurityPanel(panel_device, mock_mqtt_client)

        _, config = build_discovery_entries(panel)[1]

        assert config["name"] == "Home Siren"
        assert config["unique_id"] == "panel-1_siren"
        assert config["availability_topic"] == "ring/loc-1/alarm/panel-1/status"
        assert config["payload_available"] == "online"
        assert config["payload_not_available"] == "offline"
        assert config["state_topic"] == "ring/loc-1/alarm/panel-1/siren/state"
        assert config["command_topic"] == "ring/loc-1/alarm/panel-1/siren/command"
        assert config["icon"] == "mdi:alarm-light"
        assert config["device"] == {
            "ids": ["panel-1"],
            "name": "Home Alarm",
            "mf": "Ring",
            "mdl": "Alarm Control Panel",
        }

    def test_read_only_entity_has_no_command_topic(self, chime_device, mock_mqtt_client):
        chime = MQTTChime(chime_device, mock_mqtt_client)

        volume, snooze = [config for _, config in build_discovery_entries(chime)]

        assert volume["min"] == 0
        assert volume["max"] == 11
        assert "command_topic" in volume
        assert "command_topic" not in snooze
        assert snooze["device"]["mdl"] == "Chime Pro"

    def test_entries_are_repeatable(self, panel_device, mock_mqtt_client):
        panel = MQTTSecurityPanel(panel_device, mock_mqtt_client)

        assert build_discovery_entries(panel) == build_discovery_entries(panel)


class TestPublishDiscovery:
    """Test publishing discovery entries."""

    def test_publishes_retained_then_waits(self, mock_mqtt_client, clock):
        entries = [("a/config", {"name": "A"}), ("b/config", {"name": "B"})]

        asyncio.run(
            publish_discovery(mock_mqtt_client, entries, clock.sleep, logging.getLogger())
        )

        calls = mock_mqtt_client.publish.call_args_list
        assert [c[0][0] for c in calls] == ["a/config", "b/config"]
        assert json.loads(calls[0][0][1]) == {"name": "A"}
        assert all(c[1]["retain"] is True for c in calls)
        assert clock.sleeps == [2.0]
