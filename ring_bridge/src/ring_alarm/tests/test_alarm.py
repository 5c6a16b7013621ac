"""
Tests for alarm state derivation and bypass candidate selection.
"""

import asyncio

import pytest

from ring_alarm.alarm import (
    derive_alarm_state,
    derive_panic_states,
    exit_delay_remaining,
    find_bypass_candidates,
    siren_active,
    target_mode_for,
)
from ring_alarm.api import RingDeviceType
from ring_alarm.tests.fakes import make_sensor

NOW = 1_700_000_000.0


class TestDeriveAlarmState:
    """Test mapping of panel data to alarm_control_panel states."""

    @pytest.mark.parametrize(
        "mode,expected",
        [("none", "disarmed"), ("some", "armed_home"), ("all", "armed_away")],
    )
    def test_mode_mapping(self, mode, expected):
        assert derive_alarm_state({"mode": mode}, NOW) == (expected, None)

    def test_entry_delay_is_pending(self):
        data = {"mode": "all", "alarmInfo": {"state": "entry-delay"}}
        assert derive_alarm_state(data, NOW) == ("pending", None)

    def test_burglar_alarm_is_triggered(self):
        data = {"mode": "all", "alarmInfo": {"state": "burglar-alarm"}}
        assert derive_alarm_state(data, NOW) == ("triggered", None)

    def test_any_other_active_alarm_is_triggered(self):
        data = {"mode": "none", "alarmInfo": {"state": "some-new-alarm-kind"}}
        assert derive_alarm_state(data, NOW)[0] == "triggered"

    def test_alarm_overrides_exit_delay(self):
        data = {
            "mode": "all",
            "transitionDelayEndTimestamp": (NOW + 30) * 1000,
            "alarmInfo": {"state": "fire-alarm"},
        }
        assert derive_alarm_state(data, NOW) == ("triggered", None)

    def test_exit_delay_in_future_is_arming(self):
        data = {"mode": "all", "transitionDelayEndTimestamp": (NOW + 45) * 1000}
        state, delay = derive_alarm_state(data, NOW)
        assert state == "arming"
        assert delay == pytest.approx(45.0)

    def test_exit_delay_in_past_is_armed_away(self):
        data = {"mode": "all", "transitionDelayEndTimestamp": (NOW - 1) * 1000}
        assert derive_alarm_state(data, NOW) == ("armed_away", None)

    def test_exit_delay_ignored_outside_away_mode(self):
        data = {"mode": "some", "transitionDelayEndTimestamp": (NOW + 45) * 1000}
        assert derive_alarm_state(data, NOW) == ("armed_home", None)

    def test_missing_alarm_info_is_neutral(self):
        assert derive_alarm_state({"mode": "none", "alarmInfo": None}, NOW)[0] == "disarmed"
        assert derive_alarm_state({"mode": "none", "alarmInfo": {}}, NOW)[0] == "disarmed"

    def test_missing_mode_is_unknown(self):
        assert derive_alarm_state({}, NOW) == ("unknown", None)


class TestPanelHelpers:
    """Test panic, siren and exit delay helpers."""

    @pytest.mark.parametrize(
        "alarm_state,expected",
        [
            ("burglar-alarm", (True, False)),
            ("user-verified-burglar-alarm", (True, False)),
            ("fire-alarm", (False, True)),
            ("co-alarm", (False, True)),
            ("entry-delay", (False, False)),
            (None, (False, False)),
        ],
    )
    def test_panic_states(self, alarm_state, expected):
        assert derive_panic_states({"alarmInfo": {"state": alarm_state}}) == expected

    def test_panic_states_without_alarm_info(self):
        assert derive_panic_states({}) == (False, False)

    def test_siren_active(self):
        assert siren_active({"siren": {"state": "on"}}) is True
        assert siren_active({"siren": {"state": "off"}}) is False
        assert siren_active({}) is False

    def test_exit_delay_remaining_without_deadline(self):
        assert exit_delay_remaining({}, NOW) == 0.0

    @pytest.mark.parametrize(
        "token,mode",
        [("disarm", "none"), ("ARM_HOME", "some"), (" arm_away ", "all"), ("bogus", None)],
    )
    def test_target_mode_for(self, token, mode):
        assert target_mode_for(token) == mode


class TestBypassCandidates:
    """Test selection of sensors to bypass when arming."""

    def test_only_faulted_contact_and_zone_sensors(self, location):
        make_sensor(location, "A", RingDeviceType.CONTACT_SENSOR, faulted=True)
        make_sensor(location, "B", RingDeviceType.CONTACT_SENSOR, faulted=False)
        make_sensor(location, "C", RingDeviceType.RETROFIT_ZONE, faulted=True)
        make_sensor(location, "D", RingDeviceType.MOTION_SENSOR, faulted=True)

        devices = asyncio.run(find_bypass_candidates(location))

        assert {device.id for device in devices} == {"A", "C"}

    def test_no_devices(self, location):
        assert asyncio.run(find_bypass_candidates(location)) == []
