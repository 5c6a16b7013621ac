"""
Alarm vocabulary and pure derivations for the security panel.

Translates raw remote device data (arming mode, active alarm info, exit-delay
deadline) into Home Assistant alarm_control_panel states, and selects the
sensors that need bypassing for an arm request.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from .api import RingDeviceType, RingLocation, RingDevice


logger = logging.getLogger(__name__)

# Alarm states reported in alarmInfo.state while an alarm is active
ENTRY_DELAY = "entry-delay"
BURGLAR_ALARM_STATES = (
    "burglar-alarm",
    "user-verified-burglar-alarm",
    "burglar-accelerated-alarm",
)
FIRE_ALARM_STATES = (
    "fire-alarm",
    "co-alarm",
    "user-verified-co-or-fire-alarm",
    "fire-accelerated-alarm",
)
ALL_ALARM_STATES = (ENTRY_DELAY, "panic") + BURGLAR_ALARM_STATES + FIRE_ALARM_STATES

# Home Assistant alarm_control_panel states
STATE_DISARMED = "disarmed"
STATE_ARMED_HOME = "armed_home"
STATE_ARMED_AWAY = "armed_away"
STATE_ARMING = "arming"
STATE_PENDING = "pending"
STATE_TRIGGERED = "triggered"
STATE_UNKNOWN = "unknown"

# Remote arming modes
MODE_NONE = "none"
MODE_SOME = "some"
MODE_ALL = "all"

# Command token -> remote mode that confirms it
TARGET_MODES = {
    "disarm": MODE_NONE,
    "arm_home": MODE_SOME,
    "arm_away": MODE_ALL,
}

BYPASS_DEVICE_TYPES = (RingDeviceType.CONTACT_SENSOR, RingDeviceType.RETROFIT_ZONE)


def active_alarm_state(data: Dict[str, Any]) -> Optional[str]:
    """Return alarmInfo.state, treating a missing alarmInfo as no alarm."""
    alarm_info = data.get("alarmInfo") or {}
    return alarm_info.get("state") or None


def exit_delay_remaining(data: Dict[str, Any], now: float) -> float:
    """
    Seconds left until the exit-delay deadline.

    Args:
        data: Panel data with optional transitionDelayEndTimestamp (epoch ms)
        now: Current time (epoch seconds)

    Returns:
        Remaining seconds, <= 0 when no delay is running
    """
    deadline_ms = data.get("transitionDelayEndTimestamp")
    if not deadline_ms:
        return 0.0
    return deadline_ms / 1000.0 - now


def derive_alarm_state(
    data: Dict[str, Any], now: float
) -> Tuple[str, Optional[float]]:
    """
    Derive the published alarm panel state.

    An active alarm overrides the arming mode: entry delay is 'pending', any
    other alarm is 'triggered'. Otherwise the mode decides, with 'all' being
    'arming' while the exit delay is still running.

    Args:
        data: Raw panel data
        now: Current time (epoch seconds)

    Returns:
        Tuple of (state, exit delay seconds or None when not arming)
    """
    alarm_state = active_alarm_state(data)
    if alarm_state:
        if alarm_state == ENTRY_DELAY:
            return STATE_PENDING, None
        return STATE_TRIGGERED, None

    mode = data.get("mode")
    if mode == MODE_NONE:
        return STATE_DISARMED, None
    if mode == MODE_SOME:
        return STATE_ARMED_HOME, None
    if mode == MODE_ALL:
        exit_delay = exit_delay_remaining(data, now)
        if exit_delay > 0:
            return STATE_ARMING, exit_delay
        return STATE_ARMED_AWAY, None
    return STATE_UNKNOWN, None


def derive_panic_states(data: Dict[str, Any]) -> Tuple[bool, bool]:
    """
    Return (police, fire) panic switch states from the active alarm.

    Args:
        data: Raw panel data

    Returns:
        Tuple of booleans
    """
    alarm_state = active_alarm_state(data)
    # A burglar alarm never turns fire on, and a fire alarm never turns police on
    return alarm_state in BURGLAR_ALARM_STATES, alarm_state in FIRE_ALARM_STATES


def siren_active(data: Dict[str, Any]) -> bool:
    """True when the panel reports the siren sounding."""
    siren = data.get("siren") or {}
    return siren.get("state") == "on"


def target_mode_for(token: str) -> Optional[str]:
    """
    Map an arm/disarm command token to the remote mode that confirms it.

    Args:
        token: Command payload, case-insensitive

    Returns:
        Remote mode or None for an unrecognized token
    """
    return TARGET_MODES.get(token.strip().lower())


async def find_bypass_candidates(location: RingLocation) -> List[RingDevice]:
    """
    Find sensors that would block arming.

    Only contact sensors and retrofit zones can be bypassed, and only while
    faulted (open).

    Args:
        location: Location to query

    Returns:
        Faulted bypassable devices
    """
    devices = await location.get_devices()
    return [
        device
        for device in devices
        if device.device_type in BYPASS_DEVICE_TYPES
        and (device.data or {}).get("faulted")
    ]
