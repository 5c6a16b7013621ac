"""
Ring Alarm Module - Client-agnostic remote device layer.

Abstract remote API boundary plus the alarm vocabulary shared by the MQTT
bridge. Has no MQTT knowledge.
"""

from .api import RingApi, RingDevice, RingDeviceType, RingLocation
from .alarm import (
    ALL_ALARM_STATES,
    derive_alarm_state,
    derive_panic_states,
    find_bypass_candidates,
    target_mode_for,
)

__version__ = "1.0.0"
__all__ = [
    "RingApi",
    "RingDevice",
    "RingDeviceType",
    "RingLocation",
    "ALL_ALARM_STATES",
    "derive_alarm_state",
    "derive_panic_states",
    "find_bypass_candidates",
    "target_mode_for",
]
