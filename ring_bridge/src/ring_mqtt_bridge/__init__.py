"""
Ring MQTT Bridge

Bridges Ring alarm panels and chimes to Home Assistant through MQTT
Discovery: per-device availability, change-event driven state publishing
and confirmed arm/disarm commands.
"""

__version__ = "1.0.0"

from .bridge import MQTTBridge, create_mqtt_device
from .chime import MQTTChime
from .security_panel import MQTTSecurityPanel

__all__ = ["MQTTBridge", "MQTTChime", "MQTTSecurityPanel", "create_mqtt_device"]
