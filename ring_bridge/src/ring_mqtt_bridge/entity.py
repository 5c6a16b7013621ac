"""
Entity model for the MQTT bridge.

An entity is one addressable property of a device: its topics, its discovery
metadata and the last value published for it.
"""

from typing import Any, Dict, Optional, Tuple

PAYLOAD_AVAILABLE = "online"
PAYLOAD_NOT_AVAILABLE = "offline"


def device_topic(ring_topic: str, location_id: str, category: str, device_id: str) -> str:
    """Base topic for all of a device's entities."""
    return f"{ring_topic}/{location_id}/{category}/{device_id}"


def availability_topic(base_topic: str) -> str:
    """Availability topic for a device topic."""
    return f"{base_topic}/status"


def entity_topics(
    ring_topic: str,
    location_id: str,
    category: str,
    device_id: str,
    entity_name: str,
    component: str,
    discovery_prefix: str = "homeassistant",
) -> Tuple[str, str, str]:
    """
    Derive an entity's topics.

    Same inputs always give the same topics, so rediscovery overwrites the
    retained config instead of registering a new entity.

    Args:
        ring_topic: Bridge topic prefix (e.g., 'ring')
        location_id: Location ID
        category: Device category in topics (e.g., 'alarm', 'chime')
        device_id: Device ID
        entity_name: Entity key (e.g., 'siren')
        component: Home Assistant component (e.g., 'switch')
        discovery_prefix: Home Assistant discovery prefix

    Returns:
        Tuple of (state_topic, command_topic, config_topic)
    """
    base_topic = device_topic(ring_topic, location_id, category, device_id)
    state_topic = f"{base_topic}/{entity_name}/state"
    command_topic = f"{base_topic}/{entity_name}/command"
    config_topic = (
        f"{discovery_prefix}/{component}/{location_id}/{device_id}_{entity_name}/config"
    )
    return state_topic, command_topic, config_topic


class Entity:
    """One controllable or observable property of a device."""

    def __init__(
        self,
        name: str,
        component: str,
        state_topic: str,
        config_topic: str,
        command_topic: Optional[str] = None,
        display_name: Optional[str] = None,
        icon: Optional[str] = None,
        extra_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize entity.

        Args:
            name: Entity key, unique per device (e.g., 'alarm', 'bypass')
            component: Home Assistant component ('sensor', 'switch',
                'alarm_control_panel', 'number', 'binary_sensor')
            state_topic: Topic state is published to
            config_topic: Discovery config topic
            command_topic: Command topic for writable entities
            display_name: Name shown in Home Assistant
            icon: Optional mdi icon
            extra_config: Component-specific discovery fields (e.g., min/max)
        """
        self.name = name
        self.component = component
        self.state_topic = state_topic
        self.config_topic = config_topic
        self.command_topic = command_topic
        self.display_name = display_name
        self.icon = icon
        self.extra_config = dict(extra_config or {})

        # Last value published to state_topic (None until the first publish)
        self.last_published: Any = None

    @property
    def writable(self) -> bool:
        """True when the entity accepts commands."""
        return self.command_topic is not None

    def __repr__(self) -> str:
        return f"Entity({self.component}.{self.name})"
