"""
State synchronizer: mirrors remote device values onto entity state topics.
"""

import logging
from typing import Any, Optional

from .availability import AvailabilityTracker
from .entity import Entity


def format_payload(value: Any) -> str:
    """
    Format a domain value as an MQTT payload.

    Args:
        value: bool, number or string

    Returns:
        'ON'/'OFF' for booleans, str(value) otherwise
    """
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    return str(value)


class StateSynchronizer:
    """
    Publishes entity state, suppressing repeats on change-events.

    A full sync (is_change_event=False) always publishes, so the hub gets
    authoritative state after a restart or rediscovery. A change-event sync
    only publishes values that differ from the last published one.
    """

    def __init__(
        self,
        mqtt_client,
        availability: AvailabilityTracker,
        logger: Optional[logging.Logger] = None,
    ):
        self.mqtt_client = mqtt_client
        self.availability = availability
        self.logger = logger or logging.getLogger(__name__)

    def publish_state(self, entity: Entity, value: Any, is_change_event: bool) -> bool:
        """
        Publish an entity value.

        Args:
            entity: Target entity
            value: Domain value (bool, enumeration string, number)
            is_change_event: True for incremental, change-event driven syncs

        Returns:
            True if a message was published
        """
        if not self.availability.is_online:
            self.logger.debug(
                f"Skipping {entity.name} state publish, device is {self.availability.state}"
            )
            return False

        if is_change_event and value == entity.last_published:
            return False

        payload = format_payload(value)
        self.mqtt_client.publish(entity.state_topic, payload, qos=1)
        entity.last_published = value
        self.logger.debug(f"{entity.state_topic} {payload}")
        return True
