"""
Home Assistant MQTT Discovery for bridge devices.

Builds one retained config message per entity and publishes them, then
gives Home Assistant a moment to register the entities before any state
arrives.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from .entity import PAYLOAD_AVAILABLE, PAYLOAD_NOT_AVAILABLE

DISCOVERY_GRACE_SECONDS = 2.0

DiscoveryEntry = Tuple[str, Dict[str, Any]]


def build_discovery_entries(device) -> List[DiscoveryEntry]:
    """
    Build discovery config for every entity of a device.

    Pure function of the device's entity set and registry data; safe to call
    on every (re)activation.

    Args:
        device: MQTTDevice instance

    Returns:
        Ordered list of (config_topic, payload) tuples
    """
    entries = []
    for entity in device.entities.values():
        config = {
            "name": entity.display_name or device.device_data["name"],
            "unique_id": f"{device.device_id}_{entity.name}",
            "availability_topic": device.availability_topic,
            "payload_available": PAYLOAD_AVAILABLE,
            "payload_not_available": PAYLOAD_NOT_AVAILABLE,
            "state_topic": entity.state_topic,
        }
        if entity.command_topic:
            config["command_topic"] = entity.command_topic
        if entity.icon:
            config["icon"] = entity.icon
        config.update(entity.extra_config)
        config["device"] = dict(device.device_data)
        entries.append((entity.config_topic, config))
    return entries


async def publish_discovery(
    mqtt_client,
    entries: List[DiscoveryEntry],
    sleep: Callable[[float], Awaitable[None]],
    logger: logging.Logger,
    grace: float = DISCOVERY_GRACE_SECONDS,
) -> None:
    """
    Publish discovery entries retained, then wait the grace interval.

    Args:
        mqtt_client: MQTT client instance
        entries: Output of build_discovery_entries()
        sleep: Async sleep function
        logger: Device logger
        grace: Seconds to wait after publishing
    """
    for config_topic, config in entries:
        logger.debug(f"HA config topic: {config_topic}")
        logger.debug(config)
        mqtt_client.publish(config_topic, json.dumps(config), retain=True, qos=1)

    # Give Home Assistant time to process the config before state arrives
    await sleep(grace)
