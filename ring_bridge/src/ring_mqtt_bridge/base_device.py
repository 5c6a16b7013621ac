"""
Abstract base class for all bridged Ring devices.

Ties one remote device to its MQTT entities: discovery, availability, state
sync and command dispatch, with all of the device's work serialized through
its own worker.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from ring_alarm.api import RingDevice

from .availability import STATE_INIT, AvailabilityTracker
from .discovery import build_discovery_entries, publish_discovery
from .dispatcher import CommandDispatcher
from .entity import Entity, availability_topic, device_topic, entity_topics
from .state_sync import StateSynchronizer
from .worker import DeviceWorker


def model_name(device_type: str) -> str:
    """Human-readable model from a device type (e.g., 'chime_pro' -> 'Chime Pro')."""
    return device_type.replace("_", " ").title()


class MQTTDevice(ABC):
    """
    Device synchronization context.

    Subclasses must implement:
    - init_entities(): add the device's entities (fixed for its lifetime)
    - publish_data(): publish entity states from the remote device data
    """

    # Topic level identifying the device kind (e.g., 'alarm', 'chime')
    category = "device"

    def __init__(
        self,
        ring_device: RingDevice,
        mqtt_client,
        ring_topic: str = "ring",
        discovery_prefix: str = "homeassistant",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize device.

        Args:
            ring_device: Remote device
            mqtt_client: MQTT client instance
            ring_topic: Bridge topic prefix
            discovery_prefix: Home Assistant discovery prefix
            sleep: Async sleep function (injectable for tests)
            clock: Wall clock returning epoch seconds (injectable for tests)
        """
        self.device = ring_device
        self.mqtt_client = mqtt_client
        self.ring_topic = ring_topic
        self.discovery_prefix = discovery_prefix
        self._sleep = sleep
        self._clock = clock

        self.device_id = ring_device.id
        self.location_id = ring_device.location.id
        self.logger = logging.getLogger(f"{__name__}.{self.device_id}")

        self.device_topic = device_topic(
            ring_topic, self.location_id, self.category, self.device_id
        )
        self.availability_topic = availability_topic(self.device_topic)

        # Home Assistant device registry data
        self.device_data: Dict[str, Any] = {
            "ids": [self.device_id],
            "name": ring_device.name,
            "mf": "Ring",
            "mdl": model_name(ring_device.device_type),
        }

        self.availability = AvailabilityTracker(
            self.availability_topic, mqtt_client, sleep, self.logger
        )
        self.sync = StateSynchronizer(mqtt_client, self.availability, self.logger)
        self.dispatcher = CommandDispatcher(self.logger)
        self.worker = DeviceWorker(self.device_id, self.logger)

        self.entities: Dict[str, Entity] = {}
        self.subscribed = False
        # Bumped on every offline() so a publish in progress can notice it
        self._offline_count = 0
        self._background_tasks: Set[asyncio.Task] = set()

        self.init_entities()

    @abstractmethod
    def init_entities(self) -> None:
        """Add this device's entities with add_entity()."""

    @abstractmethod
    def publish_data(self, is_change_event: bool = False) -> None:
        """
        Publish every entity's state.

        Args:
            is_change_event: True when triggered by a remote change-event
        """

    def add_entity(
        self,
        name: str,
        component: str,
        display_name: Optional[str] = None,
        icon: Optional[str] = None,
        handler: Optional[Callable[[str], Any]] = None,
        extra_config: Optional[Dict[str, Any]] = None,
    ) -> Entity:
        """
        Create an entity and, if it takes commands, register its handler.

        Args:
            name: Entity key
            component: Home Assistant component
            display_name: Name shown in Home Assistant (device name if None)
            icon: Optional mdi icon
            handler: Command handler; makes the entity writable
            extra_config: Component-specific discovery fields

        Returns:
            The new Entity
        """
        state_topic, command_topic, config_topic = entity_topics(
            self.ring_topic,
            self.location_id,
            self.category,
            self.device_id,
            name,
            component,
            self.discovery_prefix,
        )
        entity = Entity(
            name=name,
            component=component,
            state_topic=state_topic,
            config_topic=config_topic,
            command_topic=command_topic if handler else None,
            display_name=display_name,
            icon=icon,
            extra_config=extra_config,
        )
        self.entities[name] = entity
        if handler:
            self.dispatcher.register(name, handler)
        return entity

    async def publish(self, location_connected: bool) -> None:
        """
        Publish discovery, go online and sync state.

        Called on first activation and on every reconnect/rediscovery.

        Args:
            location_connected: Whether the location's connection is up
        """
        if not location_connected:
            return
        await self.worker.run(self._publish)

    async def _publish(self) -> None:
        if self.availability.state == STATE_INIT:
            self.logger.debug(f"Publishing new device id: {self.device_id}")
        else:
            self.logger.debug(f"Republishing existing device id: {self.device_id}")

        offline_count = self._offline_count

        def still_reachable() -> bool:
            return (
                self._offline_count == offline_count and self.device.location.connected
            )

        await publish_discovery(
            self.mqtt_client, build_discovery_entries(self), self._sleep, self.logger
        )
        if not await self.availability.online(still_reachable) or not still_reachable():
            self.logger.debug(f"Went offline while publishing {self.device_id}, aborting")
            return

        if not self.subscribed:
            self.device.subscribe(self._on_remote_data)
            self.subscribe_to_commands()
            self.subscribed = True

        self.publish_data(is_change_event=False)

    def subscribe_to_commands(self) -> None:
        """Subscribe to every command topic of this device."""
        for entity in self.entities.values():
            if entity.command_topic:
                self.mqtt_client.subscribe(entity.command_topic)
                self.logger.debug(f"Subscribed to commands at {entity.command_topic}")

    def offline(self) -> None:
        """Mark the device offline; an in-flight publish stops short of going online."""
        self._offline_count += 1
        self.availability.offline()

    def handle_command(
        self, entity_key: str, action_suffix: str, payload: str
    ) -> asyncio.Future:
        """
        Queue an inbound command for dispatch.

        Args:
            entity_key: Entity key from the topic
            action_suffix: Last topic level
            payload: Decoded payload

        Returns:
            Future resolving to the dispatcher's result
        """
        return self.worker.submit(
            self.dispatcher.dispatch, entity_key, action_suffix, payload
        )

    def fire_and_forget(self, coro: Awaitable[Any], description: str) -> asyncio.Task:
        """
        Run a remote call without waiting for it; failures are only logged.

        Args:
            coro: Remote API coroutine
            description: What the call does, for the log

        Returns:
            The task running the call
        """
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._background_tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                self.logger.error(f"Failed to {description}: {error}")

        task.add_done_callback(_done)
        return task

    async def teardown(self) -> None:
        """Detach from the remote device and the broker for good."""
        if self.subscribed:
            self.device.unsubscribe(self._on_remote_data)
            for entity in self.entities.values():
                if entity.command_topic:
                    self.mqtt_client.unsubscribe(entity.command_topic)
            self.subscribed = False
        self.offline()
        await self.worker.stop()
        self.logger.info(f"Removed device {self.device_id}")

    def _on_remote_data(self, data: Dict[str, Any]) -> None:
        """Remote change-event: re-read and publish what changed."""
        self.worker.submit(self.publish_data, True)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(device_id='{self.device_id}')"
