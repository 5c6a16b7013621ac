"""
MQTT Bridge implementation for Home Assistant integration.

Bridges Ring locations and devices to Home Assistant via MQTT Discovery.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

import paho.mqtt.client as mqtt

from ring_alarm.api import RingApi, RingDevice, RingDeviceType, RingLocation

from .base_device import MQTTDevice
from .chime import MQTTChime
from .security_panel import MQTTSecurityPanel

CHIME_TYPES = (
    RingDeviceType.CHIME,
    RingDeviceType.CHIME_PRO,
    RingDeviceType.CHIME_PRO_V2,
)


def create_mqtt_device(
    ring_device: RingDevice,
    mqtt_client,
    enable_panic: bool = False,
    **kwargs: Any,
) -> Optional[MQTTDevice]:
    """
    Factory for the MQTT device matching a remote device type.

    Args:
        ring_device: Remote device
        mqtt_client: MQTT client instance
        enable_panic: Expose panic switches on security panels
        **kwargs: Passed to the device constructor

    Returns:
        MQTTDevice, or None for unsupported device types
    """
    if ring_device.device_type == RingDeviceType.SECURITY_PANEL:
        return MQTTSecurityPanel(
            ring_device, mqtt_client, enable_panic=enable_panic, **kwargs
        )
    if ring_device.device_type in CHIME_TYPES:
        return MQTTChime(ring_device, mqtt_client, **kwargs)
    return None


class MQTTBridge:
    """
    MQTT Bridge for Home Assistant integration.

    Features:
    - Home Assistant MQTT Discovery
    - Availability tracking per device, following location connection
    - Change-event driven state publishing
    - Command handling with arm/disarm confirmation
    - Full republish on broker reconnect and Home Assistant restart
    """

    def __init__(
        self,
        api: RingApi,
        mqtt_host: str,
        mqtt_port: int = 1883,
        mqtt_user: Optional[str] = None,
        mqtt_password: Optional[str] = None,
        ring_topic: str = "ring",
        discovery_prefix: str = "homeassistant",
        enable_panic: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize MQTT Bridge.

        Args:
            api: Remote API client
            mqtt_host: MQTT broker hostname
            mqtt_port: MQTT broker port
            mqtt_user: MQTT username (optional)
            mqtt_password: MQTT password (optional)
            ring_topic: Topic prefix for device topics
            discovery_prefix: Home Assistant discovery prefix
            enable_panic: Expose panic switches on security panels
            sleep: Async sleep function (injectable for tests)
            clock: Wall clock (injectable for tests)
        """
        self.logger = logging.getLogger(__name__)
        self.api = api
        self.mqtt_host = mqtt_host
        self.mqtt_port = mqtt_port
        self.ring_topic = ring_topic
        self.discovery_prefix = discovery_prefix
        self.enable_panic = enable_panic
        self._sleep = sleep
        self._clock = clock
        self._running = False
        self._connected_once = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()

        self.mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        if mqtt_user and mqtt_password:
            self.mqtt_client.username_pw_set(mqtt_user, mqtt_password)

        self.mqtt_client.on_connect = self._on_mqtt_connect
        self.mqtt_client.on_disconnect = self._on_mqtt_disconnect
        self.mqtt_client.on_message = self._on_mqtt_message

        self.locations: List[RingLocation] = []
        self.devices: Dict[str, MQTTDevice] = {}
        self._location_observers: Dict[str, Callable[[bool], None]] = {}

    @property
    def ha_status_topic(self) -> str:
        return f"{self.discovery_prefix}/status"

    async def start(self) -> None:
        """Connect to the broker, set up every location and publish."""
        if self._running:
            return

        self._running = True
        self._loop = asyncio.get_running_loop()
        self.logger.info("Starting MQTT bridge...")

        self.logger.info(f"Connecting to MQTT broker {self.mqtt_host}:{self.mqtt_port}...")
        try:
            self.mqtt_client.connect(self.mqtt_host, self.mqtt_port, 60)
            self.mqtt_client.loop_start()
        except Exception as e:
            self.logger.error(f"Failed to connect to MQTT broker: {e}")
            self._running = False
            raise

        self.locations = await self.api.get_locations()
        for location in self.locations:
            await self._setup_location(location)

        self.logger.info(
            f"MQTT bridge started with {len(self.devices)} devices "
            f"at {len(self.locations)} locations"
        )

    async def stop(self) -> None:
        """Take every device offline and disconnect."""
        if not self._running:
            return

        self._running = False
        self.logger.info("Stopping MQTT bridge...")

        for task in list(self._tasks):
            task.cancel()

        for location in self.locations:
            observer = self._location_observers.pop(location.id, None)
            if observer:
                location.unsubscribe(observer)

        for device_id in list(self.devices):
            await self.remove_device(device_id)

        self.mqtt_client.loop_stop()
        self.mqtt_client.disconnect()

        self.logger.info("MQTT bridge stopped")

    async def _setup_location(self, location: RingLocation) -> None:
        """
        Create MQTT devices for a location and follow its connection.

        Args:
            location: Remote location
        """
        self.logger.info(f"Setting up location {location.name} ({location.id})")

        for ring_device in await location.get_devices():
            if ring_device.id in self.devices:
                continue
            device = create_mqtt_device(
                ring_device,
                self.mqtt_client,
                enable_panic=self.enable_panic,
                ring_topic=self.ring_topic,
                discovery_prefix=self.discovery_prefix,
                sleep=self._sleep,
                clock=self._clock,
            )
            if device is None:
                self.logger.debug(
                    f"Unsupported device type {ring_device.device_type} ({ring_device.id})"
                )
                continue
            self.logger.info(f"Setting up MQTT for {ring_device.device_type} {ring_device.id}")
            self.devices[ring_device.id] = device

        def observer(connected: bool) -> None:
            self._on_location_connection(location, connected)

        self._location_observers[location.id] = observer
        location.subscribe(observer)

        if location.connected:
            await self.publish_location(location)

    def devices_for(self, location: RingLocation) -> List[MQTTDevice]:
        """Return the MQTT devices belonging to a location."""
        return [d for d in self.devices.values() if d.location_id == location.id]

    async def publish_location(self, location: RingLocation) -> None:
        """
        Publish every device of a location.

        Devices publish concurrently; each one keeps its own ordering.

        Args:
            location: Remote location
        """
        await asyncio.gather(
            *(device.publish(location.connected) for device in self.devices_for(location))
        )

    async def republish_all(self) -> None:
        """Rediscover and fully resync every device of connected locations."""
        self.logger.info("Republishing all devices")
        await asyncio.gather(
            *(self.publish_location(location) for location in self.locations)
        )

    async def remove_device(self, device_id: str) -> None:
        """
        Tear down a device removed from the account.

        Args:
            device_id: Remote device ID
        """
        device = self.devices.pop(device_id, None)
        if device is not None:
            await device.teardown()

    def _on_location_connection(self, location: RingLocation, connected: bool) -> None:
        if connected:
            self._spawn(self.publish_location(location))
        else:
            for device in self.devices_for(location):
                device.offline()

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Hand work from the MQTT network thread to the event loop."""
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(callback, *args)

    def _on_mqtt_connect(self, client, userdata, flags, reason_code, properties=None):
        """Handle MQTT connection."""
        if reason_code == 0:
            self.logger.info("Connected to MQTT broker")
            client.subscribe(self.ha_status_topic)
            self._call_soon(self._on_broker_connected)
        else:
            self.logger.error(f"Failed to connect to MQTT broker: {reason_code}")

    def _on_mqtt_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Handle MQTT disconnection."""
        self.logger.warning(f"Disconnected from MQTT broker: {reason_code}")

    def _on_broker_connected(self) -> None:
        if not self._connected_once:
            self._connected_once = True
            return

        # Reconnected: restore subscriptions, then resend everything
        for device in self.devices.values():
            if device.subscribed:
                device.subscribe_to_commands()
        self._spawn(self.republish_all())

    def _on_mqtt_message(self, client, userdata, msg):
        """
        Handle incoming MQTT messages (runs on the MQTT network thread).

        Args:
            client: MQTT client
            userdata: User data
            msg: MQTT message
        """
        topic = msg.topic
        payload = msg.payload.decode("utf-8")
        self.logger.debug(f"MQTT message: {topic} = {payload}")
        self._call_soon(self._route_message, topic, payload)

    def _route_message(self, topic: str, payload: str) -> None:
        """
        Route a message to Home Assistant status handling or a device.

        Command topics look like
        <ring_topic>/<location>/<category>/<device_id>/<entity>/command.

        Args:
            topic: MQTT topic
            payload: Decoded payload
        """
        if topic == self.ha_status_topic:
            if payload.strip().lower() == "online":
                self.logger.info("Home Assistant is online, resending discovery and state")
                self._spawn(self.republish_all())
            return

        parts = topic.rsplit("/", 3)
        if len(parts) == 4:
            _, device_id, entity_key, action_suffix = parts
            device = self.devices.get(device_id)
            if device is not None and topic.startswith(f"{device.device_topic}/"):
                device.handle_command(entity_key, action_suffix, payload)
                return

        self.logger.warning(f"No device found for topic: {topic}")
