"""
Abstract boundary to the remote Ring device API.

The bridge never talks to the network itself. A concrete client implements
these classes and hands them to the bridge; the bridge only reads device
data, observes change-events and issues commands.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
import logging


class RingDeviceType:
    """Device type strings reported by the remote API."""

    SECURITY_PANEL = "security-panel"
    BASE_STATION = "hub.redsky"
    CONTACT_SENSOR = "sensor.contact"
    RETROFIT_ZONE = "sensor.zone"
    MOTION_SENSOR = "sensor.motion"
    CHIME = "chime"
    CHIME_PRO = "chime_pro"
    CHIME_PRO_V2 = "chime_pro_v2"


class _Observable:
    """Minimal observer list shared by locations and devices."""

    def __init__(self):
        self._observers: List[Callable[..., None]] = []

    def subscribe(self, observer: Callable[..., None]) -> None:
        """
        Register an observer.

        Args:
            observer: Callable notified on every event
        """
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Callable[..., None]) -> None:
        """Remove a previously registered observer."""
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_observers(self, *args: Any) -> None:
        for observer in list(self._observers):
            observer(*args)


class RingDevice(_Observable, ABC):
    """
    One remote device.

    Subclasses keep ``data`` current as the backend pushes updates and call
    ``_notify_observers(data)`` after every update (a change-event). The
    event carries no meaning beyond "re-read ``data``".
    """

    def __init__(
        self,
        device_id: str,
        name: str,
        device_type: str,
        location: "RingLocation",
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        self.id = device_id
        self.name = name
        self.device_type = device_type
        self.location = location
        self.data: Dict[str, Any] = data if data is not None else {}

    def update_data(self, data: Dict[str, Any]) -> None:
        """
        Merge new data from the backend and emit a change-event.

        Args:
            data: Partial device data
        """
        self.data.update(data)
        self._notify_observers(self.data)

    async def set_volume(self, volume: int) -> None:
        """Set the device volume (chimes only)."""
        raise NotImplementedError(f"{self.device_type} has no volume control")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id='{self.id}', type='{self.device_type}')"


class RingLocation(_Observable, ABC):
    """
    One account location.

    Observers are called with a single bool whenever the location's push
    connection goes up or down.
    """

    def __init__(self, location_id: str, name: str):
        super().__init__()
        self.id = location_id
        self.name = name
        self.connected = False
        self.logger = logging.getLogger(f"{__name__}.{location_id}")

    def set_connected(self, connected: bool) -> None:
        """Record a connection change and notify observers."""
        if connected != self.connected:
            self.connected = connected
            self.logger.info(
                f"Location {self.name} {'connected' if connected else 'disconnected'}"
            )
        self._notify_observers(connected)

    @abstractmethod
    async def get_devices(self) -> List[RingDevice]:
        """Return every device at this location."""

    @abstractmethod
    async def disarm(self) -> None:
        """Disarm the alarm."""

    @abstractmethod
    async def arm_home(self, bypass_sensor_ids: Optional[List[str]] = None) -> None:
        """Arm in home mode, bypassing the given sensors."""

    @abstractmethod
    async def arm_away(self, bypass_sensor_ids: Optional[List[str]] = None) -> None:
        """Arm in away mode, bypassing the given sensors."""

    @abstractmethod
    async def sound_siren(self) -> None:
        """Sound the base station siren."""

    @abstractmethod
    async def silence_siren(self) -> None:
        """Silence the base station siren."""

    @abstractmethod
    async def trigger_burglar_alarm(self) -> None:
        """Raise a burglar (police) panic alarm."""

    @abstractmethod
    async def trigger_fire_alarm(self) -> None:
        """Raise a fire panic alarm."""

    @abstractmethod
    async def set_alarm_mode(self, mode: str) -> None:
        """Set raw alarm mode ('none', 'some', 'all')."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id='{self.id}', name='{self.name}')"


class RingApi(ABC):
    """Entry point of a remote API client."""

    @abstractmethod
    async def get_locations(self) -> List[RingLocation]:
        """Return every location on the account."""
