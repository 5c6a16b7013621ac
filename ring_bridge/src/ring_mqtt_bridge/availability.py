"""
Per-device availability (online/offline) tracking.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from .entity import PAYLOAD_AVAILABLE, PAYLOAD_NOT_AVAILABLE

STATE_INIT = "init"
STATE_ONLINE = PAYLOAD_AVAILABLE
STATE_OFFLINE = PAYLOAD_NOT_AVAILABLE

ONLINE_SETTLE_SECONDS = 1.0


class AvailabilityTracker:
    """
    Availability state machine for one device.

    States: init -> online <-> offline. Init is only ever the starting
    state. Observers and the debug log only hear about real transitions, so
    republishing every device together does not flood the log.
    """

    def __init__(
        self,
        topic: str,
        mqtt_client,
        sleep: Callable[[float], Awaitable[None]],
        logger: Optional[logging.Logger] = None,
        settle: float = ONLINE_SETTLE_SECONDS,
    ):
        self.topic = topic
        self.mqtt_client = mqtt_client
        self._sleep = sleep
        self._settle = settle
        self.logger = logger or logging.getLogger(__name__)
        self.state = STATE_INIT
        self._observers: List[Callable[[str], None]] = []

    @property
    def is_online(self) -> bool:
        return self.state == STATE_ONLINE

    def subscribe(self, observer: Callable[[str], None]) -> None:
        """Register an observer called with the new state on each transition."""
        if observer not in self._observers:
            self._observers.append(observer)

    async def online(self, still_reachable: Optional[Callable[[], bool]] = None) -> bool:
        """
        Mark the device online, with a settle delay on both sides.

        Args:
            still_reachable: Checked after the first delay; when it returns
                False the transition is abandoned

        Returns:
            True if the device was marked online
        """
        await self._sleep(self._settle)
        if still_reachable is not None and not still_reachable():
            return False
        self._transition(STATE_ONLINE)
        await self._sleep(self._settle)
        return True

    def offline(self) -> None:
        """Mark the device offline immediately."""
        self._transition(STATE_OFFLINE)

    def _transition(self, new_state: str) -> None:
        changed = new_state != self.state
        self.state = new_state
        self.mqtt_client.publish(self.topic, new_state, retain=True, qos=1)
        if changed:
            self.logger.debug(f"{self.topic} {new_state}")
            for observer in list(self._observers):
                observer(new_state)
