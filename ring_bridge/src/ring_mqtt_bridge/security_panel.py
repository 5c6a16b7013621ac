"""
Security panel entity set for the MQTT Bridge.

Exposes the location alarm as an alarm_control_panel plus siren, arming
bypass and (optionally) panic switches. Arm/disarm commands are confirmed
by polling the panel's observed mode with bounded retries.
"""

import asyncio
from typing import List, Optional

from ring_alarm.alarm import (
    MODE_ALL,
    STATE_ARMED_AWAY,
    STATE_ARMING,
    derive_alarm_state,
    derive_panic_states,
    exit_delay_remaining,
    find_bypass_candidates,
    siren_active,
)

from .base_device import MQTTDevice
from .confirmation import (
    AlarmSession,
    ArmConfirmationLoop,
    ConfirmationOutcome,
    ConfirmationState,
)
from .dispatcher import parse_switch_payload
from .exit_delay import ExitDelayWatcher


class MQTTSecurityPanel(MQTTDevice):
    """
    Alarm panel device.

    Entities:
    - alarm: alarm_control_panel (disarm / arm_home / arm_away)
    - siren: switch, sounds or silences the siren
    - bypass: switch, local only; bypass faulted sensors on the next arm
    - police, fire: panic switches, only when enable_panic is set
    """

    category = "alarm"

    def __init__(self, ring_device, mqtt_client, enable_panic: bool = False, **kwargs):
        """
        Initialize security panel.

        Args:
            ring_device: Remote security panel device
            mqtt_client: MQTT client instance
            enable_panic: Expose police/fire panic switches
            **kwargs: Passed to MQTTDevice
        """
        # Capability set is fixed before entities are built
        self.enable_panic = enable_panic
        self.bypass_enabled = False
        self.location = ring_device.location
        self._alarm_session: Optional[AlarmSession] = None

        super().__init__(ring_device, mqtt_client, **kwargs)

        self.device_data["mdl"] = "Alarm Control Panel"
        self.device_data["name"] = f"{self.location.name} Alarm"
        self.exit_delay = ExitDelayWatcher(
            self._on_exit_delay_elapsed, self._sleep, self.logger
        )

    def init_entities(self) -> None:
        location_name = self.location.name
        self.add_entity(
            "alarm",
            "alarm_control_panel",
            display_name=f"{location_name} Alarm",
            handler=self.start_alarm_command,
        )
        self.add_entity(
            "siren",
            "switch",
            display_name=f"{location_name} Siren",
            icon="mdi:alarm-light",
            handler=self.set_siren_mode,
        )
        self.add_entity(
            "bypass",
            "switch",
            display_name=f"{location_name} Arming Bypass Mode",
            icon="mdi:transit-skip",
            handler=self.set_bypass_mode,
        )
        if self.enable_panic:
            self.add_entity(
                "police",
                "switch",
                display_name=f"{location_name} Panic - Police",
                icon="mdi:police-badge",
                handler=self.set_police_mode,
            )
            self.add_entity(
                "fire",
                "switch",
                display_name=f"{location_name} Panic - Fire",
                icon="mdi:fire",
                handler=self.set_fire_mode,
            )

    def publish_data(self, is_change_event: bool = False) -> None:
        data = self.device.data
        alarm_state, exit_delay = derive_alarm_state(data, self._clock())

        if alarm_state == STATE_ARMING:
            self.exit_delay.schedule(exit_delay)
        else:
            self.exit_delay.cancel()

        self.sync.publish_state(self.entities["alarm"], alarm_state, is_change_event)
        self.sync.publish_state(
            self.entities["siren"], siren_active(data), is_change_event
        )
        self.sync.publish_state(
            self.entities["bypass"], self.bypass_enabled, is_change_event
        )

        if self.enable_panic:
            police, fire = derive_panic_states(data)
            if police:
                self.logger.debug(f"Burglar alarm is active for {self.location.name}")
            if fire:
                self.logger.debug(f"Fire alarm is active for {self.location.name}")
            self.sync.publish_state(self.entities["police"], police, is_change_event)
            self.sync.publish_state(self.entities["fire"], fire, is_change_event)

    def _on_exit_delay_elapsed(self) -> None:
        self.worker.submit(self._publish_armed_away)

    def _publish_armed_away(self) -> None:
        """Publish armed_away once the exit delay is over, if still valid."""
        if not self.availability.is_online:
            self.logger.debug("Exit delay elapsed while offline, not publishing")
            return
        data = self.device.data
        if data.get("mode") != MODE_ALL:
            return
        if exit_delay_remaining(data, self._clock()) <= 0:
            self.sync.publish_state(
                self.entities["alarm"], STATE_ARMED_AWAY, is_change_event=True
            )

    # Arm / disarm

    def start_alarm_command(self, message: str) -> AlarmSession:
        """
        Handle an alarm command without blocking the device worker.

        A valid command supersedes any confirmation loop still running for
        this panel. Unknown tokens are rejected immediately.

        Args:
            message: 'disarm', 'arm_home' or 'arm_away'

        Returns:
            The session; resolved already for unknown tokens
        """
        self.logger.debug(
            f"Received set alarm mode {message} for location "
            f"{self.location.name} ({self.location_id})"
        )
        session = AlarmSession(message)
        if session.target_mode is None:
            self.logger.warning(f"Cannot set alarm mode: unknown mode '{message}'")
            session.state = ConfirmationState.REJECTED
            session.outcome = ConfirmationOutcome.UNKNOWN_TOKEN
            return session

        self.cancel_alarm_command()
        self._alarm_session = session
        session.task = asyncio.ensure_future(self._run_alarm_session(session))
        return session

    def cancel_alarm_command(self) -> None:
        """Cancel the in-flight confirmation loop, if any."""
        previous = self._alarm_session
        if previous and previous.task and not previous.task.done():
            self.logger.info(f"Superseding in-flight alarm command {previous.token}")
            previous.task.cancel()
        self._alarm_session = None

    async def set_alarm_mode(self, message: str) -> ConfirmationOutcome:
        """
        Set alarm mode and wait for confirmation.

        Raises CancelledError if a newer command supersedes this one.

        Args:
            message: Command token

        Returns:
            ConfirmationOutcome
        """
        session = self.start_alarm_command(message)
        if session.task is None:
            return session.outcome
        return await session.task

    async def _run_alarm_session(self, session: AlarmSession) -> ConfirmationOutcome:
        loop = ArmConfirmationLoop(
            session,
            issue_command=self._issue_alarm_command,
            read_mode=lambda: self.device.data.get("mode"),
            bypass_enabled=lambda: self.bypass_enabled,
            find_bypass_ids=self._find_bypass_ids,
            sleep=self._sleep,
            logger=self.logger,
        )
        try:
            return await loop.run()
        except Exception as e:
            self.logger.error(f"Alarm command {session.token} failed: {e}", exc_info=True)
            session.state = ConfirmationState.EXHAUSTED
            session.outcome = ConfirmationOutcome.EXHAUSTED
            return session.outcome
        finally:
            if self._alarm_session is session:
                self._alarm_session = None

    def _issue_alarm_command(self, token: str, bypass_ids: List[str]) -> None:
        if token == "disarm":
            self.fire_and_forget(self.location.disarm(), "disarm alarm")
        elif token == "arm_home":
            self.fire_and_forget(self.location.arm_home(bypass_ids), "arm home")
        elif token == "arm_away":
            self.fire_and_forget(self.location.arm_away(bypass_ids), "arm away")

    async def _find_bypass_ids(self) -> List[str]:
        devices = await find_bypass_candidates(self.location)
        if devices:
            names = ", ".join(device.name for device in devices)
            self.logger.info(f"Arming bypass mode is enabled, bypassing sensors: {names}")
        return [device.id for device in devices]

    # Switches

    def set_bypass_mode(self, message: str) -> None:
        state = parse_switch_payload(message)
        if state is None:
            self.logger.warning(f"Received invalid command for arming bypass mode: {message}")
            return
        self.logger.info(
            f"{'Enabling' if state else 'Disabling'} arming bypass mode for {self.location.name}"
        )
        self.bypass_enabled = state
        self.publish_data(is_change_event=False)

    def set_siren_mode(self, message: str) -> None:
        state = parse_switch_payload(message)
        if state is None:
            self.logger.warning(f"Received invalid command for siren: {message}")
            return
        if state:
            self.logger.info(f"Activating siren for {self.location.name}")
            self.fire_and_forget(self.location.sound_siren(), "sound siren")
        else:
            self.logger.info(f"Deactivating siren for {self.location.name}")
            self.fire_and_forget(self.location.silence_siren(), "silence siren")

    def set_police_mode(self, message: str) -> None:
        state = parse_switch_payload(message)
        if state is None:
            self.logger.warning(f"Received invalid command for panic: {message}")
            return
        if state:
            self.logger.info(f"Activating burglar alarm for {self.location.name}")
            self.fire_and_forget(
                self.location.trigger_burglar_alarm(), "trigger burglar alarm"
            )
        else:
            self.logger.info(f"Deactivating burglar alarm for {self.location.name}")
            self.fire_and_forget(self.location.set_alarm_mode("none"), "clear alarm")

    def set_fire_mode(self, message: str) -> None:
        state = parse_switch_payload(message)
        if state is None:
            self.logger.warning(f"Received invalid command for panic: {message}")
            return
        if state:
            self.logger.info(f"Activating fire alarm for {self.location.name}")
            self.fire_and_forget(self.location.trigger_fire_alarm(), "trigger fire alarm")
        else:
            self.logger.info(f"Deactivating fire alarm for {self.location.name}")
            self.fire_and_forget(self.location.set_alarm_mode("none"), "clear alarm")

    async def teardown(self) -> None:
        self.exit_delay.cancel()
        self.cancel_alarm_command()
        await super().teardown()
