"""
Chime entity set for the MQTT Bridge.
"""

from .base_device import MQTTDevice

VOLUME_MIN = 0
VOLUME_MAX = 11


class MQTTChime(MQTTDevice):
    """
    Chime device.

    Entities:
    - volume: number (0-11), settable
    - snooze: binary_sensor, ON while do-not-disturb is running
    """

    category = "chime"

    def init_entities(self) -> None:
        name = self.device.name
        self.add_entity(
            "volume",
            "number",
            display_name=f"{name} Volume",
            handler=self.set_volume,
            extra_config={"min": VOLUME_MIN, "max": VOLUME_MAX},
        )
        self.add_entity("snooze", "binary_sensor", display_name=f"{name} Snooze Active")

    def publish_data(self, is_change_event: bool = False) -> None:
        data = self.device.data
        settings = data.get("settings") or {}
        do_not_disturb = data.get("do_not_disturb") or {}

        volume = settings.get("volume")
        if volume is not None:
            self.sync.publish_state(self.entities["volume"], volume, is_change_event)

        snooze = bool(do_not_disturb.get("seconds_left"))
        self.sync.publish_state(self.entities["snooze"], snooze, is_change_event)

    def set_volume(self, message: str) -> None:
        # Home Assistant may send whole numbers as '5.0'
        try:
            value = float(message.strip())
        except ValueError:
            value = None
        if value is None or not value.is_integer():
            self.logger.warning(f"Received invalid volume command: {message}")
            return
        volume = int(value)
        if not VOLUME_MIN <= volume <= VOLUME_MAX:
            self.logger.warning(
                f"Volume {volume} out of range ({VOLUME_MIN}-{VOLUME_MAX})"
            )
            return
        self.logger.info(f"Setting volume for {self.device.name} to {volume}")
        self.fire_and_forget(self.device.set_volume(volume), "set volume")
