#!/usr/bin/env python3
"""
Configuration loader for the Ring MQTT Bridge.

Loads and validates the ring.yaml configuration file: topic prefixes,
broker connection and which optional entities are exposed.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")
_TOPIC_RE = re.compile(r"^[^#+\s]+$")


class BridgeConfig:
    """Holds parsed bridge configuration."""

    def __init__(
        self,
        ring_topic: str = "ring",
        discovery_prefix: str = "homeassistant",
        enable_panic: bool = False,
        mqtt_host: str = "localhost",
        mqtt_port: int = 1883,
        mqtt_user: Optional[str] = None,
        mqtt_password: Optional[str] = None,
        log_level: str = "info",
    ):
        self.ring_topic = ring_topic
        self.discovery_prefix = discovery_prefix
        self.enable_panic = enable_panic
        self.mqtt_host = mqtt_host
        self.mqtt_port = mqtt_port
        self.mqtt_user = mqtt_user
        self.mqtt_password = mqtt_password
        self.log_level = log_level

    def get_summary(self) -> str:
        """Get summary of configuration for logging."""
        return (
            f"ring_topic={self.ring_topic}, discovery_prefix={self.discovery_prefix}, "
            f"panic={'enabled' if self.enable_panic else 'disabled'}, "
            f"broker={self.mqtt_host}:{self.mqtt_port}"
        )

    def __repr__(self):
        return f"BridgeConfig({self.get_summary()})"


def _validate_topic(key: str, value: Any) -> str:
    if not isinstance(value, str) or not _TOPIC_RE.match(value):
        raise ValueError(f"'{key}' must be a non-empty topic without wildcards")
    # Trailing slashes would produce empty topic levels
    topic = value.strip("/")
    if not topic:
        raise ValueError(f"'{key}' must be a non-empty topic without wildcards")
    return topic


def parse_config(raw_config: Dict[str, Any]) -> BridgeConfig:
    """
    Validate a raw configuration mapping.

    Args:
        raw_config: Mapping loaded from YAML

    Returns:
        BridgeConfig

    Raises:
        ValueError: If a value is invalid
    """
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    config = BridgeConfig()

    if "ring_topic" in raw_config:
        config.ring_topic = _validate_topic("ring_topic", raw_config["ring_topic"])
    if "discovery_prefix" in raw_config:
        config.discovery_prefix = _validate_topic(
            "discovery_prefix", raw_config["discovery_prefix"]
        )

    enable_panic = raw_config.get("enable_panic", False)
    if not isinstance(enable_panic, bool):
        raise ValueError("'enable_panic' must be true or false")
    config.enable_panic = enable_panic

    log_level = str(raw_config.get("log_level", "info")).lower()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"'log_level' must be one of {', '.join(LOG_LEVELS)}")
    config.log_level = log_level

    mqtt_config = raw_config.get("mqtt", {}) or {}
    if not isinstance(mqtt_config, dict):
        raise ValueError("'mqtt' must be a mapping")

    config.mqtt_host = mqtt_config.get("host", config.mqtt_host)
    if not config.mqtt_host or not isinstance(config.mqtt_host, str):
        raise ValueError("'mqtt.host' must be a hostname")

    port = mqtt_config.get("port", config.mqtt_port)
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
        raise ValueError(f"'mqtt.port' must be a port number, got {port!r}")
    config.mqtt_port = port

    config.mqtt_user = mqtt_config.get("user")
    config.mqtt_password = mqtt_config.get("password")

    return config


def load_config(config_path: Optional[str]) -> BridgeConfig:
    """
    Load and parse ring.yaml configuration file.

    Args:
        config_path: Path to configuration file (None = defaults)

    Returns:
        BridgeConfig, with defaults if the file doesn't exist or is empty

    Raises:
        ValueError: If configuration is invalid
    """
    if not config_path:
        logger.info("No config file provided, using defaults")
        return BridgeConfig()

    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning(f"Configuration file not found: {config_path}, using defaults")
        return BridgeConfig()

    try:
        with open(config_file, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML configuration: {e}")

    if not raw_config:
        logger.warning(f"Configuration file is empty: {config_path}, using defaults")
        return BridgeConfig()

    config = parse_config(raw_config)
    logger.info(f"Loaded configuration from {config_path}: {config.get_summary()}")
    return config
