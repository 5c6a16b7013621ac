"""
Main entry point for ring_mqtt_bridge command.

Usage:
    python -m ring_mqtt_bridge --api-factory mypackage.client:create_api [options]
"""

import argparse
import asyncio
import importlib
import logging
import signal
import sys

from config_loader import LOG_LEVELS, load_config

from . import __version__
from .bridge import MQTTBridge


def load_api_factory(target: str):
    """
    Import a remote API factory from 'module:callable'.

    Args:
        target: Import path of a callable returning a RingApi

    Returns:
        The callable

    Raises:
        ValueError: If target is malformed or the callable doesn't exist
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"API factory must look like 'module:callable', got '{target}'")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ValueError(f"'{attr}' in {module_name} is not callable")
    return factory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ring MQTT Bridge - Connect Ring alarm devices to Home Assistant"
    )

    parser.add_argument(
        "--api-factory",
        required=True,
        help="Remote API client factory as module:callable",
    )
    parser.add_argument("--config", help="Path to ring.yaml config file")

    # MQTT options override the config file
    parser.add_argument("--mqtt-host", help="MQTT broker host")
    parser.add_argument("--mqtt-port", type=int, help="MQTT broker port")
    parser.add_argument("--mqtt-user", help="MQTT username")
    parser.add_argument("--mqtt-password", help="MQTT password")

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level (default: from config, else info)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)
    config = load_config(args.config)

    try:
        api = load_api_factory(args.api_factory)()
    except Exception as e:
        logger.error(f"Failed to create remote API client: {e}")
        return 1

    bridge = MQTTBridge(
        api=api,
        mqtt_host=args.mqtt_host or config.mqtt_host,
        mqtt_port=args.mqtt_port or config.mqtt_port,
        mqtt_user=args.mqtt_user or config.mqtt_user,
        mqtt_password=args.mqtt_password or config.mqtt_password,
        ring_topic=config.ring_topic,
        discovery_prefix=config.discovery_prefix,
        enable_panic=config.enable_panic,
    )

    # Setup signal handlers for clean shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await bridge.start()
        logger.info("Bridge running... (Press Ctrl+C to stop)")
        await stop_event.wait()
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Bridge error: {e}")
        return 1
    finally:
        await bridge.stop()

    return 0


def main() -> int:
    """Main entry point for MQTT bridge."""
    args = build_parser().parse_args()

    # Config file log level applies unless overridden on the command line
    log_level = args.log_level
    if not log_level:
        try:
            log_level = load_config(args.config).log_level
        except ValueError as e:
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return 1

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)
    logger.info(f"Starting Ring MQTT Bridge v{__version__}")

    try:
        return asyncio.run(run(args))
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
