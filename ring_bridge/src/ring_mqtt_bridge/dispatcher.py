"""
Routes inbound command-topic messages to per-entity handlers.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Optional

COMMAND_SUFFIX = "command"


def parse_switch_payload(payload: str) -> Optional[bool]:
    """
    Parse an on/off command payload.

    Args:
        payload: Raw payload, case-insensitive

    Returns:
        True for 'on', False for 'off', None for anything else
    """
    token = payload.strip().lower()
    if token == "on":
        return True
    if token == "off":
        return False
    return None


class CommandDispatcher:
    """
    Dispatch table from entity key to command handler.

    Built once per device against its fixed capability set; an entity that
    does not exist on the device (e.g., panic switches when disabled) simply
    has no entry.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[str, Callable[[str], Any]] = {}

    def register(self, entity_key: str, handler: Callable[[str], Any]) -> None:
        """
        Register the command handler for an entity.

        Args:
            entity_key: Entity key (e.g., 'siren')
            handler: Callable receiving the raw payload string
        """
        self._handlers[entity_key] = handler

    def handles(self, entity_key: str) -> bool:
        return entity_key in self._handlers

    async def dispatch(self, entity_key: str, action_suffix: str, payload: str) -> Any:
        """
        Invoke the handler for an entity command.

        Unknown topics are logged and absorbed, never raised.

        Args:
            entity_key: Entity key parsed from the topic
            action_suffix: Last topic level (must be 'command')
            payload: Raw payload string

        Returns:
            Handler result, or None for an unknown command topic
        """
        handler = self._handlers.get(entity_key)
        if handler is None or action_suffix != COMMAND_SUFFIX:
            self.logger.debug(
                f"Received message to unknown command topic: {entity_key}/{action_suffix}"
            )
            return None

        result = handler(payload)
        if inspect.isawaitable(result):
            result = await result
        return result
