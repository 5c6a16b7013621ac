"""
Arm/disarm command confirmation.

The backend is eventually consistent and may silently ignore an arm or
disarm request (e.g., an open sensor with bypass disabled). The only
reliable confirmation is polling the panel's observed mode, so each command
runs as a bounded state machine:

    ATTEMPTING(1) -> ... -> ATTEMPTING(n) -> CONFIRMED | EXHAUSTED

Unrecognized tokens are REJECTED before any attempt is made.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ring_alarm.alarm import MODE_NONE, target_mode_for

MAX_ATTEMPTS = 5
CHECK_DELAY_SECONDS = 1.0
RETRY_DELAY_SECONDS = 10.0


class ConfirmationState(Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    CONFIRMED = "confirmed"
    EXHAUSTED = "exhausted"
    REJECTED = "rejected"


class ConfirmationOutcome(Enum):
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    UNKNOWN_TOKEN = "unknown-token"


class AlarmSession:
    """Transient state of one arm/disarm command."""

    def __init__(self, token: str):
        self.token = token.strip().lower()
        self.target_mode: Optional[str] = target_mode_for(self.token)
        self.attempt = 0
        self.bypass_ids: List[str] = []
        self.state = ConfirmationState.PENDING
        self.outcome: Optional[ConfirmationOutcome] = None
        # Task running the loop, set by the owner
        self.task = None

    @property
    def is_arming(self) -> bool:
        return self.target_mode is not None and self.target_mode != MODE_NONE

    @property
    def resolved(self) -> bool:
        return self.outcome is not None

    def __repr__(self) -> str:
        return (
            f"AlarmSession(token='{self.token}', attempt={self.attempt}, "
            f"state={self.state.value})"
        )


class ArmConfirmationLoop:
    """Issues an arm/disarm command and polls until confirmed or exhausted."""

    def __init__(
        self,
        session: AlarmSession,
        issue_command: Callable[[str, List[str]], None],
        read_mode: Callable[[], Optional[str]],
        bypass_enabled: Callable[[], bool],
        find_bypass_ids: Callable[[], Awaitable[List[str]]],
        sleep: Callable[[float], Awaitable[None]],
        logger: Optional[logging.Logger] = None,
        max_attempts: int = MAX_ATTEMPTS,
        check_delay: float = CHECK_DELAY_SECONDS,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ):
        """
        Initialize loop.

        Args:
            session: Session for this command
            issue_command: Fires the remote command (token, bypass ids);
                must not wait for the remote result
            read_mode: Returns the panel's currently observed mode
            bypass_enabled: Returns the local bypass switch position
            find_bypass_ids: Queries faulted bypassable sensor ids
            sleep: Async sleep function
            logger: Optional logger
            max_attempts: Attempts before giving up
            check_delay: Seconds between command and mode check
            retry_delay: Seconds between a failed attempt and the next one
        """
        self.session = session
        self._issue_command = issue_command
        self._read_mode = read_mode
        self._bypass_enabled = bypass_enabled
        self._find_bypass_ids = find_bypass_ids
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.max_attempts = max_attempts
        self.check_delay = check_delay
        self.retry_delay = retry_delay

    async def run(self) -> ConfirmationOutcome:
        """
        Drive the session to a terminal outcome.

        Returns:
            ConfirmationOutcome
        """
        session = self.session
        if session.target_mode is None:
            self.logger.warning(f"Unknown alarm arming mode requested: {session.token}")
            return self._finish(ConfirmationState.REJECTED, ConfirmationOutcome.UNKNOWN_TOKEN)

        while True:
            session.attempt += 1
            session.state = ConfirmationState.ATTEMPTING

            # Sensor faults can change between attempts, so recompute each time
            session.bypass_ids = []
            try:
                if session.is_arming and self._bypass_enabled():
                    session.bypass_ids = await self._find_bypass_ids()
            except Exception as e:
                # Counts as a failed attempt; no command without the bypass list
                self.logger.error(f"Failed to look up sensors to bypass: {e}", exc_info=True)
            else:
                self.logger.debug(
                    f"Set alarm mode: {session.token} "
                    f"(attempt {session.attempt}/{self.max_attempts})"
                )
                self._issue_command(session.token, session.bypass_ids)

                await self._sleep(self.check_delay)
                if self._read_mode() == session.target_mode:
                    self.logger.info(f"Alarm successfully entered {session.token} mode")
                    return self._finish(
                        ConfirmationState.CONFIRMED, ConfirmationOutcome.SUCCESS
                    )

                self.logger.debug("Alarm failed to enter requested arm/disarm mode")

            if session.attempt >= self.max_attempts:
                self.logger.error(
                    f"Alarm could not enter {session.token} mode after "
                    f"{session.attempt} attempts, giving up"
                )
                return self._finish(
                    ConfirmationState.EXHAUSTED, ConfirmationOutcome.EXHAUSTED
                )

            await self._sleep(self.retry_delay)

    def _finish(
        self, state: ConfirmationState, outcome: ConfirmationOutcome
    ) -> ConfirmationOutcome:
        self.session.state = state
        self.session.outcome = outcome
        return outcome
