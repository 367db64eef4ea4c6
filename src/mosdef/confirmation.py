"""
Keep-or-revert window after a successful rotation.

Two modes:
- interactive: one key press, 'y' keeps, anything else reverts
- timed: countdown polled once per second, 'y' keeps, expiry reverts
"""

import logging
import os
import select
import sys
import time
from enum import Enum
from typing import Optional, TextIO

from .exceptions import RollbackError
from .rollback import RollbackManager, RollbackSnapshot

logger = logging.getLogger(__name__)


class Decision(Enum):
    AWAITING_DECISION = "awaiting"
    KEPT = "kept"
    REVERTED = "reverted"


class TerminalKeyReader:
    """Read single key presses from the controlling terminal."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdin
        self.closed = False

    def read_key(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Wait for one key.

        After end-of-file each call sleeps for its timeout and returns None.

        Args:
            timeout: Seconds to wait, None blocks

        Returns:
            The key, or None if the timeout expired or input is closed
        """
        if self.closed:
            return self._wait_closed(timeout)

        if not self.stream.isatty():
            return self._read_line(timeout)

        import termios
        import tty

        started = time.monotonic()
        fd = self.stream.fileno()
        old_attrs = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            ready, _, _ = select.select([fd], [], [], timeout)
            if not ready:
                return None
            data = os.read(fd, 1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_attrs)

        if not data:
            return self._mark_closed(timeout, started)
        return data.decode(errors="replace")

    def _read_line(self, timeout: Optional[float]) -> Optional[str]:
        started = time.monotonic()
        if timeout is not None:
            ready, _, _ = select.select([self.stream], [], [], timeout)
            if not ready:
                return None
        line = self.stream.readline()
        if not line:
            return self._mark_closed(timeout, started)
        return line[:1]

    def _mark_closed(self, timeout: Optional[float], started: float) -> None:
        logger.debug("Key input closed")
        self.closed = True
        if timeout is not None:
            time.sleep(max(0.0, timeout - (time.monotonic() - started)))
        return None

    def _wait_closed(self, timeout: Optional[float]) -> None:
        if timeout is not None:
            time.sleep(timeout)
        return None


class ConfirmationController:
    """
    Ask the user to keep a rotation, reverting through the rollback manager otherwise.
    """

    def __init__(
        self,
        rollback: RollbackManager,
        key_reader: Optional[TerminalKeyReader] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self.rollback = rollback
        self.key_reader = key_reader or TerminalKeyReader()
        self.out = out or sys.stdout
        self.state = Decision.AWAITING_DECISION

    def confirm(self, snapshot: Optional[RollbackSnapshot], message: str) -> Decision:
        """Block on a single key press."""
        self._write(message)
        key = self.key_reader.read_key()
        self._write("\n")

        if key is not None and key.lower() == "y":
            return self._finish(Decision.KEPT)

        logger.info("Changes not confirmed")
        self._revert(snapshot)
        return self._finish(Decision.REVERTED)

    def countdown(self, seconds: int, snapshot: Optional[RollbackSnapshot]) -> Decision:
        """
        Count down, reverting unless 'y' is pressed first.

        Raises:
            RollbackError: If no snapshot was captured before the change
        """
        if not snapshot:
            raise RollbackError("No rollback snapshot was captured before the change")

        for remaining in range(seconds, 0, -1):
            self._write(f"\rChanges will revert in {remaining} seconds unless confirmed. Press 'y' to keep: ")
            key = self.key_reader.read_key(timeout=1.0)
            if key is None:
                continue
            if key.lower() == "y":
                self._write("\n")
                return self._finish(Decision.KEPT)
            logger.debug(f"Ignoring key {key!r} during countdown")

        self._write("\nTime expired, reverting changes...\n")
        self._revert(snapshot)
        return self._finish(Decision.REVERTED)

    def _revert(self, snapshot: Optional[RollbackSnapshot]) -> None:
        if not snapshot:
            logger.warning("Nothing to revert: no rollback snapshot was captured")
            return
        self._write("Reverting changes...\n")
        if not self.rollback.restore(snapshot, dry_run=False):
            logger.error("Rollback did not complete for every monitor")

    def _finish(self, decision: Decision) -> Decision:
        self.state = decision
        return decision

    def _write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()
