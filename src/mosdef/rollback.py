"""
Snapshot and restore of display settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .display.setters import DisplayChangeResult, DisplaySetter
from .monitor_detection import MonitorDetector, MonitorRecord, Orientation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollbackEntry:
    """Pre-change settings of one output."""
    device_path: str
    original_orientation: Orientation
    original_width: int
    original_height: int


RollbackSnapshot = Tuple[RollbackEntry, ...]


class RollbackManager:
    """
    Capture settings before a batch and put them back on request.

    Restore is best-effort: every entry is attempted and failures are
    logged, not raised.
    """

    def __init__(self, reader: MonitorDetector, writer: DisplaySetter) -> None:
        self.reader = reader
        self.writer = writer

    def snapshot(self, monitors: Sequence[MonitorRecord]) -> Optional[RollbackSnapshot]:
        """
        Read live settings for each monitor.

        Monitors whose settings cannot be read are skipped.

        Returns:
            Snapshot entries in inventory order, or None if nothing was captured
        """
        entries = []
        for monitor in monitors:
            current = self.reader.read_current_settings(monitor.device_path)
            if current is None:
                logger.debug(f"Failed to get current settings for rollback: {monitor.device_path}")
                continue
            entries.append(RollbackEntry(
                device_path=monitor.device_path,
                original_orientation=current.orientation,
                original_width=current.width,
                original_height=current.height,
            ))

        if not entries:
            return None

        logger.debug(f"Captured rollback snapshot for {len(entries)} monitor(s)")
        return tuple(entries)

    def restore(self, snapshot: Optional[RollbackSnapshot], dry_run: bool = False) -> bool:
        """
        Restore captured orientation and resolution.

        Returns:
            True only if every entry was restored
        """
        if not snapshot:
            return True

        all_successful = True
        for entry in snapshot:
            current = self.reader.read_current_settings(entry.device_path)
            if current is None:
                logger.error(f"Failed to get current settings for rollback of {entry.device_path}")
                all_successful = False
                continue

            logger.debug(
                f"Rolling back {entry.device_path} from {current.orientation.label} "
                f"to {entry.original_orientation.label}"
            )

            if dry_run:
                print(f"[DRY RUN] Would rollback {entry.device_path} to {entry.original_orientation.label}")
                continue

            code = int(self.writer.apply(
                entry.device_path,
                entry.original_orientation,
                entry.original_width,
                entry.original_height,
                persist=True,
            ))

            if code != DisplayChangeResult.SUCCESSFUL:
                logger.error(
                    f"Failed to rollback monitor {entry.device_path}: error {code}. "
                    f"{DisplayChangeResult.describe(code)}"
                )
                all_successful = False
            else:
                logger.debug(f"Successfully rolled back monitor {entry.device_path}")

        return all_successful
