"""
Rotation rules and single-monitor rotation.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .display.setters import DisplayChangeResult, DisplaySetter
from .monitor_detection import MonitorDetector, MonitorRecord, Orientation

logger = logging.getLogger(__name__)


class RotationCommand(Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    TOGGLE = "toggle"


@dataclass(frozen=True)
class RotationOutcome:
    """Result of one rotation attempt (or filtered-out no-op)."""
    monitor_id: str
    succeeded: bool
    error_code: int
    previous_orientation: Orientation
    new_orientation: Orientation
    processed: bool = True

    @property
    def changed(self) -> bool:
        return self.processed and self.succeeded


def target_orientation(current: Orientation, command: RotationCommand) -> Orientation:
    """
    Orientation a command rotates to.

    landscape -> 0°, portrait -> 90°, toggle -> 90° from 0°, otherwise 0°.
    """
    if command is RotationCommand.LANDSCAPE:
        return Orientation.LANDSCAPE
    if command is RotationCommand.PORTRAIT:
        return Orientation.PORTRAIT
    if command is RotationCommand.TOGGLE:
        return Orientation.PORTRAIT if current == Orientation.LANDSCAPE else Orientation.LANDSCAPE
    return Orientation(current)


def must_swap_dimensions(from_orientation: Orientation, to_orientation: Orientation) -> bool:
    """True when rotating across the landscape/portrait axis."""
    return Orientation(from_orientation).is_portrait != Orientation(to_orientation).is_portrait


def rotate_one(
    monitor: MonitorRecord,
    command: RotationCommand,
    reader: MonitorDetector,
    writer: DisplaySetter,
    dry_run: bool = False,
) -> RotationOutcome:
    """
    Rotate a single monitor.

    Current settings are re-read from the backend right before the change;
    the inventory values may be stale. Display API failures are returned
    in the outcome, never raised.
    """
    current = reader.read_current_settings(monitor.device_path)
    if current is None:
        logger.error(f"Failed to get current display settings for {monitor.id} ({monitor.device_path})")
        return RotationOutcome(
            monitor_id=monitor.id,
            succeeded=False,
            error_code=DisplayChangeResult.BADMODE,
            previous_orientation=monitor.orientation,
            new_orientation=monitor.orientation,
        )

    new_orientation = target_orientation(current.orientation, command)
    width, height = current.width, current.height

    logger.debug(
        f"Rotating monitor {monitor.id} ({monitor.device_path}) from "
        f"{current.orientation.label} to {new_orientation.label}"
    )

    if must_swap_dimensions(current.orientation, new_orientation):
        width, height = height, width
        logger.debug(f"Swapping dimensions: {current.width}x{current.height} -> {width}x{height}")

    if dry_run:
        print(f"[DRY RUN] Would rotate {monitor.id} from {current.orientation.label} to {new_orientation.label}")
        return RotationOutcome(
            monitor_id=monitor.id,
            succeeded=True,
            error_code=DisplayChangeResult.SUCCESSFUL,
            previous_orientation=current.orientation,
            new_orientation=new_orientation,
        )

    code = int(writer.apply(monitor.device_path, new_orientation, width, height, persist=True))
    succeeded = code == DisplayChangeResult.SUCCESSFUL

    if succeeded:
        logger.debug(f"Successfully rotated monitor {monitor.id}")
    else:
        logger.error(
            f"Failed to rotate monitor {monitor.id}: error code {code}. "
            f"{DisplayChangeResult.describe(code)}"
        )

    return RotationOutcome(
        monitor_id=monitor.id,
        succeeded=succeeded,
        error_code=code,
        previous_orientation=current.orientation,
        new_orientation=new_orientation,
    )
