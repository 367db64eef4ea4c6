"""
Batch rotation across the monitor inventory.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .display.setters import DisplayChangeResult, DisplaySetter
from .monitor_detection import MonitorDetector, MonitorRecord
from .rotation import RotationCommand, RotationOutcome, rotate_one
from .selector import SelectorSet, should_process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """
    Aggregate of one batch.

    outcomes has one entry per inventory monitor, in inventory order;
    filtered-out monitors appear as successful no-ops with processed=False.
    """
    success_count: int
    failure_count: int
    outcomes: Tuple[RotationOutcome, ...]

    @property
    def processed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.processed)

    @property
    def changed(self) -> Tuple[RotationOutcome, ...]:
        return tuple(o for o in self.outcomes if o.changed)

    @property
    def failed(self) -> Tuple[RotationOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.succeeded)


def rotate_filtered(
    monitors: Sequence[MonitorRecord],
    command: RotationCommand,
    reader: MonitorDetector,
    writer: DisplaySetter,
    include: Optional[SelectorSet] = None,
    exclude: Optional[SelectorSet] = None,
    dry_run: bool = False,
) -> BatchResult:
    """
    Rotate every monitor that survives include/exclude filtering.

    Monitors are processed one at a time in inventory order. A failure on
    one monitor is recorded and the rest are still attempted.
    """
    outcomes = []
    success_count = 0
    failure_count = 0

    for monitor in monitors:
        if not should_process(monitor, include, exclude):
            logger.debug(f"Skipping {monitor.id}: filtered out by selectors")
            outcomes.append(RotationOutcome(
                monitor_id=monitor.id,
                succeeded=True,
                error_code=DisplayChangeResult.SUCCESSFUL,
                previous_orientation=monitor.orientation,
                new_orientation=monitor.orientation,
                processed=False,
            ))
            continue

        outcome = rotate_one(monitor, command, reader, writer, dry_run=dry_run)
        outcomes.append(outcome)
        if outcome.succeeded:
            success_count += 1
        else:
            failure_count += 1

    logger.info(f"Batch {command.value}: {success_count} succeeded, {failure_count} failed")
    return BatchResult(
        success_count=success_count,
        failure_count=failure_count,
        outcomes=tuple(outcomes),
    )
