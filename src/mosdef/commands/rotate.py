"""Rotation commands: landscape, portrait, toggle."""

import logging
import os
from typing import Mapping, Optional

from ..config import RunOptions, SelectionStore
from ..confirmation import ConfirmationController, Decision, TerminalKeyReader
from ..display import DisplaySetter
from ..exceptions import NoMatchError, RemoteSessionError, RollbackError, StateError
from ..monitor_detection import MonitorDetector
from ..rollback import RollbackManager
from ..rotation import RotationCommand
from ..batch import BatchResult, rotate_filtered
from ..selector import parse_selector, parse_selector_list, resolve_include, select, suggest_selectors

logger = logging.getLogger(__name__)

REMOTE_SESSION_VARS = ("SSH_CONNECTION", "SSH_TTY")


def check_remote_session(options: RunOptions, environ: Optional[Mapping[str, str]] = None) -> None:
    """
    Refuse to rotate from a remote shell unless forced.

    Raises:
        RemoteSessionError: If a remote session is detected and not forced
    """
    environ = os.environ if environ is None else environ
    remote = [name for name in REMOTE_SESSION_VARS if environ.get(name)]
    if not remote:
        return
    if options.force_remote:
        logger.warning(f"Remote session detected ({', '.join(remote)}), continuing because of --force-remote")
        return
    raise RemoteSessionError(
        f"Remote session detected ({', '.join(remote)}). "
        "A bad rotation may leave the display unusable; pass --force-remote to proceed anyway."
    )


def _print_summary(command: RotationCommand, result: BatchResult) -> None:
    for outcome in result.outcomes:
        if not outcome.processed:
            continue
        if outcome.succeeded:
            print(f"  ✓ {outcome.monitor_id}: {outcome.previous_orientation.label} → {outcome.new_orientation.label}")
        else:
            print(f"  ✗ {outcome.monitor_id}: rotation failed (code {outcome.error_code})")
    print(f"{command.value}: {result.success_count} succeeded, {result.failure_count} failed")


def rotate(
    command: RotationCommand,
    options: RunOptions,
    detector: MonitorDetector,
    setter: DisplaySetter,
    store: SelectionStore,
    only: Optional[str] = None,
    include: Optional[str] = None,
    exclude: Optional[str] = None,
    key_reader: Optional[TerminalKeyReader] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Rotate the selected monitors and run the keep-or-revert window.

    Args:
        command: Rotation to apply
        options: Run options for this invocation
        detector: Monitor inventory and live settings reader
        setter: Display settings writer
        store: Saved default selector and last action
        only: Single selector, overrides everything else
        include: Comma-separated selector list
        exclude: Comma-separated selector list, always wins over include
        key_reader: Key source for the confirmation window
        environ: Environment used for the remote session check

    Returns:
        0 if every selected monitor was rotated, 3 if any failed

    Raises:
        RemoteSessionError: Remote session without --force-remote
        SelectorParseError: A selector could not be parsed
        NoMatchError: No monitor survived filtering
        MonitorDetectionError: Monitors could not be enumerated
        StateError: The state file is malformed
    """
    check_remote_session(options, environ)

    only_selector = parse_selector(only) if only is not None else None
    include_set = parse_selector_list(include) if include is not None else None
    exclude_set = parse_selector_list(exclude) if exclude is not None else None

    monitors = detector.list_active_monitors()

    default_selector = None
    if only_selector is None and not include_set:
        default_selector = store.load_default_selector()
    include_set = resolve_include(only_selector, include_set, default_selector)

    targets = select(monitors, include_set, exclude_set)
    if not targets:
        attempted = [text for text in (only, include, exclude) if text is not None]
        if default_selector is not None:
            attempted.append(default_selector)
        raise NoMatchError(
            "No monitors match the specified selectors",
            suggestions=suggest_selectors(monitors, attempted),
        )
    logger.info(f"Selected {len(targets)} of {len(monitors)} monitor(s): {', '.join(m.id for m in targets)}")

    rollback = RollbackManager(detector, setter)
    confirm_window = not options.dry_run and not options.no_confirm

    snapshot = None
    if confirm_window:
        snapshot = rollback.snapshot(targets)

    result = rotate_filtered(
        monitors, command, detector, setter,
        include=include_set, exclude=exclude_set, dry_run=options.dry_run,
    )

    if not options.dry_run:
        _print_summary(command, result)

    if confirm_window and result.success_count > 0:
        controller = ConfirmationController(rollback, key_reader)
        if options.revert_seconds > 0:
            try:
                controller.countdown(options.revert_seconds, snapshot)
            except RollbackError as e:
                logger.error(f"Failed to start revert timer: {e}")
        else:
            message = (
                f"Applied {command.value} rotation to {result.success_count} monitor(s). "
                "Keep changes? (y/N): "
            )
            controller.confirm(snapshot, message)
        if controller.state is Decision.REVERTED:
            print("Changes reverted")

    if result.success_count > 0 and not options.dry_run:
        try:
            store.save_last_action(command.value)
        except StateError as e:
            logger.warning(f"Could not record last action: {e}")

    if result.failure_count > 0:
        return 3
    if result.success_count == 0:
        return 2
    return 0
