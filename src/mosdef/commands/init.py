"""Initialization, validation and saved-selector commands."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from ..config import Config, SelectionStore
from ..exceptions import MonitorDetectionError, StateError
from ..monitor_detection import MonitorDetector
from ..selector import parse_selector_list

BACKEND_BINARIES = {
    "xrandr": "xrandr",
    "sway": "swaymsg",
}


def init_config(config_file: Optional[Path] = None) -> None:
    """Write a default config.toml unless one exists."""
    config_file = config_file or Config.get_config_file()

    if Config.initialize_config(config_file):
        print(f"Configuration initialized at {config_file}")
    else:
        print(f"Configuration already exists at {config_file}")


def validate_config(config: Config, detector: Optional[MonitorDetector] = None) -> int:
    """
    Check configuration and display backend availability.

    Returns:
        0 if everything checked out, 69 if the backend is unusable
    """
    logger = logging.getLogger(__name__)
    errors = []
    warnings = []

    print("Validating configuration...")
    print(f"  ✓ Config loaded (backend = {config.display.backend})")

    persist_path = config.display.get_persist_path()
    if persist_path:
        if persist_path.parent.exists():
            print(f"  ✓ Persist file: {persist_path}")
        else:
            warnings.append(f"Persist file directory does not exist: {persist_path.parent}")
            print(f"  ⚠ Persist file directory does not exist: {persist_path.parent}")
    else:
        print("  ✓ Persist file: none (changes are session-only)")

    print("\nChecking display backend...")
    detector = detector or MonitorDetector(config.display.backend, timeout=config.display.command_timeout)
    try:
        backend = detector.backend
        binary = BACKEND_BINARIES[backend]
        if shutil.which(binary):
            print(f"  ✓ {backend} backend ({binary} found)")
        else:
            errors.append(f"{binary} not found in PATH")
            print(f"  ✗ {binary} not found in PATH")
    except MonitorDetectionError as e:
        errors.append(f"Backend detection failed: {e}")
        print(f"  ✗ Backend detection failed: {e}")

    if not errors:
        print("\nChecking monitors...")
        try:
            monitors = detector.list_active_monitors()
            print(f"  ✓ {len(monitors)} active monitor(s)")
        except MonitorDetectionError as e:
            errors.append(f"Monitor enumeration failed: {e}")
            print(f"  ✗ Monitor enumeration failed: {e}")

    print("\nValidation complete")
    print(f"Errors: {len(errors)}")
    print(f"Warnings: {len(warnings)}")

    if errors:
        logger.debug(f"Validation errors: {errors}")
        print(f"\nConfiguration validation FAILED with {len(errors)} errors")
        return 69

    print("\nConfiguration validation PASSED")
    return 0


def save_default(store: SelectionStore, selector: str) -> int:
    """
    Save a default selector list.

    Raises:
        SelectorParseError: If the selector list is malformed
    """
    logger = logging.getLogger(__name__)
    parse_selector_list(selector)

    try:
        store.save_default_selector(selector)
    except StateError as e:
        logger.error(f"Failed to save default selector: {e}")
        return 3

    print(f"Saved default selector: {selector}")
    return 0


def clear_default(store: SelectionStore) -> int:
    """Remove the saved default selector."""
    logger = logging.getLogger(__name__)

    try:
        store.clear_default_selector()
    except StateError as e:
        logger.error(f"Failed to clear default selector: {e}")
        return 3

    print("Cleared default selector")
    return 0
