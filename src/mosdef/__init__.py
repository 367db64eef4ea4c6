"""
MOS-DEF - Monitor Orientation Switcher.

Rotate one or more monitors between landscape and portrait, chosen by
flexible selectors, with a confirm-or-revert window that undoes a bad
rotation.
"""

__version__ = "1.0.0"

from .config import Config, SelectionStore, RunOptions
from .monitor_detection import (
    MonitorDetector,
    MonitorRecord,
    DisplaySettings,
    Orientation,
)
from .display import DisplaySetter, DisplayChangeResult, get_setter
from .selector import Selector, SelectorKind, parse_selector, parse_selector_list
from .rotation import RotationCommand, RotationOutcome, rotate_one
from .batch import BatchResult, rotate_filtered
from .rollback import RollbackEntry, RollbackManager
from .confirmation import ConfirmationController, Decision
