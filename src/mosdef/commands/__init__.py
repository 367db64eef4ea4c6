"""CLI commands module."""

from .listing import list_monitors
from .rotate import rotate, check_remote_session
from .init import init_config, validate_config, save_default, clear_default

__all__ = [
    "list_monitors",
    "rotate",
    "check_remote_session",
    "init_config",
    "validate_config",
    "save_default",
    "clear_default",
]
