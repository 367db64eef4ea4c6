"""
Configuration dataclasses for MOS-DEF.
"""

from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass


@dataclass
class DisplayConfig:
    """Display backend settings."""
    backend: str = "auto"  # auto, xrandr or sway
    persist_file: Optional[str] = None  # Records applied settings; None = session-only
    command_timeout: int = 10

    def get_persist_path(self) -> Optional[Path]:
        """Get absolute persist file path, if configured."""
        if not self.persist_file:
            return None
        return Path(self.persist_file).expanduser()


@dataclass
class RotationConfig:
    """Defaults for rotation commands."""
    revert_seconds: int = 0  # 0 = interactive confirm instead of a countdown
    confirm: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    verbose: bool = False


@dataclass(frozen=True)
class RunOptions:
    """
    Options for one invocation.

    Built once from the command line and config, then passed to every
    component that needs it.
    """
    dry_run: bool = False
    no_confirm: bool = False
    revert_seconds: int = 0
    verbose: bool = False
    force_remote: bool = False

    @classmethod
    def from_args(cls, args: Any, rotation: RotationConfig, logging_config: Optional[LoggingConfig] = None) -> 'RunOptions':
        """
        Merge parsed arguments over config defaults.

        Command-line flags win; --no-confirm or `confirm = false` both
        suppress the confirmation window.
        """
        revert_seconds = getattr(args, "revert_seconds", None)
        if revert_seconds is None:
            revert_seconds = rotation.revert_seconds

        verbose = bool(getattr(args, "verbose", False))
        if logging_config is not None:
            verbose = verbose or logging_config.verbose

        return cls(
            dry_run=bool(getattr(args, "dry_run", False)),
            no_confirm=bool(getattr(args, "no_confirm", False)) or not rotation.confirm,
            revert_seconds=revert_seconds,
            verbose=verbose,
            force_remote=bool(getattr(args, "force_remote", False)),
        )
