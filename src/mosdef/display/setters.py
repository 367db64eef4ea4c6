"""
Display settings writers for the supported backends.

Each setter applies an orientation (and optionally a resolution) to one
output and reports a DisplayChangeResult code instead of raising, so a
batch can continue past a rejected monitor.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional

from ..exceptions import ConfigError, DisplayCommandError
from ..monitor_detection import Orientation


class DisplayChangeResult(IntEnum):
    """Result codes of a display settings change."""
    SUCCESSFUL = 0
    RESTART = 1
    FAILED = -1
    BADMODE = -2
    NOTUPDATED = -3
    BADFLAGS = -4
    BADPARAM = -5
    BADDUALVIEW = -6

    @classmethod
    def describe(cls, code: int) -> str:
        """Human-readable description of a result code."""
        try:
            return _DESCRIPTIONS[cls(code)]
        except ValueError:
            return "Unknown error occurred."


_DESCRIPTIONS: Dict[DisplayChangeResult, str] = {
    DisplayChangeResult.SUCCESSFUL: "The settings change was successful.",
    DisplayChangeResult.RESTART: "The display server must be restarted for the graphics mode to work.",
    DisplayChangeResult.FAILED: "The display driver failed the specified graphics mode.",
    DisplayChangeResult.BADMODE: "The graphics mode is not supported.",
    DisplayChangeResult.NOTUPDATED: "Unable to write settings to the persist file.",
    DisplayChangeResult.BADFLAGS: "An invalid set of flags was passed in.",
    DisplayChangeResult.BADPARAM: "An invalid parameter was passed in.",
    DisplayChangeResult.BADDUALVIEW: "The settings change was unsuccessful because the outputs are mirrored.",
}


class DisplaySetter(ABC):
    """Abstract base class for display settings writers."""

    def __init__(self, persist_file: Optional[Path] = None, timeout: int = 10) -> None:
        self.persist_file = persist_file
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def apply(
        self,
        device_path: str,
        orientation: Orientation,
        width: Optional[int] = None,
        height: Optional[int] = None,
        persist: bool = False,
    ) -> int:
        """
        Apply orientation and optional resolution to one output.

        Args:
            device_path: Backend output name (e.g., "HDMI-1")
            orientation: Target orientation
            width: Target width as displayed (already swapped for portrait)
            height: Target height as displayed
            persist: Also record the change in the persist file

        Returns:
            DisplayChangeResult code (0 on success)
        """
        try:
            orientation = Orientation(orientation)
        except ValueError:
            self.logger.error(f"Unsupported orientation for {device_path}: {orientation}")
            return DisplayChangeResult.BADPARAM

        if (width is None) != (height is None):
            self.logger.error(f"Width and height must be given together for {device_path}")
            return DisplayChangeResult.BADPARAM

        mode = None
        if width is not None and height is not None:
            # Backends take the unrotated mode
            mode = f"{height}x{width}" if orientation.is_portrait else f"{width}x{height}"

        try:
            self._run_command(self.build_command(device_path, orientation, mode))
        except DisplayCommandError as e:
            self.logger.error(str(e))
            return e.error_code

        if persist:
            if self.persist_file is None:
                self.logger.debug(f"No persist file configured, change to {device_path} is session-only")
            else:
                try:
                    self._persist_line(device_path, self.persist_line(device_path, orientation, mode))
                except OSError as e:
                    self.logger.error(f"Failed to persist settings for {device_path} to {self.persist_file}: {e}")
                    return DisplayChangeResult.NOTUPDATED

        return DisplayChangeResult.SUCCESSFUL

    @abstractmethod
    def build_command(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> List[str]:
        """Command line that applies the settings."""
        pass

    @abstractmethod
    def persist_line(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> str:
        """Line recorded in the persist file for this output."""
        pass

    def _persist_line(self, device_path: str, line: str) -> None:
        """Replace this output's line in the persist file, keeping the others."""
        path = self.persist_file
        lines: List[str] = []
        if path.exists():
            lines = path.read_text(encoding="utf-8").splitlines()

        marker = f"# mos-def: {device_path}"
        kept = []
        skip_next = False
        for existing in lines:
            if skip_next:
                skip_next = False
                continue
            if existing == marker:
                skip_next = True
                continue
            kept.append(existing)

        if not kept:
            kept = self.persist_header()
        kept.extend([marker, line])

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(kept) + "\n", encoding="utf-8")
        self.logger.debug(f"Persisted settings for {device_path} to {path}")

    def persist_header(self) -> List[str]:
        return []

    def _run_command(self, cmd: List[str]) -> None:
        """
        Run a command, raising DisplayCommandError on failure.

        Args:
            cmd: Command to run as list of strings

        Raises:
            DisplayCommandError: With the DisplayChangeResult code to report
        """
        cmd_str = ' '.join(cmd)  # For logging purposes

        try:
            self.logger.debug(f"Running command: {cmd_str}")
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise DisplayCommandError(
                f"Command timed out after {self.timeout}s: {cmd_str}",
                DisplayChangeResult.FAILED,
            ) from e
        except FileNotFoundError as e:
            raise DisplayCommandError(
                f"Command not found: {cmd[0]} - ensure {cmd[0]} is installed and in PATH",
                DisplayChangeResult.FAILED,
            ) from e
        except OSError as e:
            raise DisplayCommandError(
                f"OS error executing command {cmd_str}: {e}",
                DisplayChangeResult.FAILED,
            ) from e

        if result.returncode != 0:
            error_msg = f"Command failed with exit code {result.returncode}: {cmd_str}"
            if result.stderr:
                error_msg += f"\nStderr: {result.stderr.strip()}"
            elif result.stdout:
                error_msg += f"\nStdout: {result.stdout.strip()}"
            code = DisplayChangeResult.BADMODE if "mode" in (result.stderr or "").lower() else DisplayChangeResult.FAILED
            raise DisplayCommandError(error_msg, code)

        self.logger.debug(f"Command succeeded: {cmd_str}")


class XrandrSetter(DisplaySetter):
    """Display setter using xrandr (X11)."""

    ROTATIONS = {
        Orientation.LANDSCAPE: "normal",
        Orientation.PORTRAIT: "left",
        Orientation.LANDSCAPE_FLIPPED: "inverted",
        Orientation.PORTRAIT_FLIPPED: "right",
    }

    def build_command(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> List[str]:
        cmd = ["xrandr", "--output", device_path]
        if mode:
            cmd.extend(["--mode", mode])
        cmd.extend(["--rotate", self.ROTATIONS[orientation]])
        return cmd

    def persist_line(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> str:
        return " ".join(self.build_command(device_path, orientation, mode))

    def persist_header(self) -> List[str]:
        return ["#!/bin/sh"]

    def _persist_line(self, device_path: str, line: str) -> None:
        super()._persist_line(device_path, line)
        self.persist_file.chmod(0o755)


class SwaySetter(DisplaySetter):
    """Display setter using swaymsg (sway)."""

    TRANSFORMS = {
        Orientation.LANDSCAPE: "normal",
        Orientation.PORTRAIT: "90",
        Orientation.LANDSCAPE_FLIPPED: "180",
        Orientation.PORTRAIT_FLIPPED: "270",
    }

    def _output_args(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> List[str]:
        args = ["output", device_path]
        if mode:
            args.extend(["mode", mode])
        args.extend(["transform", self.TRANSFORMS[orientation]])
        return args

    def build_command(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> List[str]:
        return ["swaymsg"] + self._output_args(device_path, orientation, mode)

    def persist_line(self, device_path: str, orientation: Orientation, mode: Optional[str]) -> str:
        return " ".join(self._output_args(device_path, orientation, mode))


def get_setter(backend: str, persist_file: Optional[Path] = None, timeout: int = 10) -> DisplaySetter:
    """
    Get display setter for a backend.

    Args:
        backend: Resolved backend name ("xrandr" or "sway")
        persist_file: Optional file that records applied settings
        timeout: Command timeout in seconds

    Returns:
        DisplaySetter instance

    Raises:
        ConfigError: If the backend is unknown
    """
    setters = {
        "xrandr": XrandrSetter,
        "sway": SwaySetter,
    }

    if backend not in setters:
        raise ConfigError(
            f"Unknown display backend: {backend}. "
            f"Supported: {', '.join(setters.keys())}"
        )

    return setters[backend](persist_file=persist_file, timeout=timeout)
