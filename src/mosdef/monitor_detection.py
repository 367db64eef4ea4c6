"""
Monitor enumeration and live display settings.

Enumerates active monitors through the display backend (xrandr on X11,
swaymsg on sway) and reads the current orientation/resolution of a single
output. The inventory is used to discover and identify monitors; values
that are about to be changed are always re-read with
read_current_settings().
"""

import json
import logging
import os
import re
import subprocess
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional

from .exceptions import (
    ConfigError,
    BackendNotFoundError,
    BackendCommunicationError,
    MonitorDetectionError,
    NoMonitorsDetectedError,
)

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("xrandr", "sway")


class Orientation(IntEnum):
    """Display rotation in degrees."""
    LANDSCAPE = 0
    PORTRAIT = 90
    LANDSCAPE_FLIPPED = 180
    PORTRAIT_FLIPPED = 270

    @property
    def is_portrait(self) -> bool:
        return self in (Orientation.PORTRAIT, Orientation.PORTRAIT_FLIPPED)

    @property
    def label(self) -> str:
        return f"{self.value}°"


# xrandr rotation names, counter-clockwise
XRANDR_ROTATIONS: Dict[str, Orientation] = {
    "normal": Orientation.LANDSCAPE,
    "left": Orientation.PORTRAIT,
    "inverted": Orientation.LANDSCAPE_FLIPPED,
    "right": Orientation.PORTRAIT_FLIPPED,
}

SWAY_TRANSFORMS: Dict[str, Orientation] = {
    "normal": Orientation.LANDSCAPE,
    "90": Orientation.PORTRAIT,
    "180": Orientation.LANDSCAPE_FLIPPED,
    "270": Orientation.PORTRAIT_FLIPPED,
    "flipped": Orientation.LANDSCAPE,
    "flipped-90": Orientation.PORTRAIT,
    "flipped-180": Orientation.LANDSCAPE_FLIPPED,
    "flipped-270": Orientation.PORTRAIT_FLIPPED,
}


@dataclass(frozen=True)
class DisplaySettings:
    """Live settings of one output."""
    orientation: Orientation
    width: int
    height: int

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class MonitorRecord:
    """Active monitor as seen at enumeration time."""
    id: str  # "M1", "M2", ... in enumeration order
    device_path: str  # Backend output name (e.g., "HDMI-1"), unique
    device_name: str  # Monitor model, falls back to the output name
    width: int
    height: int
    orientation: Orientation

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    def __repr__(self) -> str:
        return f"MonitorRecord({self.id}, {self.device_path}, {self.resolution}, {self.orientation.label})"


# Headline: "DP-1 connected primary 1080x1920+1920+0 left (normal left inverted right ...) 527mm x 296mm"
_XRANDR_HEADLINE = re.compile(
    r'^(?P<name>\S+) (?P<state>connected|disconnected|unknown connection)'
    r'(?: primary)?'
    r'(?: (?P<width>\d+)x(?P<height>\d+)\+-?\d+\+-?\d+)?'
    r'(?: (?P<rotation>normal|left|inverted|right))?'
)
_HEX_LINE = re.compile(r'^[0-9a-fA-F]+$')


def decode_edid_name(edid_hex: str) -> Optional[str]:
    """
    Extract the monitor name from an EDID blob.

    The name lives in one of the four 18-byte display descriptors of the
    base block, tagged 0xFC.
    """
    try:
        edid = bytes.fromhex(edid_hex)
    except ValueError:
        return None
    if len(edid) < 128:
        return None

    for offset in (54, 72, 90, 108):
        block = edid[offset:offset + 18]
        if block[0:3] == b"\x00\x00\x00" and block[3] == 0xFC:
            name = block[5:18].split(b"\n")[0].decode("ascii", errors="replace").strip()
            return name or None
    return None


def _assign_ids(outputs: List[dict]) -> List[MonitorRecord]:
    return [
        MonitorRecord(
            id=f"M{index}",
            device_path=output["device_path"],
            device_name=output["device_name"],
            width=output["width"],
            height=output["height"],
            orientation=output["orientation"],
        )
        for index, output in enumerate(outputs, start=1)
    ]


def parse_xrandr_output(output: str) -> List[MonitorRecord]:
    """
    Parse `xrandr --query --prop` output.

    Disconnected outputs, connected outputs without a current mode and
    VIRTUAL pseudo-outputs are skipped. The geometry xrandr reports is
    already rotated.
    """
    outputs: List[dict] = []
    current: Optional[dict] = None
    edid_lines: Optional[List[str]] = None

    def finish() -> None:
        if current is None:
            return
        if current.pop("edid", None):
            current["device_name"] = decode_edid_name(current["edid_hex"]) or current["device_path"]
        current.pop("edid_hex", None)
        outputs.append(current)

    for line in output.splitlines():
        if not line.strip() or line.startswith("Screen "):
            continue

        if not line[0].isspace():
            finish()
            current = None
            edid_lines = None

            match = _XRANDR_HEADLINE.match(line)
            if not match:
                continue
            name = match.group("name")
            if match.group("state") == "disconnected" or match.group("width") is None:
                logger.debug(f"Skipping inactive output {name}")
                continue
            if name.upper().startswith("VIRTUAL"):
                logger.debug(f"Skipping pseudo-output {name}")
                continue

            current = {
                "device_path": name,
                "device_name": name,
                "width": int(match.group("width")),
                "height": int(match.group("height")),
                "orientation": XRANDR_ROTATIONS[match.group("rotation") or "normal"],
            }
            continue

        if current is None:
            continue

        stripped = line.strip()
        if stripped == "EDID:":
            edid_lines = []
            current["edid"] = True
            current["edid_hex"] = ""
        elif edid_lines is not None and _HEX_LINE.match(stripped):
            edid_lines.append(stripped)
            current["edid_hex"] = "".join(edid_lines)
        else:
            edid_lines = None

    finish()
    return _assign_ids(outputs)


def parse_sway_output(output: str) -> List[MonitorRecord]:
    """
    Parse `swaymsg -t get_outputs -r` JSON.

    Example output:
    [
      {
        "name": "DP-1",
        "make": "Dell Inc.",
        "model": "DELL U2720Q",
        "active": true,
        "transform": "90",
        "current_mode": {"width": 3840, "height": 2160, "refresh": 59997}
      }
    ]
    """
    try:
        outputs_data = json.loads(output)
    except json.JSONDecodeError as e:
        raise BackendCommunicationError(
            f"Failed to parse sway JSON output: {e}\n"
            "swaymsg returned invalid JSON. This may indicate a version mismatch."
        ) from e

    outputs: List[dict] = []
    for output_info in outputs_data:
        name = output_info.get("name")
        if not name:
            continue
        if not output_info.get("active", True):
            logger.debug(f"Skipping inactive output {name}")
            continue

        current_mode = output_info.get("current_mode") or {}
        width = current_mode.get("width", 0)
        height = current_mode.get("height", 0)
        if not width or not height:
            logger.debug(f"Skipping output {name} without a current mode")
            continue

        orientation = SWAY_TRANSFORMS.get(output_info.get("transform", "normal"), Orientation.LANDSCAPE)
        if orientation.is_portrait:
            width, height = height, width

        make = output_info.get("make", "")
        model = output_info.get("model", "")
        full_model = f"{make} {model}".strip()

        outputs.append({
            "device_path": name,
            "device_name": full_model or name,
            "width": width,
            "height": height,
            "orientation": orientation,
        })

    return _assign_ids(outputs)


class MonitorDetector:
    """
    Enumerate monitors and read live settings from the display backend.

    Supports:
    - xrandr (X11)
    - sway (swaymsg)
    """

    def __init__(self, backend: str = "auto", timeout: int = 10) -> None:
        if backend != "auto" and backend not in SUPPORTED_BACKENDS:
            raise ConfigError(
                f"Unsupported display backend: {backend}. "
                f"Supported: auto, {', '.join(SUPPORTED_BACKENDS)}"
            )
        self._requested_backend = backend
        self._backend: Optional[str] = None
        self._cache: Optional[List[MonitorRecord]] = None
        self.timeout = timeout

    @property
    def backend(self) -> str:
        """Resolved backend name."""
        if self._backend is None:
            if self._requested_backend == "auto":
                self._backend = self._detect_backend()
            else:
                self._backend = self._requested_backend
        return self._backend

    def list_active_monitors(self, force_refresh: bool = False) -> List[MonitorRecord]:
        """
        Enumerate active monitors.

        Results are cached until force_refresh=True.

        Returns:
            MonitorRecord list in enumeration order, ids M1..Mn

        Raises:
            MonitorDetectionError: If the backend is unavailable or reports no monitors
        """
        if self._cache is not None and not force_refresh:
            logger.debug("Using cached monitor detection results")
            return self._cache

        monitors = self._query()
        if not monitors:
            raise NoMonitorsDetectedError(
                f"No active monitors detected via {self.backend}.\n"
                "Make sure at least one monitor is connected and enabled."
            )

        for monitor in monitors:
            logger.debug(
                f"Enumerated monitor: ID={monitor.id}, Name='{monitor.device_name}', "
                f"Path='{monitor.device_path}', Resolution={monitor.resolution}, "
                f"Orientation={monitor.orientation.value}"
            )

        self._cache = monitors
        logger.info(f"Detected {len(monitors)} monitors via {self.backend}")
        return monitors

    def invalidate_cache(self) -> None:
        """Clear cached enumeration results."""
        self._cache = None

    def read_current_settings(self, device_path: str) -> Optional[DisplaySettings]:
        """
        Read the live settings of one output, bypassing the cache.

        Returns:
            DisplaySettings, or None if the output is gone, inactive or
            the backend could not be queried
        """
        try:
            monitors = self._query()
        except MonitorDetectionError as e:
            logger.debug(f"Failed to get current display settings for {device_path}: {e}")
            return None

        for monitor in monitors:
            if monitor.device_path == device_path:
                return DisplaySettings(
                    orientation=monitor.orientation,
                    width=monitor.width,
                    height=monitor.height,
                )

        logger.debug(f"Output {device_path} is not active")
        return None

    def _query(self) -> List[MonitorRecord]:
        if self.backend == "sway":
            return parse_sway_output(self._run(["swaymsg", "-t", "get_outputs", "-r"]))
        return parse_xrandr_output(self._run(["xrandr", "--query", "--prop"]))

    def _detect_backend(self) -> str:
        """
        Detect which display backend to use.

        sway is preferred when its IPC socket is advertised, since xrandr
        under XWayland only sees virtual outputs.
        """
        if os.environ.get("SWAYSOCK") or self._is_running("sway"):
            return "sway"

        if os.environ.get("DISPLAY"):
            return "xrandr"

        raise BackendNotFoundError(
            "Could not detect monitors: no supported display backend.\n"
            "Supported: X11 (xrandr) and sway.\n"
            "Make sure DISPLAY or SWAYSOCK is set for your session."
        )

    def _is_running(self, process_name: str) -> bool:
        """Check if a process is running."""
        try:
            result = subprocess.run(
                ["pgrep", "-x", process_name],
                capture_output=True,
                timeout=5,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def _run(self, cmd: List[str]) -> str:
        cmd_str = " ".join(cmd)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BackendCommunicationError(
                f"Timeout querying monitors after {e.timeout}s.\n"
                f"'{cmd_str}' took too long to respond."
            ) from e
        except FileNotFoundError as e:
            raise BackendNotFoundError(
                f"Could not find '{cmd[0]}' command.\n"
                f"Make sure {cmd[0]} is installed and in PATH."
            ) from e

        if result.returncode != 0:
            error_msg = result.stderr.strip() or "Unknown error"
            raise BackendCommunicationError(
                f"Failed to query monitors from {self.backend}: {error_msg}\n"
                f"Make sure '{cmd_str}' works in this session."
            )

        return result.stdout
