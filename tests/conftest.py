"""Test configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional

import pytest

from mosdef.config import Config, SelectionStore
from mosdef.display import DisplayChangeResult
from mosdef.monitor_detection import DisplaySettings, MonitorRecord, Orientation


class FakeDisplay:
    """
    In-memory display backend.

    Acts as both the live settings reader and the settings writer, so a
    rotation applied through apply() is visible to the next read.
    """

    def __init__(self, monitors: Iterable[MonitorRecord]) -> None:
        self.settings: Dict[str, DisplaySettings] = {
            m.device_path: DisplaySettings(m.orientation, m.width, m.height)
            for m in monitors
        }
        self.unreadable: set = set()
        self.failing: Dict[str, int] = {}
        self.apply_calls: List[tuple] = []
        self.read_calls: List[str] = []
        self.events: List[tuple] = []

    def read_current_settings(self, device_path: str) -> Optional[DisplaySettings]:
        self.read_calls.append(device_path)
        self.events.append(("read", device_path))
        if device_path in self.unreadable:
            return None
        return self.settings.get(device_path)

    def apply(self, device_path, orientation, width=None, height=None, persist=False) -> int:
        self.apply_calls.append((device_path, Orientation(orientation), width, height, persist))
        self.events.append(("apply", device_path))
        if device_path in self.failing:
            return self.failing[device_path]
        current = self.settings[device_path]
        self.settings[device_path] = DisplaySettings(
            Orientation(orientation),
            width if width is not None else current.width,
            height if height is not None else current.height,
        )
        return DisplayChangeResult.SUCCESSFUL


class FakeDetector(FakeDisplay):
    """FakeDisplay that also serves the monitor inventory."""

    def __init__(self, monitors: Iterable[MonitorRecord], backend: str = "xrandr") -> None:
        self.monitors = list(monitors)
        self.backend = backend
        super().__init__(self.monitors)

    def list_active_monitors(self, force_refresh: bool = False) -> List[MonitorRecord]:
        return self.monitors


class ScriptedKeyReader:
    """Key reader that replays a fixed sequence; None means the wait timed out."""

    def __init__(self, keys: Iterable[Optional[str]] = ()) -> None:
        self.keys = list(keys)
        self.timeouts: List[Optional[float]] = []

    def read_key(self, timeout: Optional[float] = None) -> Optional[str]:
        self.timeouts.append(timeout)
        if not self.keys:
            return None
        return self.keys.pop(0)


@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """Create a temporary config directory with a test config file."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = Path(temp_dir)

        config_file = config_dir / "config.toml"
        config_file.write_text("""
[display]
backend = "xrandr"
command_timeout = 5

[rotation]
revert_seconds = 0
confirm = true

[logging]
level = "INFO"
""")

        yield config_dir


@pytest.fixture
def test_config(temp_config_dir: Path) -> Config:
    """Create a test Config instance with isolated state."""
    config_file = temp_config_dir / "config.toml"

    # Temporarily patch the config directory method
    original_get_config_dir = Config.get_config_dir
    Config.get_config_dir = classmethod(lambda cls: temp_config_dir)

    try:
        config = Config.load(config_file=config_file)
        yield config
    finally:
        Config.get_config_dir = original_get_config_dir


@pytest.fixture
def store(temp_config_dir: Path) -> SelectionStore:
    """SelectionStore backed by a state file in the temp config dir."""
    return SelectionStore(temp_config_dir / "state.json")


@pytest.fixture
def sample_monitors() -> List[MonitorRecord]:
    """Three monitors: two landscape, one portrait."""
    return [
        MonitorRecord("M1", "DP-1", "DELL U2720Q", 2560, 1440, Orientation.LANDSCAPE),
        MonitorRecord("M2", "HDMI-1", "LG TV SSCR2", 1920, 1080, Orientation.LANDSCAPE),
        MonitorRecord("M3", "DP-2", "DELL P2419H", 1080, 1920, Orientation.PORTRAIT),
    ]


@pytest.fixture
def fake_display(sample_monitors) -> FakeDisplay:
    return FakeDisplay(sample_monitors)


@pytest.fixture
def fake_detector(sample_monitors) -> FakeDetector:
    return FakeDetector(sample_monitors)


@pytest.fixture
def xrandr_query_output() -> str:
    """Captured `xrandr --query --prop` output for a three-output setup."""
    return XRANDR_QUERY_OUTPUT


@pytest.fixture
def sway_outputs_json() -> str:
    """Captured `swaymsg -t get_outputs -r` output."""
    return SWAY_OUTPUTS_JSON


def make_edid(name: str) -> str:
    """Minimal 128-byte EDID with a 0xFC monitor-name descriptor, as hex."""
    edid = bytearray(128)
    edid[0:8] = bytes.fromhex("00ffffffffffff00")
    edid[72:90] = b"\x00\x00\x00\xfc\x00" + (name.encode("ascii") + b"\n").ljust(13, b" ")
    return edid.hex()


_EDID_U2720Q = make_edid("DELL U2720Q")

XRANDR_QUERY_OUTPUT = f"""Screen 0: minimum 320 x 200, current 5440 x 1920, maximum 16384 x 16384
DP-1 connected primary 2560x1440+0+0 (normal left inverted right x axis y axis) 597mm x 336mm
	EDID:
		{_EDID_U2720Q[0:64]}
		{_EDID_U2720Q[64:128]}
		{_EDID_U2720Q[128:192]}
		{_EDID_U2720Q[192:256]}
	scaling mode: None
   2560x1440     59.95*+
   1920x1080     60.00    59.94
HDMI-1 connected 1920x1080+2560+0 (normal left inverted right x axis y axis) 1209mm x 680mm
   1920x1080     60.00*+  50.00
DP-2 connected 1080x1920+4480+0 left (normal left inverted right x axis y axis) 527mm x 296mm
   1920x1080     60.00*+
DP-3 disconnected (normal left inverted right x axis y axis)
HDMI-2 connected (normal left inverted right x axis y axis)
   1920x1080     60.00 +
VIRTUAL1 connected 1920x1080+0+0 (normal left inverted right x axis y axis) 0mm x 0mm
"""

SWAY_OUTPUTS_JSON = """[
  {
    "name": "DP-1",
    "make": "Dell Inc.",
    "model": "DELL U2720Q",
    "active": true,
    "transform": "normal",
    "current_mode": {"width": 2560, "height": 1440, "refresh": 59951}
  },
  {
    "name": "HDMI-A-1",
    "make": "LG Electronics",
    "model": "LG TV SSCR2",
    "active": true,
    "transform": "90",
    "current_mode": {"width": 1920, "height": 1080, "refresh": 60000}
  },
  {
    "name": "DP-2",
    "make": "Unknown",
    "model": "Unknown",
    "active": false,
    "transform": "normal",
    "current_mode": {"width": 0, "height": 0, "refresh": 0}
  }
]"""
