"""Tests for exception hierarchy and error mapping in backends."""

import subprocess
from unittest.mock import patch, MagicMock

import pytest

from mosdef.exceptions import (
    MosDefError,
    ConfigError,
    ConfigValidationError,
    StateError,
    SelectorError,
    SelectorParseError,
    NoMatchError,
    DisplayApiError,
    DisplayCommandError,
    RollbackError,
    MonitorDetectionError,
    BackendNotFoundError,
    BackendCommunicationError,
    NoMonitorsDetectedError,
    RemoteSessionError,
)
from mosdef.display import DisplayChangeResult, XrandrSetter
from mosdef.monitor_detection import MonitorDetector, Orientation


class TestExceptionHierarchy:
    """Every domain error can be caught as MosDefError."""

    @pytest.mark.parametrize("exc_class", [
        ConfigError, ConfigValidationError, StateError, SelectorParseError, NoMatchError,
        DisplayApiError, DisplayCommandError, RollbackError, MonitorDetectionError,
        BackendNotFoundError, BackendCommunicationError, NoMonitorsDetectedError,
        RemoteSessionError,
    ])
    def test_inherits_base(self, exc_class):
        assert issubclass(exc_class, MosDefError)

    def test_grouping(self):
        assert issubclass(ConfigValidationError, ConfigError)
        assert issubclass(SelectorParseError, SelectorError)
        assert issubclass(NoMatchError, SelectorError)
        assert issubclass(DisplayCommandError, DisplayApiError)
        assert issubclass(BackendNotFoundError, MonitorDetectionError)

    def test_display_api_error_carries_code(self):
        error = DisplayCommandError("xrandr failed", DisplayChangeResult.BADMODE)
        assert error.error_code == DisplayChangeResult.BADMODE
        assert DisplayApiError("unknown").error_code == -1


class TestDetectorErrorMapping:
    """Subprocess failures become specific MonitorDetectionError subclasses."""

    def test_missing_binary(self):
        detector = MonitorDetector("xrandr")
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(BackendNotFoundError, match="xrandr"):
                detector.list_active_monitors()

    def test_timeout(self):
        detector = MonitorDetector("sway", timeout=3)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("swaymsg", 3)):
            with pytest.raises(BackendCommunicationError, match="Timeout"):
                detector.list_active_monitors()

    def test_nonzero_exit(self):
        detector = MonitorDetector("xrandr")
        failed = MagicMock(returncode=1, stdout="", stderr="Can't open display")
        with patch("subprocess.run", return_value=failed):
            with pytest.raises(BackendCommunicationError):
                detector.list_active_monitors()

    def test_no_monitors(self):
        detector = MonitorDetector("sway")
        empty = MagicMock(returncode=0, stdout="[]", stderr="")
        with patch("subprocess.run", return_value=empty):
            with pytest.raises(NoMonitorsDetectedError):
                detector.list_active_monitors()

    def test_unknown_backend_is_config_error(self):
        with pytest.raises(ConfigError, match="Unsupported display backend"):
            MonitorDetector("kwin")

    def test_live_read_swallows_errors(self):
        detector = MonitorDetector("xrandr")
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            assert detector.read_current_settings("DP-1") is None


class TestSetterErrorMapping:
    """Setters report result codes instead of raising."""

    def test_missing_binary_is_failed(self):
        setter = XrandrSetter()
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            assert setter.apply("DP-1", Orientation.PORTRAIT) == DisplayChangeResult.FAILED

    def test_mode_rejection_is_badmode(self):
        setter = XrandrSetter()
        failed = MagicMock(returncode=1, stdout="", stderr="xrandr: cannot find mode 1440x2560")
        with patch("subprocess.run", return_value=failed):
            assert setter.apply("DP-1", Orientation.PORTRAIT, 1440, 2560) == DisplayChangeResult.BADMODE

    def test_invalid_orientation_is_badparam(self):
        setter = XrandrSetter()
        with patch("subprocess.run") as mock_run:
            assert setter.apply("DP-1", 45) == DisplayChangeResult.BADPARAM
            mock_run.assert_not_called()
