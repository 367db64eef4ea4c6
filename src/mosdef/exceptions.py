"""
Common exception classes for MOS-DEF.

Provides domain-specific exceptions for consistent error handling across modules.
All exceptions inherit from MosDefError for unified catching at CLI level.
"""


class MosDefError(Exception):
    """
    Base exception for all MOS-DEF errors.

    All domain-specific exceptions inherit from this class, allowing
    callers to catch all MOS-DEF errors with a single except clause.
    """
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigError(MosDefError):
    """
    Configuration-related errors.

    Raised when:
    - Config file is malformed or contains unknown sections/keys
    - Config validation fails
    - Config file cannot be written
    """
    pass


class ConfigValidationError(ConfigError):
    """
    Config value validation failed.

    Raised when a config value is present but invalid (e.g., out of range,
    unknown backend name, negative revert timer).
    """
    pass


# ============================================================================
# State Errors
# ============================================================================

class StateError(MosDefError):
    """
    Config store errors.

    Raised when the state file holding the default selector and last
    action cannot be read, parsed or written.
    """
    pass


# ============================================================================
# Selector Errors
# ============================================================================

class SelectorError(MosDefError):
    """Base class for monitor selection errors."""
    pass


class SelectorParseError(SelectorError):
    """
    Selector expression is malformed.

    Raised before any monitor is touched, e.g. for an unterminated
    quote or an empty entry in a comma-separated list.
    """
    pass


class NoMatchError(SelectorError):
    """
    No monitor matched the requested selectors.

    Carries a listing of the available monitors and selectors for them.
    """

    def __init__(self, message: str, suggestions: str = "") -> None:
        super().__init__(message)
        self.suggestions = suggestions


# ============================================================================
# Display Errors
# ============================================================================

class DisplayApiError(MosDefError):
    """
    A display settings change was rejected.

    Per-monitor failures are recorded as outcomes rather than raised;
    this is raised only where a single change is the whole operation.
    """

    def __init__(self, message: str, error_code: int = -1) -> None:
        super().__init__(message)
        self.error_code = error_code


class DisplayCommandError(DisplayApiError):
    """External display command (xrandr, swaymsg) failed to execute."""
    pass


class RollbackError(MosDefError):
    """
    Rollback could not be started or completed.

    Rollback is best-effort cleanup; this never changes the exit code
    of the rotation that preceded it.
    """
    pass


# ============================================================================
# Monitor Detection Errors
# ============================================================================

class MonitorDetectionError(MosDefError):
    """
    Monitor detection errors.

    Base class for errors while enumerating active monitors.
    """
    pass


class BackendNotFoundError(MonitorDetectionError):
    """
    No supported display backend is available.

    Raised when neither an X11 session (xrandr) nor sway is detected.
    """
    pass


class BackendCommunicationError(MonitorDetectionError):
    """
    Failed to communicate with the display backend.

    Raised when xrandr or swaymsg fails, times out or returns output
    that cannot be parsed.
    """
    pass


class NoMonitorsDetectedError(MonitorDetectionError):
    """
    No active monitors detected.

    Raised when the backend reports no connected, active outputs.
    """
    pass


# ============================================================================
# Session Errors
# ============================================================================

class RemoteSessionError(MosDefError):
    """
    Refusing to rotate displays from a remote session.

    A rotation started over SSH can leave the local display unusable
    with nobody there to confirm or revert it.
    """
    pass
