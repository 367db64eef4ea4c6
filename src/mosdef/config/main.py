"""
Main Config class for MOS-DEF.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

try:
    import tomli
    import tomli_w
except ImportError:
    raise ImportError("Required packages 'tomli' and 'tomli-w' not found. Install with: pip install tomli tomli-w")

from ..exceptions import ConfigError, ConfigValidationError
from ..monitor_detection import SUPPORTED_BACKENDS

from .dataclasses import (
    DisplayConfig,
    RotationConfig,
    LoggingConfig,
)
from .validation import validate_toml_structure


@dataclass
class Config:
    """
    Main configuration class for MOS-DEF.

    Configuration is loaded from config.toml in the user config directory.
    """

    display: DisplayConfig = field(default_factory=DisplayConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.display.backend != "auto" and self.display.backend not in SUPPORTED_BACKENDS:
            raise ConfigValidationError(
                f"Invalid display backend: {self.display.backend}\n"
                f"Must be one of: {['auto', *SUPPORTED_BACKENDS]}"
            )

        if self.display.command_timeout <= 0 or self.display.command_timeout > 120:
            raise ConfigValidationError(
                f"Command timeout ({self.display.command_timeout}s) out of range.\n"
                "Must be between 1 and 120 seconds."
            )

        if self.rotation.revert_seconds < 0 or self.rotation.revert_seconds > 3600:
            raise ConfigValidationError(
                f"Revert timer ({self.rotation.revert_seconds}s) out of range.\n"
                "Must be between 0 (interactive confirm) and 3600 seconds."
            )

        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.logging.level.upper() not in valid_levels:
            raise ConfigValidationError(
                f"Invalid log level: {self.logging.level}\n"
                f"Must be one of: {valid_levels}"
            )

    @classmethod
    def get_config_dir(cls) -> Path:
        """
        Get user configuration directory.

        Uses XDG_CONFIG_HOME if set, otherwise defaults to ~/.config.
        """
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "mos-def"
        return Path.home() / ".config" / "mos-def"

    @classmethod
    def get_config_file(cls) -> Path:
        """Get config file path."""
        return cls.get_config_dir() / "config.toml"

    @classmethod
    def get_state_file(cls) -> Path:
        """Get state file path (default selector and last action)."""
        return cls.get_config_dir() / "state.json"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a TOML-serializable dictionary."""
        display: Dict[str, Any] = {
            'backend': self.display.backend,
            'command_timeout': self.display.command_timeout,
        }
        if self.display.persist_file:
            display['persist_file'] = self.display.persist_file

        return {
            'display': display,
            'rotation': {
                'revert_seconds': self.rotation.revert_seconds,
                'confirm': self.rotation.confirm,
            },
            'logging': {
                'level': self.logging.level,
                'verbose': self.logging.verbose,
            },
        }

    def save(self, config_file: Optional[Path] = None) -> Path:
        """
        Write configuration to TOML.

        Raises:
            ConfigError: If the file cannot be written
        """
        config_file = config_file or self.get_config_file()
        config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(config_file, 'wb') as f:
                tomli_w.dump(self.to_dict(), f)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {config_file}: {e}")

        logging.getLogger(__name__).info(f"Saved config to {config_file}")
        return config_file

    @classmethod
    def initialize_config(cls, config_file: Optional[Path] = None) -> bool:
        """
        Write a default config.toml unless one exists.

        Returns:
            True if a new file was written
        """
        logger = logging.getLogger(__name__)
        config_file = config_file or cls.get_config_file()

        if config_file.exists():
            logger.debug(f"Config already initialized at {config_file}, skipping")
            return False

        cls().save(config_file)
        return True

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> 'Config':
        """
        Load configuration from TOML file.

        A missing file yields defaults. A file that cannot be read or
        decoded is logged and defaults are used; unknown sections, keys
        or invalid values raise.

        Args:
            config_file: Optional path to config TOML file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigError: If the structure or a value is invalid
        """
        logger = logging.getLogger(__name__)

        if not config_file:
            config_file = cls.get_config_file()

        config_dict: Dict[str, Any] = {}
        if config_file.exists():
            try:
                with open(config_file, 'rb') as f:
                    config_dict = tomli.load(f)

                validate_toml_structure(config_dict, config_file)

                logger.info(f"Loaded config from {config_file}")
            except (tomli.TOMLDecodeError, OSError) as e:
                logger.warning(f"Failed to load config: {e}")
                config_dict = {}

        display_dict = dict(config_dict.get('display', {}))
        if not display_dict.get('persist_file'):
            display_dict.pop('persist_file', None)

        return cls(
            display=DisplayConfig(**display_dict),
            rotation=RotationConfig(**config_dict.get('rotation', {})),
            logging=LoggingConfig(**config_dict.get('logging', {})),
        )
