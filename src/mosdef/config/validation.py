"""
Structural checks for config.toml.

Values are range-checked later by Config.__post_init__; this module only
rejects unknown sections, unknown keys and wrongly typed values.
"""

from pathlib import Path
from typing import Any, Dict

from ..exceptions import ConfigError


VALID_STRUCTURE: Dict[str, Dict[str, type]] = {
    'display': {
        'backend': str,
        'persist_file': str,
        'command_timeout': int,
    },
    'rotation': {
        'revert_seconds': int,
        'confirm': bool,
    },
    'logging': {
        'level': str,
        'verbose': bool,
    },
}


def _type_matches(value: Any, expected: type) -> bool:
    # bool is a subclass of int
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)


def _check_section(name: str, section: Any, config_file: Path) -> None:
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] in {config_file} must be a table")

    allowed = VALID_STRUCTURE[name]
    for key, value in section.items():
        if key not in allowed:
            raise ConfigError(
                f"Unknown key '{key}' in section '{name}' in {config_file}. "
                f"Allowed: {', '.join(allowed)}"
            )
        if not _type_matches(value, allowed[key]):
            raise ConfigError(
                f"{name}.{key} in {config_file} must be of type {allowed[key].__name__}, "
                f"got {type(value).__name__}"
            )


def validate_toml_structure(config_dict: Dict[str, Any], config_file: Path) -> None:
    """
    Validate the shape of a loaded config before building dataclasses.

    Raises:
        ConfigError: On an unknown section or key, or a value of the wrong type
    """
    for name, section in config_dict.items():
        if name not in VALID_STRUCTURE:
            raise ConfigError(
                f"Unknown config section '{name}' in {config_file}. "
                f"Allowed: {', '.join(VALID_STRUCTURE)}"
            )
        _check_section(name, section, config_file)
