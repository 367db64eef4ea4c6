"""
Configuration package for MOS-DEF.
"""

from .main import Config
from .state import SelectionStore
from .dataclasses import (
    DisplayConfig,
    RotationConfig,
    LoggingConfig,
    RunOptions,
)
