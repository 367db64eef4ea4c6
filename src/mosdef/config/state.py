"""
Persistent selection state for MOS-DEF.

A small JSON document with two optional string fields:

    {"default_selector": "M2", "last_action": "portrait"}
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from ..exceptions import StateError

STATE_FIELDS = ('default_selector', 'last_action')


class SelectionStore:
    """
    Stores the saved default selector and the last rotation action.

    A missing state file means both fields are None. A malformed file is
    a hard error; nothing in it can be trusted.
    """

    def __init__(self, state_file: Optional[Path] = None) -> None:
        if state_file is None:
            # Import here to avoid circular import
            from .main import Config
            state_file = Config.get_state_file()
        self.state_file = state_file
        self.logger = logging.getLogger(__name__)

    def get_state(self) -> Dict[str, Optional[str]]:
        """
        Load current state.

        Raises:
            StateError: If the file cannot be read or is not a valid state document
        """
        state: Dict[str, Optional[str]] = {name: None for name in STATE_FIELDS}
        if not self.state_file.exists():
            return state

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"State file {self.state_file} is not valid JSON: {e}")
        except OSError as e:
            raise StateError(f"Failed to read state file {self.state_file}: {e}")

        if not isinstance(data, dict):
            raise StateError(f"State file {self.state_file} must contain a JSON object")

        for name in STATE_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise StateError(f"'{name}' in {self.state_file} must be a string or null")
            state[name] = value

        return state

    def save_state(self, state: Dict[str, Optional[str]]) -> None:
        """Save current state."""
        document = {name: state.get(name) for name in STATE_FIELDS}

        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise StateError(f"Failed to save state file {self.state_file}: {e}")

    def load_default_selector(self) -> Optional[str]:
        """Get the saved default selector, if any."""
        return self.get_state()['default_selector']

    def save_default_selector(self, selector: str) -> None:
        """Save the default selector, keeping the last action."""
        state = self._get_state_for_update()
        state['default_selector'] = selector
        self.save_state(state)
        self.logger.info(f"Saved default selector: {selector}")

    def clear_default_selector(self) -> None:
        """Remove the saved default selector."""
        state = self._get_state_for_update()
        state['default_selector'] = None
        self.save_state(state)
        self.logger.info("Cleared default selector")

    def save_last_action(self, action: str) -> None:
        """Record the last rotation command that changed a monitor."""
        state = self._get_state_for_update()
        state['last_action'] = action
        self.save_state(state)
        self.logger.debug(f"Saved last action: {action}")

    def _get_state_for_update(self) -> Dict[str, Optional[str]]:
        try:
            return self.get_state()
        except StateError as e:
            self.logger.warning(f"Overwriting unreadable state file: {e}")
            return {name: None for name in STATE_FIELDS}
