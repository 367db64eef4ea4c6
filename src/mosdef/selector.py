"""
Monitor selector parsing and matching.

Selector formats:
    M1, M2, ...          Monitor id
    device:"HDMI-1"      Device path, exact
    name:"Dell"          Device name substring, case-insensitive

Any other token is taken as a monitor id verbatim. `*` is not a wildcard:
"all monitors" is an absent include set.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .exceptions import SelectorParseError
from .monitor_detection import MonitorRecord

logger = logging.getLogger(__name__)

MONITOR_ID_PATTERN = re.compile(r'^M\d+$')

DEVICE_PREFIX = 'device:"'
NAME_PREFIX = 'name:"'


class SelectorKind(Enum):
    BY_ID = "id"
    BY_DEVICE_PATH = "device"
    BY_NAME_SUBSTRING = "name"


@dataclass(frozen=True)
class Selector:
    """A single monitor matching rule."""
    kind: SelectorKind
    value: str

    def __str__(self) -> str:
        if self.kind is SelectorKind.BY_DEVICE_PATH:
            return f'{DEVICE_PREFIX}{self.value}"'
        if self.kind is SelectorKind.BY_NAME_SUBSTRING:
            return f'{NAME_PREFIX}{self.value}"'
        return self.value


SelectorSet = Tuple[Selector, ...]


def _quoted_value(text: str, prefix: str) -> str:
    rest = text[len(prefix):]
    end = rest.rfind('"')
    if end < 0:
        raise SelectorParseError(f"Unterminated quote in selector: {text}")
    value = rest[:end]
    if not value:
        raise SelectorParseError(f"Empty value in selector: {text}")
    return value


def parse_selector(text: str) -> Selector:
    """
    Parse one selector expression.

    Raises:
        SelectorParseError: If the selector is empty or has an unterminated quote
    """
    text = text.strip()
    if not text:
        raise SelectorParseError("Selector cannot be empty")

    if MONITOR_ID_PATTERN.match(text):
        return Selector(SelectorKind.BY_ID, text)

    if text.startswith(DEVICE_PREFIX):
        return Selector(SelectorKind.BY_DEVICE_PATH, _quoted_value(text, DEVICE_PREFIX))

    if text.startswith(NAME_PREFIX):
        return Selector(SelectorKind.BY_NAME_SUBSTRING, _quoted_value(text, NAME_PREFIX))

    return Selector(SelectorKind.BY_ID, text)


def parse_selector_list(text: str) -> SelectorSet:
    """
    Parse a comma-separated selector list.

    Raises:
        SelectorParseError: If the list or any entry in it is empty
    """
    if not text or not text.strip():
        raise SelectorParseError("Selector list cannot be empty")

    selectors = []
    for part in text.split(","):
        if not part.strip():
            raise SelectorParseError(f"Empty entry in selector list: {text}")
        selectors.append(parse_selector(part))
    return tuple(selectors)


def matches(selector: Selector, monitor: MonitorRecord) -> bool:
    """Check whether a selector matches a monitor."""
    if selector.kind is SelectorKind.BY_ID:
        return monitor.id == selector.value
    if selector.kind is SelectorKind.BY_DEVICE_PATH:
        return monitor.device_path == selector.value
    if selector.kind is SelectorKind.BY_NAME_SUBSTRING:
        return selector.value.lower() in monitor.device_name.lower()
    return False


def matches_any(selectors: Sequence[Selector], monitor: MonitorRecord) -> bool:
    return any(matches(selector, monitor) for selector in selectors)


def resolve_include(
    only: Optional[Selector] = None,
    include: Optional[SelectorSet] = None,
    default_selector: Optional[str] = None,
) -> Optional[SelectorSet]:
    """
    Pick the include set for a command.

    Priority: --only > --include > saved default > all monitors (None).

    Raises:
        SelectorParseError: If the saved default selector is malformed
    """
    if only is not None:
        return (only,)

    if include:
        return include

    if default_selector:
        try:
            selectors = parse_selector_list(default_selector)
        except SelectorParseError as e:
            raise SelectorParseError(f"Saved default selector is invalid ({e}). Clear it with --clear-default.") from e
        logger.debug(f"Using saved default selector: {default_selector}")
        return selectors

    return None


def should_process(
    monitor: MonitorRecord,
    include: Optional[SelectorSet] = None,
    exclude: Optional[SelectorSet] = None,
) -> bool:
    """
    Decide whether a monitor survives include/exclude filtering.

    Exclusion always wins over inclusion.
    """
    selected = True
    if include:
        selected = matches_any(include, monitor)
    if exclude and matches_any(exclude, monitor):
        selected = False
    return selected


def select(
    monitors: Sequence[MonitorRecord],
    include: Optional[SelectorSet] = None,
    exclude: Optional[SelectorSet] = None,
) -> List[MonitorRecord]:
    """Monitors that survive filtering, in inventory order."""
    return [m for m in monitors if should_process(m, include, exclude)]


def suggest_selectors(monitors: Sequence[MonitorRecord], attempted: Sequence[str] = ()) -> str:
    """
    Describe the available monitors with ready-to-use selectors.

    Args:
        monitors: Active monitors
        attempted: Selector expressions that matched nothing

    Returns:
        Multi-line text for the no-match error message
    """
    if not monitors:
        return "No monitors available."

    lines = ["Available monitors and suggested selectors:", ""]
    for monitor in monitors:
        lines.append(f"  {monitor.id}: {monitor.device_name}")
        lines.append(f"    Use: {Selector(SelectorKind.BY_ID, monitor.id)}")
        lines.append(f"    Or:  {Selector(SelectorKind.BY_DEVICE_PATH, monitor.device_path)}")
        lines.append(f"    Or:  {Selector(SelectorKind.BY_NAME_SUBSTRING, monitor.device_name)}")
        lines.append("")

    if attempted:
        lines.append("Attempted selectors that didn't match:")
        lines.extend(f"  {text}" for text in attempted)

    return "\n".join(lines).rstrip()
