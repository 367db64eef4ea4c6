"""List command.

Prints the active monitor inventory as a table, or JSON for scripts.
"""

import json
from typing import Any, Dict, List

from ..exceptions import NoMonitorsDetectedError
from ..monitor_detection import MonitorDetector, MonitorRecord

DEVICE_COLUMN_WIDTH = 20
ROW_FORMAT = "{:<5} {:<30} {:<20} {:<15} {:<12}"


def truncate_device_path(device_path: str, width: int = DEVICE_COLUMN_WIDTH) -> str:
    """Shorten a device path to fit its column, marking the cut with '...'."""
    if len(device_path) <= width:
        return device_path
    return device_path[:width - 3] + "..."


def monitor_to_dict(monitor: MonitorRecord) -> Dict[str, Any]:
    return {
        "id": monitor.id,
        "name": monitor.device_name,
        "device": monitor.device_path,
        "width": monitor.width,
        "height": monitor.height,
        "rotation": int(monitor.orientation),
    }


def format_monitor_table(monitors: List[MonitorRecord]) -> str:
    if not monitors:
        return "No monitors found."

    lines = [
        ROW_FORMAT.format("ID", "Name", "Device", "Resolution", "Rotation"),
        ROW_FORMAT.format("----", "----", "------", "----------", "--------"),
    ]
    for monitor in monitors:
        lines.append(ROW_FORMAT.format(
            monitor.id,
            monitor.device_name,
            truncate_device_path(monitor.device_path),
            monitor.resolution,
            monitor.orientation.label,
        ))
    return "\n".join(lines)


def list_monitors(detector: MonitorDetector, json_output: bool = False) -> None:
    """
    Display active monitors.

    Args:
        detector: Monitor inventory
        json_output: If True, output JSON instead of a table
    """
    try:
        monitors = detector.list_active_monitors()
    except NoMonitorsDetectedError:
        monitors = []

    if json_output:
        print(json.dumps([monitor_to_dict(m) for m in monitors], indent=2))
        return

    print(format_monitor_table(monitors))
