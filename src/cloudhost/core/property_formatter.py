# cloudhost/core/property_formatter.py
import json
from datetime import datetime
from typing import Any

DATE_PROPERTIES = {"created_at", "updated_at", "expires_at", "started_at", "completed_at"}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def format_date(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return str(value)
    return parsed.strftime(DATE_FORMAT).strip()


def format_value(value: Any, name: str = "") -> str:
    """Render a property value for terminal output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, ensure_ascii=False, sort_keys=True)
    if name in DATE_PROPERTIES and isinstance(value, str):
        return format_date(value)
    return str(value)


def get_nested(data: dict, path: str) -> Any:
    """Read 'a.b.c' from nested dictionaries; raises KeyError when absent."""
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            raise KeyError(path)
        current = current[part]
    return current
