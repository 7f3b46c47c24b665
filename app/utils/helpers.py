"""
Utility helper functions for safe data handling.
"""
from typing import Any, Dict, Optional


def safe_dict(value: Any) -> Dict[str, Any]:
    """Return value if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def safe_str(value: Any, default: str = "") -> str:
    """
    Convert a value to string, treating None and empty strings as missing.

    Args:
        value: Any value to convert
        default: Default string if value is missing

    Returns:
        String representation or default
    """
    if value is None or value == "":
        return default
    return str(value)


def safe_count(value: Any) -> int:
    """
    Coerce a counter to a non-negative int.

    Args:
        value: Raw counter (int, float, numeric string, None, garbage)

    Returns:
        The counter, or 0 if missing, invalid or negative
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        count = int(float(value))
    except (ValueError, TypeError, OverflowError):
        return 0
    return max(count, 0)


def first_present(source: Dict[str, Any], *keys: str) -> Optional[Any]:
    """Value of the first key that is present and not None."""
    for key in keys:
        value = source.get(key)
        if value is not None:
            return value
    return None
