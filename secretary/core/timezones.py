"""
Time zone helpers shared by sync, bucketing and rendering.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from secretary.environments.base import ValidationError


def resolve_time_zone(name: str) -> ZoneInfo:
    """
    Look up an IANA zone by name.

    Raises:
        ValidationError: If the name is empty or unknown
    """
    if not name:
        raise ValidationError("Time zone is required")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone: {name}")
