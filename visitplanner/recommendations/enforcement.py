from __future__ import annotations

from ..fragment.resolver import minutes_since_midnight, split_hhmm
from .config import DEFAULT_ENFORCEMENT_CONFIG, EnforcementConfig


def _window(config: EnforcementConfig) -> tuple[int, int]:
    start = minutes_since_midnight(config.start)
    end = minutes_since_midnight(config.end)
    if start is None or end is None:
        raise ValueError(f"Invalid enforcement window {config.start!r}-{config.end!r}")
    return start, end


def is_parking_enforced(
    day: str,
    time: str,
    config: EnforcementConfig = DEFAULT_ENFORCEMENT_CONFIG,
) -> bool:
    """Return True when meters must be paid on *day* at 24h *time*."""
    if (day or "").strip().lower() not in config.weekdays:
        return False
    minutes = minutes_since_midnight(time)
    if minutes is None:
        return False
    start, end = _window(config)
    return start <= minutes < end


def enforced_minutes_remaining(
    day: str,
    time: str,
    config: EnforcementConfig = DEFAULT_ENFORCEMENT_CONFIG,
) -> int:
    if not is_parking_enforced(day, time, config=config):
        return 0
    _, end = _window(config)
    return end - minutes_since_midnight(time)


def required_meter_cost(
    day: str,
    time: str,
    hourly_rate: float,
    config: EnforcementConfig = DEFAULT_ENFORCEMENT_CONFIG,
) -> float:
    """Meter cost from arrival until enforcement ends, rounded to cents."""
    minutes = enforced_minutes_remaining(day, time, config=config)
    return round(hourly_rate * minutes / 60.0, 2)


def clock_label(value: str) -> str:
    """Format 24h ``HH:MM`` as ``7:00 PM``."""
    parts = split_hhmm(value)
    if parts is None:
        return value
    hour, minute = parts
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def enforcement_end_label(config: EnforcementConfig = DEFAULT_ENFORCEMENT_CONFIG) -> str:
    return clock_label(config.end)
