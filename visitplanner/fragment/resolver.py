from __future__ import annotations

import logging
import math
import re
from urllib.parse import quote, unquote

from .config import DEFAULT_FRAGMENT_CONFIG, FragmentConfig
from .models import DAY_VALUES, MODE_VALUES, ControlChanges, Mode, TripPreferences

logger = logging.getLogger(__name__)

_PATH_RE = re.compile(r"^/?visit/([a-z0-9][a-z0-9-]*)/?$")
_TIME_RE = re.compile(r"^(\d{3,4})(am|pm)?$")
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

_MAX_OPTION_DIGITS = 6

# Serialization order of query parameters
PARAM_ORDER = ("modes", "day", "time", "people", "walk", "pay", "option")


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_modes(raw: str) -> list[Mode]:
    """Split a comma list into known modes, keeping first-seen order."""
    modes: list[Mode] = []
    for token in (raw or "").split(","):
        token = token.strip().lower()
        if not token:
            continue
        if token not in MODE_VALUES:
            logger.debug("Dropping unknown mode %r", token)
            continue
        mode = Mode(token)
        if mode not in modes:
            modes.append(mode)
    return modes


def parse_day(raw: str) -> str:
    value = (raw or "").strip().lower()
    if value in DAY_VALUES:
        return value
    if value:
        logger.debug("Ignoring unknown day %r", raw)
    return ""


def parse_time(raw: str) -> str:
    """
    Convert venue shorthand into a 24h ``HH:MM`` string.

    Bare 3/4 digit values are read as afternoon/evening times, so hours 1-11
    shift by twelve (``830`` -> ``20:30``) while 12 stays noon. A leading zero
    (``0730``) or an ``am``/``pm`` suffix pins the time explicitly.
    Returns ``""`` for anything that is not a valid time.
    """
    value = (raw or "").strip().lower()
    match = _TIME_RE.match(value)
    if not match:
        if value:
            logger.debug("Ignoring unparseable time %r", raw)
        return ""

    digits, meridiem = match.groups()
    hour, minute = int(digits[:-2]), int(digits[-2:])
    if minute >= 60:
        logger.debug("Ignoring time with invalid minutes %r", raw)
        return ""

    if meridiem:
        if not 1 <= hour <= 12:
            return ""
        hour = hour % 12 + (12 if meridiem == "pm" else 0)
    elif len(digits) == 4 and digits.startswith("0"):
        pass
    elif 1 <= hour <= 11:
        hour += 12

    if hour >= 24:
        logger.debug("Ignoring time with invalid hour %r", raw)
        return ""
    return f"{hour:02d}:{minute:02d}"


def split_hhmm(value: str) -> tuple[int, int] | None:
    """Return ``(hour, minute)`` for a valid 24h ``HH:MM`` string, else ``None``."""
    match = _HHMM_RE.match((value or "").strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour >= 24 or minute >= 60:
        return None
    return hour, minute


def minutes_since_midnight(value: str) -> int | None:
    parts = split_hhmm(value)
    if parts is None:
        return None
    return parts[0] * 60 + parts[1]


def format_time(value: str) -> str:
    """Inverse of :func:`parse_time`; returns ``""`` for invalid input."""
    parts = split_hhmm(value)
    if parts is None:
        return ""
    hour, minute = parts
    if hour >= 12:
        display = hour - 12 if hour > 12 else 12
        return f"{display}{minute:02d}"
    if 1 <= hour <= 9:
        return f"{hour:02d}{minute:02d}"
    # 10-11 AM and the midnight hour would read as PM without a suffix
    return f"{hour % 12 or 12}{minute:02d}am"


def parse_people(raw: str, config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        logger.debug("Non-numeric people %r, using default", raw)
        return config.default_people
    if config.min_people <= value <= config.max_people:
        return value
    logger.debug("People %d out of range, using default", value)
    return config.default_people


def parse_amount(raw: str) -> float:
    """Parse a non-negative finite number (miles or dollars); 0.0 otherwise."""
    try:
        value = float((raw or "").strip())
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_options(raw: str) -> list[int]:
    options: set[int] = set()
    for token in (raw or "").split(","):
        token = token.strip()
        # ASCII digits only; str.isdigit alone also accepts "²" and other scripts
        if not (token.isascii() and token.isdigit()) or len(token) > _MAX_OPTION_DIGITS:
            if token:
                logger.debug("Dropping invalid option %.20r", token)
            continue
        index = int(token)
        if index >= 1:
            options.add(index)
    return sorted(options)


# ---------------------------------------------------------------------------
# Fragment <-> TripPreferences
# ---------------------------------------------------------------------------


def _split_fragment(fragment: str) -> tuple[str, str]:
    raw = fragment or ""
    if "#" in raw:
        raw = raw.split("#", 1)[1]
    path, _, query = raw.partition("?")
    return path, query


def _query_params(query: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for chunk in query.split("&"):
        if not chunk:
            continue
        key, _, value = chunk.partition("=")
        params[unquote(key).strip().lower()] = unquote(value)
    return params


def parse_fragment(
    fragment: str,
    config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG,
) -> TripPreferences:
    """Build fresh :class:`TripPreferences` from ``#/visit/<destination>?...``."""
    path, query = _split_fragment(fragment)

    match = _PATH_RE.match(unquote(path).strip().lower())
    destination = match.group(1) if match else config.default_destination

    params = _query_params(query)
    people = (
        parse_people(params["people"], config=config)
        if "people" in params
        else config.default_people
    )

    return TripPreferences(
        destination=destination,
        modes=parse_modes(params.get("modes", "")),
        day=parse_day(params.get("day", "")),
        time=parse_time(params.get("time", "")),
        people=people,
        walk_miles=parse_amount(params.get("walk", "")),
        cost_dollars=parse_amount(params.get("pay", "")),
        expanded_options=parse_options(params.get("option", "")),
    )


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def serialize_fragment(
    prefs: TripPreferences,
    config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG,
) -> str:
    """
    Write the canonical fragment for *prefs*.

    Only parameters that differ from their defaults are emitted, in
    ``PARAM_ORDER``. Commas inside list values stay literal.
    """
    values: dict[str, str] = {}
    if prefs.modes:
        values["modes"] = ",".join(Mode(m).value for m in prefs.modes)
    if prefs.day:
        values["day"] = prefs.day
    if prefs.time:
        values["time"] = format_time(prefs.time)
    if prefs.people != config.default_people:
        values["people"] = str(prefs.people)
    if prefs.walk_miles:
        values["walk"] = _format_number(prefs.walk_miles)
    if prefs.cost_dollars:
        values["pay"] = _format_number(prefs.cost_dollars)
    if prefs.expanded_options:
        values["option"] = ",".join(str(i) for i in sorted(set(prefs.expanded_options)))

    fragment = f"#/visit/{quote(prefs.destination, safe='')}"
    pairs = [
        f"{key}={quote(values[key], safe=',')}"
        for key in PARAM_ORDER
        if values.get(key)
    ]
    if pairs:
        fragment += "?" + "&".join(pairs)
    return fragment


def canonicalize(fragment: str, config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG) -> str:
    return serialize_fragment(parse_fragment(fragment, config=config), config=config)


def apply_changes(
    prefs: TripPreferences,
    changes: ControlChanges,
    config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG,
) -> TripPreferences:
    """Merge control values into *prefs* using the same filtering as parsing."""
    update: dict[str, object] = {}
    if changes.destination is not None:
        match = _PATH_RE.match(f"visit/{changes.destination.strip().lower()}")
        update["destination"] = match.group(1) if match else config.default_destination
    if changes.modes is not None:
        update["modes"] = parse_modes(",".join(changes.modes))
    if changes.day is not None:
        update["day"] = parse_day(changes.day)
    if changes.time is not None:
        parts = split_hhmm(changes.time)
        update["time"] = f"{parts[0]:02d}:{parts[1]:02d}" if parts else ""
    if changes.people is not None:
        update["people"] = parse_people(str(changes.people), config=config)
    if changes.walk_miles is not None:
        update["walk_miles"] = parse_amount(str(changes.walk_miles))
    if changes.cost_dollars is not None:
        update["cost_dollars"] = parse_amount(str(changes.cost_dollars))
    return prefs.model_copy(update=update)
