"""
Opening Hours Normalization

This module reconciles the two provider representations of business hours into
one canonical schedule of per-day open intervals.

Provider shapes:
- Google ("period-pair"): {"open_now": bool, "periods": [{"open": {day, time},
  "close": {day, time}}, ...]}. Days are Sunday=0 .. Saturday=6 and a period
  may span one or more midnights.
- Yelp ("day-segment"): [{"is_open_now": bool, "open": [{"is_overnight",
  "start", "end", "day"}, ...]}]. Days are Monday=0 .. Sunday=6 and every
  segment is already scoped to a single day.

Canonical output:
    {
        "open_now": bool,
        "open_days": [
            {"day": 0-6, "start": "HHMM", "end": "HHMM", "is_overnight": bool},
            ...
        ]
    }

or {} when the payload does not match the expected provider shape. This
module never raises: hours are best-effort data and must not abort the
surrounding response.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


DAYS_IN_WEEK = 7
MIDNIGHT = "0000"

# Close times at or before this belong to the previous walked day.
EARLY_MORNING_CUTOFF = "0600"


class HoursSource(str, Enum):
    """Provider that produced a raw hours payload."""

    GOOGLE = "google"
    YELP = "yelp"


@dataclass
class DaySegment:
    """One contiguous open interval on one canonical weekday (Sunday=0)."""

    day: int
    start: str
    end: str
    is_overnight: bool = False

    def sort_key(self) -> tuple[int, str]:
        return self.day, self.start

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Schedule:
    """Canonical schedule built from a single provider payload."""

    open_now: bool = False
    open_days: list[DaySegment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "open_now": self.open_now,
            "open_days": [segment.to_dict() for segment in self.open_days],
        }


def normalize_hours(raw: Any, source: Optional[HoursSource | str] = None) -> dict[str, Any]:
    """
    Normalize a provider hours payload into the canonical schedule.

    Args:
        raw: The provider's hours sub-object, already parsed from JSON
             (Google "opening_hours" or Yelp "hours").
        source: Provider that produced the payload. When given, only that
                provider's shape is accepted. When omitted, the shape is
                inferred from the payload structure.

    Returns:
        {"open_now": bool, "open_days": [...]} or {} if the payload does not
        match the provider shape.

    Examples:
        >>> normalize_hours({"open_now": True, "periods": [{"open": {"day": 0, "time": "0000"}}]}, "google")["open_days"][0]
        {'day': 0, 'start': '0000', 'end': '0000', 'is_overnight': True}
        >>> normalize_hours(None)
        {}
    """
    resolved = _resolve_source(source)
    if source is not None and resolved is None:
        logger.warning(
            "Unknown hours source, returning empty schedule",
            extra={"source": source},
        )
        return {}

    if resolved is None:
        resolved = detect_hours_source(raw)
    elif not _matches_source(raw, resolved):
        resolved = None

    if resolved is None:
        logger.debug(
            "Hours payload did not match any provider shape",
            extra={"source": source, "payload_type": type(raw).__name__},
        )
        return {}

    if resolved is HoursSource.GOOGLE:
        schedule = Schedule(
            open_now=raw["open_now"],
            open_days=expand_periods(raw["periods"]),
        )
    else:
        schedule = Schedule(
            open_now=raw[0]["is_open_now"],
            open_days=remap_day_segments(raw[0]["open"]),
        )

    schedule.open_days.sort(key=DaySegment.sort_key)

    logger.debug(
        "Normalized opening hours",
        extra={
            "source": resolved.value,
            "open_now": schedule.open_now,
            "segments": len(schedule.open_days),
        },
    )

    return schedule.to_dict()


def detect_hours_source(raw: Any) -> Optional[HoursSource]:
    """
    Infer the provider from the structure of an hours payload.

    Returns:
        HoursSource.GOOGLE, HoursSource.YELP, or None if neither shape matches.
    """
    if _is_google_hours(raw):
        return HoursSource.GOOGLE
    if _is_yelp_hours(raw):
        return HoursSource.YELP
    return None


def expand_periods(periods: list[dict[str, Any]]) -> list[DaySegment]:
    """
    Expand Google open/close period pairs into single-day segments.

    A period that closes on a later day is walked forward one day at a time:
    the first segment carries the real open time, the last one the real close
    time, and every segment in between runs "0000"-"0000". When the close time
    is at or before 06:00 the close day does not get its own row; the close
    time ends the previous day's segment instead (Friday 21:00 to Saturday
    03:00 is one Friday segment).

    The single period {"open": {"day": 0, "time": "0000"}} with no close is
    Google's marker for a business that never closes.

    Args:
        periods: Google "opening_hours.periods" list

    Returns:
        Unsorted list of DaySegment with is_overnight computed
    """
    if _is_always_open(periods):
        return [
            DaySegment(day=day, start=MIDNIGHT, end=MIDNIGHT, is_overnight=True)
            for day in range(DAYS_IN_WEEK)
        ]

    segments: list[DaySegment] = []

    for period in periods:
        open_day, open_time = _day_and_time(period.get("open"))
        close_day, close_time = _day_and_time(period.get("close"))

        if open_day is None or close_day is None:
            logger.debug("Skipping malformed hours period", extra={"period": period})
            continue

        if open_day == close_day:
            segments.append(DaySegment(day=open_day, start=open_time, end=close_time))
            continue

        days_open = close_day - open_day if close_day > open_day else (close_day - open_day) + DAYS_IN_WEEK
        iteratee = days_open - 1 if close_time <= EARLY_MORNING_CUTOFF else days_open

        current_day = open_day
        for i in range(iteratee + 1):
            segments.append(
                DaySegment(
                    day=current_day % DAYS_IN_WEEK,
                    start=open_time if i == 0 else MIDNIGHT,
                    end=close_time if i == iteratee else MIDNIGHT,
                )
            )
            current_day += 1

    for segment in segments:
        segment.is_overnight = segment.end <= segment.start

    return segments


def remap_day_segments(entries: list[dict[str, Any]]) -> list[DaySegment]:
    """
    Convert Yelp day segments to canonical day numbering.

    Yelp counts Monday as 0, so every day is shifted by one (Sunday 6 -> 0).
    The provider's is_overnight flag is kept as-is.
    """
    segments: list[DaySegment] = []

    for entry in entries:
        day = entry.get("day")
        start = entry.get("start")
        end = entry.get("end")
        is_overnight = entry.get("is_overnight")
        if not (
            _is_weekday(day)
            and _is_hhmm(start)
            and _is_hhmm(end)
            and isinstance(is_overnight, bool)
        ):
            logger.debug("Skipping malformed hours segment", extra={"segment": entry})
            continue

        segments.append(
            DaySegment(
                day=(day + 1) % DAYS_IN_WEEK,
                start=start,
                end=end,
                is_overnight=is_overnight,
            )
        )

    return segments


def _resolve_source(source: Optional[HoursSource | str]) -> Optional[HoursSource]:
    if source is None or isinstance(source, HoursSource):
        return source
    try:
        return HoursSource(str(source).lower())
    except ValueError:
        return None


def _matches_source(raw: Any, source: HoursSource) -> bool:
    if source is HoursSource.GOOGLE:
        return _is_google_hours(raw)
    return _is_yelp_hours(raw)


def _is_google_hours(raw: Any) -> bool:
    if not isinstance(raw, dict):
        return False
    periods = raw.get("periods")
    return (
        isinstance(raw.get("open_now"), bool)
        and isinstance(periods, list)
        and all(isinstance(period, dict) for period in periods)
    )


def _is_yelp_hours(raw: Any) -> bool:
    if not isinstance(raw, list) or not raw or not isinstance(raw[0], dict):
        return False
    entries = raw[0].get("open")
    return (
        isinstance(raw[0].get("is_open_now"), bool)
        and isinstance(entries, list)
        and all(isinstance(entry, dict) for entry in entries)
    )


def _is_always_open(periods: list[dict[str, Any]]) -> bool:
    if len(periods) != 1:
        return False
    first = periods[0]
    opening = first.get("open")
    return (
        isinstance(opening, dict)
        and _is_weekday(opening.get("day"))
        and opening.get("day") == 0
        and opening.get("time") == MIDNIGHT
        and "close" not in first
    )


def _day_and_time(point: Any) -> tuple[Optional[int], Optional[str]]:
    """Return (day, time) from a Google open/close point, or (None, None)."""
    if not isinstance(point, dict):
        return None, None
    day = point.get("day")
    time = point.get("time")
    if not _is_weekday(day) or not _is_hhmm(time):
        return None, None
    return day, time


def _is_weekday(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < DAYS_IN_WEEK


def _is_hhmm(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 4 and value.isdigit()
