"""
Normalizer

Pure functions that turn provider-specific place fields into the unified
place schema. Nothing in this package performs I/O or raises on unexpected
input; unrecognized data becomes an empty value.

Main components:
- hours: opening-hours reconciliation into a canonical per-day schedule
- converters: address, categories, services, URL, phone, distance,
  timestamps, photos, price and reviews
"""

from .hours import DaySegment, HoursSource, Schedule, normalize_hours

__all__ = ["DaySegment", "HoursSource", "Schedule", "normalize_hours"]
