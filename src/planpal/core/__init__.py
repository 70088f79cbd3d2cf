"""Resolution helpers shared by the tool handlers: dates, times and titles."""

from .entities import EntityResolver, first_title_match
from .temporal import DEFAULT_TIME, TemporalResolver, TimeSpan, local_now

__all__ = [
    "DEFAULT_TIME",
    "EntityResolver",
    "TemporalResolver",
    "TimeSpan",
    "first_title_match",
    "local_now",
]
