"""Natural-language date/time resolution.

Phrases are resolved against a reference instant with a forward bias: an
ambiguous expression (a bare weekday, a clock time, a month/day without a
year) lands on the nearest occurrence at or after the reference, never in
the past. Common phrases go through a small deterministic grammar; anything
else is handed to ``dateparser`` configured to prefer future dates.
"""

from __future__ import annotations

import logging
import re
from calendar import month_abbr, month_name, monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

import dateparser

logger = logging.getLogger(__name__)

DEFAULT_TIME = time(hour=9, minute=0)

_WEEKDAYS = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

_MONTH_LOOKUP = {name.lower(): idx for idx, name in enumerate(month_name) if name}
_MONTH_LOOKUP.update({abbr.lower(): idx for idx, abbr in enumerate(month_abbr) if abbr})
_MONTH_LOOKUP["sept"] = 9

_PERIODS = {
    "morning": time(hour=9),
    "noon": time(hour=12),
    "midday": time(hour=12),
    "afternoon": time(hour=15),
    "evening": time(hour=18),
    "tonight": time(hour=20),
    "night": time(hour=20),
    "midnight": time(hour=0),
}

_NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}

_FILLERS = {"at", "on", "the", "of", "by", "for", "due", "starting"}

_CLOCK = r"\d{1,2}(?::\d{2})?\s*(?:am|pm)|\d{1,2}:\d{2}"
_RANGE_RE = re.compile(
    rf"(?:\bfrom\s+)?\b(?P<first>\d{{1,2}}(?::\d{{2}})?\s*(?:am|pm)?)\s*(?:-|to|until|till)\s*(?P<second>{_CLOCK})\b"
)
_TIME_RE = re.compile(rf"(?:\bat\s+)?\b(?P<clock>{_CLOCK})(?![\w/:])")
_PERIOD_RE = re.compile(r"\b(?:this\s+|in\s+the\s+)?(?P<period>" + "|".join(_PERIODS) + r")\b")
_RELATIVE_RE = re.compile(
    r"^(?:in\s+(?P<amount>\d+|" + "|".join(_NUMBER_WORDS) + r")\s+(?P<unit>minute|hour|day|week|month)s?"
    r"|(?P<amount_from>\d+|" + "|".join(_NUMBER_WORDS) + r")\s+(?P<unit_from>minute|hour|day|week|month)s?\s+from\s+now)$"
)
_WEEKDAY_RE = re.compile(r"^(?:(?P<modifier>this|next|coming)\s+)?(?P<weekday>" + "|".join(_WEEKDAYS) + r")$")
_ORDINAL = r"(?:st|nd|rd|th)?"
_WEEKDAY_PREFIX = r"(?:(?:" + "|".join(_WEEKDAYS) + r")\s+)?"
_MONTH_DAY_RE = re.compile(
    rf"^{_WEEKDAY_PREFIX}(?P<month>[a-z]+)\s+(?P<day>\d{{1,2}}){_ORDINAL}(?:\s+(?P<year>\d{{4}}))?$"
)
_DAY_MONTH_RE = re.compile(
    rf"^{_WEEKDAY_PREFIX}(?P<day>\d{{1,2}}){_ORDINAL}\s+(?P<month>[a-z]+)(?:\s+(?P<year>\d{{4}}))?$"
)
_NUMERIC_DATE_RE = re.compile(r"^(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:/(?P<year>\d{2}|\d{4}))?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ORDINAL_DAY_RE = re.compile(r"^(?P<day>\d{1,2})(?:st|nd|rd|th)$")

# how a past candidate moves forward: a fixed step, to the next month or year,
# to the next full hour of the same day ("hour"), or not at all
_Roll = Union[timedelta, str, None]


@dataclass(frozen=True)
class TimeSpan:
    start: datetime
    end: Optional[datetime] = None

    def with_duration(self, minutes: int) -> "TimeSpan":
        return TimeSpan(start=self.start, end=self.start + timedelta(minutes=minutes))

    def ensure_end(self, default_minutes: int) -> "TimeSpan":
        """Keep a parsed end that follows the start, otherwise apply ``default_minutes``."""

        if self.end is not None and self.end > self.start:
            return self
        return self.with_duration(default_minutes)


@dataclass
class _Clock:
    start: Optional[time] = None
    end: Optional[time] = None
    # start came from a period word ("tonight") rather than a spoken time
    implied: bool = False


def local_now(timezone_name: str) -> datetime:
    return datetime.now(ZoneInfo(timezone_name))


def _normalize(text: str) -> str:
    lowered = text.strip().lower()
    lowered = re.sub(r"\b([ap])\.m\.?", r"\1m", lowered)
    lowered = re.sub(r"[,;!?]", " ", lowered)
    lowered = re.sub(r"\.(?=\s|$)", " ", lowered)
    return re.sub(r"\s+", " ", lowered).strip()


def _to_time(token: str, meridiem_hint: Optional[str] = None) -> Optional[time]:
    match = re.fullmatch(r"(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<ampm>am|pm)?", token.strip())
    if not match:
        return None
    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    ampm = match.group("ampm") or meridiem_hint
    if ampm:
        if not 1 <= hour <= 12:
            return None
        if ampm == "pm" and hour < 12:
            hour += 12
        if ampm == "am" and hour == 12:
            hour = 0
    if hour > 23 or minute > 59:
        return None
    return time(hour=hour, minute=minute)


def _meridiem(token: str) -> Optional[str]:
    match = re.search(r"(am|pm)$", token.strip())
    return match.group(1) if match else None


def _extract_clock(text: str) -> Tuple[str, _Clock]:
    clock = _Clock()
    range_match = _RANGE_RE.search(text)
    if range_match:
        first, second = range_match.group("first"), range_match.group("second")
        end = _to_time(second)
        hint = None if _meridiem(first) else _meridiem(second)
        start = _to_time(first, hint)
        if start is not None and end is not None and start >= end and hint:
            alternative = _to_time(first, "am" if hint == "pm" else "pm")
            start = alternative if alternative is not None and alternative < end else start
        if start is not None and end is not None:
            clock.start, clock.end = start, end
            text = text[: range_match.start()] + " " + text[range_match.end():]
    if clock.start is None:
        time_match = _TIME_RE.search(text)
        if time_match:
            parsed = _to_time(time_match.group("clock"))
            if parsed is not None:
                clock.start = parsed
                text = text[: time_match.start()] + " " + text[time_match.end():]
    period_match = _PERIOD_RE.search(text)
    if period_match:
        if clock.start is None:
            clock.start = _PERIODS[period_match.group("period")]
            clock.implied = True
        text = text[: period_match.start()] + " " + text[period_match.end():]
        if period_match.group("period") == "tonight":
            text = f"today {text}"
    return re.sub(r"\s+", " ", text).strip(), clock


def _strip_fillers(text: str) -> str:
    return " ".join(token for token in text.split() if token not in _FILLERS)


def _amount(raw: str) -> int:
    return int(raw) if raw.isdigit() else _NUMBER_WORDS[raw]


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


class TemporalResolver:
    """Resolve date/time phrases relative to a reference instant."""

    def __init__(self, *, default_time: time = DEFAULT_TIME, languages: Tuple[str, ...] = ("en",)) -> None:
        self.default_time = default_time
        self.languages = list(languages)

    def parse(self, text: Optional[str], reference: datetime) -> Optional[TimeSpan]:
        if not text or not text.strip():
            return None
        iso = self._parse_iso_datetime(text.strip(), reference)
        if iso is not None:
            return iso
        span = self._parse_phrase(_normalize(text), reference)
        if span is not None:
            return span
        return self._parse_fallback(text, reference)

    def day_window(self, text: Optional[str], reference: datetime) -> Tuple[datetime, datetime]:
        """Whole local day named by ``text``; the reference day when the phrase is not recognized."""

        span = self.parse(text, reference) if text else None
        day = span.start.date() if span else reference.date()
        tzinfo = reference.tzinfo
        return datetime.combine(day, time.min, tzinfo=tzinfo), datetime.combine(day, time.max, tzinfo=tzinfo)

    # ------------------------------------------------------------------ grammar

    def _parse_iso_datetime(self, text: str, reference: datetime) -> Optional[TimeSpan]:
        if _ISO_DATE_RE.match(text) or not re.match(r"^\d{4}-\d{2}-\d{2}[T ]\d", text):
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None and reference.tzinfo is not None:
            parsed = parsed.replace(tzinfo=reference.tzinfo)
        return TimeSpan(start=parsed)

    def _parse_phrase(self, text: str, reference: datetime) -> Optional[TimeSpan]:
        rest, clock = _extract_clock(text)
        rest = _strip_fillers(rest)

        relative = _RELATIVE_RE.match(rest)
        if relative:
            return self._relative(relative, clock, reference)

        if not rest:
            if clock.start is None:
                return None
            return self._combine(reference.date(), clock, reference, roll=timedelta(days=1))

        weekday = _WEEKDAY_RE.match(rest)
        if weekday:
            return self._weekday(weekday, clock, reference)

        target = self._calendar_day(rest, reference)
        if target is None:
            return None
        day, roll = target
        if rest == "today" and (clock.start is None or clock.implied):
            # a spoken time stays where it was put; a default one moves to the next hour
            roll = "hour"
        return self._combine(day, clock, reference, roll=roll)

    def _calendar_day(self, rest: str, reference: datetime) -> Optional[Tuple[date, _Roll]]:
        today = reference.date()
        fixed = {
            "today": today,
            "tomorrow": today + timedelta(days=1),
            "tmrw": today + timedelta(days=1),
            "day after tomorrow": today + timedelta(days=2),
            "yesterday": today - timedelta(days=1),
            "next week": today + timedelta(days=7),
            "next month": _add_months(today, 1),
        }
        if rest in fixed:
            return fixed[rest], None
        if rest in {"weekend", "this weekend"}:
            return today + timedelta(days=(5 - today.weekday()) % 7), None
        if _ISO_DATE_RE.match(rest):
            try:
                return date.fromisoformat(rest), None
            except ValueError:
                return None

        for pattern in (_MONTH_DAY_RE, _DAY_MONTH_RE):
            match = pattern.match(rest)
            if match and match.group("month") in _MONTH_LOOKUP:
                month = _MONTH_LOOKUP[match.group("month")]
                return self._with_year(match.group("year"), month, int(match.group("day")), today)

        numeric = _NUMERIC_DATE_RE.match(rest)
        if numeric:
            year = numeric.group("year")
            if year and len(year) == 2:
                year = f"20{year}"
            return self._with_year(year, int(numeric.group("month")), int(numeric.group("day")), today)

        ordinal = _ORDINAL_DAY_RE.match(rest)
        if ordinal:
            day_of_month = int(ordinal.group("day"))
            candidate = _safe_date(today.year, today.month, day_of_month)
            if candidate is None:
                return None
            return candidate, "month"
        return None

    def _with_year(
        self, year: Optional[str], month: int, day_of_month: int, today: date
    ) -> Optional[Tuple[date, _Roll]]:
        if year:
            candidate = _safe_date(int(year), month, day_of_month)
            return (candidate, None) if candidate else None
        candidate = _safe_date(today.year, month, day_of_month)
        if candidate is None:
            return None
        return candidate, "year"

    def _weekday(self, match: re.Match, clock: _Clock, reference: datetime) -> TimeSpan:
        target = _WEEKDAYS[match.group("weekday")]
        days_ahead = (target - reference.weekday()) % 7
        if match.group("modifier") == "next" and days_ahead == 0:
            days_ahead = 7
        day = reference.date() + timedelta(days=days_ahead)
        return self._combine(day, clock, reference, roll=timedelta(days=7))

    def _relative(self, match: re.Match, clock: _Clock, reference: datetime) -> TimeSpan:
        amount = _amount(match.group("amount") or match.group("amount_from"))
        unit = match.group("unit") or match.group("unit_from")
        if unit in {"minute", "hour"}:
            delta = timedelta(minutes=amount) if unit == "minute" else timedelta(hours=amount)
            start = (reference + delta).replace(second=0, microsecond=0)
            return TimeSpan(start=start)
        if unit == "month":
            day = _add_months(reference.date(), amount)
        else:
            day = reference.date() + timedelta(days=amount * (7 if unit == "week" else 1))
        return self._combine(day, clock, reference, roll=None)

    def _combine(self, day: date, clock: _Clock, reference: datetime, *, roll: _Roll) -> TimeSpan:
        start_time = clock.start or self.default_time
        start = datetime.combine(day, start_time, tzinfo=reference.tzinfo)
        if start < reference:
            start = self._roll_forward(start, roll, reference)
        end = None
        if clock.start is not None and clock.end is not None:
            end = datetime.combine(start.date(), clock.end, tzinfo=reference.tzinfo)
            if end <= start:
                end += timedelta(days=1)
        return TimeSpan(start=start, end=end)

    @staticmethod
    def _roll_forward(start: datetime, roll: _Roll, reference: datetime) -> datetime:
        if isinstance(roll, timedelta):
            return start + roll
        if roll == "hour":
            upcoming = reference.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
            return upcoming if upcoming.date() == start.date() else start
        if roll == "month":
            next_day = _add_months(start.date().replace(day=1), 1)
            target = _safe_date(next_day.year, next_day.month, start.day)
            return datetime.combine(target or next_day, start.timetz())
        if roll == "year":
            target = _safe_date(start.year + 1, start.month, start.day)
            if target is None:
                target = date(start.year + 1, start.month, 28)
            return datetime.combine(target, start.timetz())
        return start

    # ------------------------------------------------------------------ fallback

    def _parse_fallback(self, text: str, reference: datetime) -> Optional[TimeSpan]:
        settings = {
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": reference.replace(tzinfo=None),
            "RETURN_AS_TIMEZONE_AWARE": False,
        }
        parsed = dateparser.parse(text, languages=self.languages, settings=settings)
        if parsed is None:
            logger.debug("Unrecognized date/time phrase: %r", text)
            return None
        if reference.tzinfo is not None:
            parsed = parsed.replace(tzinfo=reference.tzinfo)
        return TimeSpan(start=parsed)
