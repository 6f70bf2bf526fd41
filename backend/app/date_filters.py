# Overview: Calendar-day range presets, validation and query filters in the civil timezone.

"""
Date-range filtering for reports.

Every "day" in this application is a calendar day in one civil timezone
(CIVIL_TIMEZONE, Asia/Manila by default), never the server's local zone.
Ranges travel as YYYY-MM-DD strings; an empty string means "unbounded".

Two filter modes:
- date-only columns (sales.sale_date, expenses.date) compare against the
  calendar date directly
- timestamp columns (audit_logs.timestamp) compare against the UTC instants
  of civil 00:00:00.000 and 23:59:59.999
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from app.time_utils import as_aware_utc, to_utc_z_millis


DEFAULT_CIVIL_TIMEZONE = "Asia/Manila"
DATE_FORMAT = "%Y-%m-%d"

START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)

_civil_tz = ZoneInfo(DEFAULT_CIVIL_TIMEZONE)


def configure_civil_timezone(name: str) -> None:
    """Set the module-wide civil timezone (called once by create_app)."""
    global _civil_tz
    _civil_tz = ZoneInfo(name)


def civil_timezone() -> ZoneInfo:
    return _civil_tz


class DatePreset(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last_7_days"
    LAST_30_DAYS = "last_30_days"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    CUSTOM = "custom"


PRESET_LABELS = {
    DatePreset.TODAY: "Today",
    DatePreset.YESTERDAY: "Yesterday",
    DatePreset.LAST_7_DAYS: "Last 7 Days",
    DatePreset.LAST_30_DAYS: "Last 30 Days",
    DatePreset.THIS_MONTH: "This Month",
    DatePreset.LAST_MONTH: "Last Month",
    DatePreset.CUSTOM: "Custom Range",
}


@dataclass(frozen=True)
class DateRange:
    start_date: str = ""
    end_date: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.start_date and not self.end_date

    def to_dict(self) -> dict:
        return {"startDate": self.start_date, "endDate": self.end_date}


@dataclass(frozen=True)
class RangeValidation:
    valid: bool
    error: Optional[str] = None


def _tz(tz: Optional[ZoneInfo]) -> ZoneInfo:
    return tz if tz is not None else _civil_tz


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string. Raises ValueError otherwise."""
    return datetime.strptime(value, DATE_FORMAT).date()


def civil_today(now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> date:
    """
    The calendar date it currently is in the civil timezone.

    `now` is an instant; naive values are treated as UTC.
    """
    instant = as_aware_utc(now) if now is not None else datetime.now(timezone.utc)
    return instant.astimezone(_tz(tz)).date()


def civil_today_str(now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> str:
    return format_date(civil_today(now, tz))


def civil_days_ago(days: int, now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> str:
    return format_date(civil_today(now, tz) - timedelta(days=days))


def resolve_preset(
    preset: str,
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> DateRange:
    """
    Concrete range for a preset as of `now`.

    last_7_days / last_30_days include today. this_month ends today, not at
    month end. custom and unknown names resolve to an empty range.
    """
    try:
        preset = DatePreset(preset)
    except ValueError:
        return DateRange()

    today = civil_today(now, tz)

    if preset is DatePreset.TODAY:
        start = end = today
    elif preset is DatePreset.YESTERDAY:
        start = end = today - timedelta(days=1)
    elif preset is DatePreset.LAST_7_DAYS:
        start, end = today - timedelta(days=6), today
    elif preset is DatePreset.LAST_30_DAYS:
        start, end = today - timedelta(days=29), today
    elif preset is DatePreset.THIS_MONTH:
        start, end = today.replace(day=1), today
    elif preset is DatePreset.LAST_MONTH:
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    else:
        return DateRange()

    return DateRange(format_date(start), format_date(end))


def validate_date_range(
    start_date: Optional[str],
    end_date: Optional[str],
    *,
    max_days: Optional[int] = None,
    allow_future: bool = False,
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> RangeValidation:
    """
    Check a candidate range without altering it.

    Empty or single-bound ranges are valid. Bounds after civil today are
    rejected unless allow_future is set.
    """
    if not start_date and not end_date:
        return RangeValidation(True)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError:
        return RangeValidation(False, "Dates must be in YYYY-MM-DD format")

    if start is not None and end is not None:
        if start > end:
            return RangeValidation(False, "Start date must be before or equal to end date")

        if max_days:
            span = (end - start).days + 1
            if span > max_days:
                return RangeValidation(False, f"Date range cannot exceed {max_days} days")

    if not allow_future:
        today = civil_today(now, tz)
        if (start is not None and start > today) or (end is not None and end > today):
            return RangeValidation(False, "Future dates are not allowed")

    return RangeValidation(True)


def day_boundary_utc(
    date_str: str,
    end_of_day: bool = False,
    tz: Optional[ZoneInfo] = None,
) -> datetime:
    """
    UTC instant (naive) of civil 00:00:00.000, or 23:59:59.999 when
    end_of_day, on the given calendar day.
    """
    day = parse_date(date_str)
    wall_clock = datetime.combine(day, END_OF_DAY if end_of_day else START_OF_DAY, tzinfo=_tz(tz))
    return wall_clock.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_timestamp(
    date_str: Optional[str],
    end_of_day: bool = False,
    tz: Optional[ZoneInfo] = None,
) -> Optional[str]:
    if not date_str:
        return None
    return to_utc_z_millis(day_boundary_utc(date_str, end_of_day, tz))


def apply_date_range_filter(
    query,
    column,
    start_date: Optional[str],
    end_date: Optional[str],
    is_timestamp: bool = False,
    tz: Optional[ZoneInfo] = None,
):
    """
    Add inclusive range predicates on `column` to a SQLAlchemy Query/Select.

    Date-only columns are compared against the calendar date; timestamp
    columns against the UTC boundaries of the civil day.
    """
    if query is None or column is None:
        return query

    if start_date:
        if is_timestamp:
            query = query.filter(column >= day_boundary_utc(start_date, False, tz))
        else:
            query = query.filter(column >= parse_date(start_date))

    if end_date:
        if is_timestamp:
            query = query.filter(column <= day_boundary_utc(end_date, True, tz))
        else:
            query = query.filter(column <= parse_date(end_date))

    return query


def detect_preset(
    start_date: Optional[str],
    end_date: Optional[str],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> str:
    """Which preset produced this range: a preset value, "custom", or "" if empty."""
    if not start_date and not end_date:
        return ""

    for preset in DatePreset:
        if preset is DatePreset.CUSTOM:
            continue
        candidate = resolve_preset(preset, now, tz)
        if candidate.start_date == start_date and candidate.end_date == end_date:
            return preset.value
    return DatePreset.CUSTOM.value


def preset_label(preset: str) -> str:
    try:
        return PRESET_LABELS[DatePreset(preset)]
    except ValueError:
        return PRESET_LABELS[DatePreset.CUSTOM]


def date_range_from_args(args: Mapping[str, str], now: Optional[datetime] = None) -> DateRange:
    """
    Read a range from request query args.

    A non-custom `preset` wins over explicit start_date/end_date.
    """
    preset = (args.get("preset") or "").strip()
    if preset and preset != DatePreset.CUSTOM.value:
        return resolve_preset(preset, now)
    return DateRange(
        (args.get("start_date") or "").strip(),
        (args.get("end_date") or "").strip(),
    )
