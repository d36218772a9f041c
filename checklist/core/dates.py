from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo


def normalize_day(value: date | datetime, tz: tzinfo | None = None) -> date:
    """Collapse a date or datetime onto its calendar day in the local zone.

    Aware datetimes are converted to ``tz`` first; naive ones are taken as
    already local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def weekday_ordinal(day: date) -> int:
    # 1=Sunday .. 7=Saturday
    return day.isoweekday() % 7 + 1


def week_window(today: date, cutoff: date | None = None) -> list[date]:
    """Days of the Sunday-started week containing ``today``, newest first.

    Days after ``today`` and days before ``cutoff`` are left out.
    """
    week_start = today - timedelta(days=weekday_ordinal(today) - 1)
    days: list[date] = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        if day > today:
            break
        if cutoff is not None and day < cutoff:
            continue
        days.append(day)
    days.reverse()
    return days
