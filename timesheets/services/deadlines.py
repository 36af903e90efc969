"""
Calendar-day deadline comparisons.

Time of day never matters: every value is reduced to a date in the active
local timezone before it is compared.
"""
from datetime import date, datetime

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def to_calendar_day(value):
    """
    Reduce a date, datetime or ISO string to a local calendar date.

    Aware datetimes are converted to the local timezone first; naive ones are
    taken as already local. Empty values and unparseable strings give None.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text)
            if parsed is not None:
                return to_calendar_day(parsed)
            return parse_date(text[:10])
        except ValueError:
            return None
    raise TypeError(f"Cannot read a calendar day from {type(value).__name__}")


def today():
    return timezone.localdate()


def day_key(value):
    """`YYYY-MM-DD` for the value's calendar day, or None."""
    day = to_calendar_day(value)
    return day.isoformat() if day else None


def is_overdue(due_date, reference_date=None):
    """True only when the due day is strictly before the reference day."""
    due = to_calendar_day(due_date)
    if due is None:
        return False
    reference = to_calendar_day(reference_date) if reference_date is not None else today()
    return due < reference


def due_date_matches(due_date, target_date):
    """Calendar-day equality; a missing due date never matches."""
    due = to_calendar_day(due_date)
    if due is None:
        return False
    return due == to_calendar_day(target_date)
