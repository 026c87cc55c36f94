"""Date parsing for invoice list filters."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def _period_start(today: date, period: str, back: int) -> date:
    if period == "week":
        return today - timedelta(days=today.weekday() + 7 * back)
    if period == "month":
        return today.replace(day=1) - relativedelta(months=back)
    if period == "year":
        return today.replace(month=1, day=1) - relativedelta(years=back)
    raise ValueError(f"Unknown period '{period}'. Use week, month or year")


def parse_date(date_str: str) -> date:
    """Parse a filter date as typed on the command line.

    Accepted forms:
    - "today", "yesterday", "tomorrow"
    - "this week|month|year" and "last week|month|year" (first day of the period)
    - absolute dates; dotted ones are read day first ("3.2.2024" is 3 February)

    Raises:
        ValueError: If the string is not a date
    """
    text = date_str.strip().lower()
    today = date.today()

    offsets = {"today": 0, "yesterday": -1, "tomorrow": 1}
    if text in offsets:
        return today + timedelta(days=offsets[text])

    prefix, _, period = text.partition(" ")
    if prefix in ("this", "last") and period:
        return _period_start(today, period, 1 if prefix == "last" else 0)

    try:
        return date_parser.parse(text, dayfirst="." in text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
