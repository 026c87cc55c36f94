"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from reelcost.utils.date_parser import parse_date


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_czech_day_first_date():
    """Dotted dates are read day first."""
    assert parse_date("3.2.2024") == date(2024, 2, 3)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    result = parse_date(" Yesterday ")
    assert result == date.today() - timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month'."""
    result = parse_date("last month")
    # Should be first day of last month
    today = date.today()
    if today.month == 1:
        expected = date(today.year - 1, 12, 1)
    else:
        expected = date(today.year, today.month - 1, 1)
    assert result == expected


def test_parse_this_week():
    """Test parsing 'this week'."""
    result = parse_date("this week")
    assert result.weekday() == 0
    assert result <= date.today()


def test_parse_this_year():
    """Test parsing 'this year'."""
    result = parse_date("this year")
    today = date.today()
    assert result == date(today.year, 1, 1)


def test_parse_invalid_date():
    """Test parsing an unparseable date."""
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_parse_last_week_starts_on_monday():
    """'last week' is the Monday seven days before this week's."""
    result = parse_date("last week")
    assert result.weekday() == 0
    assert result == parse_date("this week") - timedelta(days=7)


def test_parse_unknown_period():
    """Unknown periods are rejected rather than guessed."""
    with pytest.raises(ValueError, match="Unknown period"):
        parse_date("this quarter")
