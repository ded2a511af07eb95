"""Tests for date, month and trimester helpers."""

import pytest
from datetime import date, timedelta

from microcompta.utils.date_parser import (
    get_date_range,
    iter_months,
    month_end,
    month_key,
    parse_date,
    parse_month,
    trimester_of,
    trimester_range,
    vat_due_date,
)


def test_parse_absolute_date():
    """Test parsing ISO dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_iso_date_is_not_day_first():
    assert parse_date("2025-03-04") == date(2025, 3, 4)


def test_parse_french_date_is_day_first():
    assert parse_date("15/03/2025") == date(2025, 3, 15)
    assert parse_date("04/03/2025") == date(2025, 3, 4)


def test_parse_today():
    assert parse_date("today") == date.today()


def test_parse_yesterday():
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_this_month():
    today = date.today()
    assert parse_date("this month") == date(today.year, today.month, 1)


def test_parse_last_year():
    assert parse_date("last year") == date(date.today().year - 1, 1, 1)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date at all")


class TestMonths:
    def test_parse_month(self):
        assert parse_month("2025-03") == date(2025, 3, 1)

    @pytest.mark.parametrize("text", ["2025-13", "2025-00", "2025-3", "March 2025", ""])
    def test_parse_month_rejects(self, text):
        with pytest.raises(ValueError):
            parse_month(text)

    def test_month_key(self):
        assert month_key(date(2025, 3, 17)) == "2025-03"

    def test_month_end_leap_year(self):
        assert month_end(date(2024, 2, 10)) == date(2024, 2, 29)
        assert month_end(date(2025, 2, 10)) == date(2025, 2, 28)

    def test_iter_months_crosses_year(self):
        months = list(iter_months(date(2024, 11, 15), date(2025, 2, 1)))
        assert months == [
            date(2024, 11, 1),
            date(2024, 12, 1),
            date(2025, 1, 1),
            date(2025, 2, 1),
        ]


class TestTrimesters:
    @pytest.mark.parametrize("month, trimester", [(1, 1), (3, 1), (4, 2), (9, 3), (10, 4), (12, 4)])
    def test_trimester_of(self, month, trimester):
        assert trimester_of(month) == trimester

    def test_trimester_range(self):
        assert trimester_range(2025, 1) == (date(2025, 1, 1), date(2025, 3, 31))
        assert trimester_range(2025, 4) == (date(2025, 10, 1), date(2025, 12, 31))


class TestVatDueDate:
    def test_weekday_stays(self):
        # 2025-06-19 is a Thursday
        assert vat_due_date(date(2025, 5, 1)) == date(2025, 6, 19)

    def test_saturday_moves_to_monday(self):
        # 2025-04-19 is a Saturday
        assert vat_due_date(date(2025, 3, 1)) == date(2025, 4, 21)

    def test_sunday_moves_to_monday(self):
        # 2025-10-19 is a Sunday
        assert vat_due_date(date(2025, 9, 30)) == date(2025, 10, 20)

    def test_december_rolls_over(self):
        # 2026-01-19 is a Monday
        assert vat_due_date(date(2025, 12, 1)) == date(2026, 1, 19)


class TestDateRange:
    def test_this_quarter(self):
        assert get_date_range("this-quarter", today=date(2025, 5, 5)) == (
            date(2025, 4, 1),
            date(2025, 6, 30),
        )

    def test_last_quarter_crosses_year(self):
        assert get_date_range("last-quarter", today=date(2025, 2, 10)) == (
            date(2024, 10, 1),
            date(2024, 12, 31),
        )

    def test_last_month(self):
        assert get_date_range("last-month", today=date(2025, 1, 20)) == (
            date(2024, 12, 1),
            date(2024, 12, 31),
        )

    def test_unknown_period(self):
        with pytest.raises(ValueError, match="Unknown period"):
            get_date_range("next-decade")
