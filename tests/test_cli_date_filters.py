"""Tests for CLI date filter helpers."""

from datetime import date

import click
import pytest

from microcompta.cli.date_filters import (
    PERIOD_FLAGS,
    collect_period_flags,
    period_options,
    resolve_cli_date_range,
)
from microcompta.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_period_options_adds_one_flag_per_period():
    @click.command()
    @period_options
    def command(**kwargs):
        pass

    names = {opt.name for opt in command.params}
    assert names == {p.replace("-", "_") for p in PERIOD_FLAGS}


def test_collect_period_flags_pops_only_periods():
    kwargs = {"this_quarter": True, "last_year": False, "as_json": True}
    flags = collect_period_flags(kwargs)
    assert flags["this-quarter"] is True
    assert flags["last-year"] is False
    assert flags["this-month"] is False
    assert kwargs == {"as_json": True}


def test_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date=None,
            period_flags={"this-month": True, "last-quarter": True},
        )

    assert excinfo.value.exit_code == 1
    assert "Only one period option" in capsys.readouterr().err


def test_rejects_period_with_explicit_dates(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2025-01-01",
            end_date=None,
            period_flags={"this-quarter": True},
        )

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_period_flag_wins_over_default():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date=None,
        end_date=None,
        period_flags={"this-quarter": True},
        default_range=(date(2020, 1, 1), date(2020, 1, 31)),
    )
    assert (start, end) == get_date_range("this-quarter")


def test_explicit_dates_are_day_first():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date="01/03/2025",
        end_date="31/03/2025",
        period_flags={},
    )
    assert (start, end) == (date(2025, 3, 1), date(2025, 3, 31))


def test_default_range_when_nothing_given():
    default_range = (date(2025, 3, 1), date(2025, 3, 31))
    assert resolve_cli_date_range(
        _ctx(), start_date=None, end_date=None, period_flags={}, default_range=default_range
    ) == default_range


def test_only_one_bound():
    start, end = resolve_cli_date_range(
        _ctx(), start_date=None, end_date="2025-03-31", period_flags={}
    )
    assert start is None
    assert end == date(2025, 3, 31)


def test_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date="not-a-date",
            period_flags={},
        )

    assert excinfo.value.exit_code == 1
    assert "Invalid end date" in capsys.readouterr().err
