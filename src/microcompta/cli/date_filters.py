"""CLI helpers for date range resolution."""

from datetime import date

import click

from microcompta.utils.date_parser import get_date_range, parse_date

PERIOD_FLAGS = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def period_options(func):
    """Add one boolean flag per named period (--this-month, --last-quarter...)."""
    for period in reversed(PERIOD_FLAGS):
        func = click.option(
            f"--{period}",
            period.replace("-", "_"),
            is_flag=True,
            help=f"Use {period.replace('-', ' ')}",
        )(func)
    return func


def collect_period_flags(kwargs: dict) -> dict[str, bool]:
    """Pop the period flags added by ``period_options`` from command kwargs."""
    return {period: kwargs.pop(period.replace("-", "_"), False) for period in PERIOD_FLAGS}


def _parse_bound(ctx, label: str, value: str | None) -> date | None:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} date: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Turn a period flag or --start-date/--end-date into a date range.

    Falls back to ``default_range`` when neither is given. Conflicting
    options print an error and exit with status 1.
    """
    chosen = [period for period, is_set in period_flags.items() if is_set]

    if len(chosen) > 1:
        flags = ", ".join(f"--{period}" for period in PERIOD_FLAGS)
        click.echo(f"Error: Only one period option ({flags}) can be specified at a time.", err=True)
        ctx.exit(1)

    if chosen:
        if start_date or end_date:
            click.echo(
                f"Error: --{chosen[0]} cannot be combined with --start-date or --end-date.",
                err=True,
            )
            ctx.exit(1)
        return get_date_range(chosen[0])

    start = _parse_bound(ctx, "start", start_date)
    end = _parse_bound(ctx, "end", end_date)
    if start is None and end is None and default_range is not None:
        return default_range
    return start, end
