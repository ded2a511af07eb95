"""Settings, yearly rates and tax bracket commands."""

from datetime import date

import click
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.errors import DomainError
from microcompta.domain.settings import SettingsService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.money import format_amount


def _parse_bracket(value: str):
    """Parse "MIN:MAX:RATE" (empty MAX for the top bracket)."""
    parts = value.split(":")
    if len(parts) != 3:
        raise ValueError(f"Invalid bracket '{value}' (expected MIN:MAX:RATE)")
    min_income, max_income, rate = (p.strip() for p in parts)
    return (
        parse_amount(min_income),
        parse_amount(max_income) if max_income else None,
        parse_amount(rate),
    )


@click.group()
def settings_group():
    """Rates, salary and income tax brackets."""
    pass


@settings_group.command("show")
@click.option("--year", type=int, help="Apply this year's rate override")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def show_settings(ctx, year: int | None, as_json: bool) -> None:
    """Show the effective settings."""
    service = SettingsService(ctx.obj["db"])
    current = service.effective_settings(ctx.obj["user_id"], year)
    data = {
        "urssafRate": format_amount(current.urssaf_rate),
        "estimatedTaxRate": format_amount(current.estimated_tax_rate),
        "revenueDeductionRate": format_amount(current.revenue_deduction_rate),
        "monthlySalary": format_amount(current.monthly_salary),
        "additionalTaxableIncome": format_amount(current.additional_taxable_income),
    }
    if year is not None:
        _, is_custom = service.get_yearly_rates(ctx.obj["user_id"], year)
        data["year"] = year
        data["isCustom"] = is_custom
    if as_json:
        echo_json(data)
        return

    click.echo(f"Urssaf rate:               {data['urssafRate']}%")
    click.echo(f"Estimated tax rate:        {data['estimatedTaxRate']}%")
    click.echo(f"Revenue deduction rate:    {data['revenueDeductionRate']}%")
    click.echo(f"Monthly salary:            {data['monthlySalary']}")
    click.echo(f"Additional taxable income: {data['additionalTaxableIncome']}")
    if year is not None:
        source = "custom rates" if data["isCustom"] else "default rates"
        click.echo(f"({year}: {source})")


@settings_group.command("set")
@click.option("--urssaf-rate", help="Urssaf rate in percent")
@click.option("--tax-rate", help="Estimated income tax rate in percent")
@click.option("--deduction-rate", help="Revenue deduction (abatement) rate in percent")
@click.option("--salary", help="Monthly salary kept aside")
@click.option("--additional-income", help="Other taxable income of the household")
@click.pass_context
def set_settings(
    ctx,
    urssaf_rate: str | None,
    tax_rate: str | None,
    deduction_rate: str | None,
    salary: str | None,
    additional_income: str | None,
) -> None:
    """Update settings. Only the given options change."""
    values = {
        "urssaf_rate": urssaf_rate,
        "estimated_tax_rate": tax_rate,
        "revenue_deduction_rate": deduction_rate,
        "monthly_salary": salary,
        "additional_taxable_income": additional_income,
    }
    if all(v is None for v in values.values()):
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    try:
        parsed = {k: parse_amount(v) for k, v in values.items() if v is not None}
        SettingsService(ctx.obj["db"]).update_settings(ctx.obj["user_id"], **parsed)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("Settings updated")


@settings_group.command("rates-set")
@click.argument("year", type=int)
@click.option("--urssaf-rate", required=True, help="Urssaf rate in percent")
@click.option("--tax-rate", required=True, help="Estimated income tax rate in percent")
@click.pass_context
def set_yearly_rates(ctx, year: int, urssaf_rate: str, tax_rate: str) -> None:
    """Override the Urssaf and estimated tax rates for one year."""
    try:
        SettingsService(ctx.obj["db"]).set_yearly_rates(
            ctx.obj["user_id"], year, parse_amount(urssaf_rate), parse_amount(tax_rate)
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Rates for {year} set")


@settings_group.command("rates-reset")
@click.argument("year", type=int)
@click.pass_context
def reset_yearly_rates(ctx, year: int) -> None:
    """Remove the rate override of a year."""
    if SettingsService(ctx.obj["db"]).delete_yearly_rates(ctx.obj["user_id"], year):
        click.echo(f"Rates for {year} reset to defaults")
    else:
        click.echo(f"No custom rates for {year}")


@settings_group.command("brackets")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def show_brackets(ctx, year: int | None, as_json: bool) -> None:
    """Show the income tax brackets used for a year and where they come from."""
    year = year or date.today().year
    try:
        source, brackets = SettingsService(ctx.obj["db"]).resolve_brackets(ctx.obj["user_id"], year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    rows = [
        {
            "minIncome": format_amount(b.min_income),
            "maxIncome": format_amount(b.max_income) if b.max_income is not None else None,
            "rate": format_amount(b.rate),
        }
        for b in brackets
    ]
    if as_json:
        echo_json({"year": year, "source": source, "isCustom": source == "custom", "brackets": rows})
        return

    click.echo(f"\nIncome tax brackets {year} ({source})")
    click.echo("-" * 40)
    for row in rows:
        upper = row["maxIncome"] or "..."
        click.echo(f"{row['minIncome']:>10s} - {upper:>10s}  {row['rate']:>6s}%")


@settings_group.command("brackets-set")
@click.argument("year", type=int)
@click.argument("brackets", nargs=-1, required=True, metavar="MIN:MAX:RATE...")
@click.pass_context
def set_brackets(ctx, year: int, brackets: tuple[str, ...]) -> None:
    """Replace your custom income tax brackets for a year.

    Leave MAX empty for the top bracket.

    Examples:
        microcompta settings brackets-set 2026 0:11600:0 11600:29500:11 29500::30
    """
    try:
        parsed = [_parse_bracket(b) for b in brackets]
        stored = SettingsService(ctx.obj["db"]).set_custom_brackets(ctx.obj["user_id"], year, parsed)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Stored {len(stored)} custom brackets for {year}")


@settings_group.command("brackets-reset")
@click.option("--year", type=int, help="Only this year (default: all years)")
@click.pass_context
def reset_brackets(ctx, year: int | None) -> None:
    """Drop your custom brackets and fall back to the official ones."""
    count = SettingsService(ctx.obj["db"]).reset_custom_brackets(ctx.obj["user_id"], year)
    click.echo(f"Removed {count} custom bracket{'s' if count != 1 else ''}")


def register_commands(cli: click.Group) -> None:
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
