"""Income tax commands."""

from datetime import date

import click
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.entities import PaymentStatus
from microcompta.domain.errors import DomainError
from microcompta.domain.income_tax import IncomeTaxService
from microcompta.domain.ledger import PaymentService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.date_parser import parse_date
from microcompta.utils.money import format_amount


@click.group()
def income_tax_group():
    """Income tax estimate and payments."""
    pass


@income_tax_group.command("summary")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def income_tax_summary(ctx, year: int | None, as_json: bool) -> None:
    """Progressive income tax estimate against declared payments."""
    year = year or date.today().year
    try:
        summary = IncomeTaxService(ctx.obj["db"]).summary(ctx.obj["user_id"], year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        echo_json(summary.to_dict())
        return

    click.echo(f"\nIncome tax {year} ({summary.bracket_source} brackets)")
    click.echo("-" * 48)
    click.echo(f"Revenue:                {format_amount(summary.total_revenue):>12s}")
    click.echo(f"Deduction rate:         {format_amount(summary.deduction_rate):>11s}%")
    click.echo(f"Additional income:      {format_amount(summary.additional_taxable_income):>12s}")
    click.echo(f"Taxable income:         {format_amount(summary.taxable_income):>12s}")
    for b in summary.brackets:
        upper = format_amount(b.max_income) if b.max_income is not None else "..."
        click.echo(
            f"  {format_amount(b.min_income):>10s} - {upper:>10s} @ {format_amount(b.rate):>5s}%: "
            f"{format_amount(b.tax_amount):>10s}"
        )
    click.echo(f"Estimated tax:          {format_amount(summary.estimated_tax):>12s}")
    click.echo(f"Paid:                   {format_amount(summary.total_paid):>12s}")
    click.echo(f"Pending:                {format_amount(summary.total_pending):>12s}")
    click.echo(f"Remaining:              {format_amount(summary.remaining):>12s}")


@income_tax_group.command("declare")
@click.argument("year", type=int)
@click.argument("amount")
@click.option("--paid", is_flag=True, help="Already paid")
@click.option("--date", "paid_on", help="Payment date (with --paid), defaults to today")
@click.option("--reference", help="Payment reference")
@click.pass_context
def income_tax_declare(
    ctx, year: int, amount: str, paid: bool, paid_on: str | None, reference: str | None
) -> None:
    """Declare an income tax payment for a year."""
    try:
        payment_date = None
        if paid:
            payment_date = parse_date(paid_on) if paid_on else date.today()
        payment_id = PaymentService(ctx.obj["db"]).declare_income_tax_payment(
            ctx.obj["user_id"],
            year=year,
            amount=parse_amount(amount),
            status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
            payment_date=payment_date,
            reference=reference,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Declared income tax payment {payment_id} for {year}")


@income_tax_group.command("pay-mark")
@click.argument("payment_id", type=int)
@click.option("--date", "paid_on", help="Payment date, defaults to today")
@click.pass_context
def income_tax_pay_mark(ctx, payment_id: int, paid_on: str | None) -> None:
    """Mark a declared income tax payment as paid."""
    try:
        PaymentService(ctx.obj["db"]).mark_income_tax_payment_paid(
            ctx.obj["user_id"], payment_id, parse_date(paid_on) if paid_on else None
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Income tax payment {payment_id} marked as paid")


def register_commands(cli: click.Group) -> None:
    """Register income tax commands with main CLI."""
    cli.add_command(income_tax_group, name="income-tax")
