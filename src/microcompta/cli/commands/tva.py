"""TVA (VAT) commands: summaries, monthly return and declared payments."""

from datetime import date

import click
from microcompta.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.entities import PaymentStatus
from microcompta.domain.errors import DomainError
from microcompta.domain.ledger import PaymentService
from microcompta.domain.vat import VatService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.date_parser import get_date_range, parse_date
from microcompta.utils.money import format_amount


@click.group()
def tva_group():
    """TVA summaries, monthly returns and payments."""
    pass


@tva_group.command("summary")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def tva_summary(ctx, start_date: str | None, end_date: str | None, as_json: bool, **kwargs) -> None:
    """Collected, recoverable and net TVA over a period (default: this month)."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(kwargs),
        default_range=get_date_range("this-month"),
    )
    if start is None or end is None:
        click.echo("Error: Both a start and an end date are required", err=True)
        ctx.exit(1)

    summary = VatService(ctx.obj["db"]).period_summary(ctx.obj["user_id"], start, end)
    if as_json:
        echo_json(summary.to_dict())
        return

    data = summary.to_dict()
    click.echo(f"\nTVA from {data['startDate']} to {data['endDate']}")
    click.echo("-" * 40)
    click.echo(f"Collected:    {data['tvaCollected']:>12s}")
    click.echo(f"Recoverable:  {data['tvaRecoverable']:>12s}")
    click.echo(f"Net:          {data['netTva']:>12s}")
    click.echo(f"Paid:         {data['totalPaid']:>12s}")
    click.echo(f"Pending:      {data['totalPending']:>12s}")
    click.echo(f"Balance:      {data['balance']:>12s}")


@tva_group.command("monthly")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def tva_monthly(ctx, year: int | None, as_json: bool) -> None:
    """Month-by-month TVA with due dates and payment status."""
    year = year or date.today().year
    months = VatService(ctx.obj["db"]).monthly(ctx.obj["user_id"], year)
    if as_json:
        echo_json({"year": year, "months": [m.to_dict() for m in months]})
        return

    click.echo(f"\nTVA {year}")
    click.echo(f"{'Month':>5s}  {'Collected':>10s}  {'Recoverable':>11s}  {'Net':>10s}  {'Due':10s}  Status")
    click.echo("-" * 66)
    for m in months:
        click.echo(
            f"{m.month:5d}  {format_amount(m.collected):>10s}  {format_amount(m.recoverable):>11s}  "
            f"{format_amount(m.net):>10s}  {m.due_date.isoformat():10s}  {m.payment_status}"
        )


@tva_group.command("declaration")
@click.argument("month", metavar="YYYY-MM")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def tva_declaration(ctx, month: str, as_json: bool) -> None:
    """Monthly TVA return broken down into declaration boxes."""
    try:
        declaration = VatService(ctx.obj["db"]).declaration(ctx.obj["user_id"], month)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        echo_json(declaration.to_dict())
        return

    cases = declaration.cases
    summary = declaration.summary
    click.echo(f"\nTVA return {declaration.month}")
    click.echo("-" * 40)
    click.echo(f"A1  Sales and services:        {cases['A1']:>8d}")
    click.echo(f"B2  Intra-EU acquisitions:     {cases['B2']:>8d}")
    click.echo(f"08  Taxable base at 20%:       {cases['case08']:>8d}")
    click.echo(f"17  TVA on intra-EU purchases: {cases['case17']:>8d}")
    click.echo(f"19  Deductible on fixed assets:{cases['case19']:>8d}")
    click.echo(f"20  Other deductible TVA:      {cases['case20']:>8d}")
    click.echo("-" * 40)
    click.echo(f"TVA collected:                 {summary['tvaCollected']:>8d}")
    click.echo(f"TVA deductible:                {summary['tvaDeductible']:>8d}")
    click.echo(f"TVA net:                       {summary['tvaNet']:>8d}")


@tva_group.command("pay-add")
@click.argument("month", metavar="YYYY-MM")
@click.argument("amount")
@click.option("--paid", is_flag=True, help="Already paid")
@click.option("--date", "paid_on", help="Payment date (with --paid), defaults to today")
@click.option("--reference", help="Payment reference")
@click.option("--note", help="Note")
@click.pass_context
def tva_pay_add(
    ctx, month: str, amount: str, paid: bool, paid_on: str | None, reference: str | None, note: str | None
) -> None:
    """Declare the TVA payment of a month."""
    service = PaymentService(ctx.obj["db"])
    try:
        payment_date = None
        if paid:
            payment_date = parse_date(paid_on) if paid_on else date.today()
        payment_id = service.declare_tax_payment(
            ctx.obj["user_id"],
            period_month=month,
            amount=parse_amount(amount),
            status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
            payment_date=payment_date,
            reference=reference,
            note=note,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Declared TVA payment {payment_id} for {month}")


@tva_group.command("pay-list")
@click.option("--year", type=int, help="Only payments of this year")
@click.option("--status", type=click.Choice([s.value for s in PaymentStatus]))
@click.pass_context
def tva_pay_list(ctx, year: int | None, status: str | None) -> None:
    """List declared TVA payments."""
    payments = PaymentService(ctx.obj["db"]).list_tax_payments(
        ctx.obj["user_id"], year=year, status=PaymentStatus(status) if status else None
    )
    if not payments:
        click.echo("No TVA payments found.")
        return

    for p in payments:
        paid_on = p.payment_date.isoformat() if p.payment_date else "-"
        click.echo(
            f"ID: {p.id:3d} | {p.period_month} | {format_amount(p.amount):>10s} | "
            f"{p.status.value:7s} | {paid_on}"
        )


@tva_group.command("pay-mark")
@click.argument("payment_id", type=int)
@click.option("--date", "paid_on", help="Payment date, defaults to today")
@click.pass_context
def tva_pay_mark(ctx, payment_id: int, paid_on: str | None) -> None:
    """Mark a declared TVA payment as paid."""
    try:
        PaymentService(ctx.obj["db"]).mark_tax_payment_paid(
            ctx.obj["user_id"], payment_id, parse_date(paid_on) if paid_on else None
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"TVA payment {payment_id} marked as paid")


def register_commands(cli: click.Group) -> None:
    """Register TVA commands with main CLI."""
    cli.add_command(tva_group, name="tva")
