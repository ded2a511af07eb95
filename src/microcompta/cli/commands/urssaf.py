"""Urssaf contribution commands."""

from datetime import date

import click
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.entities import PaymentStatus
from microcompta.domain.errors import DomainError, ValidationError, invalid_trimester
from microcompta.domain.ledger import PaymentService
from microcompta.domain.urssaf import UrssafService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.date_parser import parse_date
from microcompta.utils.money import format_amount


@click.group()
def urssaf_group():
    """Urssaf summaries and declarations."""
    pass


@urssaf_group.command("summary")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def urssaf_summary(ctx, year: int | None, as_json: bool) -> None:
    """Revenue and estimated contribution per trimester, with declarations."""
    year = year or date.today().year
    summary = UrssafService(ctx.obj["db"]).summary(ctx.obj["user_id"], year)
    if as_json:
        echo_json(summary.to_dict())
        return

    click.echo(f"\nUrssaf {year} (rate {format_amount(summary.urssaf_rate)}%)")
    click.echo(f"{'T':>2s}  {'Revenue':>10s}  {'Estimate':>10s}  Declaration")
    click.echo("-" * 56)
    for t in summary.trimesters:
        declared = "-"
        if t.payment is not None:
            declared = f"{format_amount(t.payment.amount)} ({t.payment.status.value}, ID {t.payment.id})"
        click.echo(
            f"{t.trimester:2d}  {format_amount(t.actual_revenue):>10s}  "
            f"{format_amount(t.estimated_amount):>10s}  {declared}"
        )
    click.echo("-" * 56)
    click.echo(
        f"Declared: {format_amount(summary.total_amount)} "
        f"(paid {format_amount(summary.total_paid)}, pending {format_amount(summary.total_pending)})"
    )


@urssaf_group.command("calculate")
@click.argument("revenue")
@click.option("--year", type=int, help="Use this year's rate override")
@click.pass_context
def urssaf_calculate(ctx, revenue: str, year: int | None) -> None:
    """Contribution owed on an arbitrary revenue."""
    try:
        amount = UrssafService(ctx.obj["db"]).calculate(ctx.obj["user_id"], parse_amount(revenue), year)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(format_amount(amount))


@urssaf_group.command("declare")
@click.argument("year", type=int)
@click.argument("trimester", type=int)
@click.option("--revenue", help="Declared revenue, defaults to the trimester's actual revenue")
@click.option("--amount", help="Declared contribution, defaults to the estimate")
@click.option("--paid", is_flag=True, help="Already paid")
@click.option("--date", "paid_on", help="Payment date (with --paid), defaults to today")
@click.option("--reference", help="Payment reference")
@click.pass_context
def urssaf_declare(
    ctx,
    year: int,
    trimester: int,
    revenue: str | None,
    amount: str | None,
    paid: bool,
    paid_on: str | None,
    reference: str | None,
) -> None:
    """Declare the contribution of a trimester."""
    db = ctx.obj["db"]
    user_id = ctx.obj["user_id"]
    try:
        if revenue is None or amount is None:
            if not 1 <= trimester <= 4:
                raise ValidationError(invalid_trimester(trimester))
            computed = UrssafService(db).summary(user_id, year).trimesters[trimester - 1]
        declared_revenue = parse_amount(revenue) if revenue is not None else computed.actual_revenue
        declared_amount = parse_amount(amount) if amount is not None else computed.estimated_amount
        payment_date = None
        if paid:
            payment_date = parse_date(paid_on) if paid_on else date.today()
        payment_id = PaymentService(db).declare_urssaf_payment(
            user_id,
            year=year,
            trimester=trimester,
            revenue=declared_revenue,
            amount=declared_amount,
            status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
            payment_date=payment_date,
            reference=reference,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Declared Urssaf T{trimester} {year} (ID: {payment_id}): "
        f"{format_amount(declared_amount)} on {format_amount(declared_revenue)}"
    )


@urssaf_group.command("pay-mark")
@click.argument("payment_id", type=int)
@click.option("--date", "paid_on", help="Payment date, defaults to today")
@click.pass_context
def urssaf_pay_mark(ctx, payment_id: int, paid_on: str | None) -> None:
    """Mark a declared Urssaf payment as paid."""
    try:
        PaymentService(ctx.obj["db"]).mark_urssaf_payment_paid(
            ctx.obj["user_id"], payment_id, parse_date(paid_on) if paid_on else None
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Urssaf payment {payment_id} marked as paid")


def register_commands(cli: click.Group) -> None:
    """Register Urssaf commands with main CLI."""
    cli.add_command(urssaf_group, name="urssaf")
