"""Expense management commands."""

from datetime import date

import click
from microcompta.cli.error_handling import handle_domain_error
from microcompta.domain.entities import ExpenseCategory, RecurrencePeriod
from microcompta.domain.errors import DomainError
from microcompta.domain.ledger import ExpenseService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.date_parser import month_end, parse_date, parse_month
from microcompta.utils.money import format_amount


@click.group()
def expense_group():
    """Manage expenses."""
    pass


@expense_group.command("add")
@click.argument("description")
@click.argument("amount_ht", metavar="AMOUNT_HT")
@click.option("--date", "expense_date", help="Expense date, defaults to today")
@click.option("--tax", "tax_amount", default="0", show_default=True, help="VAT amount paid")
@click.option("--recovery-rate", default="100", show_default=True, help="Recoverable share of the VAT, in percent")
@click.option(
    "--category",
    type=click.Choice([c.value for c in ExpenseCategory]),
    default=ExpenseCategory.OTHER.value,
    show_default=True,
)
@click.option("--intra-eu", is_flag=True, help="Intra-EU acquisition (self-assessed VAT)")
@click.option(
    "--recurring",
    "recurrence",
    type=click.Choice([p.value for p in RecurrencePeriod]),
    help="Make the expense recurring with this period",
)
@click.option("--start-month", help="First month of a recurring expense (YYYY-MM)")
@click.option("--end-month", help="Last month of a recurring expense (YYYY-MM)")
@click.option("--payment-day", type=int, help="Day of the month a recurring expense is paid")
@click.option("--note", help="Note")
@click.pass_context
def add_expense(
    ctx,
    description: str,
    amount_ht: str,
    expense_date: str | None,
    tax_amount: str,
    recovery_rate: str,
    category: str,
    intra_eu: bool,
    recurrence: str | None,
    start_month: str | None,
    end_month: str | None,
    payment_day: int | None,
    note: str | None,
) -> None:
    """Add an expense.

    Examples:
        microcompta expense add "Laptop" 1200 --tax 240 --category professional
        microcompta expense add "Hosting" 20 --tax 4 --recurring monthly --start-month 2025-01 --payment-day 5
    """
    service = ExpenseService(ctx.obj["db"])
    try:
        expense_id = service.create_expense(
            ctx.obj["user_id"],
            description=description,
            expense_date=parse_date(expense_date) if expense_date else date.today(),
            amount_ht=parse_amount(amount_ht),
            tax_amount=parse_amount(tax_amount),
            tax_recovery_rate=parse_amount(recovery_rate),
            category=ExpenseCategory(category),
            is_intra_eu=intra_eu,
            is_recurring=recurrence is not None,
            recurrence_period=RecurrencePeriod(recurrence) if recurrence else None,
            start_month=parse_month(start_month) if start_month else None,
            end_month=parse_month(end_month) if end_month else None,
            payment_day=payment_day,
            note=note,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created expense {expense_id}: {description} {format_amount(parse_amount(amount_ht))} HT")


@expense_group.command("list")
@click.option("--month", help="Expense month (YYYY-MM)")
@click.option("--year", type=int, help="Expense year")
@click.option("--recurring/--one-time", "is_recurring", default=None, help="Only recurring or one-time expenses")
@click.option("--category", type=click.Choice([c.value for c in ExpenseCategory]))
@click.pass_context
def list_expenses(
    ctx, month: str | None, year: int | None, is_recurring: bool | None, category: str | None
) -> None:
    """List expenses, newest first."""
    service = ExpenseService(ctx.obj["db"])
    start = end = None
    try:
        if month:
            start = parse_month(month)
            end = month_end(start)
        elif year:
            start, end = date(year, 1, 1), date(year, 12, 31)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    expenses = service.list_expenses(
        ctx.obj["user_id"],
        start_date=start,
        end_date=end,
        is_recurring=is_recurring,
        category=ExpenseCategory(category) if category else None,
    )
    if not expenses:
        click.echo("No expenses found.")
        return

    click.echo(f"\n{'ID':>4s}  {'Date':10s}  {'Description':24s}  {'HT':>10s}  {'TVA':>8s}  Info")
    click.echo("-" * 76)
    for exp in expenses:
        info = exp.category.value
        if exp.is_recurring and exp.recurrence_period is not None:
            info = f"{exp.recurrence_period.value} from {exp.start_month:%Y-%m}"
            if exp.end_month is not None:
                info += f" to {exp.end_month:%Y-%m}"
        if exp.is_intra_eu:
            info += ", intra-EU"
        click.echo(
            f"{exp.id:4d}  {exp.date.isoformat():10s}  {exp.description[:24]:24s}  "
            f"{format_amount(exp.amount_ht):>10s}  {format_amount(exp.tax_amount):>8s}  {info}"
        )


@expense_group.command("end")
@click.argument("expense_id", type=int)
@click.argument("end_month", metavar="YYYY-MM")
@click.pass_context
def end_expense(ctx, expense_id: int, end_month: str) -> None:
    """Stop a recurring expense after the given month."""
    service = ExpenseService(ctx.obj["db"])
    try:
        service.end_recurrence(ctx.obj["user_id"], expense_id, parse_month(end_month))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Expense {expense_id} ends after {end_month}")


@expense_group.command("delete")
@click.argument("expense_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_expense(ctx, expense_id: int, yes: bool) -> None:
    """Delete an expense."""
    service = ExpenseService(ctx.obj["db"])
    if not yes and not click.confirm(f"Are you sure you want to delete expense {expense_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_expense(ctx.obj["user_id"], expense_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted expense {expense_id}")


def register_commands(cli: click.Group) -> None:
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
