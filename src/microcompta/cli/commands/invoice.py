"""Invoice management commands."""

from datetime import date

import click
from microcompta.cli.error_handling import handle_domain_error
from microcompta.domain.errors import DomainError
from microcompta.domain.ledger import InvoiceService
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.date_parser import month_end, parse_date, parse_month
from microcompta.utils.money import format_amount


@click.group()
def invoice_group():
    """Manage invoices."""
    pass


@invoice_group.command("add")
@click.argument("client")
@click.argument("amount_ht", metavar="AMOUNT_HT")
@click.option("--date", "invoice_date", help="Invoice date (YYYY-MM-DD or relative like 'today'), defaults to today")
@click.option("--tax-rate", default="20", show_default=True, help="VAT rate in percent")
@click.option("--paid", "paid_on", help="Payment date, if already paid")
@click.option("--description", help="Description")
@click.option("--number", "invoice_number", help="Invoice number")
@click.option("--note", help="Note")
@click.pass_context
def add_invoice(
    ctx,
    client: str,
    amount_ht: str,
    invoice_date: str | None,
    tax_rate: str,
    paid_on: str | None,
    description: str | None,
    invoice_number: str | None,
    note: str | None,
) -> None:
    """Add an invoice. The amount including tax is computed from the rate.

    Examples:
        microcompta invoice add "ACME" 1000
        microcompta invoice add "ACME" "1 250,50" --tax-rate 0 --paid 2025-03-15
    """
    service = InvoiceService(ctx.obj["db"])
    try:
        invoice_id = service.create_invoice(
            ctx.obj["user_id"],
            client=client,
            invoice_date=parse_date(invoice_date) if invoice_date else date.today(),
            amount_ht=parse_amount(amount_ht),
            tax_rate=parse_amount(tax_rate),
            payment_date=parse_date(paid_on) if paid_on else None,
            description=description,
            invoice_number=invoice_number,
            note=note,
        )
        invoice = service.get_invoice(ctx.obj["user_id"], invoice_id)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Created invoice {invoice_id}: {invoice.client} "
        f"{format_amount(invoice.amount_ht)} HT / {format_amount(invoice.amount_ttc)} TTC"
    )


@invoice_group.command("list")
@click.option("--month", help="Invoice month (YYYY-MM)")
@click.option("--year", type=int, help="Invoice year")
@click.option("--client", help="Filter on client name")
@click.pass_context
def list_invoices(ctx, month: str | None, year: int | None, client: str | None) -> None:
    """List invoices, newest first."""
    service = InvoiceService(ctx.obj["db"])
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

    invoices = service.list_invoices(ctx.obj["user_id"], start_date=start, end_date=end, client=client)
    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"\n{'ID':>4s}  {'Date':10s}  {'Client':20s}  {'HT':>10s}  {'TTC':>10s}  Paid")
    click.echo("-" * 72)
    for inv in invoices:
        paid = inv.payment_date.isoformat() if inv.payment_date else "-"
        if inv.is_canceled:
            paid = "canceled"
        click.echo(
            f"{inv.id:4d}  {inv.invoice_date.isoformat():10s}  {inv.client[:20]:20s}  "
            f"{format_amount(inv.amount_ht):>10s}  {format_amount(inv.amount_ttc):>10s}  {paid}"
        )


@invoice_group.command("pay")
@click.argument("invoice_id", type=int)
@click.option("--date", "paid_on", help="Payment date, defaults to today")
@click.option("--clear", is_flag=True, help="Mark the invoice as unpaid again")
@click.pass_context
def pay_invoice(ctx, invoice_id: int, paid_on: str | None, clear: bool) -> None:
    """Record the payment date of an invoice."""
    service = InvoiceService(ctx.obj["db"])
    try:
        payment_date = None if clear else (parse_date(paid_on) if paid_on else date.today())
        service.set_payment_date(ctx.obj["user_id"], invoice_id, payment_date)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    if payment_date is None:
        click.echo(f"Invoice {invoice_id} marked as unpaid")
    else:
        click.echo(f"Invoice {invoice_id} paid on {payment_date.isoformat()}")


@invoice_group.command("update")
@click.argument("invoice_id", type=int)
@click.option("--amount", "amount_ht", help="New amount excluding tax")
@click.option("--tax-rate", help="New VAT rate in percent")
@click.pass_context
def update_invoice(ctx, invoice_id: int, amount_ht: str | None, tax_rate: str | None) -> None:
    """Change the amount or VAT rate of an invoice."""
    service = InvoiceService(ctx.obj["db"])
    try:
        invoice = service.update_amounts(
            ctx.obj["user_id"],
            invoice_id,
            amount_ht=parse_amount(amount_ht) if amount_ht else None,
            tax_rate=parse_amount(tax_rate) if tax_rate else None,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Updated invoice {invoice_id}: "
        f"{format_amount(invoice.amount_ht)} HT / {format_amount(invoice.amount_ttc)} TTC"
    )


@invoice_group.command("cancel")
@click.argument("invoice_id", type=int)
@click.option("--undo", is_flag=True, help="Reinstate a canceled invoice")
@click.pass_context
def cancel_invoice(ctx, invoice_id: int, undo: bool) -> None:
    """Cancel an invoice. Canceled invoices never count as revenue."""
    service = InvoiceService(ctx.obj["db"])
    try:
        service.set_canceled(ctx.obj["user_id"], invoice_id, canceled=not undo)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Invoice {invoice_id} {'reinstated' if undo else 'canceled'}")


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: int, yes: bool) -> None:
    """Delete an invoice."""
    service = InvoiceService(ctx.obj["db"])
    if not yes and not click.confirm(f"Are you sure you want to delete invoice {invoice_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_invoice(ctx.obj["user_id"], invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted invoice {invoice_id}")


def register_commands(cli: click.Group) -> None:
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
