"""Business account commands."""

import click
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.account import AccountService
from microcompta.domain.errors import DomainError
from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.money import format_amount


@click.group()
def account_group():
    """Business account balance and available funds."""
    pass


@account_group.command("balance")
@click.pass_context
def show_balance(ctx) -> None:
    """Show the current balance."""
    balance = AccountService(ctx.obj["db"]).get_balance(ctx.obj["user_id"])
    updated = f" (updated {balance.updated_at:%Y-%m-%d})" if balance.updated_at else ""
    click.echo(f"{format_amount(balance.balance)}{updated}")


@account_group.command("set-balance")
@click.argument("amount")
@click.pass_context
def set_balance(ctx, amount: str) -> None:
    """Set the current balance of the business account."""
    try:
        record = AccountService(ctx.obj["db"]).set_balance(ctx.obj["user_id"], parse_amount(amount))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Balance set to {format_amount(record.balance)}")


@account_group.command("summary")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def account_summary(ctx, as_json: bool) -> None:
    """Funds left after every pending and estimated obligation and next salary."""
    try:
        summary = AccountService(ctx.obj["db"]).summary(ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    data = summary.to_dict()
    if as_json:
        echo_json(data)
        return

    click.echo("\nBusiness account")
    click.echo("-" * 40)
    click.echo(f"Current balance:        {data['currentBalance']:>14s}")
    click.echo(f"TVA pending:            {data['pendingTva']:>14s}")
    click.echo(f"TVA estimated:          {data['estimatedTva']:>14s}")
    click.echo(f"Urssaf pending:         {data['pendingUrssaf']:>14s}")
    click.echo(f"Urssaf estimated:       {data['estimatedUrssaf']:>14s}")
    click.echo(f"Income tax pending:     {data['pendingIncomeTax']:>14s}")
    click.echo(f"Income tax estimated:   {data['estimatedIncomeTax']:>14s}")
    click.echo(f"Total obligations:      {data['totalObligations']:>14s}")
    click.echo(f"Next month salary:      {data['nextMonthSalary']:>14s}")
    click.echo("-" * 40)
    click.echo(f"Available funds:        {data['availableFunds']:>14s}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
