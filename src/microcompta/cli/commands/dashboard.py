"""Dashboard commands."""

from datetime import date

import click
from microcompta.cli.error_handling import echo_json, handle_domain_error
from microcompta.domain.dashboard import DashboardService
from microcompta.domain.errors import DomainError


@click.group()
def dashboard_group():
    """Monthly and yearly overviews."""
    pass


@dashboard_group.command("month")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--month", type=click.IntRange(1, 12), help="Month (1-12), defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def month_dashboard(ctx, year: int | None, month: int | None, as_json: bool) -> None:
    """Revenue, expenses, TVA and estimates for one month."""
    today = date.today()
    try:
        summary = DashboardService(ctx.obj["db"]).month_summary(
            ctx.obj["user_id"], year or today.year, month or today.month
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    data = summary.to_dict()
    if as_json:
        echo_json(data)
        return

    click.echo(f"\n{data['year']}-{data['month']:02d}")
    click.echo("-" * 40)
    click.echo(f"Revenue HT:         {data['revenueHt']:>14s}")
    click.echo(f"Revenue TTC:        {data['revenueTtc']:>14s}")
    click.echo(f"TVA collected:      {data['tvaCollected']:>14s}")
    click.echo(f"TVA recoverable:    {data['tvaRecoverable']:>14s}")
    click.echo(f"TVA net:            {data['netTva']:>14s}")
    click.echo(f"Expenses HT:        {data['expensesHt']:>14s}")
    click.echo(f"Urssaf estimate:    {data['urssafEstimate']:>14s}")
    click.echo(f"Income tax estimate:{data['incomeTaxEstimate']:>14s}")
    click.echo(f"Net remaining:      {data['netRemaining']:>14s}")
    click.echo(f"Pending TVA:        {data['pendingTva']:>14s}")
    click.echo(f"Pending Urssaf:     {data['pendingUrssaf']:>14s}")
    if data["upcomingPayments"]:
        click.echo("\nUpcoming payments:")
        for p in data["upcomingPayments"]:
            click.echo(f"  {p['description']:24s} {p['amount']:>12s}")


@dashboard_group.command("year")
@click.option("--year", type=int, help="Year, defaults to the current one")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def year_dashboard(ctx, year: int | None, as_json: bool) -> None:
    """Month-by-month overview of a year with totals."""
    summary = DashboardService(ctx.obj["db"]).year_summary(ctx.obj["user_id"], year or date.today().year)
    data = summary.to_dict()
    if as_json:
        echo_json(data)
        return

    click.echo(f"\n{data['year']}")
    click.echo(
        f"{'Month':>5s}  {'Revenue':>10s}  {'Expenses':>10s}  {'Urssaf':>10s}  "
        f"{'Income tax':>10s}  {'TVA':>10s}  {'Remaining':>10s}"
    )
    click.echo("-" * 78)
    for m in data["months"]:
        urssaf = m["urssaf"] + ("*" if m["urssafIsPaid"] else " ")
        tva = m["tva"] + ("*" if m["tvaIsPaid"] else " ")
        click.echo(
            f"{m['month']:5d}  {m['revenue']:>10s}  {m['expensesHt']:>10s}  {urssaf:>11s} "
            f"{m['incomeTax']:>10s}  {tva:>11s} {m['remaining']:>10s}"
        )
    click.echo("-" * 78)
    kpis = data["kpis"]
    click.echo(f"Revenue: {kpis['totalRevenue']}  Remaining: {kpis['totalRemaining']}")
    click.echo(f"Urssaf paid: {kpis['totalUrssafPaid']}  estimated: {kpis['totalUrssafEstimated']}")
    click.echo(f"TVA paid: {kpis['totalTvaPaid']}  estimated: {kpis['totalTvaEstimated']}")
    click.echo(
        f"Income tax paid: {kpis['totalIncomeTaxPaid']}  estimated: {kpis['totalIncomeTaxEstimated']}"
    )
    click.echo("(* paid)")


def register_commands(cli: click.Group) -> None:
    """Register dashboard commands with main CLI."""
    cli.add_command(dashboard_group, name="dashboard")
