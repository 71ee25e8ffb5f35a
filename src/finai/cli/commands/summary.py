"""Balance summary command."""

import click
from finai.domain.box import BoxService
from finai.domain.intent import build_oracle_context
from finai.domain.profile import ProfileService
from finai.domain.projection import ProjectionService
from finai.utils.amount_parser import format_money


@click.command("summary")
@click.option("--context", "as_context", is_flag=True, help="Print the one-line summary sent to the assistant")
@click.pass_context
def summary(ctx, as_context: bool):
    """Show free balance, income, expenses and money held in boxes."""
    db = ctx.obj["db"]
    service = ProjectionService(db)
    currency = ProfileService(db).get_profile().currency
    projection = service.get_projection()

    if as_context:
        click.echo(build_oracle_context(projection, BoxService(db).list_boxes(), currency))
        return

    def money(amount):
        return format_money(amount, currency)

    click.echo(f"Free balance:   {money(projection.free_balance)}")
    click.echo(f"Income:         {money(projection.income)}")
    click.echo(f"Expenses:       {money(projection.expenses)}")
    click.echo(f"Invested:       {money(projection.invested)}")
    click.echo(f"Held in boxes:  {money(projection.total_in_boxes)}")
    if projection.orphaned_transfers:
        click.echo(
            f"({projection.orphaned_transfers} transfer(s) reference deleted boxes "
            "and count towards the free balance)"
        )
    if projection.negative_boxes:
        click.echo(
            "Warning: negative balance in box(es): " + ", ".join(projection.negative_boxes),
            err=True,
        )
    if not projection.is_consistent:
        click.echo("Warning: box balances disagree with the history. Run 'finai check --fix'.", err=True)

    categories = service.category_distribution()
    if categories:
        click.echo("\nExpenses by category:")
        for item in categories:
            click.echo(f"  {item.name:<20} {money(item.amount)}")

    trend = service.monthly_trend()
    if trend:
        click.echo("\nMonthly trend:")
        for month in trend:
            click.echo(
                f"  {month.month}  income {money(month.income):>16}  expenses {money(month.expenses):>16}"
            )


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
