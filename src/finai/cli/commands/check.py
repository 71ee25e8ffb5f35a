"""Ledger consistency check command."""

import click
from finai.cli.error_handling import handle_domain_error
from finai.domain.errors import DomainError
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import format_money


@click.command("check")
@click.option("--fix", is_flag=True, help="Rewrite drifted box balances from the transaction history")
@click.pass_context
def check(ctx, fix: bool):
    """Verify that every box balance matches its transaction history.

    Exits with status 1 when drift is found and --fix was not given.
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    currency = ProfileService(db).get_profile().currency

    try:
        discrepancies = ledger.reconcile_box_balances() if fix else ledger.verify_box_balances()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not discrepancies:
        click.echo("All box balances match the transaction history.")
        return

    for d in discrepancies:
        click.echo(
            f"Box '{d.name}': stored {format_money(d.cached, currency)}, "
            f"history says {format_money(d.expected, currency)}"
        )
    if fix:
        click.echo(f"Reconciled {len(discrepancies)} box balance(s).")
    else:
        ctx.exit(1)


def register_commands(cli):
    """Register check command with main CLI."""
    cli.add_command(check)
