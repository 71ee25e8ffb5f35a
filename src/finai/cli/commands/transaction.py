"""Transaction management commands."""

from datetime import date, timedelta

import click
from finai.cli.error_handling import handle_domain_error
from finai.domain.box import BoxService
from finai.domain.entities import Transaction, TransactionKind
from finai.domain.errors import DomainError
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import format_money
from finai.utils.date_parser import parse_date


def _signed_amount(txn: Transaction, currency: str) -> str:
    if txn.kind in (TransactionKind.INCOME, TransactionKind.WITHDRAW_FROM_BOX):
        return "+" + format_money(txn.amount, currency)
    return "-" + format_money(txn.amount, currency)


def echo_transactions(transactions: list[Transaction], box_names: dict[str, str], currency: str) -> None:
    """Print transactions as a compact table."""
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<34} {'Date':<12} {'Amount':<16} {'Kind':<18} {'Category':<14} {'Description'}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        category = txn.category
        if txn.box_id is not None:
            category = f"{category} [{box_names.get(txn.box_id, 'deleted box')}]"
        click.echo(
            f"{txn.id:<34} {str(txn.occurred_on):<12} {_signed_amount(txn, currency):<16} "
            f"{txn.kind.value:<18} {category[:14]:<14} {txn.description[:30]}"
        )


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--search", help="Only show transactions whose description or category contains this text")
@click.pass_context
def list_transactions(ctx, search: str | None) -> None:
    """List transactions, newest first."""
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    currency = ProfileService(db).get_profile().currency

    transactions = ledger.search_transactions(search) if search else ledger.list_transactions()
    if not transactions:
        click.echo("No transactions found.")
        return

    box_names = {box.id: box.name for box in BoxService(db).list_boxes()}
    echo_transactions(transactions, box_names, currency)


@transaction_group.command("due")
@click.option("--date", "on", help="Due date to check (defaults to tomorrow)")
@click.pass_context
def due_transactions(ctx, on: str | None) -> None:
    """List transactions that fall due on a given day.

    Examples:
        finai transaction due
        finai transaction due --date 2024-06-10
    """
    db = ctx.obj["db"]
    currency = ProfileService(db).get_profile().currency

    if on is None:
        due_on = date.today() + timedelta(days=1)
    else:
        try:
            due_on = parse_date(on)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    transactions = LedgerService(db).due_transactions(due_on)
    if not transactions:
        click.echo(f"Nothing due on {due_on}.")
        return

    click.echo(f"Due on {due_on}:")
    for txn in transactions:
        label = txn.description or txn.category
        click.echo(f"  {label}: {format_money(txn.amount, currency)}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction, undoing its effect on any box balance.

    Examples:
        finai transaction delete 3f2a...
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)

    txn = ledger.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Transaction {transaction_id} does not exist; nothing to delete.")
        return

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        ledger.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
