"""Add transaction command."""

import click
from finai.cli.error_handling import handle_domain_error
from finai.domain.entities import TransactionDraft, TransactionKind
from finai.domain.errors import DomainError
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import format_money, parse_amount
from finai.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--kind",
    required=True,
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Transaction kind",
)
@click.option("--amount", required=True, help="Positive amount (e.g., 123.45 or 'R$ 123,45')")
@click.option("--category", required=True, help="Category label (e.g., 'Salary', 'Groceries')")
@click.option(
    "--date",
    "occurred",
    default="today",
    show_default=True,
    help="Date the transaction is attributed to (YYYY-MM-DD or 'today', 'yesterday')",
)
@click.option("--due", help="Optional due date for a future obligation")
@click.option("--description", default="", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    kind: str,
    amount: str,
    category: str,
    occurred: str,
    due: str | None,
    description: str,
):
    """Record income or an expense.

    Use 'box deposit' and 'box withdraw' to move money in and out of boxes.

    Examples:
        finai add --kind income --amount 3000 --category Salary --date 2024-05-20
        finai add --kind expense --amount 89.90 --category Internet --due 2024-06-10
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    currency = ProfileService(db).get_profile().currency

    try:
        occurred_on = parse_date(occurred)
        due_on = parse_date(due) if due else None
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction = ledger.add_transaction(
            TransactionDraft(
                kind=TransactionKind(kind.lower()),
                amount=txn_amount,
                category=category,
                occurred_on=occurred_on,
                description=description,
                due_on=due_on,
            )
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded transaction {transaction.id}")
    click.echo(f"  Kind: {transaction.kind.value}")
    click.echo(f"  Date: {transaction.occurred_on}")
    click.echo(f"  Amount: {format_money(transaction.amount, currency)}")
    click.echo(f"  Category: {transaction.category}")
    if transaction.description:
        click.echo(f"  Description: {transaction.description}")
    if transaction.due_on:
        click.echo(f"  Due: {transaction.due_on}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
