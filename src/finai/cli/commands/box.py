"""Savings box commands."""

import click
from finai.cli.box_resolution import resolve_box_or_exit
from finai.cli.error_handling import handle_domain_error
from finai.domain.box import BoxService
from finai.domain.entities import TransactionDraft, TransactionKind
from finai.domain.errors import DomainError
from finai.domain.intent import INVESTMENT_CATEGORY
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import format_money, parse_amount
from finai.utils.date_parser import parse_date


@click.group()
def box_group():
    """Manage savings boxes."""
    pass


@box_group.command("create")
@click.argument("name", metavar="BOX_NAME")
@click.option("--goal", required=True, help="Savings goal amount")
@click.option("--emoji", help="Display emoji (defaults to 💰)")
@click.option("--bank", help="Bank holding the money (informational)")
@click.pass_context
def create_box(ctx, name: str, goal: str, emoji: str | None, bank: str | None):
    """Create a new savings box.

    Free accounts are limited to a fixed number of boxes.

    Examples:
        finai box create Trip --goal 1000 --emoji ✈️
        finai box create "Emergency fund" --goal 5000 --bank Nubank
    """
    db = ctx.obj["db"]
    service = BoxService(db)
    currency = ProfileService(db).get_profile().currency

    try:
        goal_amount = parse_amount(goal)
    except ValueError as e:
        click.echo(f"Error: Invalid goal amount: {e}", err=True)
        ctx.exit(1)

    try:
        box = service.create_box(name=name, goal_amount=goal_amount, emoji=emoji, bank=bank)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created box {box.emoji} '{box.name}' (ID: {box.id})")
    click.echo(f"  Goal: {format_money(box.goal_amount, currency)}")
    if box.bank:
        click.echo(f"  Bank: {box.bank}")


@box_group.command("list")
@click.pass_context
def list_boxes(ctx):
    """List all boxes with progress towards their goals."""
    db = ctx.obj["db"]
    boxes = BoxService(db).list_boxes()
    currency = ProfileService(db).get_profile().currency

    if not boxes:
        click.echo("No boxes found.")
        return

    click.echo("\nBoxes:")
    click.echo("-" * 90)
    for box in boxes:
        bank = f" | Bank: {box.bank}" if box.bank else ""
        reached = " | Goal reached!" if box.goal_reached else ""
        click.echo(
            f"{box.emoji} {box.name:20s} | {format_money(box.balance, currency)} of "
            f"{format_money(box.goal_amount, currency)} ({box.progress}%){bank}{reached}"
        )
        click.echo(f"   ID: {box.id}")
    total = sum(box.balance for box in boxes)
    click.echo("-" * 90)
    click.echo(f"Total invested: {format_money(total, currency)}")


@box_group.command("update")
@click.argument("box", metavar="BOX")
@click.option("--name", help="New name")
@click.option("--goal", help="New goal amount")
@click.option("--emoji", help="New emoji")
@click.option("--bank", help="New bank label")
@click.pass_context
def update_box(ctx, box: str, name: str | None, goal: str | None, emoji: str | None, bank: str | None):
    """Update a box's name, goal, emoji or bank.

    BOX can be a box name or ID. The balance cannot be edited; it only
    changes through deposits and withdrawals.

    Examples:
        finai box update Trip --goal 1500
        finai box update Trip --name "Japan trip" --emoji 🗾
    """
    db = ctx.obj["db"]
    service = BoxService(db)
    target = resolve_box_or_exit(ctx, service, box)

    goal_amount = None
    if goal is not None:
        try:
            goal_amount = parse_amount(goal)
        except ValueError as e:
            click.echo(f"Error: Invalid goal amount: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_box(target.id, name=name, goal_amount=goal_amount, emoji=emoji, bank=bank)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated box '{name or target.name}'")


@box_group.command("delete")
@click.argument("box", metavar="BOX")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_box(ctx, box: str, yes: bool) -> None:
    """Delete a box.

    BOX can be a box name or ID. Transactions that moved money into the box
    stay in the history; their amounts count towards the free balance again.
    """
    db = ctx.obj["db"]
    service = BoxService(db)
    target = resolve_box_or_exit(ctx, service, box)

    if not yes and not click.confirm(f"Are you sure you want to delete box '{target.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_box(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted box '{target.name}'")


def _move(ctx, box: str, amount: str, occurred: str, description: str, kind: TransactionKind) -> None:
    db = ctx.obj["db"]
    target = resolve_box_or_exit(ctx, BoxService(db), box)
    currency = ProfileService(db).get_profile().currency

    try:
        txn_amount = parse_amount(amount)
        occurred_on = parse_date(occurred)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        transaction = LedgerService(db).add_transaction(
            TransactionDraft(
                kind=kind,
                amount=txn_amount,
                category=INVESTMENT_CATEGORY,
                occurred_on=occurred_on,
                description=description,
                box_id=target.id,
            )
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    verb = "Deposited" if kind is TransactionKind.TRANSFER_TO_BOX else "Withdrew"
    preposition = "into" if kind is TransactionKind.TRANSFER_TO_BOX else "from"
    updated = BoxService(db).get_box(target.id)
    click.echo(f"{verb} {format_money(transaction.amount, currency)} {preposition} '{target.name}'")
    click.echo(f"  Transaction: {transaction.id}")
    if updated is not None:
        click.echo(f"  Box balance: {format_money(updated.balance, currency)}")


@box_group.command("deposit")
@click.argument("box", metavar="BOX")
@click.argument("amount")
@click.option("--date", "occurred", default="today", show_default=True, help="Transfer date")
@click.option("--description", default="", help="Transfer description")
@click.pass_context
def deposit(ctx, box: str, amount: str, occurred: str, description: str) -> None:
    """Move money from the free balance into a box.

    Examples:
        finai box deposit Trip 200
    """
    _move(ctx, box, amount, occurred, description, TransactionKind.TRANSFER_TO_BOX)


@box_group.command("withdraw")
@click.argument("box", metavar="BOX")
@click.argument("amount")
@click.option("--date", "occurred", default="today", show_default=True, help="Withdrawal date")
@click.option("--description", default="", help="Withdrawal description")
@click.pass_context
def withdraw(ctx, box: str, amount: str, occurred: str, description: str) -> None:
    """Move money from a box back to the free balance."""
    _move(ctx, box, amount, occurred, description, TransactionKind.WITHDRAW_FROM_BOX)


def register_commands(cli):
    """Register box commands with main CLI."""
    cli.add_command(box_group, name="box")
