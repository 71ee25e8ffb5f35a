"""Apply an assistant reply to the ledger."""

import click
from finai.cli.error_handling import handle_domain_error
from finai.domain.errors import DomainError
from finai.domain.intent import IntentApplier
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import format_money


@click.command("apply")
@click.argument("reply", required=False)
@click.pass_context
def apply_reply(ctx, reply: str | None):
    """Apply an assistant reply or a bare proposed action.

    REPLY is the raw assistant output: free text, or JSON shaped like
    {"advice": "...", "transaction": {"kind": "expense", "amount": 50, ...}}.
    Reads standard input when REPLY is omitted or '-'.

    Examples:
        finai apply '{"kind": "expense", "amount": 42.5, "category": "Food"}'
        finai apply '{"advice": "Nice!", "transaction": {"tipo": "despesa", "valor": 50, "boxNome": "trip"}}'
    """
    if reply is None or reply == "-":
        reply = click.get_text_stream("stdin").read()

    db = ctx.obj["db"]
    currency = ProfileService(db).get_profile().currency

    try:
        outcome = IntentApplier(db).apply_reply(reply)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if outcome.advice:
        click.echo(outcome.advice)
    if outcome.box is not None:
        click.echo(f"Created box {outcome.box.emoji} '{outcome.box.name}' (ID: {outcome.box.id})")
    elif outcome.transaction is not None:
        txn = outcome.transaction
        click.echo(
            f"Saved {txn.kind.value} of {format_money(txn.amount, currency)} "
            f"({txn.category}) as transaction {txn.id}"
        )
    elif not outcome.advice:
        click.echo("Nothing to apply.")


def register_commands(cli):
    """Register apply command with main CLI."""
    cli.add_command(apply_reply)
