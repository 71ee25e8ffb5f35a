"""Main CLI entry point."""

import click
from finai.cli.error_handling import handle_domain_error
from finai.database.factories import BACKENDS, create_database
from finai.domain.errors import StorageUnavailableError
from finai.utils.log import configure_logging

# Import and register all commands at module level
from finai.cli.commands import (
    add,
    apply,
    box,
    check,
    profile,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Database file (sqlite) or data directory (json); overrides FINAI_DB_PATH",
    envvar="FINAI_DB_PATH",
)
@click.option(
    "--backend",
    type=click.Choice(BACKENDS),
    default="sqlite",
    show_default=True,
    envvar="FINAI_BACKEND",
    help="Storage backend",
)
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    envvar="FINAI_LOG_LEVEL",
    help="Log level for diagnostics written to stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, backend: str, log_level: str):
    """FinAI - Personal finance ledger with savings boxes.

    Record income and expenses, move money into savings boxes with goals,
    and apply actions proposed by an AI assistant.
    """
    ctx.ensure_object(dict)

    try:
        configure_logging(log_level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level") from e

    # Open storage only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            db = create_database(backend=backend, path=db_path)
            db.connect()
            db.initialize_schema()
        except StorageUnavailableError as e:
            handle_domain_error(ctx, e)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
add.register_commands(cli)
transaction.register_commands(cli)
box.register_commands(cli)
summary.register_commands(cli)
profile.register_commands(cli)
apply.register_commands(cli)
check.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
