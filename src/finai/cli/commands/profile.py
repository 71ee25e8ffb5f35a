"""User profile commands."""

import click
from finai.cli.error_handling import handle_domain_error
from finai.domain.box import BoxService
from finai.domain.errors import DomainError
from finai.domain.profile import ProfileService


@click.group()
def profile_group():
    """Show or change the user profile."""
    pass


@profile_group.command("show")
@click.pass_context
def show_profile(ctx):
    """Show the profile and plan."""
    db = ctx.obj["db"]
    profile = ProfileService(db).get_profile()
    box_count = len(BoxService(db).list_boxes())

    click.echo(f"Name: {profile.name}")
    click.echo(f"Currency: {profile.currency}")
    if profile.is_premium:
        click.echo("Plan: Premium (unlimited boxes)")
    else:
        click.echo(f"Plan: Free ({box_count} of {profile.free_box_limit} boxes used)")


@profile_group.command("update")
@click.option("--name", help="Display name")
@click.option("--currency", help="Currency code (e.g., BRL)")
@click.option("--free-box-limit", type=int, help="Box limit for the free plan")
@click.pass_context
def update_profile(ctx, name: str | None, currency: str | None, free_box_limit: int | None):
    """Update profile fields."""
    db = ctx.obj["db"]
    try:
        profile = ProfileService(db).update_profile(
            name=name, currency=currency, free_box_limit=free_box_limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated profile for {profile.name}")


@profile_group.command("upgrade")
@click.pass_context
def upgrade(ctx):
    """Switch to the premium plan (no box limit)."""
    db = ctx.obj["db"]
    try:
        ProfileService(db).upgrade_to_premium()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("You are now premium. Box limit removed.")


def register_commands(cli):
    """Register profile commands with main CLI."""
    cli.add_command(profile_group, name="profile")
