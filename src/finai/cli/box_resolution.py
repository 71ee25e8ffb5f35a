"""CLI helpers for resolving box references."""

from __future__ import annotations

import click

from finai.domain.box import BoxService
from finai.domain.entities import Box
from finai.domain.errors import NotFoundError, box_not_found


def resolve_box(box_service: BoxService, reference: str) -> Box:
    """Resolve a box ID or (case-insensitive) name to a box.

    Raises:
        NotFoundError: If nothing matches
    """
    box = box_service.get_box(reference) or box_service.find_box_by_name(reference)
    if box is None:
        raise NotFoundError(box_not_found(reference))
    return box


def resolve_box_or_exit(ctx: click.Context, box_service: BoxService, reference: str) -> Box:
    """Resolve a box reference, or exit with a CLI error."""
    try:
        return resolve_box(box_service, reference)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
