"""CLI helpers for resolving the acting user."""

from __future__ import annotations

import click

from reelcost.cli.error_handling import handle_domain_error
from reelcost.domain.entities import Actor
from reelcost.domain.errors import DomainError
from reelcost.domain.project import ProjectService


def require_user(ctx: click.Context) -> str:
    """Return the acting user ID, or exit when none is configured."""
    user = ctx.obj.get("user")
    if not user:
        click.echo(
            "Error: No user given. Use --user or set REELCOST_USER.",
            err=True,
        )
        ctx.exit(1)
    return user


def resolve_actor_or_exit(ctx: click.Context, project_id: int | None) -> Actor:
    """Resolve the acting user with the role assigned on a project, or exit.

    Inbox invoices have no project, so nobody holds a role on them yet.
    """
    user = require_user(ctx)
    if project_id is None:
        click.echo(
            "Error: Invoice is not assigned to a project. Use 'invoice assign' first.",
            err=True,
        )
        ctx.exit(1)

    try:
        return ProjectService(ctx.obj["db"]).role_for(project_id, user)
    except DomainError as e:
        handle_domain_error(ctx, e)
